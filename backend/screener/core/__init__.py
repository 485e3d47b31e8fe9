"""
Core module for application configuration and utilities.

The adaptive engine lives in ``screener.core.adaptive``; import it directly.
"""
from .config import settings

__all__ = ["settings"]
