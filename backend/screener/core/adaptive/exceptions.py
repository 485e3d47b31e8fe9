"""
Error types raised by the adaptive engine on misuse.

Normal operation never raises: empty histories, unknown question ids and
exhausted pools are handled with neutral values.
"""


class AdaptiveTestingError(Exception):
    """Base class for adaptive engine errors."""


class SessionClosedError(AdaptiveTestingError):
    """Raised when a terminal session is asked to change state."""

    def __init__(self, session_id: str, status: str) -> None:
        self.session_id = session_id
        self.status = status
        super().__init__(f"Session {session_id} is already {status}")
