"""Adaptive screener: IRT-style adaptive question selection for student screeners."""
