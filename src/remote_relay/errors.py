from __future__ import annotations


class FatalError(Exception):
    """A misconfiguration that retrying cannot fix."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code
