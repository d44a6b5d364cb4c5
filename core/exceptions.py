"""Session Exception Hierarchy

Classifies failures of the browser session lifecycle:
- ConfigLoadError: configuration unusable (fatal at startup)
- SessionAcquireError: a session could not be brought up (fatal for the test)
- SessionUsageError: harness bug (acquire twice, release without acquire)

Teardown failures are NOT exceptions here. release() collects them into a
TeardownReport instead of raising (see session_lifecycle.py).
"""

from typing import Optional


class SessionError(RuntimeError):
    """Root of all session lifecycle errors."""


class ConfigLoadError(SessionError):
    """Raised when the configuration file cannot be loaded.

    This is a STARTUP failure. It is never retried and the provider does
    not fall back to defaults.
    """

    def __init__(self, path: str, message: str):
        super().__init__(message)
        self.path = path

    def __str__(self):
        return f"[{self.path}] {super().__str__()}"


class SessionAcquireError(SessionError):
    """Raised when acquire() fails part way through.

    By the time this propagates, every resource created before the failing
    stage has already been rolled back and nothing is registered.
    """

    def __init__(self, stage: str, message: str, rollback_errors: Optional[list] = None):
        super().__init__(message)
        self.stage = stage
        self.rollback_errors = rollback_errors or []

    def __str__(self):
        return f"[{self.stage}] {super().__str__()}"


class SessionUsageError(SessionError):
    """Programming error in the test harness (wrong call order)."""


class SessionAlreadyActiveError(SessionUsageError):
    """acquire() called while the caller already owns a live session."""


class NoActiveSessionError(SessionUsageError):
    """release() or current_page() called with no registered session."""
