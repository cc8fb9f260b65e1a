"""Login session storage."""

from .session import Session, SessionError, clear_session, load_session, save_session

__all__ = [
    "Session",
    "SessionError",
    "clear_session",
    "load_session",
    "save_session",
]
