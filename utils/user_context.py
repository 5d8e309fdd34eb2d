"""Propagate the authenticated user's id through the call stack using contextvars."""

from contextvars import ContextVar
from contextlib import contextmanager

_current_user_id: ContextVar[int | None] = ContextVar("current_user_id", default=None)


def get_current_user_id() -> int:
    """
    Get current user ID from context.

    Raises RuntimeError if no user context is set.
    Shift ownership checks depend on this, so a missing context is a bug,
    not an anonymous request.
    """
    user_id = _current_user_id.get()
    if user_id is None:
        raise RuntimeError(
            "No user context set. This usually means you're calling "
            "user-scoped code outside of an authenticated request."
        )
    return user_id


def set_current_user_id(user_id: int) -> None:
    """Set current user ID in context. Called by auth middleware."""
    _current_user_id.set(user_id)


def clear_current_user_id() -> None:
    """
    Clear user context.

    Must be called in finally block to prevent context leakage.
    """
    _current_user_id.set(None)


@contextmanager
def user_context(user_id: int):
    """
    Temporarily act as user_id (tests, admin scripts).

    Example:
        with user_context(42):
            shift_service.delete(7)  # only succeeds if user 42 owns shift 7
    """
    previous = _current_user_id.get()
    set_current_user_id(user_id)
    try:
        yield
    finally:
        if previous is None:
            clear_current_user_id()
        else:
            set_current_user_id(previous)
