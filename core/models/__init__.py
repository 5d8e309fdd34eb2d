"""Core domain models."""

from core.models.shift import Shift, ShiftUser, ShiftWrite

__all__ = [
    "Shift", "ShiftUser", "ShiftWrite",
]
