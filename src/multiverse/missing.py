"""
The missing-value marker.

A declared measurement that a universe never reached is recorded as
MISSING. This is a value, not an error.
"""

from typing import Any


class Missing:
    """Singleton placeholder for an unreached measurement."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "missing"

    def __reduce__(self):
        return (Missing, ())


MISSING = Missing()


def is_missing(value: Any) -> bool:
    return value is MISSING


__all__ = ["Missing", "MISSING", "is_missing"]
