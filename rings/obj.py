"""Checks for default and empty values."""

from __future__ import annotations

from typing import Any, Sized


def is_default(value: Any) -> bool:
    """Whether ``value`` equals the zero-argument instance of its type."""
    return value == type(value)()


def is_empty(value: Sized) -> bool:
    """Whether a sized collection has no items."""
    return len(value) == 0