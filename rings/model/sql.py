"""Helpers for SQL LIKE patterns."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Like:
    """A value to be wrapped in ``%`` wildcards."""

    val: str

    def full(self) -> str:
        return f"%{self.val}%"

    def left(self) -> str:
        return f"%{self.val}"

    def right(self) -> str:
        return f"%{self.val}"