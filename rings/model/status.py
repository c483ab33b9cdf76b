"""Record status values with textual and numeric forms."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass

from ..erx import Erx, smp

INITIALIZE = 0
MARK_DELETED = -1
BOUNDARY_OK = 11
BOUNDARY_ERROR = -11

INITIALIZE_STR = "Initialize"
MARK_DELETED_STR = "MarkDelete"
_OK_PREFIX = "OK("
_ERR_PREFIX = "ERR("

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_CODE = re.compile(r"[+-]?\d+")


class StatusKind(enum.Enum):
    INITIALIZE = "Initialize"
    OK = "OK"
    ERROR = "Error"
    MARK_DELETED = "MarkDeleted"


def _parse_code(text: str) -> tuple[int, str]:
    head, _, rest = text.partition(" ")
    if not head.endswith(")"):
        raise Erx("Invalid formated status")
    digits = head[:-1]
    if not _CODE.fullmatch(digits):
        raise smp(f"invalid digit found in string: {digits!r}")
    code = int(digits)
    if not _I32_MIN <= code <= _I32_MAX:
        raise smp(f"number out of range: {digits}")
    return code, rest


@dataclass(frozen=True)
class Status:
    """Initialize, OK(code >= 11), Error(code <= -11) or MarkDeleted."""

    kind: StatusKind = StatusKind.INITIALIZE
    code: int = INITIALIZE
    message: str = ""

    @classmethod
    def parse(cls, formatted: str) -> "Status":
        """Parse the text produced by ``str(status)``; raise Erx when invalid."""
        text = formatted.strip()
        if not text:
            raise Erx("Empty formated status")
        if text == INITIALIZE_STR:
            return cls.initialize()
        if text == MARK_DELETED_STR:
            return cls.deleted()
        if text.startswith(_OK_PREFIX):
            return cls.ok(*_parse_code(text[len(_OK_PREFIX):]))
        if text.startswith(_ERR_PREFIX):
            return cls.error(*_parse_code(text[len(_ERR_PREFIX):]))
        raise Erx(f"Unknown status: {text}")

    def valid(self) -> bool:
        if self.kind is StatusKind.OK:
            return self.code >= BOUNDARY_OK
        if self.kind is StatusKind.ERROR:
            return self.code <= BOUNDARY_ERROR
        return True

    @classmethod
    def initialize(cls) -> "Status":
        return cls(StatusKind.INITIALIZE, INITIALIZE, "")

    @classmethod
    def deleted(cls) -> "Status":
        return cls(StatusKind.MARK_DELETED, MARK_DELETED, "")

    @classmethod
    def ok(cls, code: int, message: str) -> "Status":
        if code >= BOUNDARY_OK:
            return cls(StatusKind.OK, code, message)
        raise Erx(f"invalid ok code:{code}  code must GTE(>=) BOUNDARY_OK:{BOUNDARY_OK}")

    @classmethod
    def error(cls, code: int, message: str) -> "Status":
        if code <= BOUNDARY_ERROR:
            return cls(StatusKind.ERROR, code, message)
        raise Erx(f"invalid error code:{code}, code must LTE(<=) BOUNDARY_ERROR:{BOUNDARY_ERROR}")

    @classmethod
    def from_code(cls, code: int, message: str = "") -> "Status":
        """Status for a numeric code; raise ValueError for codes in no range."""
        if code == INITIALIZE:
            return cls.initialize()
        if code == MARK_DELETED:
            return cls.deleted()
        if code >= BOUNDARY_OK:
            return cls(StatusKind.OK, code, message)
        if code <= BOUNDARY_ERROR:
            return cls(StatusKind.ERROR, code, message)
        raise ValueError(f"invalid status val: {code} ")

    def as_tuple(self) -> tuple[int, str]:
        return self.code, self.message

    def __int__(self) -> int:
        return self.code

    def __str__(self) -> str:
        if self.kind is StatusKind.OK:
            return f"OK({self.code}) {self.message}"
        if self.kind is StatusKind.ERROR:
            return f"ERR({self.code}) {self.message}"
        if self.kind is StatusKind.MARK_DELETED:
            return MARK_DELETED_STR
        return INITIALIZE_STR