"""Layouted error codes and the framework's error type."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from . import conf

LAYOUTED_C_ZERO = "0000"

FUZZ = "FUZZ"
COMM = "COMM"
MIDL = "MIDL"
SERV = "SERV"
MODE = "MODE"
ACTN = "ACTN"
UNDF = "UNDF"
TASK = "TASK"


def _app_short() -> str:
    try:
        return conf.rebit().short
    except ValueError:
        return conf.Rebit().short


@dataclass
class LayoutedC:
    """Error code laid out as ``application-domain-category-detail``."""

    application: str = field(default_factory=_app_short)
    domain: str = UNDF
    category: str = UNDF
    detail: str = UNDF

    @classmethod
    def okay(cls) -> "LayoutedC":
        """The all-zero code that means success."""
        return cls(domain=LAYOUTED_C_ZERO, category=LAYOUTED_C_ZERO, detail=LAYOUTED_C_ZERO)

    @classmethod
    def parse(cls, text: str) -> "LayoutedC":
        """Parse a dash-separated code; missing parts keep their defaults."""
        code = cls()
        names = ("application", "domain", "category", "detail")
        for name, part in zip(names, text.split("-")):
            setattr(code, name, part)
        return code

    def is_okc(self) -> bool:
        return all(not part.replace("0", "") for part in (self.domain, self.category, self.detail))

    def layout_string(self) -> str:
        return f"{self.application}-{self.domain}-{self.category}-{self.detail}"

    def __str__(self) -> str:
        return self.layout_string()


def fuzz_udf(detail: str) -> LayoutedC:
    return LayoutedC(domain=FUZZ, category=UNDF, detail=detail)


def fuzz(category: str, detail: str) -> LayoutedC:
    return LayoutedC(domain=FUZZ, category=category, detail=detail)


def common(category: str, detail: str) -> LayoutedC:
    return LayoutedC(domain=COMM, category=category, detail=detail)


def middleware(category: str, detail: str) -> LayoutedC:
    return LayoutedC(domain=MIDL, category=category, detail=detail)


def service(category: str, detail: str) -> LayoutedC:
    return LayoutedC(domain=SERV, category=category, detail=detail)


def model(category: str, detail: str) -> LayoutedC:
    return LayoutedC(domain=MODE, category=category, detail=detail)


def action(category: str, detail: str) -> LayoutedC:
    return LayoutedC(domain=ACTN, category=category, detail=detail)


def task(category: str, detail: str) -> LayoutedC:
    return LayoutedC(domain=TASK, category=category, detail=detail)


class Erx(Exception):
    """Error carrying a layouted code, a message and key/value extras."""

    def __init__(
        self,
        message: str = "",
        code: LayoutedC | None = None,
        extra: Iterable[tuple[str, str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else LayoutedC()
        self.extra: list[tuple[str, str]] = list(extra) if extra else []

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return f"Erx(message={self.message!r}, code={self.code!r}, extra={self.extra!r})"

    def add_extra(self, key: str, value: str) -> None:
        """Set ``key`` on existing extras and append the pair."""
        self.extra = [(k, value if k == key else v) for k, v in self.extra]
        self.extra.append((key, value))

    def extra_map(self) -> dict[str, str]:
        return dict(self.extra)

    def to_json(self) -> str:
        data = {
            "code": {
                "application": self.code.application,
                "domain": self.code.domain,
                "category": self.code.category,
                "detail": self.code.detail,
            },
            "message": self.message,
            "extra": [[k, v] for k, v in self.extra],
        }
        return json.dumps(data, ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_string(cls, text: str) -> "Erx":
        """Decode JSON produced by ``to_json``; any other text becomes the message."""
        if not text:
            return cls()
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            return cls(text)
        decoded = _decode(data)
        return decoded if decoded is not None else cls(text)

    @classmethod
    def from_parts(cls, parts: Iterable[Any]) -> "Erx":
        """Build from ``[message]``, ``[code, message]`` or ``[code, message, k, v, ...]``."""
        items = [str(p) for p in parts]
        if not items:
            return cls()
        if len(items) == 1:
            return cls.from_string(items[0])
        code = LayoutedC.parse(items[0])
        if len(items) == 2:
            return cls(items[1], code=code)
        pairs = [(items[i], items[i + 1] if i + 1 < len(items) else "") for i in range(0, len(items), 2)]
        return cls(items[1], code=code, extra=pairs)


def _decode(data: Any) -> Erx | None:
    if not isinstance(data, dict):
        return None
    code = data.get("code")
    message = data.get("message")
    extra = data.get("extra")
    names = ("application", "domain", "category", "detail")
    if not isinstance(code, dict) or not all(isinstance(code.get(n), str) for n in names):
        return None
    if not isinstance(message, str) or not isinstance(extra, list):
        return None
    pairs = []
    for item in extra:
        if not (isinstance(item, list) and len(item) == 2 and all(isinstance(x, str) for x in item)):
            return None
        pairs.append((item[0], item[1]))
    return Erx(message, code=LayoutedC(**{n: code[n] for n in names}), extra=pairs)


def smp(error: Any) -> Erx:
    """Wrap any error or value as an Erx with its text as message."""
    return Erx(str(error))


def amp(additional: str) -> Callable[[Any], Erx]:
    """Return a converter that prefixes the error text with ``additional``."""

    def convert(error: Any) -> Erx:
        return Erx(f"{additional} : {error}")

    return convert