"""Application configuration: layered YAML files plus ``REBT_`` environment variables."""

from __future__ import annotations

import enum
import logging
import math
import os
import re
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import yaml

ENV_PREFIX = "REBT"

_log = logging.getLogger(__name__)
_MISSING = object()
_SEGMENT = re.compile(r"([^\[\]]*)((?:\[-?\d+\])*)")
_INDEX = re.compile(r"-?\d+")
_CONVERSION_ERRORS = (ValueError, TypeError, OverflowError)


class BackendKind(enum.Enum):
    """Kind of storage backend a model connection talks to."""

    REDIS = "Redis"
    POSTGRES = "Postgres"

    @classmethod
    def parse(cls, text: str) -> "BackendKind":
        """Parse a backend kind case-insensitively."""
        lowered = text.lower()
        for kind in cls:
            if kind.value.lower() == lowered:
                return kind
        raise ValueError(f"unknown backend kind: {text}")

    def __str__(self) -> str:
        return "Redis" if self is BackendKind.REDIS else "Postgre"


@dataclass
class Log:
    level: str = "trace"
    console: bool = True
    dirs: str = "./logs"


@dataclass
class Web:
    port: int = 80
    bind: str | None = None
    middleware: dict[str, dict[str, str]] | None = None
    options: dict[str, str] | None = None


@dataclass
class Backend:
    kind: BackendKind
    readonly: bool
    connect: str
    options: dict[str, str] | None = None


@dataclass
class Model:
    backends: dict[str, Backend] | None = None

    def backend(self, name: str) -> Backend | None:
        """Return the backend configured under ``name``, if any."""
        if self.backends is None:
            return None
        return self.backends.get(name)


@dataclass
class Rebit:
    """Typed view of the whole application configuration."""

    name: str = "Rings"
    short: str = "RING"
    debug: bool = False
    web: dict[str, Web] = field(default_factory=dict)
    model: Model = field(default_factory=Model)
    log: Log | None = None
    extends: dict[str, str] | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Rebit":
        """Build a configuration from raw settings; raise ValueError when invalid."""
        owner = "rebit"
        if not isinstance(data, Mapping):
            raise ValueError(f"{owner}: expected a mapping")
        web = _field(data, "web", lambda v: {str(k): _web_from(w, str(k)) for k, w in _as_mapping(v).items()}, owner)
        return cls(
            name=_field(data, "name", _as_str, owner),
            short=_field(data, "short", _as_str, owner),
            debug=_field(data, "debug", _as_bool, owner),
            web=web,
            model=_field(data, "model", _model_from, owner),
            log=_optional(data, "log", _log_from, owner),
            extends=_optional(data, "extends", _as_str_dict, owner),
        )

    def has_backend(self) -> bool:
        return bool(self.model.backends)

    def get_backend(self, name: str) -> Backend | None:
        return self.model.backend(name)

    def has_web(self) -> bool:
        return len(self.web) > 0

    def get_web(self, name: str) -> Web | None:
        return self.web.get(name)

    def web_middleware(self, name: str, middleware_name: str) -> dict[str, str] | None:
        """Options of one middleware of one web entry, if configured."""
        web = self.get_web(name)
        if web is None or web.middleware is None:
            return None
        return web.middleware.get(middleware_name)

    def get_extend(self, name: str) -> str | None:
        if self.extends is None:
            return None
        return self.extends.get(name)


def _round_half_away(value: float) -> int:
    if value >= 0:
        return math.floor(value + 0.5)
    return math.ceil(value - 0.5)


def _as_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise ValueError(f"cannot convert {value!r} to a string")


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.lower()
        if lowered in ("1", "true", "on", "yes"):
            return True
        if lowered in ("0", "false", "off", "no"):
            return False
    raise ValueError(f"cannot convert {value!r} to a boolean")


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return _round_half_away(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return _round_half_away(float(value))
    raise ValueError(f"cannot convert {value!r} to an integer")


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        return float(value)
    raise ValueError(f"cannot convert {value!r} to a float")


def _as_mapping(value: Any) -> dict:
    if not isinstance(value, Mapping):
        raise ValueError(f"expected a table, got {value!r}")
    return dict(value)


def _as_list(value: Any) -> list:
    if not isinstance(value, list):
        raise ValueError(f"expected an array, got {value!r}")
    return list(value)


def _as_str_dict(value: Any) -> dict[str, str]:
    return {str(k): _as_str(v) for k, v in _as_mapping(value).items()}


def _as_port(value: Any) -> int:
    port = _as_int(value)
    if not 0 <= port <= 65535:
        raise ValueError(f"port out of range: {port}")
    return port


def _field(data: Mapping[str, Any], key: str, convert: Callable[[Any], Any], owner: str) -> Any:
    if data.get(key) is None:
        raise ValueError(f"{owner}: missing field `{key}`")
    try:
        return convert(data[key])
    except _CONVERSION_ERRORS as exc:
        raise ValueError(f"{owner}: invalid field `{key}`: {exc}") from exc


def _optional(data: Mapping[str, Any], key: str, convert: Callable[[Any], Any], owner: str) -> Any:
    if data.get(key) is None:
        return None
    return _field(data, key, convert, owner)


def _web_from(value: Any, name: str) -> Web:
    data = _as_mapping(value)
    owner = f"web.{name}"
    return Web(
        port=_field(data, "port", _as_port, owner),
        bind=_optional(data, "bind", _as_str, owner),
        middleware=_optional(
            data, "middleware", lambda v: {str(k): _as_str_dict(m) for k, m in _as_mapping(v).items()}, owner
        ),
        options=_optional(data, "options", _as_str_dict, owner),
    )


def _backend_from(value: Any, name: str) -> Backend:
    data = _as_mapping(value)
    owner = f"model.backends.{name}"
    return Backend(
        kind=_field(data, "kind", lambda v: BackendKind.parse(_as_str(v)), owner),
        readonly=_field(data, "readonly", _as_bool, owner),
        connect=_field(data, "connect", _as_str, owner),
        options=_optional(data, "options", _as_str_dict, owner),
    )


def _model_from(value: Any) -> Model:
    data = _as_mapping(value)
    backends = _optional(
        data, "backends", lambda v: {str(k): _backend_from(b, str(k)) for k, b in _as_mapping(v).items()}, "model"
    )
    return Model(backends=backends)


def _log_from(value: Any) -> Log:
    data = _as_mapping(value)
    return Log(
        level=_field(data, "level", _as_str, "log"),
        console=_field(data, "console", _as_bool, "log"),
        dirs=_field(data, "dirs", _as_str, "log"),
    )


def _normalize(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_normalize(v) for v in value]
    return value


def _read_yaml(path: Path) -> dict:
    if not path.is_file():
        return {}
    try:
        loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid configuration file {path}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, Mapping):
        raise ValueError(f"configuration file {path} must hold a mapping")
    return _normalize(loaded)


def _merge(target: dict, source: Mapping) -> None:
    for key, value in source.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            _merge(existing, value)
        else:
            target[key] = value


def load_settings(
    config_path: str | os.PathLike | None = None,
    run_mode: str | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Read config.yml, <run_mode>.yml and local.yml, then apply REBT_* variables."""
    env = os.environ if environ is None else environ
    run_mode = run_mode or env.get("REBT_RUN_MODE", "development")
    base = Path(config_path or env.get("REBT_CONFIG_PATH", "config"))
    _log.info("REBT_RUN_MODE=%s", run_mode)
    _log.info("Config file path: %s", base)

    merged: dict[str, Any] = {}
    for filename in ("config.yml", f"{run_mode}.yml", "local.yml"):
        _merge(merged, _read_yaml(base / filename))

    prefix = ENV_PREFIX + "_"
    for name, value in env.items():
        if name.upper().startswith(prefix) and len(name) > len(prefix):
            merged[name[len(prefix):].lower()] = value
    return merged


_lock = threading.RLock()
_settings: dict[str, Any] | None = None
_rebit: Rebit | None = None


def settings() -> dict[str, Any]:
    """The process-wide settings, loaded on first use."""
    global _settings
    with _lock:
        if _settings is None:
            _settings = load_settings()
        return _settings


def rebit() -> Rebit:
    """The process-wide typed configuration; raise ValueError if it cannot be built."""
    global _rebit
    with _lock:
        if _rebit is None:
            try:
                _rebit = Rebit.from_dict(settings())
            except ValueError as exc:
                raise ValueError(f"rebit loading error: {exc}") from exc
        return _rebit


def reset() -> None:
    """Forget loaded settings so the next access reads them again."""
    global _settings, _rebit
    with _lock:
        _settings = None
        _rebit = None


def _lookup(data: Any, key: str) -> Any:
    current = data
    for segment in key.split("."):
        match = _SEGMENT.fullmatch(segment)
        if match is None:
            return _MISSING
        name, indexes = match.groups()
        if name:
            if not isinstance(current, Mapping) or name not in current:
                return _MISSING
            current = current[name]
        for index in _INDEX.findall(indexes):
            if not isinstance(current, list):
                return _MISSING
            try:
                current = current[int(index)]
            except IndexError:
                return _MISSING
    return current


def _get(key: str, default: Any, convert: Callable[[Any], Any]) -> Any:
    value = _lookup(settings(), key)
    if value is _MISSING or value is None:
        return default
    try:
        return convert(value)
    except _CONVERSION_ERRORS:
        return default


def get_string(key: str, default: str | None = None) -> str | None:
    """Setting at ``key`` as a string, or ``default``."""
    return _get(key, default, _as_str)


def get_bool(key: str, default: bool | None = None) -> bool | None:
    """Setting at ``key`` as a boolean, or ``default``."""
    return _get(key, default, _as_bool)


def get_int(key: str, default: int | None = None) -> int | None:
    """Setting at ``key`` as an integer, or ``default``."""
    return _get(key, default, _as_int)


def get_float(key: str, default: float | None = None) -> float | None:
    """Setting at ``key`` as a float, or ``default``."""
    return _get(key, default, _as_float)


def get_table(key: str, default: dict | None = None) -> dict | None:
    """Setting at ``key`` as a table, or ``default``."""
    return _get(key, default, _as_mapping)


def get_array(key: str, default: list | None = None) -> list | None:
    """Setting at ``key`` as an array, or ``default``."""
    return _get(key, default, _as_list)


def has(key: str) -> bool:
    """Whether a setting is present at ``key``."""
    value = _lookup(settings(), key)
    return value is not _MISSING and value is not None