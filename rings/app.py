"""Application container: registered mods, lifecycle state, moments and a process registry."""

from __future__ import annotations

import abc
import asyncio
import enum
import logging
import signal
import threading
import time
from dataclasses import dataclass
from typing import Callable

from .erx import Erx
from .log import logging_initialize

_log = logging.getLogger(__name__)


class RingState(enum.Enum):
    """Lifecycle state; the value is the numeric code of the state."""

    INIT = 1
    READY = 10
    WORKING = 100
    PAUSED = 9999
    TERMINATING = -10
    TERMINATED = -1
    UNKNOWN = 0

    @classmethod
    def from_code(cls, code: int) -> "RingState":
        """State for a numeric code; unknown codes give UNKNOWN."""
        try:
            return cls(code)
        except ValueError:
            return cls.UNKNOWN

    def is_ready_to_terminating(self) -> bool:
        return self in (RingState.INIT, RingState.READY, RingState.WORKING, RingState.PAUSED)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class Moment:
    """A named point in time, in microseconds since the epoch."""

    name: str
    time: int

    @classmethod
    def now(cls, name: str) -> "Moment":
        return cls(name, time.time_ns() // 1000)


class RingsMod(abc.ABC):
    """A component whose lifecycle is driven by a Rings application."""

    @property
    @abc.abstractmethod
    def name(self) -> str: ...

    @property
    def duplicate_able(self) -> bool:
        return False

    @property
    def level(self) -> int:
        return 0

    @property
    @abc.abstractmethod
    def stage(self) -> RingState: ...

    @abc.abstractmethod
    async def initialize(self) -> None: ...

    @abc.abstractmethod
    async def unregister(self) -> None: ...

    @abc.abstractmethod
    async def shutdown(self) -> None: ...

    @abc.abstractmethod
    async def fire(self) -> None: ...


class Rings:
    """An application: ordered mods, a state and a record of moments."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._mods: list[RingsMod] = []
        self._state = RingState.INIT
        self._moments: list[Moment] = []

    @property
    def mods(self) -> tuple[RingsMod, ...]:
        return tuple(self._mods)

    def make_moment(self, name: str) -> None:
        self._moments.append(Moment.now(name))

    def get_moments(self, pred: str | None = None, after: int | None = None) -> list[Moment]:
        """Moments whose name contains ``pred`` and whose time is at least ``after``."""
        return [
            m
            for m in self._moments
            if (pred is None or pred in m.name) and (after is None or m.time >= after)
        ]

    async def register_mod(self, md: RingsMod) -> "Rings":
        """Initialize and add a mod, keeping mods ordered by level."""
        if not md.duplicate_able and any(m.name == md.name for m in self._mods):
            _log.error("Mod '%s' already registered!", md.name)
            return self
        await md.initialize()
        self._mods.append(md)
        self.make_moment(f"mod [{self.name}] registered")
        self._mods.sort(key=lambda m: m.level)
        return self

    async def shutdown(self) -> None:
        """Move to TERMINATING and ask every mod to shut down."""
        if not self._state.is_ready_to_terminating():
            return
        self.make_moment("shutdown")
        _log.info("rings::shutdown....")
        self._state = RingState.TERMINATING
        for md in self._mods:
            try:
                await md.shutdown()
            except Erx as exc:
                _log.error("failed to signal shutdown: %s error: %s", md.name, exc.message)
            else:
                _log.info("rings mod:[ %s ] shutdown accepted", md.name)

    def get_mod(self, name: str) -> RingsMod | None:
        return next((m for m in self._mods if m.name == name), None)

    async def remove_mod(self, name: str) -> "Rings":
        """Unregister and drop every mod with ``name``."""
        for md in self._mods:
            if md.name == name:
                await md.unregister()
        self._mods = [m for m in self._mods if m.name != name]
        return self

    def get_state(self) -> RingState:
        return self._state

    def set_state(self, state: RingState) -> None:
        self._state = state

    async def fire(self) -> None:
        """Fire every mod in level order, then move to WORKING."""
        _log.info("Fire Rings, Mods: %d", len(self._mods))
        for md in self._mods:
            try:
                await md.fire()
            except Erx as exc:
                _log.error("fire level %d mod:[ %s ] error:%s", md.level, md.name, exc.message)
            else:
                _log.info("fire level %d mod:[ %s ] success.", md.level, md.name)
        self._state = RingState.WORKING

    def mods_stages(self) -> dict[str, RingState]:
        return {m.name: m.stage for m in self._mods}

    def mods_all_terminated(self) -> bool:
        return all(m.stage is RingState.TERMINATED for m in self._mods)

    async def holding(self, interval: float = 0.1) -> None:
        """Wait until the app is terminating and all mods have terminated."""
        while True:
            await asyncio.sleep(interval)
            if self._state not in (RingState.TERMINATING, RingState.TERMINATED):
                continue
            if self.mods_all_terminated():
                _log.info("all mods terminated, breaking loop")
                break
            _log.info("mod stages: %s", self.mods_stages())
        self._state = RingState.TERMINATED

    def description(self) -> str:
        return "[Rings] name:" + self.name + " mods:" + "".join(m.name for m in self._mods)


_registry_lock = threading.Lock()
_apps: list[Rings] = []
_hooks: list[tuple[str, Callable[[], None]]] = []


def add_invoke_hook(name: str, func: Callable[[], None]) -> None:
    """Call ``func`` when an application named ``name`` is made."""
    with _registry_lock:
        _hooks.append((name, func))


def instance(name: str) -> Rings:
    """The registered application named ``name``; raise LookupError if none."""
    with _registry_lock:
        for app in _apps:
            if app.name == name:
                return app
    raise LookupError(f"no rings application named {name!r}")


async def make(name: str) -> Rings:
    """Initialize logging, create and register an application, run its hooks."""
    logging_initialize()
    app = Rings(name)
    app.make_moment("make")
    with _registry_lock:
        if len(_apps) > 1:
            raise RuntimeError(
                "Sorry, you've already registered an app. "
                "The current version only supports registering one app."
            )
        _apps.append(app)
        hooks = [func for hook_name, func in _hooks if hook_name == name]
    _log.info("rings application:%s made", name)
    for func in hooks:
        func()
    return app


def _install_sigint(loop: asyncio.AbstractEventLoop, callback: Callable[[], None]) -> bool:
    try:
        loop.add_signal_handler(signal.SIGINT, callback)
    except (NotImplementedError, RuntimeError, ValueError):
        return False
    return True


async def perform(app: Rings) -> None:
    """Fire the application and serve until it has terminated; Ctrl-C shuts it down."""
    await app.fire()

    loop = asyncio.get_running_loop()
    interrupted = asyncio.Event()
    installed = _install_sigint(loop, interrupted.set)
    holding = asyncio.ensure_future(app.holding())
    waiter = asyncio.ensure_future(interrupted.wait())
    try:
        done, _ = await asyncio.wait({holding, waiter}, return_when=asyncio.FIRST_COMPLETED)
        if waiter in done:
            _log.info("rings received Ctrl-C, shutting down")
            await app.shutdown()
        await holding
    finally:
        waiter.cancel()
        if not holding.done():
            holding.cancel()
        if installed:
            loop.remove_signal_handler(signal.SIGINT)