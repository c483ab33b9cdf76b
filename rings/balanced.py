"""Weighted round-robin dispatch over pools of concurrency slots."""

from __future__ import annotations

import functools
import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable, Generic, Iterable, TypeVar

from .erx import Erx

T = TypeVar("T")

DEFAULT_CONCURRENT_TIMEOUT = 1_000_000_000

_log = logging.getLogger(__name__)


def _millis() -> int:
    return time.time_ns() // 1_000_000


def vector_gcd(numbers: Iterable[int]) -> int | None:
    """Greatest common divisor of all numbers, or None when there are none."""
    values = list(numbers)
    if not values:
        return None
    return functools.reduce(math.gcd, values)


def _check_weight(weight: int) -> None:
    if not 0 <= weight <= 255:
        raise ValueError(f"weight must be between 0 and 255, got {weight}")


@dataclass
class Job:
    """A unit of work to be dispatched; ``normal_timeout`` is in milliseconds."""

    id: int
    name: str
    normal_timeout: int


@dataclass(frozen=True)
class InvokedLink:
    """Identifies the slot a job was placed on, for unlocking later."""

    weight_id: int
    concurrent_id: int
    version: int


@dataclass
class Concurrent:
    """One concurrency slot, busy between ``start`` and ``end`` milliseconds."""

    id: int
    version: int = 0
    start: int = 0
    end: int = 0

    @classmethod
    def make_concurrents(cls, size: int, id_start: int) -> list["Concurrent"]:
        """Create ``size`` idle slots with consecutive ids from ``id_start``."""
        return [cls(id_start + offset) for offset in range(size)]

    def clear(self) -> "Concurrent":
        self.start = 0
        self.end = 0
        return self

    def unlock_versioned(self, version: int) -> "Concurrent":
        """Release the slot only if it still holds the given version."""
        if self.version == version:
            self.clear()
        return self

    def unlock(self) -> "Concurrent":
        return self.clear()

    def reset(self, timeout: int, used_millis: int = 0) -> "Concurrent":
        """Occupy the slot for ``timeout`` ms from ``used_millis`` (now when 0)."""
        self.version += 1
        self.start = used_millis or _millis()
        self.end = self.start + timeout
        return self

    def is_busy(self, used_millis: int = 0) -> bool:
        now = used_millis or _millis()
        return self.end != 0 and self.end > self.start and now < self.end

    def is_idle(self, used_millis: int = 0) -> bool:
        return not self.is_busy(used_millis)


@dataclass
class Weighted(Generic[T]):
    """A weighted resource with its own slots, admission test and factory."""

    id: int
    weight: int
    concurrents: list[Concurrent]
    condition: Callable[[Job], bool]
    invoker: Callable[[], T]

    def __post_init__(self) -> None:
        _check_weight(self.weight)

    def get_new_concurrents_id_start(self) -> int:
        """One more than the largest slot id (ids below zero count as zero)."""
        return max((c.id for c in self.concurrents), default=0) + 1 if self.concurrents else 1

    def unlock(self, concurrent_id: int, version: int) -> "Weighted[T]":
        for concurrent in self.concurrents:
            if concurrent.id == concurrent_id:
                concurrent.unlock_versioned(version)
        return self

    def add_concurrent(self, concurrent: Concurrent) -> None:
        """Add a slot; raise Erx if its id is already present."""
        if any(c.id == concurrent.id for c in self.concurrents):
            raise Erx("concurrent id already exists")
        self.concurrents.append(concurrent)

    def remove_concurrent(self, concurrent_id: int) -> "Weighted[T]":
        self.concurrents = [c for c in self.concurrents if c.id != concurrent_id]
        return self

    def clear_concurrent(self) -> "Weighted[T]":
        self.concurrents.clear()
        return self

    def concurrents_count(self) -> int:
        return len(self.concurrents)

    def try_using(self, timeout: int, used_millis: int = 0) -> tuple[int, int]:
        """Occupy the first idle slot; return its id and version or raise Erx."""
        now = used_millis or _millis()
        for concurrent in self.concurrents:
            if concurrent.is_busy(now):
                continue
            concurrent.reset(timeout or DEFAULT_CONCURRENT_TIMEOUT, now)
            return concurrent.id, concurrent.version
        raise Erx("all concurrents are busy")


@dataclass
class Balanced(Generic[T]):
    """Weighted round-robin balancer; not safe for concurrent use."""

    _weights: list[Weighted[T]] = field(default_factory=list)
    _pool: list[int] = field(default_factory=list)
    _circle: int = 0

    @property
    def weights(self) -> tuple[Weighted[T], ...]:
        return tuple(self._weights)

    @property
    def pool(self) -> tuple[int, ...]:
        """The rotation order as indexes into ``weights``."""
        return tuple(self._pool)

    def add_weight(self, weight: Weighted[T]) -> "Balanced[T]":
        self._weights.append(weight)
        self._rebuild_pool()
        return self

    def add_weights(self, weights: Iterable[Weighted[T]]) -> "Balanced[T]":
        self._weights.extend(weights)
        self._rebuild_pool()
        return self

    def set_weight_val(self, weight_id: int, weight: int) -> "Balanced[T]":
        _check_weight(weight)
        for w in self._weights:
            if w.id == weight_id:
                w.weight = weight
                self._rebuild_pool()
                break
        return self

    def _rebuild_pool(self) -> None:
        active = [(index, w.weight) for index, w in enumerate(self._weights) if w.weight > 0]
        divisor = vector_gcd(weight for _, weight in active)
        if divisor is not None and divisor >= 2:
            active = [(index, weight // divisor) for index, weight in active]

        remaining = dict(active)
        pool: list[int] = []
        while any(remaining.values()):
            for index, left in remaining.items():
                if left > 0:
                    pool.append(index)
                    remaining[index] = left - 1
        self._pool = pool
        self._circle = 0

    def balance(self, job: Job) -> tuple[T, InvokedLink]:
        """Pick a resource for ``job``; return the invoker's result and a link."""
        if not self._weights:
            raise Erx("no weights available")
        if not self._pool:
            raise Erx("all weights have zero priority")

        now = _millis()
        for _ in range(len(self._weights)):
            weight = self._weights[self._pool[self._circle]]
            self._circle = (self._circle + 1) % len(self._pool)

            if not weight.condition(job):
                continue
            try:
                concurrent_id, version = weight.try_using(job.normal_timeout, now)
            except Erx as exc:
                _log.error("%s", exc.message)
                continue
            return weight.invoker(), InvokedLink(weight.id, concurrent_id, version)

        raise Erx("no available resources")

    def unlock(self, link: InvokedLink) -> "Balanced[T]":
        for weight in self._weights:
            if weight.id == link.weight_id:
                weight.unlock(link.concurrent_id, link.version)
        return self