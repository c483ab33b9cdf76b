"""Small function combinators."""

from __future__ import annotations

import threading
from typing import Any, Callable, TypeVar

A = TypeVar("A")
B = TypeVar("B")
C = TypeVar("C")


def compose(f: Callable[[B], C], g: Callable[[A], B]) -> Callable[[A], C]:
    """Return ``x -> f(g(x))``."""

    def composed(x: A) -> C:
        return f(g(x))

    return composed


def memoize(f: Callable[[A], B]) -> Callable[[A], B]:
    """Cache results of a one-argument function by its (hashable) argument."""
    cache: dict[Any, B] = {}
    lock = threading.Lock()

    def cached(x: A) -> B:
        with lock:
            if x in cache:
                return cache[x]
            result = f(x)
            cache[x] = result
            return result

    return cached


def with_retry(f: Callable[[A], B], max_retries: int) -> Callable[[A], B]:
    """Call ``f`` again on exception, up to ``max_retries`` extra times."""

    def retrying(x: A) -> B:
        retries = 0
        while True:
            try:
                return f(x)
            except Exception:
                if retries >= max_retries:
                    raise
                retries += 1

    return retrying


def singleton(f: Callable[[A], B]) -> Callable[[A], B]:
    """Run ``f`` once, with the first argument given; later calls return that result."""
    lock = threading.Lock()
    results: list[B] = []

    def once(x: A) -> B:
        with lock:
            if not results:
                results.append(f(x))
            return results[0]

    return once