"""
Performance Measurement
=======================

Times cipher calls and samples memory usage on a best-effort basis.

Memory sampling is pluggable. The pipeline works the same with
NullMemorySampler, which always reports zero.
"""

from __future__ import annotations

import time
import tracemalloc
from typing import Callable, Optional, Protocol, TypeVar

from cipherchain.core.types import PerformanceSample

T = TypeVar("T")


class MemorySampler(Protocol):
    """Reports current memory usage in bytes."""

    def current_bytes(self) -> int:
        ...


class NullMemorySampler:
    """Sampler for environments without memory introspection."""

    __slots__ = ()

    def current_bytes(self) -> int:
        return 0


class TracemallocSampler:
    """
    Memory sampler backed by tracemalloc.

    Reports zero while tracing is off. With ``start=True`` tracing is
    switched on when the sampler is created. tracemalloc is process-wide;
    stop() only turns it off again if this sampler was the one to start it.
    """

    __slots__ = ("_started",)

    def __init__(self, start: bool = False) -> None:
        self._started = False
        if start and not tracemalloc.is_tracing():
            tracemalloc.start()
            self._started = True

    @property
    def started_tracing(self) -> bool:
        return self._started

    def stop(self) -> None:
        if self._started and tracemalloc.is_tracing():
            tracemalloc.stop()
        self._started = False

    def current_bytes(self) -> int:
        if not tracemalloc.is_tracing():
            return 0
        current, _peak = tracemalloc.get_traced_memory()
        return current


def default_sampler(trace_memory: bool) -> MemorySampler:
    return TracemallocSampler(start=True) if trace_memory else NullMemorySampler()


def utf8_size(text: str) -> int:
    return len(text.encode("utf-8", errors="surrogatepass"))


def measure(
    fn: Callable[[], T],
    data_size: int,
    sampler: Optional[MemorySampler] = None,
) -> tuple[T, PerformanceSample]:
    """
    Run ``fn`` and return its result with a PerformanceSample.

    Exceptions from ``fn`` propagate unchanged and no sample is produced.

    Args:
        fn: Zero-argument callable to time
        data_size: Input size in bytes, used for throughput
        sampler: Memory sampler (defaults to NullMemorySampler)
    """
    sampler = sampler or NullMemorySampler()

    start_memory = sampler.current_bytes()
    start = time.perf_counter()

    result = fn()

    elapsed_ms = (time.perf_counter() - start) * 1000
    end_memory = sampler.current_bytes()

    return result, PerformanceSample.from_measurement(
        elapsed_ms=elapsed_ms,
        memory_bytes=end_memory - start_memory,
        data_size=data_size,
    )
