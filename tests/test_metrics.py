import tracemalloc

import pytest

from cipherchain.core.config import ChainConfig, CipherConfig
from cipherchain.core.metrics import NullMemorySampler, TracemallocSampler, measure, utf8_size
from cipherchain.core.registry import CipherRegistry
from cipherchain.core.types import MIN_ELAPSED_MS, PerformanceSample, PerformanceSummary


class FixedSampler:
    def __init__(self, values):
        self._values = iter(values)

    def current_bytes(self):
        return next(self._values)


def test_measure_returns_result_and_sample():
    result, sample = measure(lambda: "done", 10, NullMemorySampler())
    assert result == "done"
    assert sample.data_size == 10
    assert sample.memory_bytes == 0
    assert sample.elapsed_ms >= MIN_ELAPSED_MS


def test_measure_reports_memory_delta():
    _, sample = measure(lambda: None, 1, FixedSampler([1000, 4096]))
    assert sample.memory_bytes == 3096


def test_negative_memory_delta_clamped():
    _, sample = measure(lambda: None, 1, FixedSampler([4096, 1000]))
    assert sample.memory_bytes == 0


def test_measure_propagates_errors():
    def boom():
        raise RuntimeError("fail")

    with pytest.raises(RuntimeError):
        measure(boom, 1)


def test_elapsed_floor_prevents_division_by_zero():
    sample = PerformanceSample.from_measurement(elapsed_ms=0.0, memory_bytes=0, data_size=5)
    assert sample.elapsed_ms == MIN_ELAPSED_MS
    assert sample.throughput == pytest.approx(5 / (MIN_ELAPSED_MS / 1000))


def test_summary_aggregation():
    samples = [
        PerformanceSample(elapsed_ms=2.0, memory_bytes=100, data_size=10, throughput=1000.0),
        PerformanceSample(elapsed_ms=3.0, memory_bytes=400, data_size=10, throughput=3000.0),
    ]
    summary = PerformanceSummary.from_samples(samples)
    assert summary.total_ms == 5.0
    assert summary.peak_memory_bytes == 400
    assert summary.mean_throughput == 2000.0
    assert summary.layer_count == 2


def test_empty_summary():
    assert PerformanceSummary.from_samples([]).layer_count == 0


def test_tracemalloc_sampler_off_reports_zero():
    assert TracemallocSampler().current_bytes() >= 0


def test_utf8_size():
    assert utf8_size("abc") == 3
    assert utf8_size("€") == 3


@pytest.fixture
def tracing_off():
    was_tracing = tracemalloc.is_tracing()
    if was_tracing:
        tracemalloc.stop()
    yield
    if tracemalloc.is_tracing():
        tracemalloc.stop()
    if was_tracing:
        tracemalloc.start()


def test_tracemalloc_sampler_stops_only_what_it_started(tracing_off):
    sampler = TracemallocSampler(start=True)
    assert sampler.started_tracing
    assert tracemalloc.is_tracing()
    sampler.stop()
    assert not tracemalloc.is_tracing()


def test_tracemalloc_sampler_leaves_existing_tracing_on(tracing_off):
    tracemalloc.start()
    sampler = TracemallocSampler(start=True)
    assert not sampler.started_tracing
    sampler.stop()
    assert tracemalloc.is_tracing()


def test_registry_close_releases_tracing(tracing_off):
    registry = CipherRegistry(config=ChainConfig(cipher=CipherConfig(trace_memory=True)))
    assert tracemalloc.is_tracing()
    assert registry.encrypt("x" * 64, "caesar", "SHIFT-1").sample.memory_bytes >= 0
    registry.close()
    assert not tracemalloc.is_tracing()
