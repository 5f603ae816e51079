"""Tests for the quick demo."""

from batchscan import quick_demo
from batchscan.random_batch_scanner import CycleResult
from batchscan.utils.kv_simulator import KVLatencyProfile


def make_result(phase: str, mismatches: int, unexpected: int) -> CycleResult:
    return CycleResult(
        phase=phase,
        num_queries=10,
        elapsed_secs=0.5,
        lookups_per_sec=20.0,
        num_results=10,
        rows_not_found=0,
        value_mismatches=mismatches,
        unexpected_keys=unexpected,
    )


class CannedBenchmark:
    """Benchmark double returning fixed cold/hot results."""

    def __init__(self, scanner, config):
        self.config = config

    def run_benchmark(self):
        return [make_result("cold", 1, 2), make_result("hot", 0, 1)]


def test_error_line_counts_mismatches_and_unexpected_keys(monkeypatch, capsys):
    monkeypatch.setattr(quick_demo, "DEMO_ROWS", 100)
    monkeypatch.setattr(quick_demo, "DEMO_QUERIES", 10)
    monkeypatch.setattr(quick_demo, "RandomBatchScannerBenchmark", CannedBenchmark)

    quick_demo.main(profile=KVLatencyProfile.instant())

    assert "Verification errors: 4" in capsys.readouterr().out


def test_demo_runs_clean(monkeypatch, capsys):
    monkeypatch.setattr(quick_demo, "DEMO_ROWS", 200)
    monkeypatch.setattr(quick_demo, "DEMO_QUERIES", 50)

    quick_demo.main(profile=KVLatencyProfile.instant())

    out = capsys.readouterr().out
    assert "Verification errors: 0" in out
    assert "hot run is" in out
