"""Tests for MetricsCollector."""

from batchscan.utils.metrics_collector import MetricsCollector, SystemMetrics


def test_snapshot_reports_process_memory():
    collector = MetricsCollector()
    metrics = collector.collect_system_metrics()

    assert isinstance(metrics, SystemMetrics)
    assert metrics.memory_mb > 0
    assert metrics.to_dict()["memory_mb"] == metrics.memory_mb


def test_summary_and_reset():
    collector = MetricsCollector()
    assert collector.get_summary() == {}

    collector.collect_system_metrics()
    collector.collect_system_metrics()
    summary = collector.get_summary()

    assert summary["samples"] == 2
    assert summary["max_memory_mb"] >= summary["avg_memory_mb"] > 0

    collector.reset()
    assert collector.get_summary() == {}
