"""Tests for MetricsCollector."""

import logging
import threading

import pytest

from shared.metrics import MetricsCollector


def test_timer_records_duration():
    metrics = MetricsCollector()
    metrics.start_timer('dump')

    elapsed = metrics.stop_timer('dump')

    assert elapsed >= 0
    assert metrics.get_metric('dump_duration') == [elapsed]


def test_stop_unknown_timer_raises():
    with pytest.raises(KeyError):
        MetricsCollector().stop_timer('never')


def test_counters_are_thread_safe():
    metrics = MetricsCollector()

    def bump():
        for _ in range(1000):
            metrics.increment_counter('bytes_dumped', 2)

    threads = [threading.Thread(target=bump) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert metrics.get_counter('bytes_dumped') == 16000


def test_summary():
    metrics = MetricsCollector()
    metrics.record_metric('chain_duration', 1.0)
    metrics.record_metric('chain_duration', 3.0)
    metrics.increment_counter('bytes_compressed', 10)

    summary = metrics.get_summary()

    assert summary['counters'] == {'bytes_compressed': 10}
    assert summary['metrics']['chain_duration'] == {'count': 2, 'sum': 4.0, 'min': 1.0, 'max': 3.0}


def test_log_summary(caplog):
    metrics = MetricsCollector()
    metrics.increment_counter('bytes_dumped', 42)
    metrics.record_metric('dump_duration', 1.5)

    with caplog.at_level(logging.INFO):
        metrics.log_summary(logging.getLogger('test.metrics'))

    assert "bytes_dumped=42" in caplog.text
    assert "dump_duration=1.50s" in caplog.text
