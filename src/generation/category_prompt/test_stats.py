import pytest

from src.generation.category_prompt.stats import ConversionStats


def _record(stats, successes, failures):
    for _ in range(successes):
        stats.record_conversion(True, 10)
    for _ in range(failures):
        stats.record_conversion(False, 10)


def test_empty_stats():
    stats = ConversionStats(window_size=10)
    assert stats.get_stats() == {
        "total_conversions": 0,
        "successful_conversions": 0,
        "failed_conversions": 0,
        "fallback_conversions": 0,
        "avg_processing_time_ms": 0.0,
        "success_rate": 0.0,
        "fallback_rate": 0.0,
    }
    assert stats.get_health()["status"] == "healthy"


def test_counts_and_rates():
    stats = ConversionStats(window_size=10)
    stats.record_conversion(True, 100)
    stats.record_conversion(True, 200, fallback=True)
    stats.record_conversion(False, 300, fallback=True)
    stats.record_conversion(True, 400)

    result = stats.get_stats()
    assert result["total_conversions"] == 4
    assert result["successful_conversions"] == 3
    assert result["failed_conversions"] == 1
    assert result["fallback_conversions"] == 2
    assert result["avg_processing_time_ms"] == 250.0
    assert result["success_rate"] == 75.0
    assert result["fallback_rate"] == 50.0


@pytest.mark.parametrize("successes, failures, status", [
    (10, 0, "healthy"),
    (9, 1, "healthy"),
    (8, 2, "degraded"),
    (7, 3, "degraded"),
    (6, 4, "unhealthy"),
])
def test_health_thresholds(successes, failures, status):
    stats = ConversionStats(window_size=10)
    _record(stats, successes, failures)
    assert stats.get_health()["status"] == status


def test_health_uses_recent_window():
    stats = ConversionStats(window_size=5)
    _record(stats, 0, 20)
    assert stats.get_health()["status"] == "unhealthy"

    _record(stats, 5, 0)
    health = stats.get_health()
    assert health["status"] == "healthy"
    assert health["recent_success_rate"] == 100.0
    assert health["success_rate"] == 20.0


def test_health_timestamp_is_injected():
    stats = ConversionStats(timestamp=lambda: "2024-01-01T00:00:00+00:00")
    assert stats.get_health()["last_check"] == "2024-01-01T00:00:00+00:00"


def test_reset():
    stats = ConversionStats(window_size=10)
    _record(stats, 0, 5)
    stats.reset()
    assert stats.get_stats()["total_conversions"] == 0
    assert stats.get_health()["status"] == "healthy"


def test_invalid_window_size():
    with pytest.raises(ValueError):
        ConversionStats(window_size=0)
