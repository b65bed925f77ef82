"""Tests for the load test helpers."""
import pytest

from load_test import DEFAULT_STAGES, LoadTestResult, main, target_users


@pytest.mark.parametrize("elapsed,expected", [
    (0, 0),
    (15, 10),
    (30, 20),
    (60, 110),
    (90, 200),
    (150, 200),
    (225, 100),
    (240, 0),
    (1000, 0),
])
def test_target_users_ramps_linearly(elapsed, expected):
    assert target_users(DEFAULT_STAGES, elapsed) == expected


def test_percentile():
    result = LoadTestResult(durations_ms=[float(ms) for ms in range(1, 101)])
    assert result.percentile(95) == 95.0
    assert result.percentile(100) == 100.0
    assert LoadTestResult().percentile(95) == 0.0


def test_thresholds():
    fast = LoadTestResult(durations_ms=[10.0] * 200, failures=1)
    assert fast.failure_rate == 0.005
    assert fast.passed()

    failing = LoadTestResult(durations_ms=[10.0] * 100, failures=1)
    assert not failing.passed()

    slow = LoadTestResult(durations_ms=[600.0] * 100)
    assert not slow.passed()


def test_main_reports_result(monkeypatch, capsys):
    async def fake_run(url, stages, subscription_key):
        assert url == "http://example.test/mcp"
        assert subscription_key == "key"
        assert stages[0] == (15.0, 20)
        return LoadTestResult(durations_ms=[5.0] * 10)

    monkeypatch.setattr("load_test.run_load_test", fake_run)
    code = main(["--url", "http://example.test/mcp", "--subscription-key", "key", "--scale", "0.5"])
    assert code == 0
    assert "p95 latency" in capsys.readouterr().out
