"""Tests for the retry decorator."""
import pytest

from autostack.core.retry import retry


@pytest.fixture
def delays(monkeypatch):
    recorded = []
    monkeypatch.setattr("autostack.core.retry.time.sleep", recorded.append)
    return recorded


def flaky(failures, exc=ConnectionError):
    """Callable that raises `failures` times, then returns "ok"."""
    calls = []

    def func():
        calls.append(1)
        if len(calls) <= failures:
            raise exc("down")
        return "ok"

    func.calls = calls
    return func


def test_returns_after_transient_failures(delays):
    func = flaky(2)

    assert retry(max_attempts=3, delay=1.0, backoff=2.0)(func)() == "ok"
    assert len(func.calls) == 3
    assert delays == [1.0, 2.0]


def test_last_failure_is_raised(delays):
    func = flaky(5)

    with pytest.raises(ConnectionError):
        retry(max_attempts=3, delay=0.5)(func)()

    assert len(func.calls) == 3
    assert len(delays) == 2


def test_other_exceptions_not_retried(delays):
    func = flaky(1, exc=KeyError)

    with pytest.raises(KeyError):
        retry(max_attempts=3, exceptions=(ConnectionError,))(func)()

    assert len(func.calls) == 1
    assert delays == []


def test_zero_attempts_rejected():
    with pytest.raises(ValueError, match="max_attempts"):
        retry(max_attempts=0)
