"""Shared test fixtures for autostack tests."""
import io

import pytest
from rich.console import Console

from autostack.core.config import set_config
from autostack.dns.checker import ConsoleReporter
from autostack.models.stack import StackSettings



class StubResolver:
    """Scripted (hostname, resolver) -> answer lookups.

    Each hostname maps to a single answer used every round, or to a list
    of answers consumed one per round (the last one repeats).
    """

    def __init__(self, answers):
        self.answers = answers
        self.calls = []

    def __call__(self, hostname, resolver=None):
        self.calls.append((hostname, resolver))
        answer = self.answers.get(hostname)
        if isinstance(answer, list):
            round_index = sum(1 for host, _ in self.calls if host == hostname) - 1
            return answer[min(round_index, len(answer) - 1)]
        return answer


class SleepRecorder:
    """Stands in for time.sleep and records requested delays."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.fixture(autouse=True)
def reset_config(monkeypatch):
    """Each test starts from default configuration."""
    for name in (
        "AUTOSTACK_DNS_RESOLVER",
        "AUTOSTACK_DNS_MAX_ATTEMPTS",
        "AUTOSTACK_DNS_INTERVAL",
        "AUTOSTACK_STACK_DIR",
        "AUTOSTACK_MOCK",
    ):
        monkeypatch.delenv(name, raising=False)
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def stub_resolver():
    """Factory for StubResolver instances."""
    return StubResolver


@pytest.fixture
def sleeper():
    return SleepRecorder()


@pytest.fixture
def captured_reporter():
    """ConsoleReporter writing into a buffer; read it via reporter.console.file."""
    buffer = io.StringIO()
    return ConsoleReporter(Console(file=buffer, width=120, color_system=None))


@pytest.fixture
def settings():
    """Valid stack settings for example.com."""
    return StackSettings(domain="example.com", email="admin@example.com")
