"""Tests for autostack wait-dns."""
from unittest.mock import Mock

import pytest
from typer.testing import CliRunner

from autostack.cli import app

runner = CliRunner()

EXPECTED = "203.0.113.10"
OTHER = "198.51.100.5"


@pytest.fixture
def dns(monkeypatch, stub_resolver, sleeper):
    """Install a scripted resolver for the CLI."""
    monkeypatch.setattr("autostack.cli_dns_commands.time.sleep", sleeper)

    def use_answers(answers):
        lookup = stub_resolver(answers)
        monkeypatch.setattr("autostack.cli_dns_commands.lookup_a_record", lookup)
        return lookup

    return use_answers


def test_ready(dns):
    dns({"m.example.com": EXPECTED, "n8n.example.com": EXPECTED})

    result = runner.invoke(
        app, ["wait-dns", "m.example.com", "n8n.example.com", "--expected-ip", EXPECTED]
    )

    assert result.exit_code == 0, result.stdout
    assert "DNS Propagation Complete" in result.stdout


def test_timeout_exit_code(dns, sleeper):
    dns({"m.example.com": EXPECTED, "n8n.example.com": OTHER})

    result = runner.invoke(
        app,
        ["wait-dns", "m.example.com", "n8n.example.com", "-e", EXPECTED, "-n", "3", "-i", "2"],
    )

    assert result.exit_code == 3
    assert "DNS propagation timed out" in result.stdout
    assert sleeper.calls == [2, 2]


def test_discovers_public_ip_when_not_given(dns, monkeypatch):
    dns({"app.example.com": EXPECTED})
    discover = Mock(return_value=EXPECTED)
    monkeypatch.setattr("autostack.cli_dns_commands.discover_public_ip", discover)

    result = runner.invoke(app, ["wait-dns", "app.example.com"])

    assert result.exit_code == 0, result.stdout
    discover.assert_called_once_with()
    assert f"Public IP: {EXPECTED}" in result.stdout


def test_resolver_from_environment(dns, monkeypatch):
    monkeypatch.setenv("AUTOSTACK_DNS_RESOLVER", "9.9.9.9")
    lookup = dns({"app.example.com": EXPECTED})

    result = runner.invoke(app, ["wait-dns", "app.example.com", "-e", EXPECTED])

    assert result.exit_code == 0, result.stdout
    assert lookup.calls == [("app.example.com", "9.9.9.9")]


def test_malformed_answers_are_reported_as_none(dns):
    dns({"app.example.com": ";; connection timed out"})

    result = runner.invoke(app, ["wait-dns", "app.example.com", "-e", EXPECTED, "-n", "1"])

    assert result.exit_code == 3
    assert "app.example.com ➜ none" in result.stdout


def test_negative_attempts_rejected(dns):
    dns({})

    result = runner.invoke(app, ["wait-dns", "app.example.com", "-e", EXPECTED, "-n", "-1"])

    assert result.exit_code == 2
