"""DNS propagation checks for the stack hostnames."""
from autostack.dns.checker import (
    DnsCheckOutcome,
    DnsCheckRequest,
    HostResolution,
    RoundResult,
    check_round,
    wait_for_dns,
)
from autostack.dns.lookup import lookup_a_record, normalize_resolver
from autostack.dns.public_ip import discover_public_ip

__all__ = [
    "DnsCheckOutcome",
    "DnsCheckRequest",
    "HostResolution",
    "RoundResult",
    "check_round",
    "wait_for_dns",
    "lookup_a_record",
    "normalize_resolver",
    "discover_public_ip",
]
