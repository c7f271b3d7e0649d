from __future__ import annotations

from types import SimpleNamespace

import pytest

from app.services.internal_auth import (
    extract_client_ip,
    is_client_ip_allowed,
    is_valid_internal_token,
)

PROXY_ALLOWLIST = "127.0.0.1/32"


def _request(*, peer: str | None, forwarded_for: str | None = None) -> SimpleNamespace:
    headers = {} if forwarded_for is None else {"X-Forwarded-For": forwarded_for}
    client = None if peer is None else SimpleNamespace(host=peer)
    return SimpleNamespace(headers=headers, client=client)


@pytest.mark.parametrize(
    ("expected", "received", "is_valid"),
    [
        ("secret", "secret", True),
        ("secret", "wrong", False),
        ("secret", None, False),
        ("", "", False),
        ("", "anything", False),
    ],
)
def test_internal_token_must_match_a_configured_token(
    expected: str,
    received: str | None,
    is_valid: bool,
) -> None:
    assert is_valid_internal_token(expected_token=expected, received_token=received) is is_valid


@pytest.mark.parametrize(
    ("client_ip", "is_allowed"),
    [
        ("127.0.0.1", True),
        ("10.12.33.1", True),
        ("192.168.1.5", False),
        (None, False),
        ("garbage", False),
    ],
)
def test_allowlist_accepts_single_hosts_and_networks(
    client_ip: str | None,
    is_allowed: bool,
) -> None:
    allowlist = "not-a-network, ,127.0.0.1,10.0.0.0/8"
    assert is_client_ip_allowed(client_ip=client_ip, allowlist=allowlist) is is_allowed


def test_empty_allowlist_blocks_everyone() -> None:
    assert is_client_ip_allowed(client_ip="127.0.0.1", allowlist="") is False


@pytest.mark.parametrize(
    ("request_", "expected_ip"),
    [
        (_request(peer="127.0.0.1", forwarded_for="10.1.1.8, 127.0.0.1"), "10.1.1.8"),
        (_request(peer="127.0.0.1", forwarded_for="2001:db8::10, 127.0.0.1"), "2001:db8::10"),
        (_request(peer="127.0.0.1", forwarded_for="not-an-ip, 127.0.0.1"), None),
        (_request(peer="198.51.100.10", forwarded_for="10.1.1.8"), "198.51.100.10"),
        (_request(peer="127.0.0.1"), "127.0.0.1"),
        (_request(peer=None), None),
    ],
    ids=[
        "trusted-proxy",
        "trusted-proxy-ipv6",
        "trusted-proxy-garbage",
        "untrusted-proxy",
        "no-forwarding",
        "no-client",
    ],
)
def test_client_ip_honours_forwarding_only_from_trusted_proxies(
    request_: SimpleNamespace,
    expected_ip: str | None,
) -> None:
    assert extract_client_ip(request_, trusted_proxies=PROXY_ALLOWLIST) == expected_ip
