from __future__ import annotations

import ipaddress
import secrets
from functools import lru_cache

import structlog
from fastapi import HTTPException, Request

from app.core.config import get_settings

INTERNAL_TOKEN_HEADER = "X-Internal-Token"

logger = structlog.get_logger(__name__)

IPNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network


def is_valid_internal_token(*, expected_token: str, received_token: str | None) -> bool:
    if not expected_token or not received_token:
        return False
    return secrets.compare_digest(expected_token, received_token)


@lru_cache(maxsize=32)
def _parse_networks(raw_networks: str) -> tuple[IPNetwork, ...]:
    networks: list[IPNetwork] = []
    for raw_entry in raw_networks.split(","):
        entry = raw_entry.strip()
        if not entry:
            continue
        try:
            # A bare address parses as a single-host network.
            networks.append(ipaddress.ip_network(entry, strict=False))
        except ValueError:
            logger.warning("internal_auth_network_ignored", entry=entry)
    return tuple(networks)


def _parse_ip(value: str | None) -> str | None:
    candidate = (value or "").strip()
    if not candidate:
        return None
    try:
        return str(ipaddress.ip_address(candidate))
    except ValueError:
        return None


def is_client_ip_allowed(*, client_ip: str | None, allowlist: str) -> bool:
    parsed = _parse_ip(client_ip)
    if parsed is None:
        return False
    address = ipaddress.ip_address(parsed)
    return any(address in network for network in _parse_networks(allowlist))


def extract_client_ip(request: Request, *, trusted_proxies: str = "") -> str | None:
    peer_ip = _parse_ip(request.client.host if request.client is not None else None)
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for and is_client_ip_allowed(client_ip=peer_ip, allowlist=trusted_proxies):
        return _parse_ip(forwarded_for.split(",", maxsplit=1)[0])
    return peer_ip


def assert_internal_access(request: Request) -> None:
    settings = get_settings()
    client_ip = extract_client_ip(
        request,
        trusted_proxies=settings.internal_api_trusted_proxies,
    )
    if not is_valid_internal_token(
        expected_token=settings.internal_api_token,
        received_token=request.headers.get(INTERNAL_TOKEN_HEADER),
    ):
        logger.warning("internal_auth_failed", reason="invalid_token", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})

    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})
