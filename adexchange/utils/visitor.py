"""Visitor identity and request context for the widget endpoints.

Identity is the client network address in canonical form: the first
``X-Forwarded-For`` hop, then ``X-Real-IP``, then the socket peer. Anything
missing or unparseable collapses to the shared ``unknown`` identity, so all
such visitors rate-limit together.
"""
from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Mapping, Optional

from user_agents import parse as parse_user_agent

from adexchange.models.db.enums import DeviceType

UNKNOWN_IDENTITY = "unknown"
UNKNOWN_COUNTRY = "XX"

_COUNTRY_HEADERS = ("cf-ipcountry", "x-vercel-ip-country", "x-country-code")


@dataclass(frozen=True, slots=True)
class VisitorContext:
    identity: str
    device: DeviceType = DeviceType.DESKTOP
    browser: str = "Other"
    os: str = "Other"
    country: str = UNKNOWN_COUNTRY
    is_bot: bool = False


def canonical_address(raw: Optional[str]) -> str:
    if not raw:
        return UNKNOWN_IDENTITY
    candidate = raw.strip()
    # Bracketed IPv6 with port: [::1]:8080
    if candidate.startswith("[") and "]" in candidate:
        candidate = candidate[1:candidate.index("]")]
    # IPv4 with port: 1.2.3.4:5678
    elif candidate.count(":") == 1:
        candidate = candidate.split(":", 1)[0]
    try:
        address = ipaddress.ip_address(candidate)
    except ValueError:
        return UNKNOWN_IDENTITY
    # IPv4-mapped IPv6 (::ffff:1.2.3.4) is the same visitor as 1.2.3.4
    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        address = address.ipv4_mapped
    return address.compressed


def visitor_identity(headers: Mapping[str, str], peer_host: Optional[str]) -> str:
    forwarded = headers.get("x-forwarded-for")
    if forwarded:
        return canonical_address(forwarded.split(",")[0])
    real_ip = headers.get("x-real-ip")
    if real_ip:
        return canonical_address(real_ip)
    return canonical_address(peer_host)


def classify_device(user_agent: Optional[str]) -> tuple[DeviceType, str, str, bool]:
    """Return (device, browser family, os family, is_bot) for a User-Agent string."""
    if not user_agent:
        return DeviceType.DESKTOP, "Other", "Other", False
    parsed = parse_user_agent(user_agent)
    if parsed.is_tablet:
        device = DeviceType.TABLET
    elif parsed.is_mobile:
        device = DeviceType.MOBILE
    else:
        device = DeviceType.DESKTOP
    return device, parsed.browser.family or "Other", parsed.os.family or "Other", bool(parsed.is_bot)


def country_code(headers: Mapping[str, str]) -> str:
    for name in _COUNTRY_HEADERS:
        value = headers.get(name)
        if value and len(value.strip()) == 2:
            return value.strip().upper()
    return UNKNOWN_COUNTRY


def build_visitor_context(headers: Mapping[str, str], peer_host: Optional[str]) -> VisitorContext:
    device, browser, os_family, is_bot = classify_device(headers.get("user-agent"))
    return VisitorContext(
        identity=visitor_identity(headers, peer_host),
        device=device,
        browser=browser[:64],
        os=os_family[:64],
        country=country_code(headers),
        is_bot=is_bot,
    )


__all__ = [
    "VisitorContext",
    "UNKNOWN_IDENTITY",
    "canonical_address",
    "visitor_identity",
    "classify_device",
    "country_code",
    "build_visitor_context",
]
