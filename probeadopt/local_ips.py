"""Local network address enumeration."""

from __future__ import annotations

import ipaddress
import socket

import psutil

_ADDRESS_FAMILIES = (socket.AF_INET, socket.AF_INET6)


def _strip_zone(address: str) -> str:
    """Drop an IPv6 zone suffix such as '%eth0'."""
    return address.split("%", 1)[0]


def _is_reportable(address: str) -> bool:
    try:
        ip = ipaddress.ip_address(address)
    except ValueError:
        return False
    return not (ip.is_loopback or ip.is_link_local or ip.is_unspecified or ip.is_multicast)


def get_local_ips() -> list[str]:
    """Return addresses reachable from the LAN, in interface enumeration order.

    Loopback, link-local, unspecified and multicast addresses are skipped.
    Duplicates keep their first position.
    """
    seen: set[str] = set()
    result: list[str] = []

    for addrs in psutil.net_if_addrs().values():
        for addr in addrs:
            if addr.family not in _ADDRESS_FAMILIES:
                continue
            address = _strip_zone(addr.address)
            if address in seen or not _is_reportable(address):
                continue
            seen.add(address)
            result.append(address)

    return result


def is_private_ip(value: str) -> bool:
    """Check whether an IP literal is outside the globally routable space."""
    ip = ipaddress.ip_address(_strip_zone(value))
    return not ip.is_global
