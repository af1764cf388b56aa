"""Conversion between IPv4 addresses and the kernel's ``sockaddr_in`` layout."""

from __future__ import annotations

import ipaddress
import socket
import struct

SOCKADDR_SIZE = 16

_SOCKADDR_IN = struct.Struct("=HH4s8x")


def to_sockaddr(addr: str | ipaddress.IPv4Address) -> bytes:
    """Pack an IPv4 address into a 16-byte ``sockaddr_in`` with port 0."""
    packed = ipaddress.IPv4Address(addr).packed
    return _SOCKADDR_IN.pack(socket.AF_INET, 0, packed)


def to_ipv4(data: bytes) -> ipaddress.IPv4Address:
    """Extract the IPv4 address from a ``sockaddr_in`` structure."""
    if len(data) < 8:
        raise ValueError(f"sockaddr too short: {len(data)} bytes")
    return ipaddress.IPv4Address(bytes(data[4:8]))