"""Interface flag word reported by the kernel (see ``man netdevice``)."""

from __future__ import annotations

import enum

from .errors import ConversionError


class Flags(enum.IntFlag):
    """Active flag word of a network interface."""

    IFF_UP = 0x1
    IFF_BROADCAST = 0x2
    IFF_DEBUG = 0x4
    IFF_LOOPBACK = 0x8
    IFF_POINTOPOINT = 0x10
    IFF_NOTRAILERS = 0x20
    IFF_RUNNING = 0x40
    IFF_NOARP = 0x80
    IFF_PROMISC = 0x100
    IFF_ALLMULTI = 0x200
    IFF_MASTER = 0x400
    IFF_SLAVE = 0x800
    IFF_MULTICAST = 0x1000
    IFF_PORTSEL = 0x2000
    IFF_AUTOMEDIA = 0x4000
    IFF_DYNAMIC = 0x8000
    IFF_LOWER_UP = 0x10000
    IFF_DORMANT = 0x20000
    IFF_ECHO = 0x40000


_KNOWN_BITS = 0
for _member in Flags.__members__.values():
    _KNOWN_BITS |= _member.value
del _member


def flags_from_bits(value: int) -> Flags:
    """Convert a raw flag word to ``Flags``, rejecting unknown bits."""
    if value & ~_KNOWN_BITS:
        raise ConversionError(value)
    return Flags(value)