"""Request codes and structure layouts for the TUN/TAP and interface ioctls."""

from __future__ import annotations

import fcntl
import ipaddress
import struct

IFNAMSIZ = 16
IFREQ_UNION_SIZE = 24
IFREQ_SIZE = IFNAMSIZ + IFREQ_UNION_SIZE
_IN6_IFREQ = struct.Struct("=16sIi")
IN6_IFREQ_SIZE = _IN6_IFREQ.size

_SIZEOF_INT = 4

_IOC_NRBITS = 8
_IOC_TYPEBITS = 8
_IOC_SIZEBITS = 14
_IOC_NRSHIFT = 0
_IOC_TYPESHIFT = _IOC_NRSHIFT + _IOC_NRBITS
_IOC_SIZESHIFT = _IOC_TYPESHIFT + _IOC_TYPEBITS
_IOC_DIRSHIFT = _IOC_SIZESHIFT + _IOC_SIZEBITS
_IOC_WRITE = 1


def iow(kind: str | int, number: int, size: int) -> int:
    """Build a write-direction ioctl request code (the ``_IOW`` macro)."""
    if isinstance(kind, str):
        if len(kind) != 1:
            raise ValueError(f"ioctl type must be a single character: {kind!r}")
        kind = ord(kind)
    if not 0 <= kind < 1 << _IOC_TYPEBITS:
        raise ValueError(f"ioctl type out of range: {kind}")
    if not 0 <= number < 1 << _IOC_NRBITS:
        raise ValueError(f"ioctl number out of range: {number}")
    if not 0 <= size < 1 << _IOC_SIZEBITS:
        raise ValueError(f"ioctl size out of range: {size}")
    return (
        (_IOC_WRITE << _IOC_DIRSHIFT)
        | (kind << _IOC_TYPESHIFT)
        | (number << _IOC_NRSHIFT)
        | (size << _IOC_SIZESHIFT)
    )


# Set the flags and name of a TUN/TAP device.
TUNSETIFF = iow("T", 202, _SIZEOF_INT)
# Keep the device after its last descriptor is closed.
TUNSETPERSIST = iow("T", 203, _SIZEOF_INT)
# Hand a persistent device to a user or a group.
TUNSETOWNER = iow("T", 204, _SIZEOF_INT)
TUNSETGROUP = iow("T", 206, _SIZEOF_INT)
# Attach or detach a queue of a multiqueue device.
TUNSETQUEUE = iow("T", 217, _SIZEOF_INT)

SIOCGIFFLAGS = 0x8913
SIOCSIFFLAGS = 0x8914
SIOCGIFADDR = 0x8915
SIOCSIFADDR = 0x8916
SIOCGIFDSTADDR = 0x8917
SIOCSIFDSTADDR = 0x8918
SIOCGIFBRDADDR = 0x8919
SIOCSIFBRDADDR = 0x891A
SIOCGIFNETMASK = 0x891B
SIOCSIFNETMASK = 0x891C
SIOCGIFMETRIC = 0x891D
SIOCSIFMETRIC = 0x891E
SIOCGIFMTU = 0x8921
SIOCSIFMTU = 0x8922
SIOCGIFINDEX = 0x8933
SIOCDIFADDR = 0x8936


def encode_name(name: str) -> bytes:
    """Encode an interface name as a NUL-padded ``IFNAMSIZ`` field.

    At most ``IFNAMSIZ - 1`` bytes are kept so the field stays terminated.
    """
    raw = name.encode("utf-8")[: IFNAMSIZ - 1]
    return raw.ljust(IFNAMSIZ, b"\0")


def decode_name(raw: bytes) -> str:
    """Decode a NUL-terminated interface name field."""
    return bytes(raw).split(b"\0", 1)[0].decode("latin-1")


def make_ifreq(name: str | bytes, payload: bytes = b"") -> bytes:
    """Build an ``ifreq`` with the given name and union contents."""
    if isinstance(name, str):
        raw_name = encode_name(name)
    else:
        raw_name = bytes(name)
        if len(raw_name) > IFNAMSIZ:
            raise ValueError(f"interface name field longer than {IFNAMSIZ} bytes")
        raw_name = raw_name.ljust(IFNAMSIZ, b"\0")
    payload = bytes(payload)
    if len(payload) > IFREQ_UNION_SIZE:
        raise ValueError(f"ifreq payload longer than {IFREQ_UNION_SIZE} bytes")
    return raw_name + payload.ljust(IFREQ_UNION_SIZE, b"\0")


def ifreq_payload(ifreq: bytes) -> bytes:
    """Return the union part of an ``ifreq``."""
    if len(ifreq) < IFREQ_SIZE:
        raise ValueError(f"ifreq must be {IFREQ_SIZE} bytes, got {len(ifreq)}")
    return bytes(ifreq[IFNAMSIZ:IFREQ_SIZE])


def make_in6_ifreq(
    addr: str | ipaddress.IPv6Address, prefixlen: int, ifindex: int
) -> bytes:
    """Build an ``in6_ifreq`` used to add or delete an IPv6 address."""
    packed = ipaddress.IPv6Address(addr).packed
    return _IN6_IFREQ.pack(packed, prefixlen, ifindex)


def call(fd: int, request: int, arg: bytes | int = 0) -> bytes | int:
    """Issue an ioctl.

    With a buffer argument the buffer as left by the kernel is returned; with
    an integer argument the call's result is returned. Failures raise
    ``OSError``.
    """
    return fcntl.ioctl(fd, request, arg)