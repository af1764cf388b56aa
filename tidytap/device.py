"""Blocking TUN/TAP devices."""

from __future__ import annotations

import ipaddress
import os
import socket
import struct
from collections.abc import Iterator
from typing import BinaryIO

from . import ioctl
from .common import Mode, create_device
from .flags import Flags, flags_from_bits
from .sockaddr import to_ipv4, to_sockaddr

IPV6_PREFIX_LEN = 64

_IF_INET6_PATH = "/proc/net/if_inet6"

_INT = struct.Struct("=i")
_SHORT = struct.Struct("=h")
_USHORT = struct.Struct("=H")

_UP_RUNNING = int(Flags.IFF_UP | Flags.IFF_RUNNING)


def _parse_if_inet6(text: str, name: str) -> Iterator[ipaddress.IPv6Address]:
    """Yield the IPv6 addresses listed for interface ``name``."""
    for line in text.splitlines():
        fields = line.split()
        if len(fields) < 6 or fields[5] != name:
            continue
        yield ipaddress.IPv6Address(bytes.fromhex(fields[0]))


class Device:
    """A blocking TUN/TAP device.

    Holds the queue's file together with the datagram sockets used as
    handles for interface configuration requests.
    """

    def __init__(
        self,
        name: str | bytes,
        file: BinaryIO,
        inet4_socket: socket.socket,
        inet6_socket: socket.socket,
    ) -> None:
        if isinstance(name, str):
            raw_name = ioctl.encode_name(name)
        else:
            raw_name = bytes(name)
            if len(raw_name) > ioctl.IFNAMSIZ:
                raise ValueError(
                    f"interface name field longer than {ioctl.IFNAMSIZ} bytes"
                )
            raw_name = raw_name.ljust(ioctl.IFNAMSIZ, b"\0")
        self._name = raw_name
        self._file = file
        self._inet4_socket = inet4_socket
        self._inet6_socket = inet6_socket

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name()!r})"

    def name(self) -> str:
        """Return the name of the device chosen by the kernel."""
        return ioctl.decode_name(self._name)

    def flags(self) -> Flags:
        """Return the active flags of the interface."""
        return flags_from_bits(self._read_flags())

    def bring_up(self) -> None:
        """Bring the device up so it can send and receive packets."""
        self._add_flags(_UP_RUNNING)

    def bring_down(self) -> None:
        """Bring the device down so it stops sending and receiving packets."""
        self._del_flags(_UP_RUNNING)

    def set_mtu(self, mtu: int) -> None:
        """Set the MTU of the device."""
        self._set(ioctl.SIOCSIFMTU, _INT.pack(mtu))

    def get_mtu(self) -> int:
        """Return the MTU of the device."""
        return _INT.unpack_from(self._get(ioctl.SIOCGIFMTU))[0]

    def set_netmask(self, netmask: str | ipaddress.IPv4Address) -> None:
        """Set the netmask of the device."""
        self._set(ioctl.SIOCSIFNETMASK, to_sockaddr(netmask))

    def get_netmask(self) -> ipaddress.IPv4Address:
        """Return the netmask of the device."""
        return to_ipv4(self._get(ioctl.SIOCGIFNETMASK))

    def get_index(self) -> int:
        """Return the index of the interface."""
        return _INT.unpack_from(self._get(ioctl.SIOCGIFINDEX))[0]

    def set_ipv6_addr(self, addr: str | ipaddress.IPv6Address) -> None:
        """Add ``addr`` to the IPv6 addresses of the interface."""
        request = ioctl.make_in6_ifreq(addr, IPV6_PREFIX_LEN, self.get_index())
        ioctl.call(self._inet6_socket.fileno(), ioctl.SIOCSIFADDR, request)

    def get_ipv6_addrs(self) -> list[ipaddress.IPv6Address]:
        """Return the IPv6 addresses of the interface."""
        with open(_IF_INET6_PATH, encoding="ascii") as table:
            return list(_parse_if_inet6(table.read(), self.name()))

    def del_ipv6_addr(self, addr: str | ipaddress.IPv6Address) -> None:
        """Delete ``addr`` from the IPv6 addresses of the interface."""
        request = ioctl.make_in6_ifreq(addr, IPV6_PREFIX_LEN, self.get_index())
        ioctl.call(self._inet6_socket.fileno(), ioctl.SIOCDIFADDR, request)

    def set_addr(self, addr: str | ipaddress.IPv4Address) -> None:
        """Set the IPv4 address of the device."""
        self._set(ioctl.SIOCSIFADDR, to_sockaddr(addr))

    def get_addr(self) -> ipaddress.IPv4Address:
        """Return the IPv4 address of the device."""
        return to_ipv4(self._get(ioctl.SIOCGIFADDR))

    def del_addr(self) -> None:
        """Delete the IPv4 address of the interface."""
        self._set(ioctl.SIOCSIFADDR, to_sockaddr("0.0.0.0"))

    def set_brd_addr(self, addr: str | ipaddress.IPv4Address) -> None:
        """Set the broadcast IPv4 address of the device."""
        self._set(ioctl.SIOCSIFBRDADDR, to_sockaddr(addr))

    def get_brd_addr(self) -> ipaddress.IPv4Address:
        """Return the broadcast IPv4 address of the device."""
        return to_ipv4(self._get(ioctl.SIOCGIFBRDADDR))

    def set_dst_addr(self, addr: str | ipaddress.IPv4Address) -> None:
        """Set the destination IPv4 address of the device."""
        self._set(ioctl.SIOCSIFDSTADDR, to_sockaddr(addr))

    def get_dst_addr(self) -> ipaddress.IPv4Address:
        """Return the destination IPv4 address of the device."""
        return to_ipv4(self._get(ioctl.SIOCGIFDSTADDR))

    def send(self, data: bytes) -> int:
        """Write one packet to the device; return the number of bytes written."""
        return os.write(self.fileno(), data)

    def recv(self, size: int) -> bytes:
        """Read one packet of at most ``size`` bytes from the device."""
        return os.read(self.fileno(), size)

    def read(self, size: int) -> bytes:
        """Read at most ``size`` bytes through the device's file object."""
        return self._file.read(size)

    def write(self, data: bytes) -> int:
        """Write ``data`` through the device's file object."""
        return self._file.write(data)

    def fileno(self) -> int:
        """Return the descriptor of the device's queue."""
        return self._file.fileno()

    def close(self) -> None:
        """Close the queue and the configuration sockets."""
        self._file.close()
        self._inet4_socket.close()
        self._inet6_socket.close()

    def __enter__(self) -> Device:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _ifreq(self, payload: bytes = b"") -> bytes:
        return ioctl.make_ifreq(self._name, payload)

    def _get(self, request: int) -> bytes:
        reply = ioctl.call(self._inet4_socket.fileno(), request, self._ifreq())
        return ioctl.ifreq_payload(reply)

    def _set(self, request: int, payload: bytes) -> None:
        ioctl.call(self._inet4_socket.fileno(), request, self._ifreq(payload))

    def _read_flags(self) -> int:
        return _SHORT.unpack_from(self._get(ioctl.SIOCGIFFLAGS))[0]

    def _write_flags(self, value: int) -> None:
        self._set(ioctl.SIOCSIFFLAGS, _USHORT.pack(value & 0xFFFF))

    def _add_flags(self, flags: int) -> None:
        self._write_flags(self._read_flags() | flags)

    def _del_flags(self, flags: int) -> None:
        self._write_flags(self._read_flags() & ~flags)


def _open(name: str, mode: Mode, packet_info: bool) -> tuple:
    resources = create_device(name, mode, 1, packet_info, False)
    return (
        resources.name,
        resources.files[0],
        resources.inet4_socket,
        resources.inet6_socket,
    )


class Tun(Device):
    """A blocking TUN (layer 3) device."""

    def __init__(self, name: str, packet_info: bool = False) -> None:
        super().__init__(*_open(name, Mode.TUN, packet_info))


class Tap(Device):
    """A blocking TAP (layer 2) device."""

    def __init__(self, name: str, packet_info: bool = False) -> None:
        super().__init__(*_open(name, Mode.TAP, packet_info))