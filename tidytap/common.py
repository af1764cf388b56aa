"""Creation of TUN/TAP devices through the kernel's clone device.

TUN/TAP provides packet reception and transmission for user space programs:
a point-to-point (TUN) or Ethernet (TAP) interface whose packets are read
from and written to a file descriptor instead of physical media.
"""

from __future__ import annotations

import enum
import io
import os
import socket
import struct
from dataclasses import dataclass, field

from . import ioctl

DEVICE_PATH = "/dev/net/tun"

IFF_TUN = 0x0001
IFF_TAP = 0x0002
IFF_NO_PI = 0x1000
IFF_MULTI_QUEUE = 0x0100
IFF_ATTACH_QUEUE = 0x0200
IFF_DETACH_QUEUE = 0x0400


class Mode(enum.Enum):
    """Kind of device: layer 3 (TUN) or layer 2 (TAP)."""

    TUN = IFF_TUN
    TAP = IFF_TAP


@dataclass
class DeviceResources:
    """Descriptors backing a created device.

    ``name`` is the raw ``IFNAMSIZ`` name field chosen by the kernel. The two
    datagram sockets are only used as handles for interface ioctls.
    """

    name: bytes
    files: list[io.FileIO] = field(default_factory=list)
    inet4_socket: socket.socket | None = None
    inet6_socket: socket.socket | None = None


def device_flags(mode: Mode, packet_info: bool, multi_queue: bool) -> int:
    """Return the ``TUNSETIFF`` flags for the requested device."""
    flags = mode.value
    if not packet_info:
        flags |= IFF_NO_PI
    if multi_queue:
        flags |= IFF_MULTI_QUEUE
    return flags


def create_device(
    name: str,
    mode: Mode,
    device_count: int,
    packet_info: bool,
    non_blocking: bool,
) -> DeviceResources:
    """Create (or attach to) a device with ``device_count`` queues.

    The name is truncated to fit ``IFNAMSIZ``; the kernel may replace it, and
    the chosen name is used for every following queue. Raises ``OSError`` if
    the clone device cannot be opened or configured.
    """
    flags = device_flags(mode, packet_info, device_count > 1)
    open_flags = os.O_RDWR | (os.O_NONBLOCK if non_blocking else 0)
    ifreq = ioctl.make_ifreq(name, struct.pack("=h", flags))

    files: list[io.FileIO] = []
    try:
        for _ in range(device_count):
            fd = os.open(DEVICE_PATH, open_flags)
            try:
                handle = os.fdopen(fd, "r+b", buffering=0)
            except BaseException:
                os.close(fd)
                raise
            files.append(handle)
            ifreq = ioctl.call(handle.fileno(), ioctl.TUNSETIFF, ifreq)

        inet4_socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            inet6_socket = socket.socket(socket.AF_INET6, socket.SOCK_DGRAM)
        except BaseException:
            inet4_socket.close()
            raise
    except BaseException:
        for handle in files:
            handle.close()
        raise

    return DeviceResources(
        name=bytes(ifreq[: ioctl.IFNAMSIZ]),
        files=files,
        inet4_socket=inet4_socket,
        inet6_socket=inet6_socket,
    )