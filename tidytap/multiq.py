"""Multiqueue TUN/TAP devices: one device served by several queues."""

from __future__ import annotations

import struct
from typing import TypeVar

from . import ioctl
from .common import IFF_ATTACH_QUEUE, IFF_DETACH_QUEUE, Mode, create_device
from .device import Device
from .errors import ZeroDevicesError

_SHORT = struct.Struct("=h")


class MQDevice(Device):
    """One queue of a multiqueue TUN/TAP device."""

    def attach(self) -> None:
        """Attach this queue to the device."""
        self._set_queue(IFF_ATTACH_QUEUE)

    def detach(self) -> None:
        """Detach this queue from the device."""
        self._set_queue(IFF_DETACH_QUEUE)

    def _set_queue(self, flags: int) -> None:
        request = ioctl.make_ifreq(b"", _SHORT.pack(flags))
        ioctl.call(self.fileno(), ioctl.TUNSETQUEUE, request)


class MQTun(MQDevice):
    """One queue of a multiqueue TUN (layer 3) device."""


class MQTap(MQDevice):
    """One queue of a multiqueue TAP (layer 2) device."""


_Q = TypeVar("_Q", bound=MQDevice)


def _open_queues(
    cls: type[_Q], name: str, mode: Mode, device_count: int, packet_info: bool
) -> list[_Q]:
    if device_count < 1:
        raise ZeroDevicesError()

    resources = create_device(name, mode, device_count, packet_info, False)
    inet4, inet6 = resources.inet4_socket, resources.inet6_socket
    queues: list[_Q] = []
    try:
        # Each queue owns its own handles so closing one leaves the others usable.
        for handle in resources.files:
            queues.append(cls(resources.name, handle, inet4.dup(), inet6.dup()))
    except BaseException:
        for queue in queues:
            queue.close()
        for handle in resources.files[len(queues):]:
            handle.close()
        raise
    finally:
        inet4.close()
        inet6.close()
    return queues


def open_mq_tun(name: str, device_count: int, packet_info: bool = False) -> list[MQTun]:
    """Create a TUN device with ``device_count`` queues."""
    return _open_queues(MQTun, name, Mode.TUN, device_count, packet_info)


def open_mq_tap(name: str, device_count: int, packet_info: bool = False) -> list[MQTap]:
    """Create a TAP device with ``device_count`` queues."""
    return _open_queues(MQTap, name, Mode.TAP, device_count, packet_info)