"""Non-blocking TUN/TAP devices driven by asyncio."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Callable
from typing import Any

from .common import Mode, create_device
from .device import Device


class AsyncDevice(Device):
    """A non-blocking TUN/TAP device.

    The ``try_*`` methods raise ``BlockingIOError`` when the device is not
    ready; the coroutines wait for readiness on the running event loop.
    """

    def try_recv(self, size: int) -> bytes:
        """Read one packet if one is waiting."""
        return os.read(self.fileno(), size)

    def try_send(self, data: bytes) -> int:
        """Write one packet if the device can take it."""
        return os.write(self.fileno(), data)

    async def recv(self, size: int) -> bytes:  # type: ignore[override]
        """Wait for and read one packet of at most ``size`` bytes."""
        while True:
            try:
                return self.try_recv(size)
            except BlockingIOError:
                await self._readable()

    async def send(self, data: bytes) -> int:  # type: ignore[override]
        """Wait until the device is writable and write one packet."""
        while True:
            try:
                return self.try_send(data)
            except BlockingIOError:
                await self._writable()

    async def read(self, size: int) -> bytes:  # type: ignore[override]
        """Read at most ``size`` bytes through the device's file object."""
        while True:
            chunk = self._file.read(size)
            if chunk is not None:
                return chunk
            await self._readable()

    async def write(self, data: bytes) -> int:  # type: ignore[override]
        """Write ``data`` through the device's file object."""
        while True:
            written = self._file.write(data)
            if written is not None:
                return written
            await self._writable()

    async def _readable(self) -> None:
        loop = asyncio.get_running_loop()
        await self._wait(loop.add_reader, loop.remove_reader)

    async def _writable(self) -> None:
        loop = asyncio.get_running_loop()
        await self._wait(loop.add_writer, loop.remove_writer)

    async def _wait(
        self,
        add: Callable[..., Any],
        remove: Callable[[int], Any],
    ) -> None:
        future = asyncio.get_running_loop().create_future()

        def ready() -> None:
            if not future.done():
                future.set_result(None)

        fd = self.fileno()
        add(fd, ready)
        try:
            await future
        finally:
            remove(fd)


def _open(name: str, mode: Mode, packet_info: bool) -> tuple:
    resources = create_device(name, mode, 1, packet_info, True)
    return (
        resources.name,
        resources.files[0],
        resources.inet4_socket,
        resources.inet6_socket,
    )


class AsyncTun(AsyncDevice):
    """A non-blocking TUN (layer 3) device."""

    def __init__(self, name: str, packet_info: bool = False) -> None:
        super().__init__(*_open(name, Mode.TUN, packet_info))


class AsyncTap(AsyncDevice):
    """A non-blocking TAP (layer 2) device."""

    def __init__(self, name: str, packet_info: bool = False) -> None:
        super().__init__(*_open(name, Mode.TAP, packet_info))