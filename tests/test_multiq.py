import os
import socket
import struct
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from tidytap import ioctl
from tidytap.common import (
    DEVICE_PATH,
    IFF_ATTACH_QUEUE,
    IFF_DETACH_QUEUE,
    IFF_MULTI_QUEUE,
    IFF_NO_PI,
    IFF_TAP,
    IFF_TUN,
)
from tidytap.errors import ZeroDevicesError
from tidytap.multiq import MQDevice, MQTap, MQTun, open_mq_tap, open_mq_tun

KERNEL_NAME = b"tun7".ljust(16, b"\0")


@pytest.fixture
def clone_device():
    pairs = [socket.socketpair(socket.AF_UNIX, socket.SOCK_DGRAM) for _ in range(4)]
    state = SimpleNamespace(opens=[], ioctls=[], peers=[b for _, b in pairs])
    fds = iter([a.detach() for a, _ in pairs])

    def fake_open(path, flags, *args):
        state.opens.append((path, flags))
        return next(fds)

    def fake_ioctl(fd, request, arg=0):
        state.ioctls.append((fd, request, bytes(arg)))
        if request == ioctl.TUNSETIFF:
            return KERNEL_NAME + bytes(arg[16:])
        return bytes(arg)

    with patch("os.open", side_effect=fake_open), patch(
        "fcntl.ioctl", side_effect=fake_ioctl
    ), patch("socket.socket"):
        yield state
    for fd in fds:
        os.close(fd)
    for peer in state.peers:
        peer.close()


def _setiff_flags(state):
    return [
        struct.unpack_from("=h", arg, 16)[0]
        for _, request, arg in state.ioctls
        if request == ioctl.TUNSETIFF
    ]


@pytest.fixture
def queue():
    a, b = socket.socketpair(socket.AF_UNIX, socket.SOCK_DGRAM)
    s4, s6 = socket.socketpair()
    file = os.fdopen(a.detach(), "r+b", buffering=0)
    dev = MQDevice("tun3", file, s4, s6)
    yield dev, b
    dev.close()
    b.close()


@pytest.mark.parametrize("opener", [open_mq_tun, open_mq_tap])
def test_zero_devices_rejected(opener):
    with pytest.raises(ZeroDevicesError) as info:
        opener("tun0", 0, False)
    assert str(info.value) == "Device count must be greater than zero"
    assert isinstance(info.value, ValueError)


def test_open_mq_tun_creates_queues(clone_device):
    queues = open_mq_tun("tun10", 3, False)
    try:
        assert len(queues) == 3
        assert all(isinstance(q, MQTun) for q in queues)
        assert {q.name() for q in queues} == {"tun7"}
        assert len({q.fileno() for q in queues}) == 3
        assert [path for path, _ in clone_device.opens] == [DEVICE_PATH] * 3
        assert all(not flags & os.O_NONBLOCK for _, flags in clone_device.opens)
        assert _setiff_flags(clone_device) == [IFF_TUN | IFF_NO_PI | IFF_MULTI_QUEUE] * 3
    finally:
        for q in queues:
            q.close()


def test_open_mq_tap_with_packet_info(clone_device):
    queues = open_mq_tap("tap0", 2, True)
    try:
        assert len(queues) == 2
        assert all(isinstance(q, MQTap) for q in queues)
        assert _setiff_flags(clone_device) == [IFF_TAP | IFF_MULTI_QUEUE] * 2
    finally:
        for q in queues:
            q.close()


def test_single_queue_is_not_multiqueue(clone_device):
    queues = open_mq_tun("tun10", 1, False)
    try:
        assert len(queues) == 1
        assert _setiff_flags(clone_device) == [IFF_TUN | IFF_NO_PI]
    finally:
        queues[0].close()


def test_closing_one_queue_keeps_others_usable(clone_device):
    queues = open_mq_tun("tun10", 2, False)
    try:
        queues[0].close()
        assert queues[1].send(b"abc") == 3
        assert clone_device.peers[1].recv(16) == b"abc"
    finally:
        queues[1].close()


@pytest.mark.parametrize(
    "method, expected",
    [("attach", IFF_ATTACH_QUEUE), ("detach", IFF_DETACH_QUEUE)],
)
def test_queue_control_request(queue, method, expected):
    dev, _ = queue
    calls = []

    def fake_ioctl(fd, request, arg=0):
        calls.append((fd, request, bytes(arg)))
        return bytes(arg)

    with patch("fcntl.ioctl", side_effect=fake_ioctl):
        getattr(dev, method)()

    assert len(calls) == 1
    fd, request, arg = calls[0]
    assert fd == dev.fileno()
    assert request == ioctl.TUNSETQUEUE
    assert arg[:16] == b"\0" * 16
    assert struct.unpack_from("=h", arg, 16)[0] == expected


def test_attach_on_non_tun_descriptor_fails(queue):
    dev, _ = queue
    with pytest.raises(OSError):
        dev.attach()


def test_queue_send_and_recv(queue):
    dev, peer = queue
    assert dev.send(b"hello") == 5
    assert peer.recv(64) == b"hello"
    peer.send(b"world")
    assert dev.recv(64) == b"world"