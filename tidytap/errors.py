"""Exceptions raised by the package.

Failures reported by the operating system surface as ``OSError`` (with the
matching ``errno``); the classes below cover the package's own checks.
"""

from __future__ import annotations


class TunTapError(Exception):
    """Base class for errors raised by this package."""


class ZeroDevicesError(TunTapError, ValueError):
    """Raised when a multiqueue device is requested with no queues."""

    def __init__(self) -> None:
        super().__init__("Device count must be greater than zero")


class ConversionError(TunTapError, ValueError):
    """Raised when the kernel reports interface flags that are not known."""

    def __init__(self, value: int) -> None:
        self.value = value
        super().__init__(
            "Failed to create Flags from the data returned by the kernel: "
            f"{value:b}"
        )