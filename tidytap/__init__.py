"""Create and configure Linux TUN/TAP devices.

Blocking devices live in ``tidytap.device``, multiqueue devices in
``tidytap.multiq`` and asyncio devices in ``tidytap.asyncd``.
"""

__version__ = "0.3.1"