# tidytap

A small library for creating and configuring TUN/TAP network devices on Linux.

A TUN device carries IP packets and a TAP device carries Ethernet frames. Your
program reads what the kernel sends out through the interface. It writes what the
kernel should treat as received on the interface.

tidytap offers three kinds of device:

* Blocking: `Tun` and `Tap` in `tidytap.device`
* Multiqueue: `open_mq_tun` and `open_mq_tap` in `tidytap.multiq`. Each returns a
  list of `MQTun` or `MQTap` queues that share one interface.
* Non-blocking, for asyncio: `AsyncTun` and `AsyncTap` in `tidytap.asyncd`

It has no third-party dependencies. Creating devices needs `/dev/net/tun` and
`CAP_NET_ADMIN`, which usually means running as root.

## Blocking devices

```python
from ipaddress import IPv4Address

from tidytap.device import Tun
from tidytap.flags import Flags

with Tun("tun10", packet_info=False) as tun:
    tun.bring_up()
    tun.set_addr(IPv4Address("10.10.10.1"))
    tun.set_brd_addr(IPv4Address("10.10.10.255"))
    tun.set_netmask(IPv4Address("255.255.255.0"))
    tun.set_mtu(1400)

    assert Flags.IFF_UP in tun.flags()
    print(tun.name(), tun.get_index(), tun.get_mtu())

    packet = tun.recv(1500)   # one packet, at most 1500 bytes
    tun.send(packet)          # inject a packet
```

Addresses may be given as `ipaddress` objects or as strings. Getters return
`IPv4Address` / `IPv6Address` objects.

The kernel may choose a different interface name than the one you ask for; names
longer than 15 bytes are truncated. `name()` returns the name actually in use.

`packet_info=True` keeps the kernel's 4-byte packet information header in front
of every packet. `read` and `write` go through the device's file object, while
`recv` and `send` use the descriptor directly; `fileno()` returns it for use with
`select` and friends. `close()` (or leaving the `with` block) releases the device.

### IPv6 addresses

An interface can hold several IPv6 addresses. They are added and removed with a
/64 prefix. `get_ipv6_addrs` reads them from `/proc/net/if_inet6`.

```python
from ipaddress import IPv6Address

tun.set_ipv6_addr(IPv6Address("fe80::be8f:5838:c7ca:b98"))
print(tun.get_ipv6_addrs())
tun.del_ipv6_addr(IPv6Address("fe80::be8f:5838:c7ca:b98"))
```

### Other settings

* `get_addr` and `del_addr` read and remove the IPv4 address.
* `set_dst_addr` and `get_dst_addr` set and read the peer address of a
  point-to-point link.
* `bring_down` clears `IFF_UP` and `IFF_RUNNING`.

## Multiqueue devices

```python
from tidytap.multiq import open_mq_tun

queues = open_mq_tun("tun10", 3, packet_info=False)
queues[0].bring_up()
for queue in queues:
    queue.send(packet)

queues[1].detach()   # stop receiving on this queue
queues[1].attach()   # and start again
```

Each queue is a full device object with its own descriptors, so closing one
queue leaves the others usable. A count below one raises
`tidytap.errors.ZeroDevicesError`.

## Asyncio devices

```python
import asyncio

from tidytap.asyncd import AsyncTun

async def main():
    with AsyncTun("tun10", packet_info=False) as tun:
        tun.bring_up()
        packet = await tun.recv(1500)
        await tun.send(packet)

asyncio.run(main())
```

On these devices `recv`, `send`, `read` and `write` are coroutines that wait for
the descriptor on the running event loop. `try_recv` and `try_send` do not wait;
they raise `BlockingIOError` when the device is not ready.

## Lower-level helpers

* `tidytap.flags.flags_from_bits` turns a raw flag word into `Flags`.
* `tidytap.sockaddr.to_sockaddr` / `to_ipv4` pack and unpack `sockaddr_in`.
* `tidytap.ioctl` holds the request codes and `ifreq` / `in6_ifreq` builders.
* `tidytap.common.create_device` opens the clone device directly.

## Errors

Failures from the kernel are raised as `OSError` with `errno` set. For example,
reading an IPv4 address after it has been deleted raises `OSError` with
`errno.EADDRNOTAVAIL`. Errors from the library itself derive from
`tidytap.errors.TunTapError`: `ZeroDevicesError`, and `ConversionError` when the
kernel reports flag bits that `Flags` does not know.

## What it does not do

tidytap does not parse or build packets, and it has no command-line tool. It does
not make devices persistent or change their owner or group; the request codes
for that are defined in `tidytap.ioctl` but no device method uses them.