"""Packets: an id, a length and a payload, grouped into aggregates on the wire."""

from __future__ import annotations

import struct
from typing import Any, Callable, Dict, Iterable, List, Optional

from .console import log_warning

_U16 = struct.Struct("<H")

HEADER_SIZE = 2 * _U16.size
"""Bytes in a packet header (id, size) and in an aggregate header (count, size)."""

MAX_PACKET_SIZE = 0xFFFF
"""Largest value a 16-bit id, size or count field can hold."""

MAX_AGGREGATE_COUNT = 64 // 2 - 1
"""Most packets sent in one aggregate: two buffers per packet plus the header."""

PacketHandler = Callable[[Any, "Packet"], object]


def _check_u16(value: int, what: str) -> None:
    if not 0 <= value <= MAX_PACKET_SIZE:
        raise ValueError(f"{what} {value} does not fit in 16 bits")


class PacketReader:
    """Reads little-endian fields from a byte string, front to back."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    @property
    def remaining(self) -> int:
        return len(self._data) - self._position

    def _take(self, size: int) -> bytes:
        if size < 0:
            raise ValueError(f"cannot read a negative number of bytes ({size})")
        if size > self.remaining:
            raise ValueError(f"cannot read {size} bytes, {self.remaining} remaining")
        start = self._position
        self._position += size
        return self._data[start:self._position]

    def read_u16(self) -> int:
        """Read an unsigned 16-bit integer."""
        return _U16.unpack(self._take(_U16.size))[0]

    def read(self, size: int) -> bytes:
        """Read ``size`` bytes."""
        return self._take(size)

    def skip(self, size: int) -> None:
        """Move past ``size`` bytes."""
        self._take(size)

    def current(self) -> bytes:
        """Return the unread bytes without consuming them."""
        return self._data[self._position:]


class Packet:
    """A payload tagged with a 16-bit id."""

    __slots__ = ("id", "_data")

    def __init__(self, packet_id: int, data: bytes = b"") -> None:
        _check_u16(packet_id, "Packet id")
        self.id = packet_id
        self._data = bytearray()
        self.write(data)

    @property
    def data(self) -> bytes:
        return bytes(self._data)

    @property
    def size(self) -> int:
        """Payload length in bytes."""
        return len(self._data)

    @property
    def full_size(self) -> int:
        """Payload length plus the header."""
        return self.size + HEADER_SIZE

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Packet):
            return NotImplemented
        return self.id == other.id and self._data == other._data

    def __repr__(self) -> str:
        return f"Packet(id={self.id}, data={bytes(self._data)!r})"

    @classmethod
    def from_bytes(cls, data: bytes) -> "Packet":
        """Parse one packet that fills ``data`` exactly; ValueError otherwise."""
        reader = PacketReader(data)
        packet_id = reader.read_u16()
        size = reader.read_u16()
        if reader.remaining != size:
            raise ValueError(
                f"Data and packet size mismatch: Packet reports {size} but received: "
                f"{reader.remaining} after header."
            )
        return cls(packet_id, reader.read(size))

    @classmethod
    def from_reader(cls, reader: PacketReader) -> "Packet":
        """Parse the next packet from ``reader``; ValueError if it is cut short."""
        packet_id = reader.read_u16()
        size = reader.read_u16()
        if size > reader.remaining:
            raise ValueError(
                f"Packet size mismatch: Packet reports {size} but received: "
                f"{reader.remaining} after header."
            )
        return cls(packet_id, reader.read(size))

    def write(self, data: bytes) -> None:
        """Append bytes to the payload."""
        if not data:
            return
        _check_u16(len(self._data) + len(data), "Packet size")
        self._data.extend(data)

    def to_bytes(self) -> bytes:
        """Return header and payload as sent on the wire."""
        return _U16.pack(self.id) + _U16.pack(self.size) + bytes(self._data)

    def reader(self) -> PacketReader:
        """Return a reader over the payload."""
        return PacketReader(bytes(self._data))


class AggregatePacket:
    """Several packets sent together behind a count and a total size."""

    HEADER_SIZE = HEADER_SIZE

    def __init__(self, packets: Iterable[Packet] = ()) -> None:
        self.packets: List[Packet] = []
        self.size = 0
        for packet in packets:
            self.add_packet(packet)

    @property
    def count(self) -> int:
        return len(self.packets)

    def can_add(self, packet: Packet, max_count: int = MAX_PACKET_SIZE) -> bool:
        """Whether ``packet`` still fits without exceeding the limits."""
        return (
            self.count < max_count
            and self.size + packet.full_size <= MAX_PACKET_SIZE
        )

    def add_packet(self, packet: Packet) -> None:
        """Append a packet; ValueError if the count or size would overflow."""
        _check_u16(self.count + 1, "Packet count")
        _check_u16(self.size + packet.full_size, "Aggregate size")
        self.packets.append(packet)
        self.size += packet.full_size

    def to_bytes(self) -> bytes:
        """Return the aggregate header followed by every packet."""
        parts = [_U16.pack(self.count), _U16.pack(self.size)]
        parts.extend(packet.to_bytes() for packet in self.packets)
        return b"".join(parts)

    @classmethod
    def from_reader(cls, reader: PacketReader) -> "AggregatePacket":
        """Parse the next aggregate from ``reader``; ValueError if it is cut short."""
        count = reader.read_u16()
        size = reader.read_u16()
        if size > reader.remaining:
            raise ValueError(
                f"Received partial aggregate packet of {reader.remaining} bytes. "
                f"Expected {size}"
            )
        return cls(Packet.from_reader(reader) for _ in range(count))


class PacketRegistry:
    """Maps packet ids to the handlers that process them."""

    def __init__(self) -> None:
        self._handlers: Dict[int, PacketHandler] = {}

    def __contains__(self, packet_id: object) -> bool:
        return packet_id in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def register(self, packet_id: int, handler: PacketHandler) -> None:
        """Set the handler for an id, warning if one is replaced."""
        if packet_id in self._handlers:
            log_warning(f"Packet ID {packet_id} re-registered and overwritten.")
        self._handlers[packet_id] = handler

    def get(self, packet_id: int) -> Optional[PacketHandler]:
        """Return the handler for an id, or None."""
        return self._handlers.get(packet_id)


default_registry = PacketRegistry()


def register_packet(packet_id: int, handler: PacketHandler) -> None:
    """Register a handler in the shared registry."""
    default_registry.register(packet_id, handler)


def get_packet_handler(packet_id: int) -> Optional[PacketHandler]:
    """Look up a handler in the shared registry."""
    return default_registry.get(packet_id)