import pytest

from thera.packet import (
    HEADER_SIZE,
    MAX_PACKET_SIZE,
    AggregatePacket,
    Packet,
    PacketReader,
    PacketRegistry,
    get_packet_handler,
    register_packet,
)


def test_reader_reads_fields_in_order():
    reader = PacketReader(Packet(3, b"xyz").to_bytes())
    assert reader.read_u16() == 3
    assert reader.read_u16() == 3
    assert reader.read(2) == b"xy"
    assert reader.remaining == 1
    assert reader.current() == b"z"
    reader.skip(1)
    assert reader.remaining == 0


def test_reader_overrun_raises():
    reader = PacketReader(b"\x01")
    with pytest.raises(ValueError):
        reader.read_u16()
    with pytest.raises(ValueError):
        reader.skip(2)


def test_packet_wire_layout():
    assert Packet(0x0102, b"ab").to_bytes() == b"\x02\x01\x02\x00ab"


def test_packet_round_trip():
    packet = Packet(42, b"payload")
    assert Packet.from_bytes(packet.to_bytes()) == packet


def test_from_bytes_size_mismatch_raises():
    data = Packet(1, b"abc").to_bytes() + b"extra"
    with pytest.raises(ValueError):
        Packet.from_bytes(data)


def test_from_reader_cut_short_raises():
    data = Packet(1, b"abcdef").to_bytes()[:-2]
    with pytest.raises(ValueError):
        Packet.from_reader(PacketReader(data))


def test_write_appends_and_updates_size():
    packet = Packet(5)
    packet.write(b"he")
    packet.write(b"")
    packet.write(b"llo")
    assert packet.data == b"hello"
    assert packet.size == len(b"hello")
    assert packet.full_size == packet.size + HEADER_SIZE
    assert packet.reader().read(5) == b"hello"


def test_write_beyond_limit_raises():
    packet = Packet(1, b"a" * MAX_PACKET_SIZE)
    with pytest.raises(ValueError):
        packet.write(b"b")


def test_packet_id_out_of_range_raises():
    with pytest.raises(ValueError):
        Packet(MAX_PACKET_SIZE + 1)


def test_aggregate_round_trip():
    packets = [Packet(1, b"one"), Packet(2), Packet(3, b"three")]
    aggregate = AggregatePacket(packets)
    assert aggregate.count == 3
    assert aggregate.size == sum(p.full_size for p in packets)
    reader = PacketReader(aggregate.to_bytes())
    parsed = AggregatePacket.from_reader(reader)
    assert parsed.packets == packets
    assert reader.remaining == 0


def test_aggregate_header_holds_count_and_size():
    aggregate = AggregatePacket([Packet(9, b"ab"), Packet(10, b"c")])
    reader = PacketReader(aggregate.to_bytes())
    assert reader.read_u16() == aggregate.count
    assert reader.read_u16() == aggregate.size
    assert reader.remaining == aggregate.size


def test_aggregate_partial_raises():
    data = AggregatePacket([Packet(1, b"abc")]).to_bytes()[:-1]
    with pytest.raises(ValueError):
        AggregatePacket.from_reader(PacketReader(data))


def test_can_add_respects_count():
    aggregate = AggregatePacket([Packet(1)])
    assert aggregate.can_add(Packet(2), max_count=2)
    assert not aggregate.can_add(Packet(2), max_count=1)


def test_registry_register_and_get():
    registry = PacketRegistry()
    handler = lambda conn, packet: None  # noqa: E731
    registry.register(4, handler)
    assert registry.get(4) is handler
    assert registry.get(5) is None
    assert 4 in registry


def test_registry_overwrite_warns(capsys):
    registry = PacketRegistry()
    first = lambda conn, packet: 1  # noqa: E731
    second = lambda conn, packet: 2  # noqa: E731
    registry.register(8, first)
    registry.register(8, second)
    assert registry.get(8) is second
    assert len(registry) == 1
    assert "re-registered" in capsys.readouterr().out


def test_module_registry():
    handler = lambda conn, packet: None  # noqa: E731
    register_packet(64999, handler)
    assert get_packet_handler(64999) is handler