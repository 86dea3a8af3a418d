"""A UDP connection that sends and receives aggregated packets."""

from __future__ import annotations

import select
import socket
import threading
from collections import deque
from typing import Deque, Optional, Tuple

from .console import check, log_error, log_info, log_warning
from .events import Event
from .packet import (
    HEADER_SIZE,
    MAX_AGGREGATE_COUNT,
    AggregatePacket,
    Packet,
    PacketReader,
    PacketRegistry,
    default_registry,
)

Address = Tuple[str, int]

RECEIVE_BUFFER_SIZE = 1024
_POLL_INTERVAL = 0.05


def _resolve(address: Address) -> Address:
    host, port = address
    infos = socket.getaddrinfo(host, port, socket.AF_INET, socket.SOCK_DGRAM)
    return infos[0][4][:2]


def _describe(endpoint: Optional[Address]) -> str:
    if endpoint is None:
        return "<unknown>"
    return f"{endpoint[0]}:{endpoint[1]}"


class Connection:
    """A UDP socket bound locally that talks to one remote endpoint."""

    def __init__(
        self,
        local: Address = ("0.0.0.0", 0),
        remote: Optional[Address] = None,
        *,
        registry: Optional[PacketRegistry] = None,
        listen: bool = True,
    ) -> None:
        self.registry = registry if registry is not None else default_registry
        self.disconnected = Event()
        self.endpoint: Optional[Address] = _resolve(remote) if remote is not None else None
        self._send_queue: Deque[AggregatePacket] = deque()
        self._lock = threading.Lock()
        self._close_lock = threading.Lock()
        self._closed = False
        self._socket = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self._socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            self._socket.bind(local)
        except OSError:
            self._socket.close()
            raise
        self._thread: Optional[threading.Thread] = None
        if listen:
            self._thread = threading.Thread(target=self._listen, name="thera-udp", daemon=True)
            self._thread.start()

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def local_address(self) -> Address:
        return self._socket.getsockname()[:2]

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        """Number of aggregates waiting to be flushed."""
        with self._lock:
            return len(self._send_queue)

    def _listen(self) -> None:
        while not self._closed:
            try:
                ready, _, _ = select.select([self._socket], [], [], _POLL_INTERVAL)
                if not ready:
                    continue
                data, sender = self._socket.recvfrom(RECEIVE_BUFFER_SIZE)
            except (OSError, ValueError) as exc:
                if self._closed:
                    break
                log_error(str(exc), False)
                continue
            self.endpoint = sender[:2]
            self.handle_datagram(data)
        self._handle_disconnect()

    def _handle_disconnect(self) -> None:
        log_info(f"Aborted receive from connection {_describe(self.endpoint)}")
        self.close()
        self.disconnected.invoke(self)

    def handle_datagram(self, data: bytes) -> int:
        """Dispatch every packet of one received aggregate; return how many were handled."""
        size = len(data)
        if size < HEADER_SIZE:
            log_error(f"Received packet with invalid size {size}", False)
            return 0
        reader = PacketReader(data)
        count = reader.read_u16()
        aggregate_size = reader.read_u16()
        if aggregate_size + AggregatePacket.HEADER_SIZE > size:
            log_error(
                f"Received partial aggregate packet of {size} bytes. "
                f"Expected {aggregate_size + AggregatePacket.HEADER_SIZE}",
                False,
            )
            return 0
        handled = 0
        for _ in range(count):
            try:
                packet = Packet.from_reader(reader)
            except ValueError as exc:
                log_error(str(exc), False)
                break
            handler = self.registry.get(packet.id)
            if handler is None:
                log_warning(
                    f"Received unhandled packet id '{packet.id}' from {_describe(self.endpoint)}"
                )
                continue
            handler(self, packet)
            handled += 1
        log_info(f"Received {size} bytes from {_describe(self.endpoint)}")
        return handled

    def send(self, packet: Packet) -> None:
        """Queue a packet; it is sent on the next flush."""
        with self._lock:
            if not self._send_queue or not self._send_queue[-1].can_add(
                packet, MAX_AGGREGATE_COUNT
            ):
                self._send_queue.append(AggregatePacket())
            self._send_queue[-1].add_packet(packet)

    def flush(self) -> None:
        """Send every queued aggregate to the remote endpoint."""
        with self._lock:
            if not self._send_queue:
                return
            check(self.endpoint is not None, "Connection has no remote endpoint to send to.")
            while self._send_queue:
                aggregate = self._send_queue.popleft()
                payload = aggregate.to_bytes()
                sent = self._socket.sendto(payload, self.endpoint)
                if sent != len(payload):
                    log_error(
                        f"Sent {sent} of {len(payload)} bytes for aggregate with count "
                        f"{aggregate.count}",
                        False,
                    )

    def close(self) -> None:
        """Stop receiving and close the socket."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join()
        self._socket.close()