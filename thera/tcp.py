"""A TCP connection that sends and receives aggregated packets."""

from __future__ import annotations

import select
import socket
import threading
from collections import deque
from typing import Deque, Optional, Tuple

from .console import log_error, log_info, log_warning
from .events import Event
from .packet import (
    HEADER_SIZE,
    MAX_AGGREGATE_COUNT,
    AggregatePacket,
    Packet,
    PacketHandler,
    PacketReader,
    PacketRegistry,
)
from .workers import run_task

Address = Tuple[str, int]

RECEIVE_BUFFER_SIZE = 1024
_POLL_INTERVAL = 0.05
_STOP_TIMEOUT = 2.0

_registry = PacketRegistry()


def register_packet(packet_id: int, handler: PacketHandler) -> None:
    """Register a handler for TCP packets."""
    _registry.register(packet_id, handler)


def get_packet_handler(packet_id: int) -> Optional[PacketHandler]:
    """Look up the handler for a TCP packet id."""
    return _registry.get(packet_id)


class TcpConnection:
    """A connected stream socket with a background receiver."""

    def __init__(self, sock: socket.socket, *, registry: Optional[PacketRegistry] = None) -> None:
        self._socket = sock
        try:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        except OSError:
            pass
        try:
            self.endpoint = sock.getpeername()
        except OSError:
            self.endpoint = None
        self.registry = registry if registry is not None else _registry
        self.disconnected = Event()
        self._send_queue: Deque[AggregatePacket] = deque()
        self._lock = threading.Lock()
        self._close_lock = threading.Lock()
        self._active = False
        self._closed = False
        self._receiver: Optional[threading.Thread] = None
        self._stopped = threading.Event()

    @classmethod
    def connect(cls, local: Address, address: str, port: int) -> "TcpConnection":
        """Connect from ``local`` to ``address:port`` and start receiving; OSError on failure."""
        family, _, proto, _, endpoint = socket.getaddrinfo(
            address, port, type=socket.SOCK_STREAM
        )[0]
        sock = socket.socket(family, socket.SOCK_STREAM, proto)
        try:
            sock.bind(local)
            sock.connect(endpoint)
        except OSError:
            sock.close()
            raise
        connection = cls(sock)
        connection.activate()
        return connection

    @classmethod
    def from_socket(cls, sock: socket.socket, start_active: bool = True) -> "TcpConnection":
        """Take over an already connected socket."""
        connection = cls(sock)
        if start_active:
            connection.activate()
        return connection

    def __enter__(self) -> "TcpConnection":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def active(self) -> bool:
        return self._active

    def activate(self) -> None:
        """Start receiving on a worker thread, once."""
        if self._active:
            return
        self._active = True
        run_task(self._receive_loop, self.close)

    def _receive_loop(self) -> None:
        self._receiver = threading.current_thread()
        try:
            while not self._closed:
                try:
                    ready, _, _ = select.select([self._socket], [], [], _POLL_INTERVAL)
                    if not ready:
                        continue
                    data = self._socket.recv(RECEIVE_BUFFER_SIZE)
                except ConnectionResetError:
                    log_warning(f"Connection {self.endpoint} closed connection (Reset).")
                    break
                except ConnectionAbortedError:
                    log_info(f"Connection {self.endpoint} aborted by host machine.")
                    break
                except (OSError, ValueError) as exc:
                    if self._closed:
                        log_info(f"Aborted receive from connection {self.endpoint}")
                        break
                    log_error(str(exc), False)
                    continue
                if not data:
                    if self._closed:
                        log_info(f"Aborted receive from connection {self.endpoint}")
                    else:
                        log_warning(f"Connection {self.endpoint} closed connection (EOF).")
                    break
                self.handle_data(data)
            else:
                log_info(f"Aborted receive from connection {self.endpoint}")
            self._handle_disconnect()
        finally:
            self._stopped.set()

    def _handle_disconnect(self) -> None:
        self.close()
        self.disconnected.invoke(self)

    def handle_data(self, data: bytes) -> int:
        """Dispatch every packet of the aggregates in ``data``; return how many were handled."""
        if len(data) < HEADER_SIZE:
            log_error(f"Received packet with invalid size {len(data)}", False)
            return 0
        reader = PacketReader(data)
        handled = 0
        while reader.remaining > 0:
            if reader.remaining < HEADER_SIZE:
                log_error(
                    "Received extra data too short for another packet. "
                    f"Remainder: {reader.remaining}",
                    False,
                )
                return handled
            count = reader.read_u16()
            aggregate_size = reader.read_u16()
            if aggregate_size > reader.remaining:
                log_error(
                    f"Received partial aggregate packet of {reader.remaining} bytes. "
                    f"Expected {aggregate_size}",
                    False,
                )
                return handled
            for _ in range(count):
                try:
                    packet = Packet.from_reader(reader)
                except ValueError as exc:
                    log_error(str(exc), False)
                    return handled
                handler = self.registry.get(packet.id)
                if handler is None:
                    log_warning(
                        f"Received unhandled packet id '{packet.id}' from {self.endpoint}"
                    )
                    continue
                handler(self, packet)
                handled += 1
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
        """Write every queued aggregate to the socket."""
        with self._lock:
            while self._send_queue:
                aggregate = self._send_queue.popleft()
                self._socket.sendall(aggregate.to_bytes())

    def close(self) -> None:
        """Shut the socket down and stop the receiver."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
        try:
            self._socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        if self._active and self._receiver is not threading.current_thread():
            self._stopped.wait(_STOP_TIMEOUT)
        self._socket.close()