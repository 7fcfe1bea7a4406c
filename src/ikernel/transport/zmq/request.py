"""ZeroMQ ROUTER endpoint, used for the shell, control, and stdin channels.

The socket is owned by a single background thread. Incoming messages are
handed to callers through an inbox queue; outgoing messages are queued and
the owning thread is woken through an inproc PAIR signal to send them.
ZeroMQ makes no attempt to be thread-safe, so no other thread ever touches
the ROUTER socket.
"""

from __future__ import annotations

import logging
import queue
import threading
from typing import Optional, Sequence, Tuple

import zmq

from ..base import Endpoint, TransportError, TransportPortError, TransportTimeout


logger = logging.getLogger(__name__)

zmq_context = zmq.Context()


def bind(socket, address: str, port: int) -> int:
    """Bind *socket* on *address*:*port* over TCP and return the port.

    Port zero binds whatever port is free.
    """

    try:
        if port:
            socket.bind(f"tcp://{address}:{port}")
        else:
            port = socket.bind_to_random_port(f"tcp://{address}")
    except zmq.ZMQError as exc:
        raise TransportPortError(f"cannot bind {address}:{port}: {exc}") from exc

    return port


class Server(Endpoint):
    """Receive and send multipart messages via a ZeroMQ ROUTER socket."""

    socket_type = zmq.ROUTER
    receives = True
    poll_interval = 100  # milliseconds
    close_linger = 500  # milliseconds

    def __init__(self, address: str, port: int = 0, name: str = 'request'):
        self.address = address
        self.name = name

        self.socket = zmq_context.socket(self.socket_type)
        self.socket.setsockopt(zmq.LINGER, 0)

        try:
            self.port = bind(self.socket, address, port)
        except TransportPortError:
            self.socket.close()
            raise

        self._inbox = queue.SimpleQueue()
        self._outbox = queue.SimpleQueue()

        internal = f"inproc://request.Server:signal:{id(self)}"
        self._signal_rx = zmq_context.socket(zmq.PAIR)
        self._signal_rx.bind(internal)
        self._signal_tx = zmq_context.socket(zmq.PAIR)
        self._signal_tx.connect(internal)

        # The lock is for the signal socket, not the ROUTER socket; any
        # thread may call send(), and the PAIR socket is no more thread-safe
        # than any other ZeroMQ socket.

        self._signal_lock = threading.Lock()
        self._closed = False

        self.shutdown = False
        self.thread = threading.Thread(target=self.run, name=f"{name}-thread", daemon=True)
        self.thread.start()

    def __repr__(self):
        return f"<{self.name} ROUTER {self.address}:{self.port}>"

    def send(self, frames: Sequence[bytes]) -> None:
        with self._signal_lock:
            if self._closed:
                raise TransportError(f"{self.name}: endpoint is closed")

            self._outbox.put(tuple(frames))
            self._signal_tx.send(b"")

    def recv(self, timeout: Optional[float] = None) -> Tuple[bytes, ...]:
        try:
            return self._inbox.get(timeout=timeout)
        except queue.Empty:
            raise TransportTimeout(f"{self.name}: nothing received in {timeout} sec")

    def close(self) -> None:
        self.shutdown = True
        if self.thread is not threading.current_thread():
            self.thread.join(timeout=5)

    # --- internal ---
    def _rep_outgoing(self) -> None:
        self._signal_rx.recv(flags=zmq.NOBLOCK)
        frames = self._outbox.get(block=False)
        self.socket.send_multipart(frames)

    def run(self) -> None:
        poller = zmq.Poller()
        if self.receives:
            poller.register(self.socket, zmq.POLLIN)
        poller.register(self._signal_rx, zmq.POLLIN)

        try:
            while not self.shutdown:
                for active, _flag in poller.poll(self.poll_interval):
                    if active == self._signal_rx:
                        try:
                            self._rep_outgoing()
                        except zmq.ZMQError:
                            logger.exception("%s: send failed", self.name)
                    elif active == self.socket:
                        parts = tuple(self.socket.recv_multipart())
                        self._inbox.put(parts)
        finally:
            with self._signal_lock:
                self._closed = True
                self._flush()
                self._signal_tx.close()

            # A flushed reply needs a moment to leave; LINGER is otherwise zero.

            self.socket.close(linger=self.close_linger)
            self._signal_rx.close()

    def _flush(self) -> None:
        # Anything queued before the endpoint closed still goes out; a
        # shutdown reply is the usual example.

        while True:
            try:
                frames = self._outbox.get(block=False)
            except queue.Empty:
                break

            try:
                self.socket.send_multipart(frames, flags=zmq.NOBLOCK)
            except zmq.ZMQError:
                logger.warning("%s: dropped message at close", self.name)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
