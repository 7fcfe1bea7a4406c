"""ZeroMQ heartbeat endpoint.

Frontends decide whether a kernel is alive by whether it echoes heartbeat
pings. The echo runs on its own thread with its own ZeroMQ context and
shares nothing with the rest of the kernel, so a handler that hangs or
crashes cannot stop it.
"""

from __future__ import annotations

import logging
import threading

import zmq

from .request import bind


logger = logging.getLogger(__name__)


class Heartbeat:
    """Echo every message received on a REP socket back, unmodified."""

    poll_interval = 100  # milliseconds

    def __init__(self, address: str, port: int = 0):
        self.address = address
        self.context = zmq.Context()

        self.socket = self.context.socket(zmq.REP)
        self.socket.setsockopt(zmq.LINGER, 0)

        try:
            self.port = bind(self.socket, address, port)
        except Exception:
            self.socket.close()
            self.context.term()
            raise

        self.shutdown = False
        self.thread = threading.Thread(target=self.run, name="heartbeat-thread", daemon=True)
        self.thread.start()

    def __repr__(self):
        return f"<heartbeat REP {self.address}:{self.port}>"

    def run(self) -> None:
        poller = zmq.Poller()
        poller.register(self.socket, zmq.POLLIN)

        try:
            while not self.shutdown:
                if poller.poll(self.poll_interval):
                    ping = self.socket.recv_multipart()
                    self.socket.send_multipart(ping)
        except zmq.ZMQError:
            logger.exception("heartbeat stopped")
        finally:
            self.socket.close()
            self.context.term()

    def close(self) -> None:
        self.shutdown = True
        if self.thread is not threading.current_thread():
            self.thread.join(timeout=5)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
