"""ZeroMQ PUB endpoint for the iopub channel.

Status updates, stream output, and display data may be published from any
thread; they all funnel through the one thread that owns the PUB socket,
so frames from different messages are never interleaved.
"""

from __future__ import annotations

from typing import Optional, Tuple

import zmq

from ..base import TransportError
from . import request


class Server(request.Server):
    """Broadcast multipart messages via a ZeroMQ PUB socket."""

    socket_type = zmq.PUB
    receives = False

    def __init__(self, address: str, port: int = 0, name: str = 'iopub'):
        request.Server.__init__(self, address, port, name)

    def __repr__(self):
        return f"<{self.name} PUB {self.address}:{self.port}>"

    def recv(self, timeout: Optional[float] = None) -> Tuple[bytes, ...]:
        raise TransportError(f"{self.name}: a publish endpoint cannot receive")


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
