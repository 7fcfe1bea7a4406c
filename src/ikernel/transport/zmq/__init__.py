"""ZeroMQ implementations of the kernel channel endpoints."""

from . import request
from . import publish
from . import heartbeat
