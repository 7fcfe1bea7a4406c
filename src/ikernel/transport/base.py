"""Transport interface.

This is the (small) contract that transport implementations should follow.
It lives outside :mod:`ikernel.protocol` so the protocol remains
transport-agnostic. An endpoint moves complete multipart messages as
sequences of byte strings; it never looks inside them.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Sequence, Tuple


# Transport agnostic exceptions

class TransportError(Exception):
    """Base class for all transport-layer errors."""


class TransportTimeout(TransportError):
    """Nothing arrived within the requested time."""


class TransportPortError(TransportError):
    """A channel could not be bound to its port."""


class FramingError(TransportError):
    """A multipart message does not have the shape of a signed envelope."""


class SignatureError(FramingError):
    """The signature on an envelope does not match its contents."""


class Endpoint(ABC):
    """Minimal contract for one bound channel endpoint."""

    name: str = ''
    port: Optional[int] = None

    @abstractmethod
    def close(self) -> None:
        """Tear down the underlying socket."""

    @abstractmethod
    def send(self, frames: Sequence[bytes]) -> None:
        """Send one complete multipart message. Safe to call from any thread."""

    @abstractmethod
    def recv(self, timeout: Optional[float] = None) -> Tuple[bytes, ...]:
        """Block until one complete multipart message arrives and return it.

        Raises :class:`TransportTimeout` if *timeout* seconds pass first.
        """


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
