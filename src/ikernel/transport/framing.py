"""Multipart framing and signing for protocol messages.

Every message on shell, control, stdin, and iopub has the same layout:

    ident..., b'<IDS|MSG>', signature, header, parent_header, metadata, content, buffer...

The routing identities are whatever ROUTER sockets prepended; there may be
none. The signature is the hex HMAC of the four JSON parts, in order, as
they appear on the wire. Trailing buffers are carried along but are not
signed and are not interpreted.
"""

from __future__ import annotations

import dataclasses
import hashlib
import hmac
import logging
from typing import Optional, Sequence, Tuple

from .. import json
from ..protocol import parser
from ..protocol.message import EncodeError, Message, header_dict
from .base import FramingError, SignatureError


logger = logging.getLogger(__name__)

DELIMITER = b'<IDS|MSG>'

# The number of frames required after the delimiter: signature plus the
# four JSON parts.

_REQUIRED = 5

digests = {'hmac-sha256': hashlib.sha256}


class Signer:
    """Compute and check envelope signatures with a shared *key*.

    An empty key means the connection is unsigned: :func:`sign` returns an
    empty signature and :func:`verify` accepts anything.
    """

    def __init__(self, key: bytes = b'', scheme: str = 'hmac-sha256'):

        try:
            self.digest = digests[scheme]
        except KeyError:
            raise ValueError('unsupported signature scheme: ' + repr(scheme))

        if isinstance(key, str):
            key = key.encode()

        self.scheme = scheme
        self._key = key or b''

    def __repr__(self):
        return 'Signer(%s, signed=%s)' % (self.scheme, bool(self._key))

    @classmethod
    def from_profile(cls, profile) -> Signer:
        return cls(profile.key, profile.signature_scheme)

    @property
    def enabled(self) -> bool:
        return bool(self._key)

    def sign(self, parts: Sequence[bytes]) -> bytes:

        if not self._key:
            return b''

        mac = hmac.new(self._key, digestmod=self.digest)
        for part in parts:
            mac.update(part)

        return mac.hexdigest().encode()

    def verify(self, signature: bytes, parts: Sequence[bytes]) -> bool:

        if not self._key:
            return True

        return hmac.compare_digest(self.sign(parts), signature)


@dataclasses.dataclass(frozen=True)
class Envelope:
    """The parts of one multipart message, byte-for-byte as received."""

    identities: Tuple[bytes, ...]
    signature: bytes
    header: bytes
    parent_header: bytes
    metadata: bytes
    content: bytes
    buffers: Tuple[bytes, ...] = ()

    @property
    def signed_parts(self) -> Tuple[bytes, bytes, bytes, bytes]:
        return (self.header, self.parent_header, self.metadata, self.content)

    def frames(self) -> Tuple[bytes, ...]:
        return self.identities + (DELIMITER, self.signature) + self.signed_parts + self.buffers


def split(frames: Sequence[bytes]) -> Envelope:
    """Split a received multipart message into an :class:`Envelope`.

    Raises :class:`FramingError` if there is no delimiter, or if fewer than
    five frames follow it.
    """

    frames = tuple(bytes(frame) for frame in frames)

    try:
        index = frames.index(DELIMITER)
    except ValueError:
        raise FramingError('no delimiter in %d-part message' % (len(frames),))

    identities = frames[:index]
    rest = frames[index + 1:]

    if len(rest) < _REQUIRED:
        raise FramingError('expected at least %d parts after the delimiter, got %d' % (_REQUIRED, len(rest)))

    signature, header, parent_header, metadata, content = rest[:_REQUIRED]
    buffers = rest[_REQUIRED:]

    return Envelope(identities, signature, header, parent_header, metadata, content, buffers)


def serialize(msg: Message, signer: Signer) -> Envelope:
    """Encode a fully headered *msg* into a signed :class:`Envelope`.

    Raises :class:`EncodeError` if the message has no header, or if its type
    has no wire encoding.
    """

    header = msg.header

    if header is None:
        raise EncodeError(type(msg).__name__ + ' has no header')

    content = json.dumps(msg.content())
    header_bytes = json.dumps(header_dict(header))

    if header.parent_header is None:
        parent_bytes = b'{}'
    else:
        parent_bytes = json.dumps(header_dict(header.parent_header))

    metadata = json.dumps(header.metadata)

    parts = (header_bytes, parent_bytes, metadata, content)
    signature = signer.sign(parts)

    return Envelope(tuple(header.identities), signature, *parts)


def to_frames(msg: Message, signer: Signer) -> Tuple[bytes, ...]:
    """Encode a protocol Message to signed multipart frames."""

    return serialize(msg, signer).frames()


def from_frames(frames: Sequence[bytes], signer: Signer) -> Optional[Message]:
    """Verify and decode a received multipart message.

    Raises :class:`FramingError` for a malformed envelope and
    :class:`SignatureError` for a bad signature; in either case nothing
    reaches the parser. Returns None if the parser could not make sense of
    the contents.
    """

    envelope = split(frames)

    if not signer.verify(envelope.signature, envelope.signed_parts):
        raise SignatureError('invalid signature on %d-part message' % (len(frames),))

    return parser.decode(envelope.identities, *envelope.signed_parts)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
