from . import types
from . import message
from . import parser

from .message import DecodeError, EncodeError, Message, MessageHeader, MessageType
from .message import header_dict, reply_type
from .parser import decode


"""
ikernel Protocol Layer
======================

This package defines the kernel messaging protocol: what the messages are,
and how their bodies look as JSON. It does not know how messages are
framed, signed, or moved.

The protocol layer MUST NOT depend on any transport implementation.

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

Dispatch Loop (kernel.py)
    Routes requests to handlers, publishes status and output
    │
    ▼
Message Model (message.py)
    One dataclass per message type
    - MessageHeader
    - Message.content() is the JSON body
    - reply_type() pairs requests with replies
    │
    ▼
Message Parser (parser.py)
    JSON parts -> typed Message
    - strict about headers and message types
    - lenient about metadata, MIME types, statuses
    - never raises; undecodable input is dropped
    │
    ▼
Value Types (types.py)
    Display data, MIME types, status enumerations

---------------------------------------------------------------------

Below the Protocol Layer (for context)
--------------------------------------

Framing Layer (transport/framing.py)
    Message <-> signed multipart frames

Transport Layer (transport/zmq)
    Moves frames
    - shell/control/stdin: ROUTER
    - iopub: PUB
    - heartbeat: REP echo

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
