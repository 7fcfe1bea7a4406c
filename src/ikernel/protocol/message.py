""" A class representation of a kernel protocol message, with one subclass
    per message type. Every message carries a :class:`MessageHeader`; the
    variant-specific fields live on the subclass, and :func:`Message.content`
    produces the JSON body for the wire.

    The header's own wire form is a subset of the in-memory header: the
    routing identities, parent header, and metadata are separate parts of
    the multipart envelope, and are assembled by the framing layer.
"""

from __future__ import annotations

import dataclasses
import enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple

from .. import identity
from . import types


# This is the version of the wire protocol implemented here. It goes out
# in every header; the value on incoming headers is not checked.

version = '5.0'


class DecodeError(ValueError):
    """ An incoming message could not be interpreted. """


class EncodeError(RuntimeError):
    """ A message with no defined wire body was handed off to be sent. This
        is always a programming error.
    """



class MessageType(enum.Enum):
    KERNEL_INFO_REQUEST = 'kernel_info_request'
    KERNEL_INFO_REPLY = 'kernel_info_reply'
    EXECUTE_INPUT = 'execute_input'
    EXECUTE_REQUEST = 'execute_request'
    EXECUTE_REPLY = 'execute_reply'
    EXECUTE_RESULT = 'execute_result'
    EXECUTE_ERROR = 'error'
    STATUS = 'status'
    STREAM = 'stream'
    DISPLAY_DATA = 'display_data'
    OUTPUT = 'pyout'
    INPUT = 'pyin'
    IS_COMPLETE_REQUEST = 'is_complete_request'
    IS_COMPLETE_REPLY = 'is_complete_reply'
    COMPLETE_REQUEST = 'complete_request'
    COMPLETE_REPLY = 'complete_reply'
    INSPECT_REQUEST = 'inspect_request'
    INSPECT_REPLY = 'inspect_reply'
    SHUTDOWN_REQUEST = 'shutdown_request'
    SHUTDOWN_REPLY = 'shutdown_reply'
    CLEAR_OUTPUT = 'clear_output'
    INPUT_REQUEST = 'input_request'
    INPUT_REPLY = 'input_reply'
    COMM_OPEN = 'comm_open'
    COMM_MSG = 'comm_msg'
    COMM_CLOSE = 'comm_close'
    HISTORY_REQUEST = 'history_request'
    HISTORY_REPLY = 'history_reply'


    @classmethod
    def read(cls, text):
        """ Strict counterpart to the lenient readers in :mod:`types`: a
            message type the kernel does not know is a :class:`DecodeError`,
            the message cannot be handled at all.
        """

        if not isinstance(text, str):
            raise DecodeError('message type is not a string: ' + repr(text))

        text = message_type_aliases.get(text, text)

        try:
            return cls(text)
        except ValueError:
            raise DecodeError('unknown message type: ' + repr(text))


# end of class MessageType


message_type_aliases = {'status_message': 'status'}


_reply_types = {
    MessageType.KERNEL_INFO_REQUEST: MessageType.KERNEL_INFO_REPLY,
    MessageType.EXECUTE_REQUEST: MessageType.EXECUTE_REPLY,
    MessageType.IS_COMPLETE_REQUEST: MessageType.IS_COMPLETE_REPLY,
    MessageType.COMPLETE_REQUEST: MessageType.COMPLETE_REPLY,
    MessageType.INSPECT_REQUEST: MessageType.INSPECT_REPLY,
    MessageType.SHUTDOWN_REQUEST: MessageType.SHUTDOWN_REPLY,
    MessageType.HISTORY_REQUEST: MessageType.HISTORY_REPLY,
    MessageType.COMM_OPEN: MessageType.COMM_MSG,
}


def reply_type(msg_type):
    """ Return the :class:`MessageType` of the reply to a request of type
        *msg_type*, or None if that type gets no reply.
    """

    return _reply_types.get(msg_type)



@dataclasses.dataclass(frozen=True)
class MessageHeader:
    """ The header attached to every message. Headers are built fresh for
        each outgoing message and parsed fresh for each incoming one; they
        are never modified afterwards.

        :ivar identities: ZeroMQ routing identities, as received.
        :ivar parent_header: The header of the message that caused this one.
        :ivar metadata: Free-form JSON metadata.
    """

    identities: Tuple[bytes, ...]
    parent_header: Optional[MessageHeader]
    metadata: Dict[str, Any]
    message_id: str
    session_id: str
    username: str
    msg_type: MessageType


    def child(self, msg_type, session_id=None, username=None, metadata=None):
        """ Return a new header for a message of type *msg_type* sent in
            response to the message carrying this header. The routing
            identities carry over so that a reply can find its way back; the
            message identifier is always new.
        """

        if session_id is None:
            session_id = self.session_id

        if username is None:
            username = self.username

        if metadata is None:
            metadata = dict()

        return MessageHeader(self.identities, self, metadata, identity.new(),
                             session_id, username, msg_type)


    def rerouted(self, identities):
        """ Return a copy of this header with different routing identities;
            iopub messages carry a topic there instead of a peer identity.
        """

        return dataclasses.replace(self, identities=tuple(identities))


    @classmethod
    def new(cls, msg_type, session_id, username, identities=(), metadata=None):
        """ Return a header for a message that is not a response to anything.
        """

        if metadata is None:
            metadata = dict()

        return cls(tuple(identities), None, metadata, identity.new(),
                   session_id, username, msg_type)


# end of class MessageHeader



def header_dict(header):
    """ Return the wire form of *header*, which is a subset of its fields.
    """

    wire = dict()
    wire['msg_id'] = header.message_id
    wire['session'] = header.session_id
    wire['username'] = header.username
    wire['version'] = version
    wire['msg_type'] = header.msg_type.value

    return wire



@dataclasses.dataclass(kw_only=True)
class Message:
    """ Base class for all messages. The *header* may be None while a
        message is under construction, but it must be filled in before the
        message is handed to the framing layer.

        Subclasses define :attr:`msg_type` and override :func:`content`.
        Subclasses that leave :func:`content` alone are receive-only: the
        kernel never sends them.
    """

    msg_type: ClassVar[MessageType]

    header: Optional[MessageHeader] = dataclasses.field(default=None, compare=False)


    def content(self) -> Dict[str, Any]:
        raise EncodeError('no wire encoding for ' + type(self).__name__)


    def with_header(self, header):
        """ Return a copy of this message with *header* attached.
        """

        return dataclasses.replace(self, header=header)


# end of class Message



@dataclasses.dataclass(kw_only=True)
class KernelInfoRequest(Message):
    msg_type = MessageType.KERNEL_INFO_REQUEST



@dataclasses.dataclass(kw_only=True)
class KernelInfoReply(Message):
    msg_type = MessageType.KERNEL_INFO_REPLY

    protocol_version: str
    banner: str
    implementation: str
    implementation_version: str
    language_info: types.LanguageInfo

    def content(self):
        body = dict()
        body['protocol_version'] = self.protocol_version
        body['banner'] = self.banner
        body['implementation'] = self.implementation
        body['implementation_version'] = self.implementation_version
        body['language_info'] = self.language_info.to_dict()
        return body



@dataclasses.dataclass(kw_only=True)
class ExecuteRequest(Message):
    msg_type = MessageType.EXECUTE_REQUEST

    code: str
    silent: bool = False
    store_history: bool = True
    allow_stdin: bool = True
    user_variables: List[str] = dataclasses.field(default_factory=list)
    user_expressions: Dict[str, str] = dataclasses.field(default_factory=dict)

    def content(self):
        body = dict()
        body['code'] = self.code
        body['silent'] = self.silent
        body['store_history'] = self.store_history
        body['allow_stdin'] = self.allow_stdin
        body['user_variables'] = list(self.user_variables)
        body['user_expressions'] = dict(self.user_expressions)
        return body



@dataclasses.dataclass(kw_only=True)
class ExecuteInput(Message):
    """ Broadcast on iopub to tell every frontend which code is running.
    """

    msg_type = MessageType.EXECUTE_INPUT

    code: str
    execution_count: int

    def content(self):
        body = dict()
        body['code'] = self.code
        body['execution_count'] = self.execution_count
        return body



@dataclasses.dataclass(kw_only=True)
class ExecuteReply(Message):
    msg_type = MessageType.EXECUTE_REPLY

    status: Any = types.ExecuteReplyStatus.OK
    execution_count: int
    pager: List[types.DisplayData] = dataclasses.field(default_factory=list)

    def content(self):

        # Pager output rides along as 'page' payloads, one per rendering.

        payload = list()
        for display in self.pager:
            data, metadata = types.display_bundle((display,))
            page = dict()
            page['source'] = 'page'
            page['line'] = 0
            page['data'] = data
            page['metadata'] = metadata
            payload.append(page)

        body = dict()
        body['status'] = types.show(self.status)
        body['execution_count'] = self.execution_count
        body['payload'] = payload
        body['user_variables'] = dict()
        body['user_expressions'] = dict()
        return body



@dataclasses.dataclass(kw_only=True)
class ExecuteResult(Message):
    msg_type = MessageType.EXECUTE_RESULT

    data: List[types.DisplayData]
    metadata: Dict[str, Any] = dataclasses.field(default_factory=dict)
    execution_count: int

    def content(self):
        data, metadata = types.display_bundle(self.data)

        # Extra metadata for an image sits alongside its width and height.

        for key, value in self.metadata.items():
            if isinstance(value, dict) and isinstance(metadata.get(key), dict):
                metadata[key].update(value)
            else:
                metadata[key] = value

        body = dict()
        body['data'] = data
        body['metadata'] = metadata
        body['execution_count'] = self.execution_count
        return body



@dataclasses.dataclass(kw_only=True)
class ExecuteError(Message):
    msg_type = MessageType.EXECUTE_ERROR

    ename: str
    evalue: str
    traceback: List[str] = dataclasses.field(default_factory=list)

    def content(self):
        body = dict()
        body['ename'] = self.ename
        body['evalue'] = self.evalue
        body['traceback'] = list(self.traceback)
        return body



@dataclasses.dataclass(kw_only=True)
class PublishStatus(Message):
    msg_type = MessageType.STATUS

    execution_state: Any

    def content(self):
        return {'execution_state': types.show(self.execution_state)}



@dataclasses.dataclass(kw_only=True)
class PublishStream(Message):
    msg_type = MessageType.STREAM

    name: types.StreamType
    text: str

    def content(self):
        body = dict()
        body['name'] = self.name.value
        body['text'] = self.text
        return body



@dataclasses.dataclass(kw_only=True)
class PublishDisplayData(Message):
    msg_type = MessageType.DISPLAY_DATA

    source: str = ''
    data: List[types.DisplayData]

    def content(self):
        data, metadata = types.display_bundle(self.data)

        body = dict()
        body['source'] = self.source
        body['data'] = data
        body['metadata'] = metadata
        return body



@dataclasses.dataclass(kw_only=True)
class Output(Message):
    """ The pre-5.0 spelling of an execution result (pyout).
    """

    msg_type = MessageType.OUTPUT

    data: List[types.DisplayData]
    execution_count: int

    def content(self):
        data, metadata = types.display_bundle(self.data)

        body = dict()
        body['data'] = data
        body['metadata'] = metadata
        body['execution_count'] = self.execution_count
        return body



@dataclasses.dataclass(kw_only=True)
class Input(Message):
    """ The pre-5.0 spelling of execute_input (pyin).
    """

    msg_type = MessageType.INPUT

    code: str
    execution_count: int

    def content(self):
        body = dict()
        body['code'] = self.code
        body['execution_count'] = self.execution_count
        return body



@dataclasses.dataclass(kw_only=True)
class IsCompleteRequest(Message):
    msg_type = MessageType.IS_COMPLETE_REQUEST

    code: str



@dataclasses.dataclass(kw_only=True)
class IsCompleteReply(Message):
    msg_type = MessageType.IS_COMPLETE_REPLY

    review: types.CodeReview
    indent: str = ''

    def content(self):
        body = dict()
        body['status'] = self.review.value
        if self.review is types.CodeReview.INCOMPLETE:
            body['indent'] = self.indent
        return body



@dataclasses.dataclass(kw_only=True)
class CompleteRequest(Message):
    msg_type = MessageType.COMPLETE_REQUEST

    code: str
    cursor_pos: int

    def content(self):
        body = dict()
        body['code'] = self.code
        body['cursor_pos'] = self.cursor_pos
        return body



@dataclasses.dataclass(kw_only=True)
class CompleteReply(Message):
    msg_type = MessageType.COMPLETE_REPLY

    matches: List[str]
    cursor_start: int
    cursor_end: int
    metadata: Dict[str, Any] = dataclasses.field(default_factory=dict)
    ok: bool = True

    def content(self):
        body = dict()
        body['matches'] = list(self.matches)
        body['cursor_start'] = self.cursor_start
        body['cursor_end'] = self.cursor_end
        body['metadata'] = dict(self.metadata)
        body['status'] = 'ok' if self.ok else 'error'
        return body



@dataclasses.dataclass(kw_only=True)
class InspectRequest(Message):
    msg_type = MessageType.INSPECT_REQUEST

    code: str
    cursor_pos: int
    detail_level: int = 0

    def content(self):
        body = dict()
        body['code'] = self.code
        body['cursor_pos'] = self.cursor_pos
        body['detail_level'] = self.detail_level
        return body



@dataclasses.dataclass(kw_only=True)
class InspectReply(Message):
    msg_type = MessageType.INSPECT_REPLY

    ok: bool = True
    found: bool
    data: List[types.DisplayData] = dataclasses.field(default_factory=list)

    def content(self):
        data, metadata = types.display_bundle(self.data)

        body = dict()
        body['status'] = 'ok' if self.ok else 'error'
        body['found'] = self.found
        body['data'] = data
        body['metadata'] = metadata
        return body



@dataclasses.dataclass(kw_only=True)
class ShutdownRequest(Message):
    msg_type = MessageType.SHUTDOWN_REQUEST

    restart: bool



@dataclasses.dataclass(kw_only=True)
class ShutdownReply(Message):
    msg_type = MessageType.SHUTDOWN_REPLY

    restart: bool

    def content(self):
        return {'restart': self.restart}



@dataclasses.dataclass(kw_only=True)
class ClearOutput(Message):
    msg_type = MessageType.CLEAR_OUTPUT

    wait: bool = False

    def content(self):
        return {'wait': self.wait}



@dataclasses.dataclass(kw_only=True)
class RequestInput(Message):
    """ Sent on stdin when running code wants a line of input.
    """

    msg_type = MessageType.INPUT_REQUEST

    prompt: str = ''
    password: bool = False

    def content(self):
        body = dict()
        body['prompt'] = self.prompt
        body['password'] = self.password
        return body



@dataclasses.dataclass(kw_only=True)
class InputReply(Message):
    msg_type = MessageType.INPUT_REPLY

    value: str



@dataclasses.dataclass(kw_only=True)
class CommOpen(Message):
    msg_type = MessageType.COMM_OPEN

    comm_id: str
    target_name: str
    target_module: str = ''
    data: Any = dataclasses.field(default_factory=dict)

    def content(self):
        body = dict()
        body['comm_id'] = self.comm_id
        body['target_name'] = self.target_name
        body['target_module'] = self.target_module
        body['data'] = self.data
        return body



@dataclasses.dataclass(kw_only=True)
class CommData(Message):
    msg_type = MessageType.COMM_MSG

    comm_id: str
    data: Any = dataclasses.field(default_factory=dict)

    def content(self):
        body = dict()
        body['comm_id'] = self.comm_id
        body['data'] = self.data
        return body



@dataclasses.dataclass(kw_only=True)
class CommClose(Message):
    msg_type = MessageType.COMM_CLOSE

    comm_id: str
    data: Any = dataclasses.field(default_factory=dict)

    def content(self):
        body = dict()
        body['comm_id'] = self.comm_id
        body['data'] = self.data
        return body



@dataclasses.dataclass(kw_only=True)
class HistoryRequest(Message):
    msg_type = MessageType.HISTORY_REQUEST

    output: bool
    raw: bool
    access_type: types.HistoryAccessType



@dataclasses.dataclass(kw_only=True)
class HistoryReply(Message):
    msg_type = MessageType.HISTORY_REPLY

    history: List[types.HistoryReplyElement] = dataclasses.field(default_factory=list)

    def content(self):
        return {'history': [element.to_list() for element in self.history]}



@dataclasses.dataclass(kw_only=True)
class SendNothing(Message):
    """ A placeholder for a handler that has nothing to say. It is never put
        on the wire; trying to encode one is an error.
    """

    msg_type = None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
