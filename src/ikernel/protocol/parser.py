""" Convert the raw JSON parts of an incoming message into a typed
    :class:`message.Message`. The only function most callers need is
    :func:`decode`, which never raises: anything it cannot make sense of
    is logged and comes back as None, and the caller drops it.
"""

import logging

from .. import json
from . import message
from . import types
from .message import DecodeError, MessageType


logger = logging.getLogger(__name__)

empty = b'{}'


def decode(identities, header, parent_header, metadata, content):
    """ Parse a message from its byte string components. *parent_header*
        and *metadata* are the literal b'{}' when absent. Returns a
        :class:`message.Message` with its header attached, or None if the
        message cannot be understood.
    """

    try:
        parsed = parse_header(identities, header, parent_header, metadata)
    except DecodeError as e:
        logger.warning('Dropping message with unusable header: %s', e)
        return None

    try:
        body = parse_content(parsed.msg_type, content)
    except DecodeError as e:
        logger.warning('Dropping %s message %s: %s', parsed.msg_type.value, parsed.message_id, e)
        return None

    return body.with_header(parsed)



def parse_header(identities, header, parent_header=empty, metadata=empty):
    """ Parse a header from its byte string components into a
        :class:`message.MessageHeader`. Raises :class:`DecodeError` if the
        header is unusable. The parent header, if any, is parsed one level
        deep with the same identities and metadata; a parent header that
        does not parse is treated as absent.
    """

    fields = _loads(header, 'header')

    try:
        msg_type = fields['msg_type']
        username = fields['username']
        message_id = fields['msg_id']
        session_id = fields['session']
    except KeyError as e:
        raise DecodeError('header is missing ' + str(e))
    except TypeError:
        raise DecodeError('header is not a JSON object')

    for name, value in (('msg_type', msg_type), ('username', username),
                        ('msg_id', message_id), ('session', session_id)):
        if not isinstance(value, str):
            raise DecodeError('header %s is not a string: %r' % (name, value))

    msg_type = MessageType.read(msg_type)

    # Metadata is best-effort. Anything other than a JSON object is
    # replaced with an empty one.

    try:
        metadata_map = json.loads(metadata)
    except json.DecodeError:
        metadata_map = dict()

    if not isinstance(metadata_map, dict):
        metadata_map = dict()

    parent = None
    if parent_header.strip() != empty:
        try:
            parent = parse_header(identities, parent_header, empty, metadata)
        except DecodeError as e:
            logger.debug('Ignoring unusable parent header: %s', e)

    return message.MessageHeader(tuple(identities), parent, metadata_map,
                                 message_id, session_id, username, msg_type)



def parse_content(msg_type, content):
    """ Parse a message body for a message of type *msg_type*. The returned
        message has no header.
    """

    try:
        parser = parsers[msg_type]
    except KeyError:
        raise DecodeError('no parser for message type ' + msg_type.value)

    fields = _loads(content, 'content')
    if not isinstance(fields, dict):
        raise DecodeError('content is not a JSON object')

    try:
        return parser(fields)
    except KeyError as e:
        raise DecodeError('content is missing ' + str(e))
    except (TypeError, ValueError) as e:
        raise DecodeError('content is malformed: ' + str(e))



def _loads(raw, part):

    try:
        return json.loads(raw)
    except json.DecodeError as e:
        raise DecodeError('%s is not valid JSON: %s' % (part, e))



def _require(fields, key, kind):
    """ Return *fields[key]*, requiring it to be an instance of *kind*.
        A missing key raises KeyError, the wrong type raises TypeError.
    """

    value = fields[key]

    # bool is a subclass of int; a JSON true is not a cursor position.

    if kind is int and isinstance(value, bool):
        raise TypeError('%s: expected int, got bool' % (key,))

    if not isinstance(value, kind):
        raise TypeError('%s: expected %s, got %s' % (key, kind.__name__, type(value).__name__))

    return value



def _object(fields, key):
    """ Return the JSON object at *key*, or None if the key is absent.
    """

    value = fields.get(key)

    if value is None:
        return None

    if not isinstance(value, dict):
        raise TypeError('%s: expected object' % (key,))

    return value


def _status_ok(fields):
    return _require(fields, 'status', str) == 'ok'


def kernel_info_request(fields):
    # There is no auxiliary information; the body is ignored.
    return message.KernelInfoRequest()


def kernel_info_reply(fields):
    info = types.LanguageInfo.from_dict(_require(fields, 'language_info', dict))
    return message.KernelInfoReply(
            protocol_version=_require(fields, 'protocol_version', str),
            banner=_require(fields, 'banner', str),
            implementation=_require(fields, 'implementation', str),
            implementation_version=_require(fields, 'implementation_version', str),
            language_info=info)


def execute_request(fields):

    user_variables = fields.get('user_variables') or list()
    user_expressions = fields.get('user_expressions') or dict()

    return message.ExecuteRequest(
            code=_require(fields, 'code', str),
            silent=_require(fields, 'silent', bool),
            store_history=_require(fields, 'store_history', bool),
            allow_stdin=_require(fields, 'allow_stdin', bool),
            user_variables=list(user_variables),
            user_expressions=dict(user_expressions))


def execute_input(fields):
    return message.ExecuteInput(
            code=_require(fields, 'code', str),
            execution_count=_require(fields, 'execution_count', int))


def execute_reply(fields):

    pager = list()
    for page in fields.get('payload') or ():
        if isinstance(page, dict) and page.get('source') == 'page':
            pager.extend(types.display_datas(page.get('data'), page.get('metadata')))

    status = types.ExecuteReplyStatus.read(_require(fields, 'status', str))

    return message.ExecuteReply(
            status=status,
            execution_count=_require(fields, 'execution_count', int),
            pager=pager)


def execute_result(fields):

    data = _require(fields, 'data', dict)
    metadata = _object(fields, 'metadata') or dict()
    datas = types.display_datas(data, metadata)

    # Image dimensions were folded into the display data; what remains is
    # whatever else the producer attached.

    remaining = dict()
    for key, value in metadata.items():
        if key in data and _is_image(key) and isinstance(value, dict):
            value = dict(value)
            value.pop('width', None)
            value.pop('height', None)
            if not value:
                continue
        remaining[key] = value

    return message.ExecuteResult(
            data=datas,
            metadata=remaining,
            execution_count=_require(fields, 'execution_count', int))


def _is_image(name):
    return types.MimeType.read(name).is_image


def execute_error(fields):
    return message.ExecuteError(
            ename=_require(fields, 'ename', str),
            evalue=_require(fields, 'evalue', str),
            traceback=list(_require(fields, 'traceback', list)))


def status(fields):
    state = types.ExecutionState.read(_require(fields, 'execution_state', str))
    return message.PublishStatus(execution_state=state)


def stream(fields):

    # Older producers put the stream contents under 'data'.

    if 'text' in fields:
        text = _require(fields, 'text', str)
    else:
        text = _require(fields, 'data', str)

    name = types.StreamType(_require(fields, 'name', str))
    return message.PublishStream(name=name, text=text)


def display_data(fields):
    data = _require(fields, 'data', dict)
    metadata = _object(fields, 'metadata')
    source = fields.get('source') or ''
    return message.PublishDisplayData(source=source, data=types.display_datas(data, metadata))


def pyout(fields):

    # Producers disagree on whether the payload goes under 'data' or
    # 'text'; take both.

    metadata = _object(fields, 'metadata')
    datas = types.display_datas(_object(fields, 'data'), metadata)
    datas.extend(types.display_datas(_object(fields, 'text'), metadata))

    return message.Output(data=datas, execution_count=_require(fields, 'execution_count', int))


def pyin(fields):
    return message.Input(
            code=_require(fields, 'code', str),
            execution_count=_require(fields, 'execution_count', int))


def is_complete_request(fields):
    return message.IsCompleteRequest(code=_require(fields, 'code', str))


def is_complete_reply(fields):
    review = types.CodeReview(_require(fields, 'status', str))
    indent = ''
    if review is types.CodeReview.INCOMPLETE:
        indent = fields.get('indent') or ''
    return message.IsCompleteReply(review=review, indent=indent)


def complete_request(fields):
    return message.CompleteRequest(
            code=_require(fields, 'code', str),
            cursor_pos=_require(fields, 'cursor_pos', int))


def complete_reply(fields):
    return message.CompleteReply(
            matches=list(_require(fields, 'matches', list)),
            cursor_start=_require(fields, 'cursor_start', int),
            cursor_end=_require(fields, 'cursor_end', int),
            metadata=_object(fields, 'metadata') or dict(),
            ok=_status_ok(fields))


def inspect_request(fields):
    return message.InspectRequest(
            code=_require(fields, 'code', str),
            cursor_pos=_require(fields, 'cursor_pos', int),
            detail_level=_require(fields, 'detail_level', int))


def inspect_reply(fields):
    data = types.display_datas(_object(fields, 'data'), _object(fields, 'metadata'))
    return message.InspectReply(
            ok=_status_ok(fields),
            found=_require(fields, 'found', bool),
            data=data)


def shutdown_request(fields):
    return message.ShutdownRequest(restart=_require(fields, 'restart', bool))


def shutdown_reply(fields):
    return message.ShutdownReply(restart=_require(fields, 'restart', bool))


def clear_output(fields):
    return message.ClearOutput(wait=_require(fields, 'wait', bool))


def input_request(fields):
    return message.RequestInput(
            prompt=_require(fields, 'prompt', str),
            password=bool(fields.get('password', False)))


def input_reply(fields):
    return message.InputReply(value=_require(fields, 'value', str))


def comm_open(fields):
    return message.CommOpen(
            comm_id=_require(fields, 'comm_id', str),
            target_name=_require(fields, 'target_name', str),
            target_module=fields.get('target_module') or '',
            data=fields['data'])


def comm_msg(fields):
    return message.CommData(comm_id=_require(fields, 'comm_id', str), data=fields['data'])


def comm_close(fields):
    return message.CommClose(comm_id=_require(fields, 'comm_id', str), data=fields['data'])


def history_request(fields):
    access_type = types.HistoryAccessType(_require(fields, 'hist_access_type', str))
    return message.HistoryRequest(
            output=_require(fields, 'output', bool),
            raw=_require(fields, 'raw', bool),
            access_type=access_type)


def history_reply(fields):
    history = list()
    for entry in _require(fields, 'history', list):
        history.append(types.HistoryReplyElement.from_list(entry))
    return message.HistoryReply(history=history)


parsers = {
    MessageType.KERNEL_INFO_REQUEST: kernel_info_request,
    MessageType.KERNEL_INFO_REPLY: kernel_info_reply,
    MessageType.EXECUTE_INPUT: execute_input,
    MessageType.EXECUTE_REQUEST: execute_request,
    MessageType.EXECUTE_REPLY: execute_reply,
    MessageType.EXECUTE_RESULT: execute_result,
    MessageType.EXECUTE_ERROR: execute_error,
    MessageType.STATUS: status,
    MessageType.STREAM: stream,
    MessageType.DISPLAY_DATA: display_data,
    MessageType.OUTPUT: pyout,
    MessageType.INPUT: pyin,
    MessageType.IS_COMPLETE_REQUEST: is_complete_request,
    MessageType.IS_COMPLETE_REPLY: is_complete_reply,
    MessageType.COMPLETE_REQUEST: complete_request,
    MessageType.COMPLETE_REPLY: complete_reply,
    MessageType.INSPECT_REQUEST: inspect_request,
    MessageType.INSPECT_REPLY: inspect_reply,
    MessageType.SHUTDOWN_REQUEST: shutdown_request,
    MessageType.SHUTDOWN_REPLY: shutdown_reply,
    MessageType.CLEAR_OUTPUT: clear_output,
    MessageType.INPUT_REQUEST: input_request,
    MessageType.INPUT_REPLY: input_reply,
    MessageType.COMM_OPEN: comm_open,
    MessageType.COMM_MSG: comm_msg,
    MessageType.COMM_CLOSE: comm_close,
    MessageType.HISTORY_REQUEST: history_request,
    MessageType.HISTORY_REPLY: history_reply,
}


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
