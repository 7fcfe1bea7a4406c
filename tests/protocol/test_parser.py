import pytest

from ikernel import json
from ikernel.protocol import message
from ikernel.protocol import parser
from ikernel.protocol import types
from ikernel.protocol.message import MessageType


def header(msg_type, msg_id='0001'):

    fields = dict()
    fields['msg_id'] = msg_id
    fields['session'] = 'session-1'
    fields['username'] = 'user'
    fields['version'] = '5.0'
    fields['msg_type'] = msg_type

    return json.dumps(fields)


def decode(msg_type, content, parent=b'{}', metadata=b'{}'):
    return parser.decode((b'peer',), header(msg_type), parent, metadata, json.dumps(content))


def test_parent_header():

    parent = header('execute_request', 'parent-id')
    decoded = decode('status', {'execution_state': 'busy'}, parent=parent, metadata=b'{"a": 1}')

    assert decoded.header.message_id == '0001'
    assert decoded.header.metadata == {'a': 1}

    chained = decoded.header.parent_header
    assert chained.message_id == 'parent-id'
    assert chained.msg_type is MessageType.EXECUTE_REQUEST
    assert chained.identities == (b'peer',)
    assert chained.metadata == {'a': 1}
    assert chained.parent_header is None


def test_no_parent():

    decoded = decode('status', {'execution_state': 'idle'})
    assert decoded.header.parent_header is None

    # An unusable parent is treated as no parent at all.

    decoded = decode('status', {'execution_state': 'idle'}, parent=b'{"msg_id": "x"}')
    assert decoded is not None
    assert decoded.header.parent_header is None


def test_metadata_fallback():

    for metadata in (b'not json', b'[1, 2]', b'null'):
        decoded = decode('clear_output', {'wait': False}, metadata=metadata)
        assert decoded.header.metadata == {}


def test_dropped():

    assert decode('complete_request', {'code': 'x'}) is None
    assert decode('complete_request', {'code': 'x', 'cursor_pos': 'one'}) is None
    assert decode('complete_request', {'code': 'x', 'cursor_pos': True}) is None
    assert decode('stream', {'name': 'stdlog', 'text': 'x'}) is None
    assert decode('interrupt_request', {}) is None

    assert parser.decode((), b'{', b'{}', b'{}', b'{}') is None
    assert parser.decode((), header('clear_output'), b'{}', b'{}', b'[]') is None
    assert parser.decode((), b'{"msg_id": "x"}', b'{}', b'{}', b'{}') is None


def test_header_field_types():

    good = dict()
    good['msg_id'] = 'a'
    good['session'] = 's'
    good['username'] = 'u'
    good['msg_type'] = 'clear_output'

    assert parser.decode((), json.dumps(good), b'{}', b'{}', b'{"wait": true}') is not None

    for key in ('msg_id', 'session', 'username', 'msg_type'):
        for junk in (['x'], {'x': 1}, 12, None):
            fields = dict(good)
            fields[key] = junk
            assert parser.decode((), json.dumps(fields), b'{}', b'{}', b'{"wait": true}') is None

    with pytest.raises(message.DecodeError):
        MessageType.read(['status'])


def test_parse_header_strict():

    with pytest.raises(message.DecodeError):
        parser.parse_header((), b'{"msg_id": "x"}')

    with pytest.raises(message.DecodeError):
        parser.parse_header((), header('no_such_type'))

    parsed = parser.parse_header((), header('status_message'))
    assert parsed.msg_type is MessageType.STATUS


def test_stream_legacy():

    decoded = decode('stream', {'name': 'stdout', 'data': 'old style'})
    assert decoded.text == 'old style'
    assert decoded.name is types.StreamType.STDOUT

    decoded = decode('stream', {'name': 'stdout', 'text': 'new', 'data': 'old'})
    assert decoded.text == 'new'


def test_pyout_merge():

    content = dict()
    content['data'] = {'text/html': '<b>2</b>'}
    content['text'] = {'text/plain': '2'}
    content['execution_count'] = 7

    decoded = decode('pyout', content)

    assert isinstance(decoded, message.Output)
    assert decoded.execution_count == 7
    assert types.extract_plain(decoded.data) == '2'
    assert len(decoded.data) == 2


def test_unknown_leaves():

    decoded = decode('status', {'execution_state': 'restarting'})
    assert decoded.execution_state == types.Unknown('restarting')

    content = {'data': {'application/x-custom': 'abc'}, 'metadata': {}, 'execution_count': 1}
    decoded = decode('execute_result', content)
    assert str(decoded.data[0].mime) == 'application/x-custom'


def test_execute_request():

    content = dict()
    content['code'] = 'print(1)'
    content['silent'] = True
    content['store_history'] = False
    content['allow_stdin'] = False

    decoded = decode('execute_request', content)

    assert decoded.code == 'print(1)'
    assert decoded.silent == True
    assert decoded.allow_stdin == False
    assert decoded.user_expressions == {}


def test_receive_only():

    decoded = decode('kernel_info_request', {})
    assert isinstance(decoded, message.KernelInfoRequest)

    decoded = decode('shutdown_request', {'restart': True})
    assert decoded.restart == True

    decoded = decode('input_reply', {'value': 'Ada'})
    assert decoded.value == 'Ada'

    content = {'output': True, 'raw': False, 'hist_access_type': 'search', 'pattern': 'x*'}
    decoded = decode('history_request', content)
    assert decoded.access_type is types.HistoryAccessType.SEARCH

    decoded = decode('is_complete_request', {'code': 'for x in y:'})
    assert decoded.code == 'for x in y:'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
