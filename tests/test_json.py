import pytest

from ikernel import json


def test_dumps_compact():

    fields = dict()
    fields['msg_id'] = 'abc'
    fields['version'] = '5.0'

    encoded = json.dumps(fields)

    assert isinstance(encoded, bytes)
    assert encoded == b'{"msg_id":"abc","version":"5.0"}'
    assert json.dumps(dict()) == b'{}'


def test_dumps_unicode():

    # Non-ASCII text goes out as raw UTF-8, not as escapes.

    encoded = json.dumps({'text': 'héllo'})
    assert encoded == '{"text":"héllo"}'.encode('utf-8')


def test_loads_wire_parts():

    assert json.loads(b'{}') == {}

    header = b'{"msg_id": "a", "session": "s", "username": "u", "msg_type": "status"}'
    decoded = json.loads(header)
    assert decoded['msg_type'] == 'status'
    assert decoded['session'] == 's'

    # Anything that parses comes back as is; callers decide whether it
    # is the object they wanted.

    assert json.loads(b'[1, 2]') == [1, 2]
    assert json.loads(b'null') is None
    assert json.loads(b'"text"') == 'text'


def test_loads_text():

    assert json.loads('{"a": 1}') == {'a': 1}


def test_truncated():

    with pytest.raises(json.DecodeError):
        json.loads(b'{"truncated": ')

    with pytest.raises(json.DecodeError):
        json.loads(b'')


def test_not_json():

    with pytest.raises(json.DecodeError):
        json.loads(b'not json')

    with pytest.raises(json.DecodeError):
        json.loads(b'{"a": 1} trailing')


def test_invalid_utf8():

    with pytest.raises(json.DecodeError):
        json.loads(b'{"a": "\xff"}')

    with pytest.raises(json.DecodeError):
        json.loads(b'{"a": "\xc3"}')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
