import pytest

from ikernel.protocol import types
from ikernel.protocol.types import DisplayData, Mime, MimeType


def test_mime_round_trip():

    for text in ('text/plain', 'text/html', 'text/markdown', 'image/png',
                 'image/jpeg', 'image/svg+xml', 'text/latex',
                 'application/javascript', 'application/json'):
        assert str(MimeType.read(text)) == text


def test_mime_unknown():

    mime = MimeType.read('application/x-custom')
    assert mime.kind is Mime.UNKNOWN
    assert str(mime) == 'application/x-custom'
    assert mime.is_image == False


def test_mime_images():

    png = MimeType.read('image/png')
    assert png.is_image
    assert png.width == 50
    assert png.height == 50
    assert png == MimeType.png()

    # The short spelling is accepted, but never written.

    jpeg = MimeType.read('image/jpg')
    assert jpeg.kind is Mime.JPEG
    assert str(jpeg) == 'image/jpeg'

    assert types.PLAIN.is_image == False


def test_extract_plain():

    datas = list()
    assert types.extract_plain(datas) == ''

    datas.append(DisplayData(types.HTML, '<b>2</b>'))
    assert types.extract_plain(datas) == ''

    datas.append(DisplayData(types.PLAIN, '2'))
    datas.append(DisplayData(types.PLAIN, 'two'))
    assert types.extract_plain(datas) == '2'


def test_display_bundle():

    datas = list()
    datas.append(DisplayData(types.PLAIN, 'a plot'))
    datas.append(DisplayData(MimeType.png(640, 480), 'iVBORw0KGgo='))

    data, metadata = types.display_bundle(datas)
    assert data == {'text/plain': 'a plot', 'image/png': 'iVBORw0KGgo='}
    assert metadata == {'image/png': {'width': 640, 'height': 480}}

    assert types.display_datas(data, metadata) == datas

    # Without metadata, images get the default size.

    unsized = types.display_datas(data)
    assert unsized[1].mime == MimeType.png()


def test_display_datas_skips_structured():

    data = {'application/json': {'a': 1}, 'text/plain': '{"a": 1}'}
    datas = types.display_datas(data)

    assert len(datas) == 1
    assert datas[0].mime == types.PLAIN

    assert types.display_datas(None) == []
    assert types.display_datas(['text/plain']) == []


def test_lenient_statuses():

    assert types.ExecutionState.read('busy') is types.ExecutionState.BUSY
    assert types.ExecuteReplyStatus.read('abort') is types.ExecuteReplyStatus.ABORT

    state = types.ExecutionState.read('restarting')
    assert state == types.Unknown('restarting')
    assert types.show(state) == 'restarting'
    assert types.show(types.ExecuteReplyStatus.OK) == 'ok'


def test_strict_enumerations():

    assert types.StreamType('stderr') is types.StreamType.STDERR

    with pytest.raises(ValueError):
        types.StreamType('stdlog')

    with pytest.raises(ValueError):
        types.HistoryAccessType('everything')

    with pytest.raises(ValueError):
        types.CodeReview('maybe')


def test_language_info():

    info = types.LanguageInfo('python', '3.12.1', '.py')
    expected = {'name': 'python', 'version': '3.12.1', 'file_extension': '.py', 'codemirror_mode': ''}

    assert info.to_dict() == expected
    assert types.LanguageInfo.from_dict(expected) == info


def test_history_element():

    element = types.HistoryReplyElement(1, 2, ('1+1', '2'))
    assert element.to_list() == [1, 2, ['1+1', '2']]
    assert types.HistoryReplyElement.from_list([1, 2, ['1+1', '2']]) == element

    element = types.HistoryReplyElement(1, 3, 'x = 4')
    assert types.HistoryReplyElement.from_list(element.to_list()) == element

    with pytest.raises(ValueError):
        types.HistoryReplyElement.from_list([1, 4, 12])


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
