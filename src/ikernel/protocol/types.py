""" Value types carried inside protocol messages: display data and its MIME
    types, the execution and reply status enumerations, stream names, and
    the small records used by kernel info and history replies.

    The string forms are defined by explicit tables rather than derived
    from Python names, so that the wire spelling never changes by accident.
    Informational fields (MIME types, execution states, reply statuses)
    read leniently: an unrecognized string becomes an :class:`Unknown`
    carrying the original text. Everything else reads strictly and raises
    :class:`ValueError` on an unrecognized string.
"""

from __future__ import annotations

import dataclasses
import enum
from typing import Optional, Tuple, Union


@dataclasses.dataclass(frozen=True)
class Unknown:
    """ The explicit fallback for a lenient enumeration: the raw string that
        did not match any known value. It is written back out unchanged.
    """

    text: str

    def __str__(self):
        return self.text



def read_lenient(enumeration, text):
    """ Return the member of *enumeration* whose value is *text*, or an
        :class:`Unknown` wrapping *text* if there is no such member.
    """

    try:
        return enumeration(text)
    except ValueError:
        return Unknown(text)



def show(value):
    """ Return the wire string for a member of one of the enumerations
        here, or for an :class:`Unknown`.
    """

    if isinstance(value, Unknown):
        return value.text

    return value.value



class ExecutionState(enum.Enum):
    BUSY = 'busy'
    IDLE = 'idle'
    STARTING = 'starting'

    @classmethod
    def read(cls, text):
        return read_lenient(cls, text)



class ExecuteReplyStatus(enum.Enum):
    OK = 'ok'
    ERROR = 'error'
    ABORT = 'abort'

    @classmethod
    def read(cls, text):
        return read_lenient(cls, text)



class StreamType(enum.Enum):
    STDIN = 'stdin'
    STDOUT = 'stdout'
    STDERR = 'stderr'



class HistoryAccessType(enum.Enum):
    """ How the frontend is asking for history. The protocol attaches a
        different set of fields to each access type; those are not modeled,
        all three behave the same way here.
    """

    RANGE = 'range'
    TAIL = 'tail'
    SEARCH = 'search'



class CodeReview(enum.Enum):
    """ The outcome of an is_complete request. An incomplete review carries
        an indent string alongside it in the reply message.
    """

    COMPLETE = 'complete'
    INCOMPLETE = 'incomplete'
    INVALID = 'invalid'
    UNKNOWN = 'unknown'



class Mime(enum.Enum):
    """ The kinds of MIME type understood here. :attr:`UNKNOWN` has no wire
        string of its own; a :class:`MimeType` of that kind carries one.
    """

    PLAIN = 'text/plain'
    HTML = 'text/html'
    MARKDOWN = 'text/markdown'
    PNG = 'image/png'
    JPEG = 'image/jpeg'
    SVG = 'image/svg+xml'
    LATEX = 'text/latex'
    JAVASCRIPT = 'application/javascript'
    JSON = 'application/json'
    UNKNOWN = None


# Strings recognized by MimeType.read() in addition to the canonical values.

mime_aliases = {'image/jpg': Mime.JPEG}

image_kinds = set((Mime.PNG, Mime.JPEG))

default_width = 50
default_height = 50


@dataclasses.dataclass(frozen=True)
class MimeType:
    """ A MIME type as used for display data. Images carry a width and
        height; an unrecognized type keeps the original string in *text*.
        Use :func:`read` to interpret a wire string and :func:`str` to
        produce one.
    """

    kind: Mime
    width: Optional[int] = None
    height: Optional[int] = None
    text: Optional[str] = None


    def __str__(self):

        if self.kind is Mime.UNKNOWN:
            return self.text

        return self.kind.value


    @classmethod
    def read(cls, text):

        try:
            kind = mime_aliases[text]
        except KeyError:
            try:
                kind = Mime(text)
            except ValueError:
                kind = Mime.UNKNOWN

        if kind is Mime.UNKNOWN or text is None:
            return cls(Mime.UNKNOWN, text=text)

        if kind in image_kinds:
            return cls(kind, default_width, default_height)

        return cls(kind)


    @classmethod
    def png(cls, width=default_width, height=default_height):
        return cls(Mime.PNG, width, height)


    @classmethod
    def jpeg(cls, width=default_width, height=default_height):
        return cls(Mime.JPEG, width, height)


    @property
    def is_image(self):
        return self.kind in image_kinds


# end of class MimeType


PLAIN = MimeType(Mime.PLAIN)
HTML = MimeType(Mime.HTML)
MARKDOWN = MimeType(Mime.MARKDOWN)
SVG = MimeType(Mime.SVG)
LATEX = MimeType(Mime.LATEX)
JAVASCRIPT = MimeType(Mime.JAVASCRIPT)
JSON = MimeType(Mime.JSON)



@dataclasses.dataclass(frozen=True)
class DisplayData:
    """ One rendering of a result: a MIME type and the data, as text, in
        that format. Binary formats such as PNG are base64 text.
    """

    mime: MimeType
    data: str

    def __repr__(self):
        # The data can be enormous; it is not useful in a log message.
        return 'DisplayData <%s>' % (self.mime,)



def extract_plain(datas):
    """ Return the text of the first plain text entry in *datas*, or the
        empty string if there is none.
    """

    for display in datas:
        if display.mime.kind is Mime.PLAIN:
            return display.data

    return ''



def display_bundle(datas):
    """ Convert a list of :class:`DisplayData` into the *data* and
        *metadata* dictionaries used on the wire. Image dimensions go in
        the metadata, keyed by MIME type.
    """

    data = dict()
    metadata = dict()

    for display in datas:
        mime = str(display.mime)
        data[mime] = display.data

        if display.mime.is_image:
            size = dict()
            size['width'] = display.mime.width
            size['height'] = display.mime.height
            metadata[mime] = size

    return data, metadata


def display_datas(data, metadata=None):
    """ The inverse of :func:`display_bundle`. Only string-valued entries in
        *data* are kept; a JSON-valued entry (such as application/json
        carrying an object) has no text rendering.
    """

    datas = list()

    if not isinstance(data, dict):
        return datas

    for mime, content in data.items():
        if not isinstance(content, str):
            continue

        mime = MimeType.read(mime)

        if mime.is_image and isinstance(metadata, dict):
            size = metadata.get(str(mime))
            if isinstance(size, dict):
                width = size.get('width', mime.width)
                height = size.get('height', mime.height)
                mime = MimeType(mime.kind, width, height)

        datas.append(DisplayData(mime, content))

    return datas



@dataclasses.dataclass
class LanguageInfo:
    name: str
    version: str
    file_extension: str
    codemirror_mode: str = ''

    def to_dict(self):
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, info):
        return cls(info['name'], info['version'], info['file_extension'],
                   info.get('codemirror_mode') or '')



@dataclasses.dataclass
class HistoryReplyElement:
    """ One entry in a history reply. The *content* is either the input
        alone, or an (input, output) pair when output was requested.
    """

    session: int
    line_number: int
    content: Union[str, Tuple[str, str]]


    def to_list(self):

        content = self.content
        if isinstance(content, tuple):
            content = list(content)

        return [self.session, self.line_number, content]


    @classmethod
    def from_list(cls, entry):

        session, line_number, content = entry

        if isinstance(content, list):
            source, result = content
            content = (source, result)
        elif not isinstance(content, str):
            raise ValueError('unexpected history content: ' + repr(content))

        return cls(int(session), int(line_number), content)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
