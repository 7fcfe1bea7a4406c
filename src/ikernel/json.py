""" Wrapper module for the JSON handling used throughout ikernel. The
    msgspec encoder and decoder are substantially faster than the standard
    library, and the encoder returns bytes, which is what goes on the wire.
"""

import msgspec

encoder = msgspec.json.Encoder()
decoder = msgspec.json.Decoder()

dumps = encoder.encode

DecodeError = msgspec.DecodeError
EncodeError = msgspec.EncodeError


def loads(raw):
    """ Decode one JSON document. Any failure to parse *raw*, including
        bytes that are not valid UTF-8, raises :class:`DecodeError`.
    """

    try:
        return decoder.decode(raw)
    except UnicodeDecodeError as e:
        raise DecodeError('JSON is not valid UTF-8: ' + str(e))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
