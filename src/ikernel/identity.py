""" Identifiers for sessions and messages. Every header carries one of each;
    frontends use the message identifier to tie a reply back to its request,
    so they must be unique across processes and not merely within this one.
"""

import uuid


def new():
    """ Return a new random identifier as a string. The canonical hyphenated
        UUID form is what the frontends themselves generate.
    """

    return str(uuid.uuid4())


def is_valid(identifier):
    """ Return True if *identifier* looks like something :func:`new` would
        have produced. Frontends are not strictly required to use UUIDs, so
        this is informational only; nothing rejects a message on this basis.
    """

    try:
        uuid.UUID(str(identifier))
    except ValueError:
        return False

    return True


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
