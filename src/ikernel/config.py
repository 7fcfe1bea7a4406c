""" Static configuration for a kernel: the connection :class:`Profile` that
    says where each channel listens and how messages are signed, and the
    :class:`KernelSpec` descriptor a launcher uses to start the kernel.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import List, Optional

from . import json


logger = logging.getLogger(__name__)

# The connection descriptor names each port after its channel.

port_names = ('shell_port', 'iopub_port', 'stdin_port', 'control_port', 'hb_port')

signature_schemes = set(('hmac-sha256',))
transports = set(('tcp',))

# Launchers replace this token in the kernel argv with the path to the
# connection file they wrote.

connection_placeholder = '{connection_file}'


class ConfigurationError(ValueError):
    """ The connection descriptor cannot be used; the kernel cannot start. """


@dataclasses.dataclass(frozen=True)
class Profile:
    """ A kernel profile, specifying how the kernel communicates. A
        :class:`Profile` is immutable once loaded and is shared read-only by
        every channel. The *key* is the shared HMAC secret; it is excluded
        from :func:`repr` so that it does not wind up in a log file.
    """

    ip: str
    transport: str
    stdin_port: int
    control_port: int
    hb_port: int
    shell_port: int
    iopub_port: int
    key: bytes = dataclasses.field(default=b'', repr=False)
    signature_scheme: str = 'hmac-sha256'


    def __post_init__(self):

        if self.transport not in transports:
            raise ConfigurationError('unknown transport mechanism: ' + repr(self.transport))

        if self.signature_scheme not in signature_schemes:
            raise ConfigurationError('unexpected signature scheme: ' + repr(self.signature_scheme))

        if isinstance(self.key, str):
            object.__setattr__(self, 'key', self.key.encode())
        elif not isinstance(self.key, bytes):
            raise ConfigurationError('key must be a string, not ' + repr(self.key))


    @classmethod
    def from_dict(cls, info) -> Profile:
        """ Build a :class:`Profile` from the dictionary form of a connection
            descriptor. Missing fields, an unknown transport, or an unknown
            signature scheme all raise :class:`ConfigurationError`.
        """

        try:
            scheme = info['signature_scheme']
        except KeyError:
            raise ConfigurationError('connection info has no signature_scheme')

        arguments = dict()
        for name in ('ip', 'transport') + port_names:
            try:
                arguments[name] = info[name]
            except KeyError:
                raise ConfigurationError('connection info is missing ' + repr(name))

        for name in port_names:
            try:
                arguments[name] = int(arguments[name])
            except (TypeError, ValueError):
                raise ConfigurationError('invalid %s: %r' % (name, arguments[name]))

        key = info.get('key', '')
        if key is None:
            key = ''

        return cls(key=key, signature_scheme=scheme, **arguments)


    @classmethod
    def from_json(cls, raw) -> Profile:

        try:
            info = json.loads(raw)
        except json.DecodeError as e:
            raise ConfigurationError('connection info is not valid JSON: ' + str(e))

        if not isinstance(info, dict):
            raise ConfigurationError('connection info must be a JSON object')

        return cls.from_dict(info)


    def to_dict(self):
        """ Return the dictionary form of this profile, suitable for writing
            out as a connection descriptor.
        """

        info = dict()
        info['ip'] = self.ip
        info['transport'] = self.transport
        info['stdin_port'] = self.stdin_port
        info['control_port'] = self.control_port
        info['hb_port'] = self.hb_port
        info['shell_port'] = self.shell_port
        info['iopub_port'] = self.iopub_port
        info['signature_scheme'] = self.signature_scheme
        info['key'] = self.key.decode()

        return info


    def address(self, port):
        """ Return the endpoint address for a channel bound to *port*.
        """

        return '%s://%s:%d' % (self.transport, self.ip, port)


# end of class Profile



def load(filename) -> Profile:
    """ Read a connection descriptor from *filename* and return the
        corresponding :class:`Profile`.
    """

    logger.debug('Loading connection file %s', filename)

    with open(filename, 'rb') as contents:
        raw = contents.read()

    return Profile.from_json(raw)



@dataclasses.dataclass
class KernelSpec:
    """ The descriptor a launcher needs to discover and start a kernel. One
        of the *argv* tokens is expected to be :data:`connection_placeholder`,
        which the launcher replaces with the path to a connection file.
    """

    display_name: str
    language: str
    argv: List[str]


    def command(self, connection_file: Optional[str] = None) -> List[str]:
        """ Return the argv, with the connection file placeholder replaced
            by *connection_file* if one is provided.
        """

        if connection_file is None:
            return list(self.argv)

        return [token.replace(connection_placeholder, connection_file) for token in self.argv]


    def to_dict(self):

        spec = dict()
        spec['argv'] = list(self.argv)
        spec['display_name'] = self.display_name
        spec['language'] = self.language

        return spec


    def to_json(self):
        return json.dumps(self.to_dict())


# end of class KernelSpec


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
