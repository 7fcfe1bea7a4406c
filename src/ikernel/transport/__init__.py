"""Transport layer implementations."""

import logging
import os

from .base import (
    Endpoint,
    FramingError,
    SignatureError,
    TransportError,
    TransportTimeout,
    TransportPortError,
)
from . import framing

_BACKEND = os.environ.get("IKERNEL_TRANSPORT", "zmq")

if _BACKEND == "zmq":
    from .zmq import request
    from .zmq import publish
    from .zmq import heartbeat
else:
    raise ImportError(f"unknown IKERNEL_TRANSPORT backend: {_BACKEND!r}")


logger = logging.getLogger(__name__)


class Channels:
    """ The five endpoints of one kernel, each bound to the address and
        port named in a :class:`ikernel.config.Profile`. A port of zero in
        the profile binds a free port; the port actually bound is available
        as the *port* attribute of each endpoint.
    """

    def __init__(self, profile):

        self.profile = profile
        self.heartbeat = None
        self.iopub = None
        self.control = None
        self.stdin = None
        self.shell = None

        ip = profile.ip

        try:
            self.heartbeat = heartbeat.Heartbeat(ip, profile.hb_port)
            self.iopub = publish.Server(ip, profile.iopub_port)
            self.control = request.Server(ip, profile.control_port, 'control')
            self.stdin = request.Server(ip, profile.stdin_port, 'stdin')
            self.shell = request.Server(ip, profile.shell_port, 'shell')
        except TransportError:
            self.close()
            raise

        logger.debug("Channels bound: %s", self.ports())


    def ports(self):
        """ Return a dictionary of the bound ports, keyed the same way as a
            connection descriptor.
        """

        ports = dict()
        ports['shell_port'] = self.shell.port
        ports['iopub_port'] = self.iopub.port
        ports['stdin_port'] = self.stdin.port
        ports['control_port'] = self.control.port
        ports['hb_port'] = self.heartbeat.port

        return ports


    def close(self):

        for endpoint in (self.shell, self.stdin, self.control, self.iopub, self.heartbeat):
            if endpoint is not None:
                endpoint.close()


# end of class Channels



def open(profile):
    """ Bind all five channels for *profile* and return the
        :class:`Channels` instance.
    """

    return Channels(profile)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
