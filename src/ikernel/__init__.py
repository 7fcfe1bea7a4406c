""" Python implementation of the kernel side of the Jupyter messaging
    protocol. This includes the message model and its JSON encoding, the
    signed multipart framing, the five ZeroMQ channels, and the dispatch
    loop that routes requests to handlers.
"""

# Utility components.

from . import json
from . import identity

# Submodules used by multiple other components.

from . import config
from . import protocol
from . import transport

# Primary public-facing interfaces.

from . import kernel
from .config import KernelSpec, Profile
from .kernel import Kernel, Output

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
