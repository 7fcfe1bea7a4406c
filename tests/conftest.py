import pytest
import time
import zmq

import ikernel
from ikernel import json
from ikernel.protocol import message
from ikernel.transport import framing


key = b'unittest-secret'


@pytest.fixture
def profile():

    profile = ikernel.Profile(ip='127.0.0.1', transport='tcp', stdin_port=0,
                              control_port=0, hb_port=0, shell_port=0,
                              iopub_port=0, key=key)
    return profile


@pytest.fixture
def signer(profile):
    return framing.Signer.from_profile(profile)


@pytest.fixture
def kernel(profile):

    kernel = ikernel.Kernel(profile, banner='unittest kernel')
    kernel.start()

    yield kernel

    kernel.stop()


@pytest.fixture
def frontend():
    """ Return a function that connects a new :class:`Client` to the given
        ports; every client connected this way is closed afterwards.
    """

    clients = list()

    def connect(profile, ports):
        client = Client(profile, ports)
        clients.append(client)

        # A SUB socket misses anything published before its subscription
        # reaches the publisher.

        time.sleep(0.3)
        return client

    yield connect

    for client in clients:
        client.close()


@pytest.fixture
def client(kernel, frontend):
    return frontend(kernel.profile, kernel.channels.ports())



class Client:
    """ Just enough of a frontend to drive a kernel from a test: DEALER
        sockets for shell, control, and stdin sharing one identity, a SUB
        socket for iopub, and a REQ socket for the heartbeat.
    """

    username = 'unittest'

    def __init__(self, profile, ports, identity=b'unittest-client'):

        self.profile = profile
        self.signer = framing.Signer.from_profile(profile)
        self.session_id = ikernel.identity.new()
        self.context = zmq.Context()
        self.sockets = dict()

        for name in ('shell', 'control', 'stdin'):
            socket = self.context.socket(zmq.DEALER)
            socket.setsockopt(zmq.IDENTITY, identity)
            socket.setsockopt(zmq.LINGER, 0)
            socket.connect(profile.address(ports[name + '_port']))
            self.sockets[name] = socket

        socket = self.context.socket(zmq.SUB)
        socket.setsockopt(zmq.SUBSCRIBE, b'')
        socket.setsockopt(zmq.LINGER, 0)
        socket.connect(profile.address(ports['iopub_port']))
        self.sockets['iopub'] = socket

        socket = self.context.socket(zmq.REQ)
        socket.setsockopt(zmq.LINGER, 0)
        socket.connect(profile.address(ports['hb_port']))
        self.sockets['heartbeat'] = socket


    def close(self):

        for socket in self.sockets.values():
            socket.close()

        self.context.term()


    def frames(self, msg_type, content, parent=None, signer=None):
        """ Return the frames for a request, as a frontend would build them,
            along with the new message identifier.
        """

        if signer is None:
            signer = self.signer

        msg_id = ikernel.identity.new()

        header = dict()
        header['msg_id'] = msg_id
        header['session'] = self.session_id
        header['username'] = self.username
        header['version'] = message.version
        header['msg_type'] = msg_type

        if parent is None:
            parent = dict()

        parts = (json.dumps(header), json.dumps(parent), b'{}', json.dumps(content))
        signature = signer.sign(parts)

        return msg_id, [framing.DELIMITER, signature] + list(parts)


    def send(self, channel, msg_type, content, parent=None):

        msg_id, frames = self.frames(msg_type, content, parent)
        self.sockets[channel].send_multipart(frames)
        return msg_id


    def recv(self, channel, timeout=5):
        """ Return the next decoded message on *channel*, or None if nothing
            arrives within *timeout* seconds.
        """

        socket = self.sockets[channel]

        if socket.poll(int(timeout * 1000)) == 0:
            return None

        frames = socket.recv_multipart()
        return framing.from_frames(frames, self.signer)


    def iopub(self, parent_id, timeout=5):
        """ Collect the iopub messages sent on behalf of request *parent_id*,
            up to and including the idle status that ends them.
        """

        collected = list()
        expiration = time.time() + timeout

        while time.time() < expiration:
            received = self.recv('iopub', timeout=expiration - time.time())
            if received is None:
                break

            parent = received.header.parent_header
            if parent is None or parent.message_id != parent_id:
                continue

            collected.append(received)

            if isinstance(received, message.PublishStatus):
                if received.execution_state == ikernel.protocol.types.ExecutionState.IDLE:
                    break

        return collected


# end of class Client


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
