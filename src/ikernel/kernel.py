""" The :class:`Kernel` is the dispatch loop tying the channels together:
    requests arrive on shell and control, are decoded, handed to whatever
    handler is registered for their message type, and answered; status and
    output are broadcast on iopub along the way.
"""

import logging
import threading
import traceback

from . import identity
from . import transport
from .protocol import message
from .protocol import types
from .protocol.message import EncodeError, MessageHeader, MessageType
from .transport import framing


logger = logging.getLogger(__name__)

# The version reported in kernel_info replies. This is the protocol version,
# not the version of this library.

protocol_version = message.version


class StdinNotAllowed(RuntimeError):
    """ The request being handled told the kernel not to ask for input. """



class Output:
    """ The handle a request handler uses to talk back to the frontends
        while it runs. Everything published through an :class:`Output` is
        attributed to the request being handled, which is how a frontend
        knows where to display it.

        :ivar request: The request being handled.
        :ivar execution_count: The execution counter for this request.
    """

    def __init__(self, kernel, request, execution_count):

        self.kernel = kernel
        self.request = request
        self.execution_count = execution_count


    @property
    def cancelled(self):
        """ True once a shutdown has been requested. Long-running handlers
            are expected to check this and stop early.
        """

        return self.kernel.stopping.is_set()


    def publish(self, msg):
        """ Broadcast *msg* on iopub as a child of the current request.
        """

        self.kernel.publish(msg, parent=self.request.header)


    def stream(self, text, name=types.StreamType.STDOUT):
        self.publish(message.PublishStream(name=name, text=text))


    def display(self, datas, source=''):
        self.publish(message.PublishDisplayData(source=source, data=list(datas)))


    def result(self, datas, metadata=None):
        """ Publish the result of an execution, tagged with the current
            execution count.
        """

        if metadata is None:
            metadata = dict()

        result = message.ExecuteResult(data=list(datas), metadata=metadata,
                                       execution_count=self.execution_count)
        self.publish(result)


    def error(self, ename, evalue, traceback=()):
        self.publish(message.ExecuteError(ename=ename, evalue=evalue, traceback=list(traceback)))


    def clear_output(self, wait=False):
        self.publish(message.ClearOutput(wait=wait))


    def comm_open(self, comm_id, target_name, data=None, target_module=''):
        if data is None:
            data = dict()
        self.publish(message.CommOpen(comm_id=comm_id, target_name=target_name,
                                      target_module=target_module, data=data))


    def comm_msg(self, comm_id, data):
        self.publish(message.CommData(comm_id=comm_id, data=data))


    def comm_close(self, comm_id, data=None):
        if data is None:
            data = dict()
        self.publish(message.CommClose(comm_id=comm_id, data=data))


    def input(self, prompt='', password=False, timeout=None):
        """ Ask the frontend that sent the current request for a line of
            input, and block until it answers. Raises :class:`StdinNotAllowed`
            if the request said not to, and
            :class:`ikernel.transport.TransportTimeout` if *timeout* seconds
            pass without an answer.
        """

        if not getattr(self.request, 'allow_stdin', True):
            raise StdinNotAllowed('frontend does not support input requests')

        return self.kernel.request_input(self.request.header, prompt, password, timeout)


# end of class Output



class Kernel:
    """ A kernel bound to the channels described by a
        :class:`ikernel.config.Profile`. The caller registers a handler for
        each request type it supports via :func:`register`, then calls
        :func:`run` (or :func:`start` and later :func:`stop`).

        A handler is called as ``handler(request, output)``, where *request*
        is the decoded :class:`ikernel.protocol.Message` and *output* is an
        :class:`Output`. It returns the reply message, without a header; the
        kernel fills in the header and sends it back on the channel the
        request arrived on. Returning None means no reply, except for
        execute requests, which always get one.

        Shell and control are served by separate threads, so a control
        request is handled even while a shell handler is busy. Heartbeats
        are answered by the transport without involving the kernel at all.
    """

    implementation = 'ikernel'
    implementation_version = '0.1.0'
    banner = ''
    language_info = types.LanguageInfo('text', '', '.txt')
    username = 'kernel'

    poll_timeout = 0.1

    def __init__(self, profile, channels=None, username=None, implementation=None,
                 implementation_version=None, banner=None, language_info=None):

        self.profile = profile
        self.signer = framing.Signer.from_profile(profile)
        self.session_id = identity.new()

        if username is not None:
            self.username = username
        if implementation is not None:
            self.implementation = implementation
        if implementation_version is not None:
            self.implementation_version = implementation_version
        if banner is not None:
            self.banner = banner
        if language_info is not None:
            self.language_info = language_info

        self.channels = channels
        self.handlers = dict()
        self.threads = list()

        self.execution_count = 0
        self._count_lock = threading.Lock()

        self.stopping = threading.Event()
        self.stopped = threading.Event()
        self._stop_lock = threading.Lock()
        self._stop_requested = False

        self.register(MessageType.KERNEL_INFO_REQUEST, self.kernel_info)
        self.register(MessageType.SHUTDOWN_REQUEST, self.shutdown)


    def register(self, msg_type, handler=None):
        """ Register *handler* for requests of type *msg_type*, which may be
            a :class:`MessageType` or its wire string. Replaces any existing
            handler for that type. Without a *handler* argument, this returns
            a decorator.
        """

        if not isinstance(msg_type, MessageType):
            msg_type = MessageType.read(msg_type)

        if handler is None:
            def decorator(function):
                self.handlers[msg_type] = function
                return function
            return decorator

        self.handlers[msg_type] = handler
        return handler


    def start(self):
        """ Bind the channels, if that hasn't happened already, announce
            that the kernel is starting, and begin serving shell and control.
        """

        if self.channels is None:
            self.channels = transport.open(self.profile)

        self._status(types.ExecutionState.STARTING)

        for endpoint in (self.control, self.shell):
            thread = threading.Thread(target=self._serve, args=(endpoint,),
                                      name=endpoint.name + '-dispatch', daemon=True)
            thread.start()
            self.threads.append(thread)

        self._status(types.ExecutionState.IDLE)


    def run(self):
        """ :func:`start` the kernel and block until it is shut down.
        """

        self.start()

        try:
            self.stopped.wait()
        except KeyboardInterrupt:
            self.stop()


    def stop(self):
        """ Stop serving and close every channel. Anything already queued to
            be sent, such as a shutdown reply, still goes out.
        """

        with self._stop_lock:
            first = not self._stop_requested
            self._stop_requested = True

        self.stopping.set()
        current = threading.current_thread()

        if not first:
            # Someone else is already closing the channels. A dispatch
            # thread must not wait for that, the closer is joining it.

            if current not in self.threads:
                self.stopped.wait()
            return

        for thread in self.threads:
            if thread is not current:
                thread.join()

        if self.channels is not None:
            self.channels.close()

        self.stopped.set()


    @property
    def shell(self):
        return self.channels.shell

    @property
    def control(self):
        return self.channels.control

    @property
    def stdin(self):
        return self.channels.stdin

    @property
    def iopub(self):
        return self.channels.iopub


    def next_execution_count(self):
        """ Increment the execution counter and return the new value.
        """

        with self._count_lock:
            self.execution_count += 1
            count = self.execution_count

        return count


    def publish(self, msg, parent=None):
        """ Broadcast *msg* on iopub. If *parent* is provided, the message is
            attributed to the request with that header.
        """

        topic = ('kernel.%s.%s' % (self.session_id, msg.msg_type.value)).encode()

        if parent is None:
            header = MessageHeader.new(msg.msg_type, self.session_id, self.username, (topic,))
        else:
            header = parent.child(msg.msg_type, self.session_id, self.username)
            header = header.rerouted((topic,))

        frames = framing.to_frames(msg.with_header(header), self.signer)
        self.iopub.send(frames)


    def request_input(self, parent, prompt='', password=False, timeout=None):
        """ Send an input_request on stdin to the frontend that sent the
            request with header *parent*, and return the value it replies
            with. Replies to anything other than this input request are
            discarded.
        """

        request = message.RequestInput(prompt=prompt, password=password)
        header = parent.child(MessageType.INPUT_REQUEST, self.session_id, self.username)
        self.stdin.send(framing.to_frames(request.with_header(header), self.signer))

        while True:
            frames = self.stdin.recv(timeout)

            try:
                reply = framing.from_frames(frames, self.signer)
            except transport.FramingError as e:
                logger.warning('stdin: dropped message: %s', e)
                continue

            if not isinstance(reply, message.InputReply):
                continue

            reply_parent = reply.header.parent_header
            if reply_parent is not None and reply_parent.message_id != header.message_id:
                logger.debug('stdin: ignoring stale input_reply')
                continue

            return reply.value


    def dispatch(self, endpoint, frames):
        """ Handle one multipart message received on *endpoint*: decode it,
            run its handler, and send the reply back on the same endpoint.
            A message that cannot be verified or decoded is dropped.
        """

        try:
            request = framing.from_frames(frames, self.signer)
        except transport.FramingError as e:
            logger.warning('%s: dropped message: %s', endpoint.name, e)
            return

        if request is None:
            # The parser already logged why.
            return

        parent = request.header

        self._status(types.ExecutionState.BUSY, parent)

        try:
            reply = self._handle(request)
        finally:
            self._status(types.ExecutionState.IDLE, parent)

        if reply is not None:
            endpoint.send(framing.to_frames(reply, self.signer))

        if isinstance(request, message.ShutdownRequest):
            self._stop_later()


    def kernel_info(self, request, output):

        return message.KernelInfoReply(
                protocol_version=protocol_version,
                banner=self.banner,
                implementation=self.implementation,
                implementation_version=self.implementation_version,
                language_info=self.language_info)


    def shutdown(self, request, output):

        # Setting the flag here lets handlers still running on shell see it;
        # the channels close once the reply has been sent.

        self.stopping.set()
        return message.ShutdownReply(restart=request.restart)


    # --- internal ---

    def _serve(self, endpoint):

        while not self.stopping.is_set():
            try:
                frames = endpoint.recv(timeout=self.poll_timeout)
            except transport.TransportTimeout:
                continue
            except transport.TransportError:
                break

            try:
                self.dispatch(endpoint, frames)
            except Exception:
                logger.exception('%s: error dispatching message', endpoint.name)


    def _stop_later(self):

        # stop() joins the dispatch threads, so it cannot run on one.

        thread = threading.Thread(target=self.stop, name='kernel-stop', daemon=True)
        thread.start()


    def _status(self, state, parent=None):
        self.publish(message.PublishStatus(execution_state=state), parent)


    def _handle(self, request):
        """ Run the handler for *request* and return the reply, with its
            header, or None if there is nothing to send.
        """

        msg_type = request.header.msg_type
        executing = isinstance(request, message.ExecuteRequest)

        if executing and not request.silent:
            count = self.next_execution_count()
            self.publish(message.ExecuteInput(code=request.code, execution_count=count), request.header)
        else:
            count = self.execution_count

        output = Output(self, request, count)

        try:
            handler = self.handlers[msg_type]
        except KeyError:
            handler = None

        if handler is None and not executing:
            logger.warning('No handler registered for %s', msg_type.value)
            return None

        body = None

        try:
            if handler is not None:
                body = handler(request, output)
        except Exception as e:
            if not executing:
                logger.exception('Handler for %s failed', msg_type.value)
                return None

            lines = traceback.format_exception(type(e), e, e.__traceback__)
            output.error(type(e).__name__, str(e), lines)
            body = message.ExecuteReply(status=types.ExecuteReplyStatus.ERROR, execution_count=count)

        if executing and body is None:
            body = message.ExecuteReply(status=types.ExecuteReplyStatus.OK, execution_count=count)

        if body is None or isinstance(body, message.SendNothing):
            return None

        label = message.reply_type(msg_type)

        if label is None:
            logger.warning('Discarding reply to %s, which takes no reply', msg_type.value)
            return None

        if body.msg_type != label:
            raise EncodeError('%s handler returned %s' % (msg_type.value, type(body).__name__))

        header = request.header.child(label, self.session_id, self.username)
        return body.with_header(header)


# end of class Kernel


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
