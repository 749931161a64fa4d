"""Utilities for testing."""

import copy
import functools
import select
import socketserver
import time

from .errors import RCONMessageError
from .packet import Packet


class UnexpectedRCONMessage(Exception):
    """Raised when an RCON request wasn't expected."""


class ExpectedRCONMessage(Packet):
    """Request expected by :class:`TestRCONServer`.

    This class should not be instantiated directly. Instead use the
    :meth:`TestRCONServer.expect` factory to create them.

    Instances of this class can be configured to respond to the request
    using :meth:`respond`, :meth:`respond_close`, etc..
    """

    def __init__(self, id_, type_, body):
        Packet.__init__(self, id_, type_, body)
        self.responses = []

    def respond(self, id_, type_, body):
        """Respond to the request with a packet.

        The parameters for this method are the same as those given to
        the initialiser of :class:`sourcercon.packet.Packet`. The created
        packet will be encoded and sent to the client.
        """
        self.respond_raw(Packet(id_, type_, body).encode())

    def respond_raw(self, data):
        """Respond with arbitrary bytes, e.g. a malformed frame."""
        self.responses.append(
            functools.partial(_TestRCONHandler.send_bytes, data=data))

    def respond_chunked(self, id_, type_, body, chunk_size=1):
        """Respond with a packet trickled out in small pieces.

        A short pause between each piece makes the client see partial
        reads.
        """
        self.responses.append(functools.partial(
            _TestRCONHandler.send_chunked,
            data=Packet(id_, type_, body).encode(),
            chunk_size=chunk_size,
        ))

    def respond_close(self):
        """Respond by closing the connection."""
        self.responses.append(_TestRCONHandler.close)


class _TestRCONHandler(socketserver.BaseRequestHandler):
    """Request handler for :class:`TestRCONServer`."""

    def _decode_messages(self):
        """Decode buffer into discrete RCON packets.

        This may consume the buffer, either in whole or part.

        :returns: an iterator of :class:`sourcercon.packet.Packet`s.
        """
        while self._buffer:
            try:
                message, self._buffer = Packet.decode_frame(self._buffer)
            except RCONMessageError:
                return
            else:
                yield message

    def _handle_request(self, message):
        """Handle individual RCON requests.

        Given a RCON request this will check that it matches the next
        expected request by comparing the request's ID, type and body
        attributes. If they all match, then each of the responses
        configured for the request is called.

        :param sourcercon.packet.Packet: the request to handle.

        :raises UnexpectedRCONMessage: if given packet does not match
            the expected request.
        """
        if not self._expectations:
            raise UnexpectedRCONMessage(
                "Unexpected message {!r}".format(message))
        expected = self._expectations.pop(0)
        for attribute in ['id', 'type', 'body']:
            a_message = getattr(message, attribute)
            a_expected = getattr(expected, attribute)
            if a_message != a_expected:
                raise UnexpectedRCONMessage(
                    "Expected {} == {!r}, got {!r}".format(
                        attribute, a_expected, a_message))
        for response in expected.responses:
            response(self)
            if self._closed:
                return

    def send_bytes(self, data):
        self.request.sendall(data)

    def send_chunked(self, data, chunk_size):
        for offset in range(0, len(data), chunk_size):
            self.request.sendall(data[offset:offset + chunk_size])
            time.sleep(0.01)

    def close(self):
        self._closed = True
        self.request.close()

    def setup(self):
        self._buffer = b""
        self._closed = False
        self._expectations = self.server.expectations()

    def handle(self):
        """Handle incoming requests.

        This will continually read incoming requests from the connected
        socket assigned to this handler. If the connected client closes
        the connection this method will exit.
        """
        while not self._closed:
            ready, _, _ = select.select([self.request], [], [], 0.05)
            if ready:
                received = self.request.recv(4096)
                if not received:
                    return
                self._buffer += received
                try:
                    for message in self._decode_messages():
                        self._handle_request(message)
                        if self._closed:
                            return
                except UnexpectedRCONMessage:
                    return


class TestRCONServer(socketserver.TCPServer):
    """Stub RCON server for testing.

    This class provides a simple RCON server which can be configured to
    respond to requests in certain ways. The idea is that this can be used
    in testing to fake the responses from a real RCON server.

    Specifically, each instance of this server can be configured to
    :meth:`expect` requests in a certain order. For each expected request
    there can be any number of responses for it. Each connection to the
    server will expect the exact same requests.

    All expected requests should be configured *before* connecting the
    client to the server.

    :param address: the address the server should bind to. By default it
        will use a random port on the loopback interface. In such cases
        the actual address in use can be retrieved via the
        :attr:`server_address` attribute.
    """

    allow_reuse_address = True

    def __init__(self, address=("127.0.0.1", 0)):
        socketserver.TCPServer.__init__(self, address, _TestRCONHandler)
        self._expectations = []

    def expect(self, id_, type_, body):
        """Expect a RCON request.

        The parameters for this method are the same as those passed to the
        initialiser of :class:`ExpectedRCONMessage`.

        :returns: the corresponding :class:`ExpectedRCONMessage`.
        """
        self._expectations.append(ExpectedRCONMessage(id_, type_, body))
        return self._expectations[-1]

    def expectations(self):
        """Get a copy of all the expectations.

        :returns: a deep copy of all the :class:`ExpectedRCONMessage`
            configured for the server.
        """
        return copy.deepcopy(self._expectations)
