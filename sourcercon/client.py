# -*- coding: utf-8 -*-

"""Source RCON client.

Typical use::

    rcon = sourcercon.RCON("127.0.0.1", 27015, "password")
    if rcon.connect():
        try:
            if rcon.send_command("status"):
                print(rcon.get_response())
        finally:
            rcon.disconnect()
"""

import enum
import functools
import logging
import threading

from .errors import (RCONConnectionError, RCONAuthenticationError,
                     RCONError, RCONNotConnectedError)
from .packet import (AUTHORIZE_ID, COMMAND_ID,
                     SIZE_FIELD_LENGTH, Packet, read_size)
from .transport import Transport


log = logging.getLogger(__name__)


class State(enum.Enum):
    """Lifecycle of a :class:`RCON` connection."""

    DISCONNECTED = "disconnected"
    AWAITING_AUTH_REPLY = "awaiting-auth-reply"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"


class RCON(object):
    """Represents an RCON connection.

    Expected failures such as a refused connection, a rejected password or
    an unexpected reply are reported by boolean return values. Issuing a
    command without an authenticated connection is a programming error and
    raises :exc:`RCONNotConnectedError` instead.

    Each connection carries a single request at a time. Calls on one
    instance from several threads are serialised.

    :param str host: host name or address of the server.
    :param int port: TCP port of the server, 1 to 65535.
    :param password: the RCON password. It is sent in plain text.
    :param timeout: seconds to wait for the TCP connection to be made.
    :param read_timeout: seconds to wait for each reply.

    :raises ValueError: if the port is out of range.
    """

    def __init__(self, host, port, password, timeout=3, read_timeout=3):
        if (isinstance(port, bool)
                or not isinstance(port, int)
                or not 0 < port <= 65535):
            raise ValueError("Port number must be in the range 1 to 65535")
        self._host = host
        self._port = port
        self._password = password
        self._timeout = timeout
        self._read_timeout = read_timeout
        self._transport = None
        self._state = State.DISCONNECTED
        self._last_response = None
        self._lock = threading.RLock()

    def __repr__(self):
        return "<{0.__class__.__name__} {0._host}:{0._port} {1}>".format(
            self, self._state.value)

    def __enter__(self):
        if not self.connect():
            if self._state is State.FAILED:
                raise RCONAuthenticationError
            raise RCONConnectionError(self._last_response)
        return self

    def __exit__(self, type_, value, traceback):
        self.disconnect()

    def _synchronised(function):  # pylint: disable=no-self-argument
        """Decorator to run a method while holding the connection lock."""

        @functools.wraps(function)
        def wrapper(instance, *args, **kwargs):  # pylint: disable=missing-docstring
            with instance._lock:
                return function(instance, *args, **kwargs)  # pylint: disable=not-callable

        return wrapper

    def _ensure(state):  # pylint: disable=no-self-argument
        """Decorator to ensure a connection is in a specific state.

        The returned function will raise :exc:`RCONNotConnectedError` if
        the connection is in any other state. The wrapped function's
        docstring gains a matching ``:raises:`` directive.

        :param State state: the required state.
        """

        def decorator(function):  # pylint: disable=missing-docstring

            @functools.wraps(function)
            def wrapper(instance, *args, **kwargs):  # pylint: disable=missing-docstring
                if instance._state is not state:
                    raise RCONNotConnectedError(
                        "Must be {}, not {}".format(
                            state.value, instance._state.value))
                return function(instance, *args, **kwargs)

            # pylint: disable=no-member
            if not wrapper.__doc__.endswith("\n"):
                wrapper.__doc__ += "\n"
            wrapper.__doc__ += (
                "\n:raises RCONNotConnectedError: if not {}.".format(
                    state.value))
            # pylint: enable=no-member
            return wrapper

        return decorator

    @property
    def state(self):
        """The current :class:`State` of the connection."""
        return self._state

    def is_connected(self):
        """Determine if the connection is authenticated.

        .. note::
            The server may drop the connection at any time so this only
            says that the last :meth:`connect` succeeded and nothing has
            failed since.
        """
        return self._state is State.AUTHENTICATED

    def get_response(self):
        """Get the most recent response.

        This is the body of the last successful :meth:`send_command`, or
        the error message if :meth:`connect` couldn't reach the server.
        Failed commands leave it untouched.

        :returns: the response as a Unicode string or ``None``.
        """
        return self._last_response

    def _close(self):
        if self._transport is not None:
            self._transport.close()
            self._transport = None

    def _request(self, frame):
        """Send a frame and block until one reply frame is read.

        :raises RCONCommunicationError: on timeout or socket failure.
        :raises RCONMessageError: if the reply's size field is invalid.

        :returns: the reply as a :class:`Packet`.
        """
        self._transport.write_frame(frame)
        size = read_size(self._transport.read_exact(SIZE_FIELD_LENGTH))
        response = Packet.decode(self._transport.read_exact(size))
        log.debug("Received %r", response)
        return response

    @_synchronised
    def connect(self):
        """Connect to the server and authenticate.

        Any existing connection is closed first. If the server can't be
        reached the error message becomes the :meth:`get_response` value.

        Only a single reply is read for the authentication request. Servers
        which send an empty ``RESPONSE_VALUE`` ahead of the
        ``AUTH_RESPONSE`` will therefore fail to authenticate.

        :raises UnicodeEncodeError: if the password isn't ASCII.

        :returns: ``True`` if authenticated, ``False`` otherwise.
        """
        self._close()
        self._state = State.DISCONNECTED
        frame = Packet(
            AUTHORIZE_ID, Packet.Type.AUTH, self._password).encode()
        try:
            self._transport = Transport.open(
                self._host, self._port, self._timeout, self._read_timeout)
        except RCONConnectionError as exc:
            log.warning(
                "Could not connect to %s:%s: %s", self._host, self._port, exc)
            self._last_response = str(exc)
            return False
        self._state = State.AWAITING_AUTH_REPLY
        try:
            response = self._request(frame)
            if (response.type != Packet.Type.AUTH_RESPONSE
                    or response.id != AUTHORIZE_ID):
                raise RCONAuthenticationError(
                    "Unexpected reply {!r}".format(response))
        except RCONError as exc:
            log.warning("Authentication with %s:%s failed: %s",
                        self._host, self._port, exc)
            self._close()
            self._state = State.FAILED
            return False
        except BaseException:
            self._close()
            self._state = State.DISCONNECTED
            raise
        log.debug("Authenticated with %s:%s", self._host, self._port)
        self._state = State.AUTHENTICATED
        return True

    @_synchronised
    @_ensure(State.AUTHENTICATED)
    def send_command(self, command):
        """Execute a command on the server.

        The reply must carry the command's correlation ID and be a
        ``RESPONSE_VALUE``. Its body then replaces the value returned by
        :meth:`get_response`, or clears it if the body isn't ASCII.

        A mismatched reply returns ``False`` and keeps the connection. A
        timeout, socket error or invalid frame returns ``False`` and closes
        it. Responses split over several packets aren't supported.

        :param command: the command to execute.

        :raises UnicodeEncodeError: if the command isn't ASCII.
        :raises RCONMessageError: if the command is over 4096 bytes or
            contains a null byte.

        :returns: ``True`` if a matching reply was received.
        """
        frame = Packet(COMMAND_ID, Packet.Type.EXECCOMMAND, command).encode()
        try:
            response = self._request(frame)
        except RCONError as exc:
            log.warning("Lost connection to %s:%s: %s",
                        self._host, self._port, exc)
            self._close()
            self._state = State.DISCONNECTED
            return False
        except BaseException:
            self._close()
            self._state = State.DISCONNECTED
            raise
        if (response.id != COMMAND_ID
                or response.type != Packet.Type.RESPONSE_VALUE):
            log.warning("Unexpected reply %r to %r", response, command)
            return False
        try:
            self._last_response = response.text
        except UnicodeDecodeError:
            log.warning("Response to %r is not ASCII", command)
            self._last_response = None
        return True

    @_synchronised
    def disconnect(self):
        """Close the connection. Safe to call if not connected."""
        self._close()
        self._state = State.DISCONNECTED

    del _synchronised
    del _ensure


def execute(host, port, password, command, timeout=3):
    """Execute a command on an RCON server.

    This is a *very* high-level interface which connects to the given
    RCON server using the provided credentials, executes a command and
    disconnects again.

    :raises RCONConnectionError: if a connection to the RCON server
        could not be made.
    :raises RCONAuthenticationError: if authentication failed.

    :returns: the response to the command as a Unicode string, or ``None``
        if the command failed or its response wasn't ASCII.
    """
    with RCON(host, port, password, timeout) as rcon:
        if rcon.send_command(command):
            return rcon.get_response()
        return None
