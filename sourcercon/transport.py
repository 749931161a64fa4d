# -*- coding: utf-8 -*-

"""Blocking TCP transport for RCON frames."""

import logging
import socket

import monotonic

from .errors import (RCONCommunicationError,
                     RCONConnectionError, RCONTimeoutError)


log = logging.getLogger(__name__)


class Transport(object):
    """Exclusively owned socket with exact-length reads and writes.

    Any I/O failure closes the transport before the exception propagates,
    so a transport that raised once is unusable. :meth:`close` may be
    called any number of times.

    :param sock: a connected stream socket.
    :param read_timeout: the number of seconds a single :meth:`read_exact`
        may take in total. ``None`` blocks forever.
    """

    def __init__(self, sock, read_timeout=3):
        self._socket = sock
        self.read_timeout = read_timeout

    @classmethod
    def open(cls, host, port, timeout=3, read_timeout=3):
        """Connect to a server.

        :param str host: host name or address of the server.
        :param int port: TCP port of the server.
        :param timeout: seconds to wait for the connection to be made.
        :param read_timeout: see :class:`Transport`.

        :raises RCONConnectionError: if the connection couldn't be made.

        :returns: a new, open :class:`Transport`.
        """
        log.debug("Connecting to %s:%s", host, port)
        try:
            sock = socket.create_connection((host, port), timeout)
        except socket.timeout:
            raise RCONConnectionError(
                "Timed out connecting to {}:{}".format(host, port))
        except (OSError, UnicodeError) as exc:
            raise RCONConnectionError(str(exc))
        return cls(sock, read_timeout)

    def __enter__(self):
        return self

    def __exit__(self, type_, value, traceback):
        self.close()

    @property
    def closed(self):
        """Determine if the transport has been closed."""
        return self._socket is None

    def close(self):
        """Close the underlying socket."""
        if self._socket is not None:
            log.debug("Closing transport")
            try:
                self._socket.close()
            finally:
                self._socket = None

    def _ensure_open(self):
        if self._socket is None:
            raise RCONCommunicationError("Transport is closed")

    def write_frame(self, frame):
        """Write every byte of an encoded frame.

        The socket timeout is reset to :attr:`read_timeout` first as
        :meth:`read_exact` shrinks it towards its own deadline.

        :raises RCONCommunicationError: if the socket is closed or fails
            part way through. The transport is closed in that case.
        """
        self._ensure_open()
        try:
            self._socket.settimeout(self.read_timeout)
            self._socket.sendall(frame)
        except socket.timeout:
            self.close()
            raise RCONTimeoutError("Timed out sending frame")
        except OSError as exc:
            self.close()
            raise RCONCommunicationError(str(exc))

    def read_exact(self, size):
        """Read exactly ``size`` bytes.

        A single ``recv`` may return fewer bytes than asked for so this
        keeps reading until the buffer is full. The read timeout covers the
        whole call rather than each individual ``recv``.

        :raises RCONTimeoutError: if the bytes don't arrive in time.
        :raises RCONCommunicationError: if the server closes the connection
            or for any other socket error.

        In all error cases the transport is closed.

        :returns: the bytes read.
        """
        self._ensure_open()
        if self.read_timeout is None:
            deadline = None
        else:
            deadline = monotonic.monotonic() + self.read_timeout
        buffer_ = bytearray()
        while len(buffer_) < size:
            if deadline is not None:
                remaining = deadline - monotonic.monotonic()
                if remaining <= 0:
                    self.close()
                    raise RCONTimeoutError(
                        "Got {} of {} bytes before timing "
                        "out".format(len(buffer_), size))
            else:
                remaining = None
            try:
                self._socket.settimeout(remaining)
                chunk = self._socket.recv(size - len(buffer_))
            except socket.timeout:
                self.close()
                raise RCONTimeoutError(
                    "Got {} of {} bytes before timing "
                    "out".format(len(buffer_), size))
            except OSError as exc:
                self.close()
                raise RCONCommunicationError(str(exc))
            if not chunk:
                self.close()
                raise RCONCommunicationError(
                    "Connection closed by server after "
                    "{} of {} bytes".format(len(buffer_), size))
            buffer_ += chunk
        return bytes(buffer_)
