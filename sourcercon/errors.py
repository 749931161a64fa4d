# -*- coding: utf-8 -*-

"""Exceptions raised by the RCON client."""


class RCONError(Exception):
    """Base exception for all RCON-related errors."""


class RCONConnectionError(RCONError):
    """Raised when the TCP connection to the server could not be made."""


class RCONCommunicationError(RCONError):
    """Used for propagating socket-related errors."""


class RCONTimeoutError(RCONCommunicationError):
    """Raised when a timeout occurs waiting for a response."""


class RCONMessageError(RCONError):
    """Raised for errors encoding or decoding RCON messages."""


class RCONAuthenticationError(RCONError):
    """Raised for failed authentication.

    The server gives no reliable way to tell a wrong password apart from
    a malformed reply so no further detail is attached.
    """

    def __init__(self, message="Authentication failed"):
        super(RCONAuthenticationError, self).__init__(message)


class RCONNotConnectedError(RCONError):
    """Raised when a command is issued without an authenticated connection.

    This signals misuse by the caller rather than a network fault.
    """
