# -*- coding: utf-8 -*-

"""Client for the Source RCON protocol."""

from .client import RCON, State, execute
from .errors import (RCONError, RCONConnectionError, RCONCommunicationError,
                     RCONTimeoutError, RCONMessageError,
                     RCONAuthenticationError, RCONNotConnectedError)
from .packet import AUTHORIZE_ID, COMMAND_ID, MAX_BODY_SIZE, Packet
from .transport import Transport

__all__ = [
    "RCON",
    "State",
    "execute",
    "Packet",
    "Transport",
    "AUTHORIZE_ID",
    "COMMAND_ID",
    "MAX_BODY_SIZE",
    "RCONError",
    "RCONConnectionError",
    "RCONCommunicationError",
    "RCONTimeoutError",
    "RCONMessageError",
    "RCONAuthenticationError",
    "RCONNotConnectedError",
]
