# -*- coding: utf-8 -*-

"""Source RCON packet encoding and decoding.

Each packet on the wire is laid out as::

    size:int32 | id:int32 | type:int32 | body | 0x00 | 0x00

All integers are signed and little-endian. ``size`` counts every byte
after the size field itself, so an empty body gives a size of ten.

https://developer.valvesoftware.com/wiki/Source_RCON_Protocol
"""

import enum
import struct

from .errors import RCONMessageError


#: Correlation ID used for the authentication request.
AUTHORIZE_ID = 5
#: Correlation ID used for every command request.
COMMAND_ID = 6

#: Largest body a single packet may carry. Bigger responses are split
#: over several packets by the server which isn't supported here.
MAX_BODY_SIZE = 4096
#: Smallest ``size`` field that still holds an ID and a type.
MIN_PACKET_SIZE = struct.calcsize("<ii")
#: Largest ``size`` field accepted from a server.
MAX_PACKET_SIZE = MIN_PACKET_SIZE + MAX_BODY_SIZE + 2

_SIZE_FIELD = struct.Struct("<i")
_FIXED_FIELDS = struct.Struct("<ii")

#: Length of the size field that prefixes every frame.
SIZE_FIELD_LENGTH = _SIZE_FIELD.size


class Packet(object):
    """Represents a RCON request or response."""

    ENCODING = "ascii"

    class Type(enum.IntEnum):
        """Packet types corresponding to ``SERVERDATA_`` constants.

        ``AUTH_RESPONSE`` and ``EXECCOMMAND`` share a value; which one a
        packet is depends only on the direction it travels.
        """

        RESPONSE_VALUE = 0
        AUTH_RESPONSE = 2
        EXECCOMMAND = 2
        AUTH = 3

    def __init__(self, id_, type_, body_or_text):
        self.id = int(id_)
        try:
            self.type = self.Type(type_)
        except ValueError:
            # Servers are free to send garbage; keep it so that
            # correlation checks can reject it.
            self.type = int(type_)
        if isinstance(body_or_text, bytes):
            self.body = body_or_text
        else:
            self.body = b""
            self.text = body_or_text

    def __repr__(self):
        return "<{0.__class__.__name__} {0.id} {1} {2}B>".format(
            self, getattr(self.type, "name", self.type), len(self.body))

    def __eq__(self, other):
        if not isinstance(other, Packet):
            return NotImplemented
        return ((self.id, self.type, self.body)
                == (other.id, other.type, other.body))

    __hash__ = None

    @property
    def text(self):
        """Get the body of the packet as Unicode.

        :raises UnicodeDecodeError: if the body cannot be decoded as ASCII.

        :returns: the body of the packet as a Unicode string.
        """
        return self.body.decode(self.ENCODING)

    @text.setter
    def text(self, text):
        """Set the body of the packet as Unicode.

        :raises UnicodeEncodeError: if the string cannot be encoded as ASCII.
        """
        self.body = text.encode(self.ENCODING)

    @property
    def size(self):
        """Value of the size field for this packet."""
        return _FIXED_FIELDS.size + len(self.body) + 2

    def encode(self):
        """Encode the packet to a bytestring.

        :raises RCONMessageError: if the body is too big to fit in a single
            packet or contains a null byte. Such bodies are rejected rather
            than truncated.
        """
        if len(self.body) > MAX_BODY_SIZE:
            raise RCONMessageError(
                "Body is {} bytes long; at most {} fit in "
                "one packet".format(len(self.body), MAX_BODY_SIZE))
        if b"\x00" in self.body:
            raise RCONMessageError("Body must not contain null bytes")
        return (_SIZE_FIELD.pack(self.size)
                + _FIXED_FIELDS.pack(self.id, self.type)
                + self.body + b"\x00\x00")

    @classmethod
    def decode(cls, buffer_):
        """Decode a packet from the bytes that follow its size field.

        The buffer must already be exactly as long as the size field said.
        Up to two trailing null terminators are stripped from the body.

        :raises RCONMessageError: if the buffer is too short to hold the
            ID and type fields.

        :returns: the decoded :class:`Packet`.
        """
        if len(buffer_) < _FIXED_FIELDS.size:
            raise RCONMessageError(
                "Need at least {} bytes; got "
                "{}".format(_FIXED_FIELDS.size, len(buffer_)))
        id_, type_ = _FIXED_FIELDS.unpack(buffer_[:_FIXED_FIELDS.size])
        body = buffer_[_FIXED_FIELDS.size:]
        for _ in range(2):
            if body.endswith(b"\x00"):
                body = body[:-1]
        return cls(id_, type_, bytes(body))

    @classmethod
    def decode_frame(cls, buffer_):
        """Decode a whole frame from the start of a stream buffer.

        Unlike :meth:`decode` the buffer begins with the size field. If the
        buffer contains more than a single frame then this must be called
        multiple times.

        :raises RCONMessageError: if the buffer doesn't contain a whole
            frame yet or the size field is invalid.

        :returns: a tuple containing the decoded :class:`Packet` and the
            remnants of the buffer.
        """
        if len(buffer_) < _SIZE_FIELD.size:
            raise RCONMessageError(
                "Need at least {} bytes; got "
                "{}".format(_SIZE_FIELD.size, len(buffer_)))
        size = read_size(buffer_[:_SIZE_FIELD.size])
        raw_message = buffer_[_SIZE_FIELD.size:]
        if len(raw_message) < size:
            raise RCONMessageError(
                "Message is {} bytes long "
                "but got {}".format(size, len(raw_message)))
        return cls.decode(raw_message[:size]), raw_message[size:]


def read_size(size_field):
    """Unpack and validate a size field.

    :raises RCONMessageError: if the size is too small to hold a packet or
        implies a multi-packet response.

    :returns: the number of bytes that follow the size field.
    """
    size = _SIZE_FIELD.unpack(size_field)[0]
    if size < MIN_PACKET_SIZE:
        raise RCONMessageError("Packet size {} is too small".format(size))
    if size > MAX_PACKET_SIZE:
        raise RCONMessageError(
            "Packet size {} exceeds {}; multi-packet responses "
            "are not supported".format(size, MAX_PACKET_SIZE))
    return size


def encode(id_, type_, body):
    """Encode a single packet. See :meth:`Packet.encode`."""
    return Packet(id_, type_, body).encode()


def decode(buffer_):
    """Decode a single packet. See :meth:`Packet.decode`."""
    return Packet.decode(buffer_)
