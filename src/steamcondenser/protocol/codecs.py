"""
Codecs for the fields of the game server protocol. All numeric fields are little-endian.

| field  | width    | encoding                          |
|--------|----------|-----------------------------------|
| byte   | 1        | unsigned 8-bit                    |
| short  | 2        | unsigned 16-bit                   |
| long   | 4        | unsigned 32-bit                   |
| float  | 4        | IEEE-754 single precision         |
| string | variable | bytes followed by a zero byte     |
"""
import struct
from abc import abstractmethod

from steamcondenser.errors import ProtocolError

STRING_TERMINATOR = b'\x00'
STRING_ENCODING = 'utf-8'


class Decoder:
    @abstractmethod
    def decode(self, data):
        """
        decodes a field from its on-wire representation.
        :param data: a buffer holding exactly the bytes of the field
        :returns the decoded value
        """
        raise NotImplementedError


class Encoder:
    @abstractmethod
    def encode(self, value) -> bytes:
        """Encode a given value as the bytes sent on the wire."""
        raise NotImplementedError


class Codec(Decoder, Encoder):
    """
    Knows how to convert a field value to/from the on-wire data format.
    """


class StructCodec(Codec):
    """A fixed width field described by a struct format string."""

    def __init__(self, fmt):
        self._struct = struct.Struct(fmt)

    def encoded_len(self) -> int:
        """Determine the number of bytes in the encoded data for this value"""
        return self._struct.size

    def decode(self, data):
        """
        >>> StructCodec('<H').decode(bytes([0x2A, 0x00]))
        42
        """
        try:
            return self._struct.unpack(bytes(data))[0]
        except struct.error as e:
            raise ProtocolError("expected %d bytes, got %d" % (self.encoded_len(), len(data))) from e

    def encode(self, value):
        """
        >>> StructCodec('<L').encode(1)
        b'\\x01\\x00\\x00\\x00'
        """
        try:
            return self._struct.pack(value)
        except struct.error as e:
            raise ProtocolError("cannot encode %r as %s" % (value, self._struct.format)) from e


class CStringCodec(Codec):
    """
    A zero-terminated string. The terminator is part of the encoded data.
    Bytes that are not valid UTF-8 are replaced rather than rejected.
    """

    def decode(self, data):
        """
        >>> CStringCodec().decode(b'AB\\x00')
        'AB'
        """
        data = bytes(data)
        end = data.find(STRING_TERMINATOR)
        if end != len(data) - 1:
            raise ProtocolError("a string must end with its only zero byte: %s" % data.hex())
        return data[:end].decode(STRING_ENCODING, errors='replace')

    def encode(self, value):
        """
        >>> CStringCodec().encode('Source Engine Query')
        b'Source Engine Query\\x00'
        """
        data = value.encode(STRING_ENCODING)
        if STRING_TERMINATOR in data:
            raise ProtocolError("a string cannot contain a zero byte: %r" % value)
        return data + STRING_TERMINATOR


BYTE = StructCodec('<B')
SHORT = StructCodec('<H')
LONG = StructCodec('<L')
FLOAT = StructCodec('<f')
CSTRING = CStringCodec()
