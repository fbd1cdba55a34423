"""
Readers and writers for the fields of datagrams exchanged with a game server.
"""
from steamcondenser.errors import BufferUnderrunError
from steamcondenser.protocol.codecs import BYTE, CSTRING, FLOAT, LONG, SHORT, STRING_TERMINATOR


class PacketReader:
    """
    A cursor over received bytes. Data is appended with feed() and consumed by the read methods.

    A read that needs more bytes than are buffered raises BufferUnderrunError and
    leaves the buffer untouched, so the caller can receive more data and try again.
    """

    def __init__(self, data=b''):
        self._buffer = bytearray(data)

    def feed(self, data):
        self._buffer.extend(data)

    def remaining(self) -> int:
        return len(self._buffer)

    def __len__(self):
        return self.remaining()

    def _read(self, count) -> bytes:
        buffer = self._buffer
        if len(buffer) < count:
            raise BufferUnderrunError("need %d bytes but only %d are buffered" % (count, len(buffer)))
        result = bytes(buffer[:count])
        del buffer[:count]
        return result

    def _read_value(self, codec):
        return codec.decode(self._read(codec.encoded_len()))

    def read_byte(self) -> int:
        return self._read_value(BYTE)

    def read_short(self) -> int:
        """
        >>> PacketReader(bytes([0x2A, 0x00])).read_short()
        42
        """
        return self._read_value(SHORT)

    def read_long(self) -> int:
        """
        >>> PacketReader(bytes([0x01, 0x00, 0x00, 0x00])).read_long()
        1
        """
        return self._read_value(LONG)

    def read_float(self) -> float:
        return self._read_value(FLOAT)

    def read_cstring(self) -> str:
        """
        Reads the bytes up to and including the next zero byte.

        >>> PacketReader(b'AB\\x00').read_cstring()
        'AB'
        """
        end = self._buffer.find(STRING_TERMINATOR)
        if end < 0:
            raise BufferUnderrunError("no string terminator in %d buffered bytes" % len(self._buffer))
        return CSTRING.decode(self._read(end + 1))

    def drain_remaining(self) -> bytes:
        """ returns everything not yet read and empties the buffer. """
        result = bytes(self._buffer)
        self._buffer.clear()
        return result


class PacketWriter:
    """
    Builds a request datagram field by field.

    >>> PacketWriter().write_long(0xFFFFFFFF).write_byte(0x54).write_cstring('Source Engine Query').to_bytes()
    b'\\xff\\xff\\xff\\xffTSource Engine Query\\x00'
    """

    def __init__(self):
        self._buffer = bytearray()

    def _write(self, codec, value):
        self._buffer.extend(codec.encode(value))
        return self

    def write_byte(self, value):
        return self._write(BYTE, value)

    def write_short(self, value):
        return self._write(SHORT, value)

    def write_long(self, value):
        return self._write(LONG, value)

    def write_float(self, value):
        return self._write(FLOAT, value)

    def write_cstring(self, value):
        return self._write(CSTRING, value)

    def to_bytes(self) -> bytes:
        return bytes(self._buffer)
