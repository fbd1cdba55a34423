class SteamCondenserError(Exception):
    """ Base class for all errors raised by this library. """


class TransportError(SteamCondenserError):
    """
    Indicates the datagram channel could not be created, connected or written to.
    The platform error number and message are kept when they are known.
    """
    def __init__(self, message, errno=None, strerror=None):
        super().__init__(message)
        self.message = message
        self.errno = errno
        self.strerror = strerror

    @classmethod
    def from_os_error(cls, message, e: OSError):
        return cls(message, e.errno, e.strerror or str(e))

    def __str__(self):
        """
        >>> str(TransportError("Could not create socket", 111, "Connection refused"))
        'Could not create socket: Connection refused (111)'
        >>> str(TransportError("Could not send data."))
        'Could not send data.'
        """
        if self.strerror is None:
            return self.message
        if self.errno is None:
            return "%s: %s" % (self.message, self.strerror)
        return "%s: %s (%s)" % (self.message, self.strerror, self.errno)


class TransportNotConnectedError(TransportError):
    """ The transport is used before connect() or after close(). """
    def __init__(self, message="The transport is not connected."):
        super().__init__(message)


class ProtocolError(SteamCondenserError):
    """ A field of a received packet could not be decoded. """


class BufferUnderrunError(ProtocolError):
    """ The buffer holds fewer bytes than the field being read. More data has to be received first. """


class ConversionError(SteamCondenserError):
    """ A legacy SteamID could not be converted to a 64-bit community id. """


class NotFoundError(SteamCondenserError):
    """ The requested identity or stats handle does not exist. """


class FetchError(SteamCondenserError):
    """ A document could not be retrieved from the community server or could not be parsed. """
