import logging
import select
from abc import abstractmethod

from steamcondenser.errors import TransportError, TransportNotConnectedError
from steamcondenser.protocol.packet import PacketReader
from steamcondenser.support.mixins import CommonEqualityMixin, StringerMixin

logger = logging.getLogger(__name__)

DEFAULT_RECEIVE_LENGTH = 128


class ServerAddress(CommonEqualityMixin, StringerMixin):
    """
    Describes the game server endpoint a transport talks to.
    """
    def __init__(self, host, port):
        self.host = host
        self.port = port

    def key(self):
        """
        >>> ServerAddress('127.0.0.1', 27015).key()
        '127.0.0.1:27015'
        """
        return str(self.host) + ':' + str(self.port)


class Transport:
    """
    A transport owns one datagram channel to a game server. Data is sent as single datagrams,
    received data is appended to the reader, where it is decoded field by field.
    """

    @property
    @abstractmethod
    def reader(self) -> PacketReader:
        """ the reader holding the bytes received so far. """
        raise NotImplementedError

    @property
    @abstractmethod
    def endpoint(self) -> ServerAddress:
        """ the address this transport is connected to, or None before connect(). """
        raise NotImplementedError

    @property
    @abstractmethod
    def connected(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def connect(self, address, port):
        """
        Creates the channel to the given address. Must be called once before sending or receiving.
        Raises TransportError if the channel cannot be created.
        """
        raise NotImplementedError

    @abstractmethod
    def send(self, data) -> int:
        """ Sends the data as one datagram. """
        raise NotImplementedError

    @abstractmethod
    def receive(self, max_length=None) -> bytes:
        """ Blocks until a datagram arrives and returns at most max_length bytes of it. """
        raise NotImplementedError

    @abstractmethod
    def await_readable(self, timeout=0) -> bool:
        """ Waits up to timeout seconds for data. A timeout of 0 polls without blocking. """
        raise NotImplementedError

    @abstractmethod
    def close(self):
        """ Releases the channel. Calling close() more than once has no effect. """
        raise NotImplementedError

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


class AbstractTransport(Transport):
    """
    Manages the lifecycle of the channel and leaves the I/O calls to the backend subclasses.
    """
    name = None
    receive_length = DEFAULT_RECEIVE_LENGTH
    connect_timeout = 2.0

    def __init__(self):
        self._reader = PacketReader()
        self._endpoint = None
        self._channel = None
        self._closed = False

    @property
    def reader(self) -> PacketReader:
        return self._reader

    @property
    def endpoint(self) -> ServerAddress:
        return self._endpoint

    @property
    def connected(self) -> bool:
        return self._channel is not None

    def connect(self, address, port):
        if self._closed:
            raise TransportNotConnectedError("The transport has been closed.")
        if self._channel is not None:
            raise TransportError("The transport is already connected to %s" % self._endpoint.key())
        endpoint = ServerAddress(str(address), int(port))
        self._channel = self._open(endpoint)
        self._endpoint = endpoint
        logger.info("opened %s transport to %s", self.name, endpoint.key())

    def check_connected(self):
        if self._channel is None:
            raise TransportNotConnectedError()
        return self._channel

    def send(self, data) -> int:
        channel = self.check_connected()
        data = bytes(data)
        logger.debug("Sending data: %s", data.hex())
        try:
            sent = self._send(channel, data)
        except OSError as e:
            raise TransportError.from_os_error("Could not send data", e) from e
        if not sent:
            raise TransportError("Could not send data.")
        return sent

    def receive(self, max_length=None) -> bytes:
        channel = self.check_connected()
        if max_length is None:
            max_length = int(self.receive_length)
        try:
            data = self._receive(channel, max_length)
        except OSError as e:
            raise TransportError.from_os_error("Could not receive data", e) from e
        logger.debug("Received %d bytes from %s", len(data), self._endpoint.key())
        self._reader.feed(data)
        return data

    def await_readable(self, timeout=0) -> bool:
        channel = self.check_connected()
        readable, _, _ = select.select([channel], [], [], timeout)
        return bool(readable)

    def close(self):
        channel = self._channel
        self._channel = None
        self._closed = True
        if channel is not None:
            self._close(channel)
            logger.info("closed %s transport to %s", self.name, self._endpoint.key())

    def __del__(self):
        # __init__ may not have completed
        if getattr(self, '_channel', None) is not None:
            self.close()

    @abstractmethod
    def _open(self, endpoint: ServerAddress):
        """ Template method for subclasses to create the channel.
            Returns an object with a fileno() that can be passed to select().
            If the channel cannot be created, a TransportError is raised.
        """
        raise NotImplementedError

    @abstractmethod
    def _send(self, channel, data: bytes) -> int:
        """ writes the datagram and returns the number of bytes accepted. """
        raise NotImplementedError

    @abstractmethod
    def _receive(self, channel, max_length) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def _close(self, channel):
        raise NotImplementedError
