import logging
import socket

from steamcondenser.config.config import CONFIG_NAME, apply_conf, load_config
from steamcondenser.errors import TransportError
from steamcondenser.transport.base import AbstractTransport, ServerAddress

logger = logging.getLogger(__name__)


def _udp_socket():
    return socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)


class SocketTransport(AbstractTransport):
    """
    Sends with sendto() on an unconnected UDP socket and reads with recv().
    """
    name = 'socket'

    def _open(self, endpoint: ServerAddress):
        try:
            return _udp_socket()
        except OSError as e:
            raise TransportError.from_os_error("Could not create socket", e) from e

    def _send(self, channel, data):
        endpoint = self.endpoint
        return channel.sendto(data, (endpoint.host, endpoint.port))

    def _receive(self, channel, max_length):
        return channel.recv(max_length)

    def _close(self, channel):
        channel.close()


class StreamTransport(AbstractTransport):
    """
    Connects a UDP socket to the server and reads and writes it through an unbuffered file object.
    """
    name = 'stream'

    def __init__(self):
        super().__init__()
        self._stream = None

    def _open(self, endpoint: ServerAddress):
        sock = None
        try:
            sock = _udp_socket()
            sock.settimeout(float(self.connect_timeout))
            sock.connect((endpoint.host, endpoint.port))
            sock.settimeout(None)
            self._stream = sock.makefile('rwb', buffering=0)
            return sock
        except OSError as e:
            if sock is not None:
                sock.close()
            raise TransportError.from_os_error("Could not create socket", e) from e

    def _send(self, channel, data):
        return self._stream.write(data)

    def _receive(self, channel, max_length):
        data = self._stream.read(max_length)
        return data if data is not None else b''

    def _close(self, channel):
        stream = self._stream
        self._stream = None
        try:
            if stream is not None:
                stream.close()
        finally:
            channel.close()


TRANSPORT_BACKENDS = {
    SocketTransport.name: SocketTransport,
    StreamTransport.name: StreamTransport,
}


def create_transport(backend=None, config=None) -> AbstractTransport:
    """
    Creates an unconnected transport using the given backend, or the backend named in the
    [transport] section of the configuration.
    :param backend: 'socket' or 'stream'
    :param config: the loaded configuration. When None, the packaged configuration is loaded.
    """
    if config is None:
        config = load_config(CONFIG_NAME)
    section = config['transport']
    backend = backend or section['backend']
    factory = TRANSPORT_BACKENDS.get(backend)
    if factory is None:
        raise ValueError("unknown transport backend '%s', expected one of %s" %
                         (backend, ', '.join(sorted(TRANSPORT_BACKENDS))))
    transport = factory()
    apply_conf(section, transport)
    return transport
