"""


Steam Condenser

- Transport: a datagram channel to a game server. Sends request packets, receives
  replies into a PacketReader and can wait (with a timeout) for the channel to become readable.
  Two backends: SocketTransport (sendto/recv on a plain UDP socket) and StreamTransport
  (a connected UDP socket read and written through a file object).
- PacketReader: a cursor over the received bytes. Decodes the little-endian
  byte, short, long, float and zero-terminated string fields of the server protocol.
- SteamId: an identity record from the Steam Community. Either a stub (only the key
  is known) or fully fetched from the profile XML.
- RecordCache: maps both the 64-bit id and the custom URL of a record to the same
  instance. The first record stored under a key keeps it.
- SteamIdResolver: returns cached records or fetches them. Friends and groups found
  in a profile become stubs in the cache; they are never fetched as part of resolving
  the profile that names them, so one resolve costs at most one document fetch.


## Threading

Everything is synchronous. The caches have no locks - callers sharing a resolver between
threads must serialize access to it. Transport.await_readable() is the only call that waits
with a timeout, document fetches rely on the HTTP timeout from the configuration.

"""
