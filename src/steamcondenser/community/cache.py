""" cache.py

Keeps one instance per identity. A record is stored under all of its keys (the 64-bit id and,
when known, the custom URL), so looking it up by either returns the same object. Friends and
groups refer to each other by key, which makes cycles in the social graph harmless.

Keys are case-insensitive. A key is taken by the first record stored under it; storing a
different record under a taken key leaves the key as it is. Only replace() moves a key.

The caches are ordinary dictionaries without locking.
"""
import logging

logger = logging.getLogger(__name__)


class RecordCache:
    """
    Maps the keys of records to the record instances.
    """

    def __init__(self):
        self._records = {}

    @staticmethod
    def _key(key):
        return str(key).lower()

    def get(self, key):
        return self._records.get(self._key(key))

    def lookup(self, *keys):
        """ returns the record stored under the first of the keys that is cached, or None. """
        for key in keys:
            record = self.get(key)
            if record is not None:
                return record
        return None

    def is_cached(self, key) -> bool:
        return self._key(key) in self._records

    def put(self, record):
        """
        Stores the record under each of its keys that is not already taken.
        :return: True if the record was stored under at least one key.
        """
        stored = False
        for key in record.keys():
            key = self._key(key)
            existing = self._records.get(key)
            if existing is None:
                self._records[key] = record
                stored = True
            elif existing is not record:
                logger.debug("key %s is already cached for another record, keeping it", key)
        return stored

    def replace(self, key, record):
        """ stores the record under the key, even when the key is taken. """
        self._records[self._key(key)] = record

    def clear(self):
        self._records.clear()

    def __contains__(self, key):
        return self.is_cached(key)

    def __len__(self):
        return len(self._records)


# the caches shared by the default resolver
steam_ids = RecordCache()
steam_groups = RecordCache()
