import logging
import time

from steamcondenser.community import cache
from steamcondenser.community.cache import RecordCache
from steamcondenser.community.documents import parse_games_page, parse_profile
from steamcondenser.community.fetcher import CommunityFetcher
from steamcondenser.community.steam_id import SteamGroup, SteamId, convert_steam_id_to_community_id
from steamcondenser.config.config import CONFIG_NAME, apply_conf, load_config
from steamcondenser.errors import NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = 'http://steamcommunity.com'


class SteamIdResolver:
    """
    Returns SteamId records from the cache, fetching their profiles when needed.

    Fetching a profile creates stubs for the friends and groups it lists, but never fetches them.
    Resolving an id therefore costs at most one profile document, however large the social graph is.

    :param cache: the cache of SteamId records
    :param group_cache: the cache of SteamGroup records
    :param fetcher: retrieves documents from the community server
    :param base_url: the address of the community server
    :param clock: returns the current time, stored as the fetch time of fetched records
    """

    def __init__(self, cache: RecordCache = None, group_cache: RecordCache = None,
                 fetcher: CommunityFetcher = None, base_url=None, clock=time.time):
        self.cache = cache if cache is not None else RecordCache()
        self.group_cache = group_cache if group_cache is not None else RecordCache()
        self.fetcher = fetcher if fetcher is not None else CommunityFetcher()
        self.base_url = (base_url or DEFAULT_BASE_URL).rstrip('/')
        self.clock = clock

    def is_cached(self, key) -> bool:
        return self.cache.is_cached(key)

    def clear_cache(self):
        self.cache.clear()
        self.group_cache.clear()

    def resolve(self, id, fetch=True, bypass_cache=False) -> SteamId:
        """
        Returns the record for a 64-bit id or a custom URL.

        A cached record is returned as it is, unless fetch is set and the record is a stub, in which case
        its profile is fetched first. Otherwise a new record is created, fetched if fetch is set, and cached.
        A fetch returns the instance cached under the 64-bit id of the profile, which may not be the
        stub found under a custom URL.
        :param id: the 64-bit id (digits only) or the custom URL of the user
        :param fetch: when True, the returned record has its profile loaded
        :param bypass_cache: when True, the profile is fetched even when the record is cached
        """
        id = str(id).lower()
        if not bypass_cache:
            record = self.cache.get(id)
            if record is not None:
                if fetch and not record.is_fetched():
                    record = self.fetch_data(record)
                return record

        record = SteamId(id)
        if fetch:
            return self.fetch_data(record)
        return self._store(record)

    def resolve_legacy(self, steam_id, fetch=True) -> SteamId:
        """ resolves a SteamID as reported by game servers, such as STEAM_0:1:12345 """
        return self.resolve(convert_steam_id_to_community_id(steam_id), fetch)

    def resolve_group(self, group_id) -> SteamGroup:
        """ returns the cached group, or a new stub for it. Groups are never fetched here. """
        group = self.group_cache.get(group_id)
        if group is None:
            group = SteamGroup(group_id)
            self.group_cache.put(group)
        return group

    def _canonical(self, record: SteamId, steam_id64=None, custom_url=None) -> SteamId:
        """
        Finds the cached instance for the identity of the record, without changing anything.
        The instance cached under the 64-bit id wins. Otherwise the owner of the custom URL is used,
        unless that owner has a different 64-bit id. The record itself is returned when neither is cached.
        """
        steam_id64 = steam_id64 or record.steam_id64
        if steam_id64:
            owner = self.cache.get(steam_id64)
            if owner is not None:
                return owner
        for alias in (custom_url, record.custom_url):
            if not alias:
                continue
            owner = self.cache.get(alias)
            if owner is not None and (not steam_id64 or owner.steam_id64 in (None, steam_id64)):
                return owner
        return record

    def _store(self, record: SteamId) -> SteamId:
        """
        Caches the canonical instance for the identity of the record under all of its keys.
        A custom URL held by a stub that has no 64-bit id is moved to the canonical instance.
        :return: the cached instance
        """
        canonical = self._canonical(record)
        self.cache.put(canonical)
        if canonical.custom_url:
            owner = self.cache.get(canonical.custom_url)
            if owner is not canonical and owner.steam_id64 is None:
                logger.debug("custom URL %s now names %s", canonical.custom_url, canonical.steam_id64)
                self.cache.replace(canonical.custom_url, canonical)
        return canonical

    def fetch_data(self, record: SteamId) -> SteamId:
        """
        Loads the profile of the record into the cached instance for its identity. That is the record
        itself unless another instance is already cached under the 64-bit id in the profile.
        The document is parsed completely before anything is changed, so a failed fetch leaves the
        records and the cache as they were.
        :return: the fetched instance
        """
        profile = parse_profile(self.fetcher.fetch_xml(self.profile_url(record)))
        steam_id64 = profile.pop('steam_id64')
        custom_url = profile.pop('custom_url', None)

        target = self._canonical(record, steam_id64, custom_url)
        target.set_steam_id64(steam_id64)
        target.set_custom_url(custom_url)
        if target is not record and not record.steam_id64:
            # the alias the record was requested by names this profile
            target.set_custom_url(record.custom_url)
        target.apply_profile(profile)
        target = self._store(target)

        for friend_id in target.friends:
            self.resolve(friend_id, fetch=False)
        for group_id in target.groups:
            self.resolve_group(group_id)

        target.fetch_time = self.clock()
        logger.info("fetched profile %s with %d friends and %d groups",
                    target.steam_id64, len(target.friends), len(target.groups))
        return target

    def friends(self, record: SteamId):
        """ the records of the friends of a fetched record. Friends that are not yet fetched are stubs. """
        return [self.resolve(friend_id, fetch=False) for friend_id in record.friends]

    def groups(self, record: SteamId):
        return [self.resolve_group(group_id) for group_id in record.groups]

    def profile_base_url(self, record: SteamId):
        if record.custom_url:
            return "%s/id/%s" % (self.base_url, record.custom_url)
        return "%s/profiles/%s" % (self.base_url, record.steam_id64)

    def profile_url(self, record: SteamId):
        return self.profile_base_url(record) + '?xml=1'

    def games_url(self, record: SteamId):
        return self.profile_base_url(record) + '/games'

    def get_games(self, record: SteamId):
        """
        Returns the games owned by the user, mapping the game names to their stats handles, or to None
        for games without stats. The games page is fetched on the first call for each record.
        """
        if record.games is None:
            record.games = parse_games_page(self.fetcher.fetch_text(self.games_url(record)))
        return record.games

    def find_stats_handle(self, record: SteamId, game_name) -> str:
        """
        Looks up the stats handle of a game owned by the user. The name may be the name of the game
        or a stats handle, in any case.
        """
        name = game_name.lower()
        games = self.get_games(record)
        if name in (handle for handle in games.values() if handle):
            return name
        for title, handle in games.items():
            if title.lower() == name and handle:
                return handle
        raise NotFoundError("Stats for game %s do not exist." % game_name)


def create_resolver(config=None) -> SteamIdResolver:
    """
    Creates a resolver over the shared caches, configured from the [community] section.
    """
    if config is None:
        config = load_config(CONFIG_NAME)
    section = config['community']
    fetcher = CommunityFetcher()
    apply_conf(section, fetcher)
    return SteamIdResolver(cache.steam_ids, cache.steam_groups, fetcher, section['base_url'])


_default_resolver = None


def default_resolver() -> SteamIdResolver:
    """ the process-wide resolver, created on first use. """
    global _default_resolver
    if _default_resolver is None:
        _default_resolver = create_resolver()
    return _default_resolver
