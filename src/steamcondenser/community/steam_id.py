"""
Identity records of the Steam Community and the conversion of the SteamIDs reported by game servers.
"""
import re

from steamcondenser.errors import ConversionError
from steamcondenser.support.mixins import StringerMixin

STEAM_ID_BASE = 76561197960265728

UNCONVERTIBLE_STEAM_IDS = ('STEAM_ID_LAN', 'BOT')

LEGACY_STEAM_ID = re.compile(r'STEAM_[0-1]:[0-1]:[0-9]+')

# ASCII digits only
COMMUNITY_ID = re.compile(r'[0-9]+')


def convert_steam_id_to_community_id(steam_id: str) -> str:
    """
    Converts a SteamID as reported by game servers to the 64-bit id used by the Steam Community.

    >>> convert_steam_id_to_community_id('STEAM_1:0:2')
    '76561197960265732'
    >>> convert_steam_id_to_community_id('STEAM_0:1:1')
    '76561197960265731'
    """
    if steam_id in UNCONVERTIBLE_STEAM_IDS:
        raise ConversionError('Cannot convert SteamID "%s" to a community ID.' % steam_id)
    if not LEGACY_STEAM_ID.fullmatch(steam_id):
        raise ConversionError('SteamID "%s" doesn\'t have the correct format.' % steam_id)

    _, account_type, account_number = steam_id[6:].split(':')
    return str(int(account_type) + int(account_number) * 2 + STEAM_ID_BASE)


def is_community_id(value) -> bool:
    """
    >>> is_community_id('76561197960265732')
    True
    >>> is_community_id('gabelogannewell')
    False
    """
    return COMMUNITY_ID.fullmatch(str(value)) is not None


class SteamId(StringerMixin):
    """
    A user of the Steam Community.

    A record is known by its 64-bit id, its custom URL, or both. Each key is set once and
    never changes afterwards. Until the profile is fetched the record is a stub: only the key
    is known and fetch_time is None.

    Friends and groups are kept as lists of ids. The records they name are held by the caches.
    """

    # attributes copied from a fetched profile
    PROFILE_ATTRIBUTES = (
        'image_url', 'online_state', 'privacy_state', 'visibility_state', 'state_message',
        'nickname', 'vac_banned',
        'favorite_game', 'favorite_game_hours_played', 'head_line', 'hours_played', 'location',
        'member_since', 'real_name', 'steam_rating', 'summary',
        'most_played_games', 'links', 'friends', 'groups',
    )

    def __init__(self, id=None):
        self.steam_id64 = None
        self.custom_url = None
        if id is not None:
            if is_community_id(id):
                self.steam_id64 = str(id)
            else:
                self.custom_url = str(id).lower()

        self.fetch_time = None

        self.image_url = None
        self.online_state = None
        self.privacy_state = None
        self.visibility_state = None
        self.state_message = None
        self.nickname = None
        self.vac_banned = None

        # only available for public profiles
        self.favorite_game = None
        self.favorite_game_hours_played = None
        self.head_line = None
        self.hours_played = None
        self.location = None
        self.member_since = None
        self.real_name = None
        self.steam_rating = None
        self.summary = None

        self.most_played_games = {}
        self.links = {}
        self.friends = []
        self.groups = []

        # name -> stats handle, loaded on demand
        self.games = None

    def keys(self):
        return [key for key in (self.steam_id64, self.custom_url) if key]

    def set_steam_id64(self, steam_id64):
        if steam_id64 and not self.steam_id64:
            self.steam_id64 = str(steam_id64)

    def set_custom_url(self, custom_url):
        if custom_url and not self.custom_url:
            self.custom_url = custom_url.lower()

    def apply_profile(self, profile):
        """
        Replaces the profile attributes with the parsed values. Attributes missing from the
        profile, such as the public fields of a private profile, are reset.
        The keys and the fetch time are left to the caller.
        """
        for attribute in self.PROFILE_ATTRIBUTES:
            value = profile.get(attribute)
            if value is None and attribute in ('friends', 'groups'):
                value = []
            elif value is None and attribute in ('most_played_games', 'links'):
                value = {}
            setattr(self, attribute, value)

    def is_fetched(self) -> bool:
        return self.fetch_time is not None

    def is_public(self) -> bool:
        return self.privacy_state == 'public'

    def is_banned(self) -> bool:
        return bool(self.vac_banned)

    def is_in_game(self) -> bool:
        return self.online_state == 'in-game'

    def is_online(self) -> bool:
        return self.online_state in ('online', 'in-game')

    @property
    def icon_avatar_url(self):
        return self._avatar_url('_.jpg')

    @property
    def medium_avatar_url(self):
        return self._avatar_url('_medium.jpg')

    @property
    def full_avatar_url(self):
        return self._avatar_url('_full.jpg')

    def _avatar_url(self, suffix):
        return self.image_url + suffix if self.image_url else None


class SteamGroup(StringerMixin):
    """
    A group of the Steam Community. Groups are only known as stubs, by the id listed in a member's profile.
    """

    def __init__(self, group_id64):
        self.group_id64 = str(group_id64)
        self.fetch_time = None

    def keys(self):
        return [self.group_id64]

    def is_fetched(self) -> bool:
        return self.fetch_time is not None
