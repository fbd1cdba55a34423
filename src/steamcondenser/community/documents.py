"""
Parsing of the documents served by the Steam Community: the XML version of a profile and the
HTML page listing the games of a user.
"""
import html
import re
from collections import OrderedDict

from steamcondenser.errors import FetchError, NotFoundError

_GAME_HEADING = re.compile(r'(?is)<h4[^>]*>(.*?)</h4>')
_STATS_LINK = re.compile(r'(?is)href=["\'][^"\']*/stats/([0-9a-zA-Z:]+)/achievements/?["\']')
_TAG = re.compile(r'(?s)<[^>]*>')
_SPACE = re.compile(r'\s+')


def _text(element, path, default=None):
    value = element.findtext(path)
    if value is None:
        return default
    return value.strip()


def _number(element, path, convert=float):
    value = _text(element, path)
    if not value:
        return None
    try:
        return convert(value.replace(',', ''))
    except ValueError as e:
        raise FetchError("the profile field %s is not a number: '%s'" % (path, value)) from e


def _ids(element, path, child):
    """
    Collects the ids listed in the profile, e.g. friends/friend/steamID64.
    Older profiles nest the id in a child element, newer ones put it in the text of the entry.
    """
    result = []
    for entry in element.iterfind(path):
        value = _text(entry, child) or (entry.text or '').strip()
        if value:
            result.append(value)
    return result


def parse_profile(profile) -> dict:
    """
    Reads the attributes of a SteamId from the root element of a profile XML document.

    The extended fields are only present when the privacy state is "public".
    :return: a dict of SteamId attribute names and their values
    """
    error = _text(profile, 'error')
    if error:
        raise NotFoundError(error)

    steam_id64 = _text(profile, 'steamID64')
    if not steam_id64:
        raise FetchError("the profile document has no steamID64")

    data = {
        'steam_id64': steam_id64,
        'image_url': _text(profile, 'avatarIcon'),
        'online_state': _text(profile, 'onlineState'),
        'privacy_state': _text(profile, 'privacyState'),
        'state_message': _text(profile, 'stateMessage'),
        'nickname': _text(profile, 'steamID'),
        'vac_banned': _text(profile, 'vacBanned') == '1',
        'visibility_state': _number(profile, 'visibilityState', int),
    }

    if data['privacy_state'] == 'public':
        data.update({
            'custom_url': _text(profile, 'customURL'),
            'favorite_game': _text(profile, 'favoriteGame/name'),
            'favorite_game_hours_played': _text(profile, 'favoriteGame/hoursPlayed2wk'),
            'head_line': _text(profile, 'headline'),
            'hours_played': _number(profile, 'hoursPlayed2Wk'),
            'location': _text(profile, 'location'),
            'member_since': _text(profile, 'memberSince'),
            'real_name': _text(profile, 'realname'),
            'steam_rating': _number(profile, 'steamRating'),
            'summary': _text(profile, 'summary'),
        })

    most_played = OrderedDict()
    for game in profile.iterfind('mostPlayedGames/mostPlayedGame'):
        most_played[_text(game, 'gameName')] = _number(game, 'hoursPlayed')
    data['most_played_games'] = most_played

    links = OrderedDict()
    for link in profile.iterfind('weblinks/weblink'):
        links[_text(link, 'title')] = _text(link, 'link')
    data['links'] = links

    data['friends'] = _ids(profile, 'friends/friend', 'steamID64')
    data['groups'] = _ids(profile, 'groups/group', 'groupID64')
    return data


def _heading_text(fragment):
    return _SPACE.sub(' ', html.unescape(_TAG.sub('', fragment))).strip()


def parse_games_page(page: str) -> OrderedDict:
    """
    Reads the games listed on the games page of a user.

    Every game is an <h4> heading. When the game has stats, the heading is followed by a link to
    .../stats/<handle>/achievements/ before the next heading.

    >>> page = '<h4>Team Fortress 2</h4><a href="http://steamcommunity.com/stats/TF2/achievements/">s</a>'
    >>> list(parse_games_page(page + '<h4>Portal</h4><br/>').items())
    [('Team Fortress 2', 'tf2'), ('Portal', None)]

    :return: game name -> lowercased stats handle, or None for games without stats
    """
    games = OrderedDict()
    headings = list(_GAME_HEADING.finditer(page))
    for index, heading in enumerate(headings):
        end = headings[index + 1].start() if index + 1 < len(headings) else len(page)
        link = _STATS_LINK.search(page, heading.end(), end)
        name = _heading_text(heading.group(1))
        games[name] = link.group(1).lower() if link else None
    return games
