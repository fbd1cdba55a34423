import unittest
import xml.etree.ElementTree as ET
from unittest.mock import Mock, patch

from configobj import ConfigObj
from hamcrest import assert_that, is_, same_instance, calling, raises, contains_exactly, is_not

from steamcondenser.community import cache, resolver
from steamcondenser.community.cache import RecordCache
from steamcondenser.community.documents_test import GAMES_PAGE, profile_xml
from steamcondenser.community.resolver import SteamIdResolver, create_resolver, default_resolver
from steamcondenser.errors import FetchError, NotFoundError

GABE = '76561197960265732'
FRIENDS = ['76561197960265733', '76561197960265734']
GROUP = '103582791429521412'


class SteamIdResolverTest(unittest.TestCase):

    def setUp(self):
        self.fetcher = Mock()
        self.fetcher.fetch_xml.side_effect = lambda url: profile_xml(GABE, friends=FRIENDS, groups=[GROUP])
        self.fetcher.fetch_text.return_value = GAMES_PAGE
        self.clock = Mock(return_value=1000.0)
        self.sut = SteamIdResolver(RecordCache(), RecordCache(), self.fetcher, 'http://community.test/', self.clock)

    def test_resolve_fetches_once(self):
        first = self.sut.resolve(GABE)
        second = self.sut.resolve(GABE)
        assert_that(second, same_instance(first))
        assert_that(first.is_fetched(), is_(True))
        assert_that(first.fetch_time, is_(1000.0))
        assert_that(first.nickname, is_('Some Player'))
        self.fetcher.fetch_xml.assert_called_once_with('http://community.test/profiles/%s?xml=1' % GABE)

    def test_resolve_by_custom_url_is_the_same_instance(self):
        record = self.sut.resolve(GABE)
        assert_that(self.sut.resolve('Alias'), same_instance(record))
        assert_that(self.sut.is_cached('alias'), is_(True))
        assert_that(self.fetcher.fetch_xml.call_count, is_(1))

    def test_resolve_custom_url_first(self):
        record = self.sut.resolve('ALIAS')
        self.fetcher.fetch_xml.assert_called_once_with('http://community.test/id/alias?xml=1')
        assert_that(record.steam_id64, is_(GABE))
        assert_that(self.sut.resolve(GABE), same_instance(record))

    def test_resolve_without_fetch_returns_stub(self):
        record = self.sut.resolve(GABE, fetch=False)
        assert_that(record.is_fetched(), is_(False))
        self.fetcher.fetch_xml.assert_not_called()
        assert_that(self.sut.resolve(GABE), same_instance(record))
        assert_that(record.is_fetched(), is_(True))

    def test_friends_are_unfetched_stubs(self):
        record = self.sut.resolve(GABE)
        friends = self.sut.friends(record)
        assert_that([f.steam_id64 for f in friends], contains_exactly(*FRIENDS))
        for friend in friends:
            assert_that(friend.is_fetched(), is_(False))
            assert_that(self.sut.resolve(friend.steam_id64, fetch=False), same_instance(friend))
        assert_that(self.fetcher.fetch_xml.call_count, is_(1))

    def test_fetched_stub_keeps_its_instance(self):
        # a friend stub created by another profile becomes the fetched record later
        self.fetcher.fetch_xml.side_effect = [profile_xml(FRIENDS[0], friends=[GABE], custom_url=''),
                                              profile_xml(GABE, friends=[FRIENDS[0]])]
        friend = self.sut.resolve(FRIENDS[0])
        stub = self.sut.friends(friend)[0]
        assert_that(stub.is_fetched(), is_(False))
        record = self.sut.resolve('alias')
        assert_that(record, same_instance(stub))
        assert_that(record.is_fetched(), is_(True))
        assert_that(self.sut.friends(record)[0], same_instance(friend))

    def test_alias_stub_does_not_take_the_id_of_another_record(self):
        # the alias is known as a stub before the profile naming it is fetched through its id
        self.fetcher.fetch_xml.side_effect = [profile_xml(FRIENDS[0], friends=[GABE], custom_url=''),
                                              profile_xml(GABE, custom_url='alias')]
        alias_stub = self.sut.resolve('alias', fetch=False)
        friend = self.sut.resolve(FRIENDS[0])
        stub = self.sut.friends(friend)[0]

        record = self.sut.resolve(GABE)
        assert_that(record, same_instance(stub))
        assert_that(self.sut.resolve(GABE), same_instance(record))
        assert_that(self.sut.resolve('alias'), same_instance(record))
        assert_that(record.keys(), contains_exactly(GABE, 'alias'))
        assert_that(alias_stub.steam_id64, is_(None))
        assert_that(alias_stub.is_fetched(), is_(False))
        assert_that(self.fetcher.fetch_xml.call_count, is_(2))

    def test_fetching_alias_stub_fills_the_record_cached_under_the_id(self):
        self.fetcher.fetch_xml.side_effect = lambda url: profile_xml(GABE, custom_url='alias')
        alias_stub = self.sut.resolve('alias', fetch=False)
        stub = self.sut.resolve(GABE, fetch=False)

        record = self.sut.resolve('alias')
        self.fetcher.fetch_xml.assert_called_once_with('http://community.test/id/alias?xml=1')
        assert_that(record, same_instance(stub))
        assert_that(record.is_fetched(), is_(True))
        assert_that(self.sut.resolve('alias'), same_instance(record))
        assert_that(alias_stub.steam_id64, is_(None))

    def test_alias_of_private_profile_names_the_fetched_record(self):
        self.fetcher.fetch_xml.side_effect = lambda url: profile_xml(GABE, privacy='private')
        stub = self.sut.resolve(GABE, fetch=False)
        record = self.sut.resolve('Alias')
        assert_that(record, same_instance(stub))
        assert_that(self.sut.resolve('alias'), same_instance(record))
        assert_that(self.fetcher.fetch_xml.call_count, is_(1))

    def test_cyclic_friends_terminate(self):
        self.fetcher.fetch_xml.side_effect = lambda url: profile_xml(GABE, friends=[GABE])
        record = self.sut.resolve(GABE)
        assert_that(self.sut.friends(record)[0], same_instance(record))

    def test_groups_are_stubs(self):
        record = self.sut.resolve(GABE)
        groups = self.sut.groups(record)
        assert_that(len(groups), is_(1))
        assert_that(groups[0].group_id64, is_(GROUP))
        assert_that(groups[0].is_fetched(), is_(False))
        assert_that(self.sut.resolve_group(GROUP), same_instance(groups[0]))

    def test_bypass_cache_refetches_into_the_same_instance(self):
        record = self.sut.resolve(GABE)
        self.clock.return_value = 2000.0
        self.fetcher.fetch_xml.side_effect = lambda url: profile_xml(GABE, privacy='friendsonly')
        refreshed = self.sut.resolve(GABE, bypass_cache=True)
        assert_that(refreshed, same_instance(record))
        assert_that(refreshed.privacy_state, is_('friendsonly'))
        assert_that(refreshed.fetch_time, is_(2000.0))
        assert_that(self.fetcher.fetch_xml.call_count, is_(2))

    def test_failed_fetch_leaves_stub_unfetched(self):
        self.fetcher.fetch_xml.side_effect = FetchError("Could not retrieve")
        assert_that(calling(self.sut.resolve).with_args(GABE), raises(FetchError))
        assert_that(self.sut.is_cached(GABE), is_(False))

        stub = self.sut.resolve(GABE, fetch=False)
        assert_that(calling(self.sut.resolve).with_args(GABE), raises(FetchError))
        assert_that(stub.is_fetched(), is_(False))
        assert_that(stub.nickname, is_(None))

    def test_profile_not_found(self):
        self.fetcher.fetch_xml.side_effect = lambda url: ET.fromstring(
            "<response><error>The specified profile could not be found.</error></response>")
        assert_that(calling(self.sut.resolve).with_args('nobody'), raises(NotFoundError))

    def test_resolve_legacy(self):
        record = self.sut.resolve_legacy('STEAM_1:0:2')
        assert_that(record, same_instance(self.sut.resolve(GABE)))

    def test_clear_cache(self):
        record = self.sut.resolve(GABE)
        self.sut.clear_cache()
        assert_that(self.sut.is_cached(GABE), is_(False))
        assert_that(self.sut.resolve(GABE), is_not(same_instance(record)))
        assert_that(self.fetcher.fetch_xml.call_count, is_(2))

    def test_urls(self):
        record = self.sut.resolve(GABE, fetch=False)
        assert_that(self.sut.profile_url(record), is_('http://community.test/profiles/%s?xml=1' % GABE))
        assert_that(self.sut.games_url(record), is_('http://community.test/profiles/%s/games' % GABE))
        record.set_custom_url('alias')
        assert_that(self.sut.profile_base_url(record), is_('http://community.test/id/alias'))

    def test_games_are_fetched_once(self):
        record = self.sut.resolve(GABE)
        games = self.sut.get_games(record)
        assert_that(games['Team Fortress 2'], is_('tf2'))
        assert_that(self.sut.get_games(record), same_instance(games))
        self.fetcher.fetch_text.assert_called_once_with('http://community.test/id/alias/games')

    def test_find_stats_handle(self):
        record = self.sut.resolve(GABE)
        assert_that(self.sut.find_stats_handle(record, 'team fortress 2'), is_('tf2'))
        assert_that(self.sut.find_stats_handle(record, 'TF2'), is_('tf2'))
        assert_that(self.sut.find_stats_handle(record, 'Left 4 Dead'), is_('l4d:1'))

    def test_find_stats_handle_not_found(self):
        record = self.sut.resolve(GABE)
        assert_that(calling(self.sut.find_stats_handle).with_args(record, 'Portal'),
                    raises(NotFoundError, 'Stats for game Portal do not exist.'))
        assert_that(calling(self.sut.find_stats_handle).with_args(record, 'Counter-Strike: Source'),
                    raises(NotFoundError))


class CreateResolverTest(unittest.TestCase):

    def test_configured_from_community_section(self):
        config = ConfigObj({'community': {'base_url': 'http://community.test', 'timeout': 5.0,
                                          'user_agent': 'tests'}})
        sut = create_resolver(config)
        assert_that(sut.base_url, is_('http://community.test'))
        assert_that(sut.fetcher.timeout, is_(5.0))
        assert_that(sut.fetcher.user_agent, is_('tests'))
        assert_that(sut.cache, same_instance(cache.steam_ids))
        assert_that(sut.group_cache, same_instance(cache.steam_groups))

    def test_default_resolver_is_shared(self):
        with patch.object(resolver, '_default_resolver', None):
            first = default_resolver()
            assert_that(default_resolver(), same_instance(first))
            assert_that(first.base_url, is_('http://steamcommunity.com'))


if __name__ == '__main__':  # pragma no cover
    unittest.main()
