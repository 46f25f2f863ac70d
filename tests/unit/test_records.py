"""
Unit tests for pvp_observer.recovery.records module.

Tests for player key splitting, team normalization and the projection of
decoded documents into MatchRecord and PlayerRecord.
"""

import pytest

from pvp_observer.recovery.document_decoder import decode_document
from pvp_observer.recovery.records import (
    UNKNOWN,
    MatchRecord,
    PlayerRecord,
    match_from_document,
    normalize_team,
    player_from_document,
    split_player_key
)
from pvp_observer.recovery.timestamps import EPOCH, parse_timestamp


@pytest.mark.unit
class TestSplitPlayerKey:
    """Test splitting "<name> <server>" keys."""

    def test_multi_word_name(self):
        """Everything before the last token is the name."""
        assert split_player_key('Foo Bar Gungnir') == ('Foo Bar', 'Gungnir')

    def test_collapses_whitespace(self):
        assert split_player_key('  Foo   Bar  Gungnir ') == ('Foo Bar', 'Gungnir')

    def test_single_token(self):
        """A single token is used as both name and server."""
        assert split_player_key('Gungnir') == ('Gungnir', 'Gungnir')

    @pytest.mark.parametrize('key', ['', '   ', None])
    def test_empty_key_is_unknown(self, key):
        assert split_player_key(key) == (UNKNOWN, UNKNOWN)


@pytest.mark.unit
class TestNormalizeTeam:
    """Test team code mapping."""

    def test_numeric_codes_map_to_localized_names(self):
        """Codes 0, 1 and 2 map to the three Grand Companies."""
        assert normalize_team(0) == '黑渦團'
        assert normalize_team(1) == '雙蛇黨'
        assert normalize_team(2) == '恆輝隊'

    def test_falls_back_to_alliance_code(self):
        """When team is not a code, alliance is used."""
        assert normalize_team(None, 2) == '恆輝隊'
        assert normalize_team('x', 1) == '雙蛇黨'

    def test_english_name_maps_to_localized_name(self):
        assert normalize_team('Adders') == '雙蛇黨'
        assert normalize_team('Flames') == '恆輝隊'

    def test_unrecognized_values_pass_through(self):
        """Unknown strings and codes come back unchanged."""
        assert normalize_team('Immortal Flames Reserve') == 'Immortal Flames Reserve'
        assert normalize_team(7) == 7

    def test_missing_team_is_empty(self):
        assert normalize_team(None) == ''

    def test_boolean_is_not_a_code(self):
        """True must not be read as team code 1."""
        assert normalize_team(True) is True


@pytest.mark.unit
class TestPlayerRecord:
    """Test PlayerRecord helpers."""

    def test_full_name(self):
        assert PlayerRecord('Alice', 'Gungnir').full_name == 'Alice@Gungnir'

    def test_kda_with_and_without_deaths(self):
        """KDA is (kills + assists) / deaths, or kills + assists without deaths."""
        assert PlayerRecord('A', 'B', kills=4, deaths=2, assists=2).kda == 3.0
        assert PlayerRecord('A', 'B', kills=4, deaths=0, assists=2).kda == 6.0

    def test_match_without_time(self):
        assert not MatchRecord().has_start_time
        assert MatchRecord().start_time == EPOCH


@pytest.mark.unit
class TestPlayerFromDocument:
    """Test projecting scoreboard entries."""

    def test_reads_stats_and_identity(self, bson):
        """Stats, name, server, job and team should be projected."""
        document = decode_document(bson.player(
            5, 2, 3, 123456, Name='Alice', Server='Gungnir', Job='Paladin', Team=1
        ), 0)

        player = player_from_document(document)

        assert player.name == 'Alice'
        assert player.server == 'Gungnir'
        assert (player.kills, player.deaths, player.assists, player.damage) == (5, 2, 3, 123456)
        assert player.job == 'Paladin'
        assert player.team == '雙蛇黨'

    def test_name_from_key(self, bson):
        """A "<name> <server>" key is split when there is no name field."""
        document = decode_document(bson.player(1, 1, 1, Key='Foo Bar Gungnir'), 0)

        player = player_from_document(document)

        assert (player.name, player.server) == ('Foo Bar', 'Gungnir')

    def test_unknown_fields_are_kept_in_extras(self, bson):
        document = decode_document(bson.player(1, 1, 1, Rank=12), 0)

        assert player_from_document(document).extras == {'Rank': 12}

    def test_missing_stats_default_to_zero(self, bson):
        document = decode_document(bson.document(bson.int32('Kills', 2)), 0)

        player = player_from_document(document)

        assert (player.kills, player.deaths, player.assists, player.damage) == (2, 0, 0, 0)
        assert player.name == UNKNOWN

    def test_negative_stat_is_rejected(self, bson):
        document = decode_document(bson.player(-1, 0, 0), 0)
        assert player_from_document(document) is None

    def test_non_numeric_stat_is_rejected(self, bson):
        document = decode_document(bson.document(bson.string('Kills', 'five')), 0)
        assert player_from_document(document) is None

    def test_unreliable_stat_is_rejected(self, bson):
        """Stats decoded after an unrecognized tag are not trusted."""
        document = decode_document(bson.document(
            bson.element(0x42, 'Weird', b'\x00'),
            bson.int32('Kills', 3),
        ), 0)

        assert 'Kills' in document
        assert player_from_document(document) is None


@pytest.mark.unit
class TestMatchFromDocument:
    """Test projecting whole match documents."""

    def test_match_with_one_player(self, bson):
        """A start time of epoch + 1000 ms and one scoreboard entry."""
        document = decode_document(bson.match(1000, [bson.player(5, 2, 3)]), 0)

        match = match_from_document(document)

        assert match.start_time == parse_timestamp(1000)
        assert len(match.players) == 1
        player = match.players[0]
        assert (player.kills, player.deaths, player.assists) == (5, 2, 3)
        assert not match.extracted

    def test_players_list_is_used_without_scoreboards(self, bson):
        document = decode_document(bson.document(
            bson.array('Players', [bson.player(1, 0, 0), bson.player(2, 0, 0)]),
        ), 0)

        match = match_from_document(document)

        assert [player.kills for player in match.players] == [1, 2]
        assert not match.has_start_time

    def test_single_entry_scoreboard(self, bson):
        """A scoreboard stored as one entry instead of a list still yields a player."""
        document = decode_document(bson.document(
            bson.embedded('PlayerScoreboards', bson.player(4, 1, 1)),
        ), 0)

        assert [player.kills for player in match_from_document(document).players] == [4]

    def test_entries_after_unrecognized_tag_are_dropped(self, bson):
        """Scoreboard entries decoded after an unrecognized tag do not become players."""
        scoreboards = bson.element(0x04, 'PlayerScoreboards', bson.document(
            bson.embedded('0', bson.player(2, 1, 0, Key='Alice Gungnir')),
            bson.element(0x42, '1', b'\x00'),
            bson.embedded('2', bson.player(9, 0, 0, Key='Ghost Gungnir')),
        ))
        document = decode_document(bson.document(scoreboards), 0)

        match = match_from_document(document)

        assert [player.full_name for player in match.players] == ['Alice@Gungnir']

    def test_desynchronized_scoreboard_without_reliable_entries(self, bson):
        scoreboards = bson.element(0x04, 'Players', bson.document(
            bson.element(0x42, '0', b'\x00'),
            bson.embedded('1', bson.player(9, 0, 0, Key='Ghost Gungnir')),
        ))
        document = decode_document(bson.document(scoreboards), 0)

        assert match_from_document(document).players == []

    def test_invalid_entries_are_skipped(self, bson):
        document = decode_document(bson.match(1000, [bson.player(-3, 0, 0), bson.player(2, 1, 0)]), 0)

        assert [player.kills for player in match_from_document(document).players] == [2]

    def test_other_fields_go_to_extras(self, bson):
        document = decode_document(bson.match(1000, [bson.player(1, 1, 1)], padding=3), 0)

        assert match_from_document(document).extras == {'Notes': 'nnn'}

    def test_string_start_time(self, bson):
        document = decode_document(bson.document(
            bson.string('MatchStartTime', '2025-12-07T06:48:01Z'),
        ), 0)

        assert match_from_document(document).start_time == parse_timestamp('2025-12-07T06:48:01Z')
