"""
Shared pytest fixtures for all tests.

This file is automatically loaded by pytest and makes fixtures available
to all test files without needing to import them.
"""

import struct
from datetime import datetime, timezone

import pytest

from pvp_observer.config.observer_config import ObserverConfig
from pvp_observer.recovery.litedb_parser import HEADER_INFO, HEADER_INFO_OFFSET, FILE_VERSION_OFFSET
from pvp_observer.recovery.records import MatchRecord, PlayerRecord


# ============================================================================
# Binary Builders
# ============================================================================

class BsonBuilder:
    """
    Encodes synthetic documents in the same layout the recovery engine reads.

    Element helpers return encoded elements (type tag + name + value);
    document() wraps a list of elements into a length-prefixed document.
    """

    @staticmethod
    def element(tag: int, name: str, payload: bytes) -> bytes:
        return bytes([tag]) + name.encode('utf-8') + b'\x00' + payload

    @classmethod
    def document(cls, *elements: bytes) -> bytes:
        body = b''.join(elements)
        return struct.pack('<i', 4 + len(body) + 1) + body + b'\x00'

    @classmethod
    def double(cls, name: str, value: float) -> bytes:
        return cls.element(0x01, name, struct.pack('<d', value))

    @classmethod
    def string(cls, name: str, value: str) -> bytes:
        encoded = value.encode('utf-8') + b'\x00'
        return cls.element(0x02, name, struct.pack('<i', len(encoded)) + encoded)

    @classmethod
    def embedded(cls, name: str, document: bytes) -> bytes:
        return cls.element(0x03, name, document)

    @classmethod
    def array(cls, name: str, documents) -> bytes:
        items = [cls.embedded(str(index), document) for index, document in enumerate(documents)]
        return cls.element(0x04, name, cls.document(*items))

    @classmethod
    def boolean(cls, name: str, value: bool) -> bytes:
        return cls.element(0x08, name, b'\x01' if value else b'\x00')

    @classmethod
    def datetime(cls, name: str, millis: int) -> bytes:
        return cls.element(0x09, name, struct.pack('<q', millis))

    @classmethod
    def null(cls, name: str) -> bytes:
        return cls.element(0x0A, name, b'')

    @classmethod
    def int32(cls, name: str, value: int) -> bytes:
        return cls.element(0x10, name, struct.pack('<i', value))

    @classmethod
    def int64(cls, name: str, value: int) -> bytes:
        return cls.element(0x12, name, struct.pack('<q', value))

    @classmethod
    def player(cls, kills: int, deaths: int, assists: int, damage: int = None, **fields) -> bytes:
        """Scoreboard entry; extra keyword fields are encoded as strings or int32."""
        elements = [
            cls.int32('Kills', kills),
            cls.int32('Deaths', deaths),
            cls.int32('Assists', assists),
        ]
        if damage is not None:
            elements.append(cls.int64('DamageDealt', damage))
        for name, value in fields.items():
            if isinstance(value, str):
                elements.append(cls.string(name, value))
            else:
                elements.append(cls.int32(name, value))
        return cls.document(*elements)

    @classmethod
    def match(cls, start_millis: int, players, padding: int = 80) -> bytes:
        """
        Match document with MatchStartTime first, so the only plausible
        start behind the first marker is the document's own length prefix.
        """
        return cls.document(
            cls.datetime('MatchStartTime', start_millis),
            cls.array('PlayerScoreboards', players),
            cls.string('Notes', 'n' * padding),
        )


class FieldLayoutBuilder:
    """
    Builds raw field runs for the field-level fallback extractor.

    Each field is written as name + NUL + one type byte + value, which is
    the fixed layout the fallback reads.
    """

    @staticmethod
    def int32_field(name: bytes, value: int) -> bytes:
        return name + b'\x00\x10' + struct.pack('<i', value)

    @staticmethod
    def int64_field(name: bytes, value: int) -> bytes:
        return name + b'\x00\x12' + struct.pack('<q', value)

    @classmethod
    def player(cls, label: str, kills: int, deaths: int, assists: int,
               damage: int = None, stride: int = 250) -> bytes:
        """One player record padded to `stride` bytes, label first."""
        record = label.encode('utf-8') + b'\x00' * 20
        record += cls.int32_field(b'Kills', kills)
        record += cls.int32_field(b'Deaths', deaths)
        record += cls.int32_field(b'Assists', assists)
        if damage is not None:
            record += cls.int64_field(b'DamageDealt', damage)
        return record + b'\x00' * (stride - len(record))

    @classmethod
    def match(cls, start_millis: int, players) -> bytes:
        return (
            b'\x00' * 16
            + cls.int64_field(b'MatchStartTime', start_millis)
            + b'\x00' * 8
            + b'PlayerScoreboards\x00\x04'
            + b''.join(players)
        )


@pytest.fixture
def bson():
    """Provide the synthetic document encoder."""
    return BsonBuilder


@pytest.fixture
def field_layout():
    """Provide the raw field-run encoder for fallback tests."""
    return FieldLayoutBuilder


@pytest.fixture
def litedb_header():
    """Provide an 8 KiB LiteDB v5 header page."""
    page = bytearray(8192)
    page[HEADER_INFO_OFFSET:HEADER_INFO_OFFSET + len(HEADER_INFO)] = HEADER_INFO
    page[FILE_VERSION_OFFSET] = 2
    return bytes(page)


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config():
    """Provide a test configuration with small limits."""
    return ObserverConfig(
        data_path="./test_data.db",
        player_limit=50,
        recent_days=7,
        stats_match_limit=20,
        min_tier_matches=1,
        target_matches=3
    )


# ============================================================================
# Test Data Fixtures
# ============================================================================

@pytest.fixture
def sample_json_export():
    """Provide a JSON export as written by the match database exporter."""
    return {
        'flmatch': [
            {
                'MatchStartTime': {'$date': '2025-12-07T06:48:01.6530000Z'},
                'Players': [
                    {'key': 'Foo Bar Gungnir', 'kills': 3, 'deaths': 1, 'assists': 9,
                     'damage': 123456, 'job': 'Paladin', 'team': 1, 'alliance': 1},
                    {'key': 'Baz Tonberry', 'kills': 0, 'deaths': 4, 'assists': 2,
                     'damage': 65000, 'job': 'Bard', 'team': 2, 'alliance': 2},
                ]
            },
            {
                'MatchStartTime': '2025-12-06T20:15:00Z',
                'Players': [
                    {'key': 'Foo Bar Gungnir', 'kills': 5, 'deaths': 0, 'assists': 12,
                     'damage': 200000, 'job': 'Paladin', 'team': 0},
                ]
            }
        ]
    }


@pytest.fixture
def sample_matches():
    """Provide three matches on two days with overlapping players."""
    def when(day, hour):
        return datetime(2025, 12, day, hour, 0, tzinfo=timezone.utc)

    return [
        MatchRecord(start_time=when(6, 20), players=[
            PlayerRecord('Alice', 'Gungnir', kills=4, deaths=2, assists=10, damage=300000, job='Paladin'),
            PlayerRecord('Bob', 'Tonberry', kills=1, deaths=5, assists=3, damage=100000, job='Bard'),
        ]),
        MatchRecord(start_time=when(7, 6), players=[
            PlayerRecord('Alice', 'Gungnir', kills=6, deaths=0, assists=8, damage=500000, job='Warrior'),
            PlayerRecord('Carol', 'Moogle', kills=2, deaths=2, assists=2, damage=200000, job='Sage'),
        ]),
        MatchRecord(start_time=when(7, 8), players=[
            PlayerRecord('Alice', 'Gungnir', kills=2, deaths=1, assists=4, damage=200000, job='Paladin'),
            PlayerRecord('Bob', 'Tonberry', kills=0, deaths=3, assists=6, damage=150000, job='Bard'),
        ]),
    ]
