"""
Unit Tests for Legacy Cache Migration
"""

import asyncio

import pytest

from geocache.cache import MetricsAggregator, MigrationResolver

GEOCODE_PATH = "/maps/api/geocode/json"


@pytest.fixture
def migration(store):
    return MigrationResolver(store, MetricsAggregator(store, "geo-cache"))


@pytest.fixture
def fingerprint(fingerprinter):
    return fingerprinter.fingerprint(GEOCODE_PATH, {"address": "Paris"})


@pytest.mark.unit
class TestMigrationResolver:
    async def test_no_legacy_entry(self, migration, fingerprint, in_memory_redis):
        migrated = await migration.migrate(fingerprint)

        assert migrated is False
        assert in_memory_redis.transactions == [["get"]]
        assert in_memory_redis.counter("migrate", GEOCODE_PATH) == 0

    async def test_legacy_entry_is_moved(self, migration, fingerprint, in_memory_redis):
        legacy_key = str(fingerprint.legacy_key)
        cache_key = str(fingerprint.cache_key)
        in_memory_redis.data[legacy_key] = '{ "status": "OK", "results": [] }'

        migrated = await migration.migrate(fingerprint)

        assert migrated is True
        assert legacy_key not in in_memory_redis.data
        assert in_memory_redis.data[cache_key] == '{"status":"OK","results":[]}'
        assert cache_key not in in_memory_redis.ttls
        assert in_memory_redis.counter("migrate", GEOCODE_PATH) == 1

    async def test_move_is_one_transaction(self, migration, fingerprint, in_memory_redis):
        in_memory_redis.data[str(fingerprint.legacy_key)] = '{"status":"OK"}'

        await migration.migrate(fingerprint)

        assert in_memory_redis.transactions == [["get"], ["set", "delete", "hincrby"]]

    async def test_migrates_at_most_once(self, migration, fingerprint, in_memory_redis):
        in_memory_redis.data[str(fingerprint.legacy_key)] = '{"status":"OK"}'

        assert await migration.migrate(fingerprint) is True
        assert await migration.migrate(fingerprint) is False
        assert in_memory_redis.counter("migrate", GEOCODE_PATH) == 1

    async def test_concurrent_migrations_both_reading_legacy(self, migration, fingerprint, in_memory_redis):
        """Both requests see the legacy entry before either deletes it."""
        legacy_key = str(fingerprint.legacy_key)
        cache_key = str(fingerprint.cache_key)
        in_memory_redis.data[legacy_key] = '{ "status": "OK" }'

        results = await asyncio.gather(migration.migrate(fingerprint), migration.migrate(fingerprint))

        assert in_memory_redis.transactions[:2] == [["get"], ["get"]]
        assert results == [True, True]
        assert legacy_key not in in_memory_redis.data
        assert in_memory_redis.data[cache_key] == '{"status":"OK"}'
        assert in_memory_redis.counter("migrate", GEOCODE_PATH) in (1, 2)
        assert await migration.migrate(fingerprint) is False

    async def test_malformed_legacy_entry_is_dropped(self, migration, fingerprint, in_memory_redis):
        legacy_key = str(fingerprint.legacy_key)
        in_memory_redis.data[legacy_key] = "{not json"

        migrated = await migration.migrate(fingerprint)

        assert migrated is False
        assert legacy_key not in in_memory_redis.data
        assert str(fingerprint.cache_key) not in in_memory_redis.data
        assert in_memory_redis.counter("migrate", GEOCODE_PATH) == 0
