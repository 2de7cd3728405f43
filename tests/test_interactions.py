"""Tests for interaction stores."""

from datetime import datetime, timedelta, timezone

import pytest

from socialdesk.domain.sectors import Sector
from socialdesk.infra.interactions import (
    InMemoryInteractionStore,
    LoggingInteractionStore,
    store_from_env,
)
from socialdesk.whatsapp.models import Direction, InteractionRecord

BASE_TIME = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _record(sender="15550001111", sector=Sector.EDUCATION, minutes=0, direction=Direction.INBOUND):
    return InteractionRecord(
        sender_id=sender,
        sector=sector,
        direction=direction,
        body="body",
        timestamp=BASE_TIME + timedelta(minutes=minutes),
    )


class TestInMemoryInteractionStore:
    def test_record_and_history_newest_first(self):
        store = InMemoryInteractionStore()
        store.record(_record(minutes=1))
        store.record(_record(minutes=3))
        store.record(_record(minutes=2))

        history = store.history()
        assert [r.timestamp.minute for r in history] == [3, 2, 1]
        assert len(store) == 3

    def test_filter_by_sender_and_sector(self):
        store = InMemoryInteractionStore()
        store.record(_record(sender="a", sector=Sector.EDUCATION))
        store.record(_record(sender="a", sector=Sector.INVESTMENT))
        store.record(_record(sender="b", sector=Sector.EDUCATION))

        assert len(store.history(sender_id="a")) == 2
        assert len(store.history(sector=Sector.EDUCATION)) == 2
        assert len(store.history(sender_id="a", sector=Sector.INVESTMENT)) == 1

    def test_limit_and_offset(self):
        store = InMemoryInteractionStore()
        for minute in range(5):
            store.record(_record(minutes=minute))

        page = store.history(limit=2, offset=1)
        assert [r.timestamp.minute for r in page] == [3, 2]


class TestLoggingInteractionStore:
    def test_record_keeps_nothing(self):
        store = LoggingInteractionStore()
        store.record(_record())
        assert store.history() == []


class TestCount:
    def test_count_ignores_pagination(self):
        store = InMemoryInteractionStore()
        for minute in range(4):
            store.record(_record(minutes=minute))
        store.record(_record(sender="15559990000"))

        assert store.count() == 5
        assert store.count(sender_id="15550001111") == 4
        assert store.count(sector=Sector.INVESTMENT) == 0
        assert len(store.history(limit=2)) == 2

    def test_logging_store_counts_nothing(self):
        store = LoggingInteractionStore()
        store.record(_record())
        assert store.count() == 0


class TestStoreFromEnv:
    def test_default_is_logging(self, monkeypatch):
        monkeypatch.delenv("INTERACTION_STORE", raising=False)
        assert isinstance(store_from_env(), LoggingInteractionStore)

    def test_memory(self, monkeypatch):
        monkeypatch.setenv("INTERACTION_STORE", "Memory")
        assert isinstance(store_from_env(), InMemoryInteractionStore)

    def test_unknown_raises(self, monkeypatch):
        monkeypatch.setenv("INTERACTION_STORE", "postgres")
        with pytest.raises(ValueError):
            store_from_env()


def test_records_are_hashable_and_comparable():
    first = _record(minutes=1)
    assert hash(first) == hash(_record(minutes=1))
    assert len({first, _record(minutes=1), _record(minutes=2)}) == 2
