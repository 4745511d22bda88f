"""
tests/test_record_source.py

Pytest tests for streaming catalog records out of an in-memory SQLite store.
"""

from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from db.base import Base
from db.models.catalog_record import CatalogRecordRow
from sitemap.domain.records import CatalogRecord, RecordFilter
from sitemap.repositories.record_source import RecordSource


class TrackingSession(Session):
    closed_count = 0

    def close(self) -> None:
        TrackingSession.closed_count += 1
        super().close()


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    TrackingSession.closed_count = 0
    return sessionmaker(bind=engine, class_=TrackingSession, expire_on_commit=False)


@pytest.fixture()
def seeded(session_factory):
    with session_factory() as session:
        session.add_all(
            [
                CatalogRecordRow(about="/1/a", europeana_completeness=3),
                CatalogRecordRow(
                    about="/1/b",
                    europeana_completeness=5,
                    timestamp_updated=datetime(2024, 3, 1, 12, 0),
                ),
                CatalogRecordRow(about="/1/c", europeana_completeness=9),
                CatalogRecordRow(about="/1/d", europeana_completeness=10),
            ]
        )
        session.commit()
    TrackingSession.closed_count = 0
    return session_factory


def _ids(records: list[CatalogRecord]) -> list[str]:
    return sorted(record.identifier for record in records)


def test_streams_all_records_without_filter(seeded) -> None:
    records = list(RecordSource(seeded, batch_size=2).stream())

    assert _ids(records) == ["/1/a", "/1/b", "/1/c", "/1/d"]
    by_id = {record.identifier: record for record in records}
    assert by_id["/1/b"].completeness == 5
    assert by_id["/1/b"].last_updated is not None
    assert by_id["/1/b"].last_updated.date().isoformat() == "2024-03-01"
    assert by_id["/1/a"].last_updated is None


def test_threshold_is_inclusive(seeded) -> None:
    records = list(RecordSource(seeded).stream(RecordFilter(min_completeness=5)))
    assert _ids(records) == ["/1/b", "/1/c", "/1/d"]


def test_threshold_above_every_score_yields_nothing(seeded) -> None:
    assert list(RecordSource(seeded).stream(RecordFilter(min_completeness=11))) == []


def test_stream_is_lazy(session_factory) -> None:
    calls: list[int] = []

    def factory() -> Session:
        calls.append(1)
        return session_factory()

    iterator = RecordSource(factory).stream()
    assert calls == []

    assert list(iterator) == []
    assert calls == [1]


def test_session_closed_after_exhaustion(seeded) -> None:
    list(RecordSource(seeded, batch_size=1).stream())
    assert TrackingSession.closed_count == 1


def test_session_closed_when_abandoned(seeded) -> None:
    iterator = RecordSource(seeded, batch_size=1).stream()
    next(iterator)
    iterator.close()
    assert TrackingSession.closed_count == 1


def test_store_errors_propagate(session_factory) -> None:
    Base.metadata.drop_all(session_factory.kw["bind"])

    with pytest.raises(OperationalError):
        list(RecordSource(session_factory).stream())
    assert TrackingSession.closed_count == 1
