"""
Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

try:
    from ._env import ensure_test_env
except ImportError:
    from tests._env import ensure_test_env
ensure_test_env()

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import make_session_scope
from db_models import AlertRecord, Base
from models.alerting.alerts import WebhookAlert
from services.alerting.errors import DecodeError, StorageError
from services.storage.alerts import AlertStore


def _engine(create_schema=True):
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    if create_schema:
        Base.metadata.create_all(engine)
    return engine


@pytest.fixture
def scope():
    engine = _engine()
    yield make_session_scope(sessionmaker(bind=engine, expire_on_commit=False))
    engine.dispose()


@pytest.fixture
def store(scope):
    return AlertStore(scope)


def _alert(**overrides):
    payload = {
        "status": "firing",
        "labels": {"alertname": "HighCPUUsage", "severity": "critical", "instance": "node-1"},
        "annotations": {"summary": "CPU above 90%"},
        "startsAt": "2026-03-01T10:20:30.456Z",
        "endsAt": "0001-01-01T00:00:00Z",
        "generatorURL": "http://prometheus/graph?g0.expr=cpu",
        "fingerprint": "a1b2c3d4",
    }
    payload.update(overrides)
    return WebhookAlert.model_validate(payload)


def test_upsert_inserts_new_row(store):
    store.upsert(_alert())

    rows = store.list_alerts()
    assert len(rows) == 1
    row = rows[0]
    assert row.fingerprint == "a1b2c3d4"
    assert row.alert_name == "HighCPUUsage"
    assert row.status == "firing"
    assert row.labels == {"alertname": "HighCPUUsage", "severity": "critical", "instance": "node-1"}
    assert row.annotations == {"summary": "CPU above 90%"}
    assert row.end_time is None
    assert row.generator_url == "http://prometheus/graph?g0.expr=cpu"


def test_upsert_is_idempotent(store):
    alert = _alert()
    store.upsert(alert)
    first = store.list_alerts()
    store.upsert(alert)
    second = store.list_alerts()

    assert store.count() == 1
    assert first == second


def test_upsert_overwrites_existing_fingerprint_in_place(store):
    store.upsert(_alert())
    original_id = store.list_alerts()[0].id

    store.upsert(
        _alert(
            status="resolved",
            labels={"alertname": "HighCPUUsage", "severity": "warning", "instance": "node-1"},
            annotations={"summary": "recovered"},
            endsAt="2026-03-01T11:00:00Z",
            generatorURL="http://prometheus/graph?g0.expr=cpu2",
        )
    )

    rows = store.list_alerts()
    assert len(rows) == 1
    row = rows[0]
    assert row.id == original_id
    assert row.status == "resolved"
    assert row.labels["severity"] == "warning"
    assert row.annotations == {"summary": "recovered"}
    assert row.end_time == datetime(2026, 3, 1, 11, 0, 0, tzinfo=timezone.utc)
    assert row.generator_url == "http://prometheus/graph?g0.expr=cpu2"


def test_distinct_fingerprints_get_distinct_rows(store):
    store.upsert(_alert(fingerprint="fp-1"))
    store.upsert(_alert(fingerprint="fp-2", labels={"alertname": "DiskFull"}))

    rows = store.list_alerts()
    assert [r.fingerprint for r in rows] == ["fp-1", "fp-2"]
    assert rows[1].alert_name == "DiskFull"
    assert rows[0].id != rows[1].id


def test_timestamps_round_trip_to_second_precision(store):
    starts_at = datetime(2026, 3, 1, 12, 20, 30, 987654, tzinfo=timezone(timedelta(hours=2)))
    store.upsert(_alert(startsAt=starts_at.isoformat()))

    row = store.list_alerts()[0]
    assert row.start_time == starts_at.replace(microsecond=0)
    assert row.start_time.tzinfo is not None


def test_list_fails_with_decode_error_on_corrupt_labels(store, scope):
    store.upsert(_alert(fingerprint="good"))
    with scope() as db:
        db.add(
            AlertRecord(
                fingerprint="corrupt",
                status="firing",
                alert_name="Broken",
                start_time=datetime(2026, 1, 1),
                labels="{not json",
                annotations="{}",
            )
        )

    with pytest.raises(DecodeError):
        store.list_alerts()


def test_list_fails_with_decode_error_on_non_object_annotations(store, scope):
    with scope() as db:
        db.add(
            AlertRecord(
                fingerprint="list-annotations",
                status="firing",
                alert_name="Broken",
                start_time=datetime(2026, 1, 1),
                labels="{}",
                annotations="[1, 2]",
            )
        )

    with pytest.raises(DecodeError):
        store.list_alerts()


def test_storage_failures_raise_storage_error():
    engine = _engine(create_schema=False)
    store = AlertStore(make_session_scope(sessionmaker(bind=engine)))

    with pytest.raises(StorageError):
        store.upsert(_alert())
    with pytest.raises(StorageError):
        store.list_alerts()
    engine.dispose()
