"""
Storage service for alerts received through the Alertmanager webhook. Every alert is upserted by fingerprint: the first sighting inserts a row, later sightings overwrite the mutable columns in place. The upsert is a single INSERT ... ON CONFLICT statement on dialects that support one, so concurrent writers to the same fingerprint are serialised by the database through the unique constraint rather than by any lock held in the application.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.dialects.mysql import insert as mysql_insert
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from database import SessionScope, get_db_session
from db_models import AlertRecord, utc_now
from models.alerting.alerts import StoredAlert, WebhookAlert
from services.alerting.errors import StorageError
from services.storage.serializers import alert_to_row_values, row_to_pydantic

logger = logging.getLogger(__name__)

MUTABLE_COLUMNS = (
    "status",
    "alert_name",
    "start_time",
    "end_time",
    "generator_url",
    "labels",
    "annotations",
    "updated_at",
)


def _on_conflict_upsert(insert_fn, values: Dict[str, Any]):
    stmt = insert_fn(AlertRecord).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=[AlertRecord.fingerprint],
        set_={col: getattr(stmt.excluded, col) for col in MUTABLE_COLUMNS},
    )


def _on_duplicate_key_upsert(values: Dict[str, Any]):
    stmt = mysql_insert(AlertRecord).values(**values)
    return stmt.on_duplicate_key_update(
        **{col: getattr(stmt.inserted, col) for col in MUTABLE_COLUMNS}
    )


class AlertStore:
    def __init__(self, session_scope: SessionScope = get_db_session):
        self._session_scope = session_scope

    def upsert(self, alert: WebhookAlert) -> None:
        values = alert_to_row_values(alert)
        values["updated_at"] = utc_now()
        try:
            with self._session_scope() as db:
                dialect = db.get_bind().dialect.name
                if dialect == "postgresql":
                    db.execute(_on_conflict_upsert(pg_insert, values))
                elif dialect == "sqlite":
                    db.execute(_on_conflict_upsert(sqlite_insert, values))
                elif dialect in {"mysql", "mariadb"}:
                    db.execute(_on_duplicate_key_upsert(values))
                else:
                    self._merge(db, values)
        except IntegrityError:
            # another writer inserted the fingerprint between our select and insert
            logger.debug("Fingerprint %s inserted concurrently; retrying as update", alert.fingerprint)
            self._retry_as_update(values)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to save alert {alert.fingerprint}: {exc}") from exc
        logger.debug("Upserted alert %s (%s)", values["alert_name"], alert.fingerprint)

    def _merge(self, db: Session, values: Dict[str, Any]) -> None:
        row: Optional[AlertRecord] = (
            db.query(AlertRecord)
            .filter(AlertRecord.fingerprint == values["fingerprint"])
            .with_for_update()
            .first()
        )
        if row is None:
            db.add(AlertRecord(**values))
            db.flush()
            return
        for col in MUTABLE_COLUMNS:
            setattr(row, col, values[col])

    def _retry_as_update(self, values: Dict[str, Any]) -> None:
        try:
            with self._session_scope() as db:
                self._merge(db, values)
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to save alert {values['fingerprint']}: {exc}") from exc

    def list_alerts(self) -> List[StoredAlert]:
        try:
            with self._session_scope() as db:
                rows = db.query(AlertRecord).order_by(AlertRecord.id).all()
                return [row_to_pydantic(row) for row in rows]
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to retrieve alerts: {exc}") from exc

    def count(self) -> int:
        try:
            with self._session_scope() as db:
                return db.query(AlertRecord).count()
        except SQLAlchemyError as exc:
            raise StorageError(f"failed to count alerts: {exc}") from exc
