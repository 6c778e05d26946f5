"""
SQLAlchemy models for the AlertKeeper service, defining the schema of the alerts table that stores one row per alert fingerprint.

Copyright (c) 2026 Stefan Kumarasinghe

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at http://www.apache.org/licenses/LICENSE-2.0
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None, microsecond=0)


# SQLite only autoincrements INTEGER PRIMARY KEY columns
_ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


class AlertRecord(Base):
    __tablename__ = "alerts"

    id:            Mapped[int]                = mapped_column(_ID_TYPE,     primary_key=True, autoincrement=True)
    fingerprint:   Mapped[str]                = mapped_column(String(255),  nullable=False, unique=True)
    status:        Mapped[str]                = mapped_column(String(32),   nullable=False, index=True)
    alert_name:    Mapped[str]                = mapped_column(String(255),  nullable=False, index=True)
    start_time:    Mapped[datetime]           = mapped_column(DateTime,     nullable=False)
    end_time:      Mapped[Optional[datetime]] = mapped_column(DateTime)
    generator_url: Mapped[Optional[str]]      = mapped_column(String(1024))
    labels:        Mapped[str]                = mapped_column(Text,         nullable=False, default="{}")
    annotations:   Mapped[str]                = mapped_column(Text,         nullable=False, default="{}")
    created_at:    Mapped[datetime]           = mapped_column(DateTime,     default=utc_now, nullable=False)
    updated_at:    Mapped[datetime]           = mapped_column(DateTime,     default=utc_now, nullable=False)

    __table_args__ = (
        Index("idx_alerts_status_name", "status", "alert_name"),
    )
