"""
Shared column helpers for the ORM models.

Every table uses an integer surrogate key and UTC ``created_at`` timestamps;
these helpers keep the definitions identical across modules.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import mapped_column


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def id_column():
    return mapped_column(Integer, primary_key=True, autoincrement=True)


def created_at_column():
    return mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )
