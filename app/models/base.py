import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String


def generate_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


def id_column():
    return Column(String(32), primary_key=True, default=generate_id)
