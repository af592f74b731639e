from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.admin import AdminSummary
from app.schemas.base import ApiModel
from app.utils.file_helpers import get_file_extension, mime_category

MAX_DAYS_AHEAD = 30


def blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


def as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


# ---------------- REQUEST SCHEMAS ----------------
class NoticeCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=3, max_length=200)
    description: str = Field(min_length=10, max_length=2000)
    date: Optional[datetime] = None

    @field_validator("date", mode="before")
    @classmethod
    def empty_date(cls, value):
        return blank_to_none(value)

    @field_validator("date")
    @classmethod
    def not_too_far_ahead(cls, value):
        value = as_utc(value)
        if value and value > datetime.now(timezone.utc) + timedelta(days=MAX_DAYS_AHEAD):
            raise ValueError(
                f"Notice date cannot be more than {MAX_DAYS_AHEAD} days in the future"
            )
        return value


class NoticeQuery(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=100)
    search: Optional[str] = Field(default=None, max_length=100)

    @field_validator("search", mode="before")
    @classmethod
    def empty_search(cls, value):
        return blank_to_none(value)


# ---------------- RESPONSE SCHEMAS ----------------
class AttachmentOut(ApiModel):
    provider: str
    filename: str
    original_name: str
    size: int
    mime_type: str
    url: str
    path: Optional[str] = None
    public_id: Optional[str] = None
    format: Optional[str] = None
    resource_type: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None


class NoticeOut(ApiModel):
    id: str
    title: str
    description: str
    date: datetime
    attachment: Optional[AttachmentOut] = None
    created_by: Optional[AdminSummary] = None
    updated_by: Optional[AdminSummary] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    attachment_type: Optional[str] = None
    attachment_extension: Optional[str] = None
    formatted_date: str

    @classmethod
    def from_record(cls, notice) -> "NoticeOut":
        attachment = notice.attachment or None
        return cls(
            id=notice.id,
            title=notice.title,
            description=notice.description,
            date=notice.date,
            attachment=attachment,
            created_by=AdminSummary.model_validate(notice.creator) if notice.creator else None,
            updated_by=AdminSummary.model_validate(notice.updater) if notice.updater else None,
            is_active=notice.is_active,
            created_at=notice.created_at,
            updated_at=notice.updated_at,
            attachment_type=mime_category(attachment["mime_type"]) if attachment else None,
            attachment_extension=(
                get_file_extension(attachment["filename"]).lstrip(".") or None
                if attachment else None
            ),
            formatted_date=f"{notice.date:%B} {notice.date.day}, {notice.date.year}",
        )
