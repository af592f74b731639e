from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.enums import GalleryCategory
from app.schemas.admin import AdminSummary
from app.schemas.base import ApiModel
from app.schemas.notice import AttachmentOut, as_utc, blank_to_none


# ---------------- REQUEST SCHEMAS ----------------
class GalleryCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    category: GalleryCategory
    date: Optional[datetime] = None

    @field_validator("description", "date", mode="before")
    @classmethod
    def empty_optional(cls, value):
        return blank_to_none(value)

    @field_validator("date")
    @classmethod
    def utc_date(cls, value):
        return as_utc(value)


class GalleryUpdate(BaseModel):
    """Partial update; omitted or blank fields keep their stored value."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, max_length=2000)
    category: Optional[GalleryCategory] = None
    date: Optional[datetime] = None

    @field_validator("title", "description", "category", "date", mode="before")
    @classmethod
    def empty_optional(cls, value):
        return blank_to_none(value)

    @field_validator("date")
    @classmethod
    def utc_date(cls, value):
        return as_utc(value)

    def changes(self) -> dict:
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}


class GalleryQuery(BaseModel):
    category: Optional[GalleryCategory] = None

    @field_validator("category", mode="before")
    @classmethod
    def empty_category(cls, value):
        return blank_to_none(value)


# ---------------- RESPONSE SCHEMAS ----------------
class GalleryItemOut(ApiModel):
    id: str
    title: str
    description: Optional[str] = None
    category: str
    date: datetime
    image: AttachmentOut
    uploaded_by: Optional[AdminSummary] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, item) -> "GalleryItemOut":
        return cls(
            id=item.id,
            title=item.title,
            description=item.description,
            category=item.category,
            date=item.date,
            image=item.image,
            uploaded_by=AdminSummary.model_validate(item.uploader) if item.uploader else None,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )
