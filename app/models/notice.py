from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.models.base import TimestampMixin, id_column, utcnow


class Notice(TimestampMixin, Base):
    __tablename__ = "notices"

    id = id_column()
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    # Embedded attachment reference (provider, url, path / public_id, ...)
    attachment = Column(JSON, nullable=True)

    created_by = Column(String(32), ForeignKey("admins.id"), nullable=False)
    updated_by = Column(String(32), ForeignKey("admins.id"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    creator = relationship("Admin", foreign_keys=[created_by], lazy="joined")
    updater = relationship("Admin", foreign_keys=[updated_by], lazy="joined")
