from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from app.db.session import Base
from app.models.base import TimestampMixin, id_column, utcnow
from app.models.enums import GalleryCategory


class GalleryItem(TimestampMixin, Base):
    __tablename__ = "gallery"

    id = id_column()
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(30), nullable=False, default=GalleryCategory.OTHER.value, index=True)
    date = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Required image reference; a gallery row never exists without one
    image = Column(JSON, nullable=False)

    uploaded_by = Column(String(32), ForeignKey("admins.id"), nullable=False)

    uploader = relationship("Admin", lazy="joined")
