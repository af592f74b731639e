from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.orm import validates

from app.core.security import hash_password, verify_password
from app.db.session import Base
from app.models.base import TimestampMixin, id_column
from app.models.enums import AdminRole


class Admin(TimestampMixin, Base):
    __tablename__ = "admins"

    id = id_column()
    name = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default=AdminRole.ADMIN.value)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True), nullable=True)

    @validates("email")
    def _normalize_email(self, key, value):
        return value.strip().lower() if value else value

    @validates("name")
    def _normalize_name(self, key, value):
        return value.strip() if value else value

    def set_password(self, plain: str):
        # Only place the hash is ever produced; unchanged passwords keep their hash
        if self.password_hash and verify_password(plain, self.password_hash):
            return False
        self.password_hash = hash_password(plain)
        return True

    def check_password(self, plain: str) -> bool:
        if not self.password_hash:
            return False
        return verify_password(plain, self.password_hash)

    def __repr__(self):
        return f"<Admin {self.email} ({self.role})>"
