from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.errors import AuthError, ForbiddenError
from app.core.jwt import decode_access_token
from app.models.admin import Admin
from app.services.attachments import AttachmentPipeline

security = HTTPBearer(auto_error=False)

TOKEN_COOKIE = "token"


@dataclass(frozen=True)
class AdminContext:
    """Identity of the authenticated admin for the current request."""

    id: str
    email: str
    name: str
    role: str

    def as_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "name": self.name, "role": self.role}


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_attachments(request: Request) -> AttachmentPipeline:
    return request.app.state.attachments


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_current_admin(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
) -> AdminContext:
    # Bearer header first, then the sign-in cookie
    token = credentials.credentials if credentials else request.cookies.get(TOKEN_COOKIE)
    if not token:
        raise AuthError("Access denied. No token provided.")

    payload = decode_access_token(token, settings)

    # Re-resolved on every request so deactivation takes effect immediately
    admin = db.get(Admin, payload["sub"])
    if not admin:
        raise AuthError("Access denied. Admin not found.")
    if not admin.is_active:
        raise AuthError("Access denied. Admin account is deactivated.")

    return AdminContext(id=admin.id, email=admin.email, name=admin.name, role=admin.role)


def require_roles(*roles: str):
    allowed = {r.value if hasattr(r, "value") else r for r in roles}

    def dependency(admin: AdminContext = Depends(get_current_admin)) -> AdminContext:
        if admin.role not in allowed:
            raise ForbiddenError("Access denied. Insufficient permissions.")
        return admin

    return dependency
