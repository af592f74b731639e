from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from jose.exceptions import ExpiredSignatureError

from app.core.config import Settings
from app.core.errors import AuthError


# -------- CREATE TOKEN --------
def create_access_token(data: dict, settings: Settings, expires_delta: int | None = None):
    """Generate JWT token"""
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + timedelta(
        minutes=expires_delta if expires_delta is not None else settings.access_token_expire_minutes
    )
    to_encode.update({"iat": now, "exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


# -------- DECODE TOKEN --------
def decode_access_token(token: str, settings: Settings) -> dict:
    """Verify signature + expiry and return the payload, or raise AuthError"""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise AuthError("Access denied. Token has expired.")
    except JWTError:
        raise AuthError("Access denied. Invalid token.")

    if not payload.get("sub"):
        raise AuthError("Access denied. Invalid token.")

    return payload


def admin_token_claims(admin) -> dict:
    return {"sub": admin.id, "email": admin.email, "role": admin.role}
