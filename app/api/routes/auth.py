from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.dependencies import (
    TOKEN_COOKIE,
    AdminContext,
    get_current_admin,
    get_db,
    get_settings,
    require_roles,
)
from app.core.jwt import admin_token_claims, create_access_token
from app.core.uploads import UploadForm, upload_form
from app.core.validation import ensure_object_id, validate_or_raise
from app.models.enums import AdminRole
from app.schemas.admin import AdminOut
from app.services import admins as admin_service

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


# =====================================================================
#                           ADMIN SIGN IN
# =====================================================================
@router.post("/signin")
def signin(
    response: Response,
    form: UploadForm = Depends(upload_form()),
    settings: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    data = validate_or_raise("signin", form.fields)
    admin = admin_service.authenticate(db, data)

    token = create_access_token(admin_token_claims(admin), settings)
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=settings.access_token_expire_minutes * 60,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )

    return {
        "success": True,
        "message": "Authentication successful",
        "data": {
            "token": token,
            "tokenType": "bearer",
            "admin": AdminOut.model_validate(admin).dump(),
        },
    }


# =====================================================================
#                           ADMIN LOGOUT
# =====================================================================
@router.post("/logout")
def logout(response: Response):
    response.delete_cookie(TOKEN_COOKIE)
    return {"success": True, "message": "Logged out successfully"}


# =====================================================================
#                           PROFILE / VERIFY
# =====================================================================
@router.get("/profile")
def profile(admin: AdminContext = Depends(get_current_admin), db: Session = Depends(get_db)):
    record = admin_service.get_admin(db, admin.id)
    return {
        "success": True,
        "message": "Profile retrieved successfully",
        "data": {"admin": AdminOut.model_validate(record).dump()},
    }


@router.get("/verify")
def verify(admin: AdminContext = Depends(get_current_admin)):
    return {
        "success": True,
        "message": "Token is valid",
        "data": {"admin": admin.as_dict()},
    }


# =====================================================================
#                           CHANGE PASSWORD
# =====================================================================
@router.put("/password")
def change_password(
    admin: AdminContext = Depends(get_current_admin),
    form: UploadForm = Depends(upload_form()),
    db: Session = Depends(get_db),
):
    data = validate_or_raise("password_change", form.fields)
    admin_service.change_password(db, admin.id, data)
    return {"success": True, "message": "Password updated successfully"}


# =====================================================================
#                  REGISTER ADMIN  (super admin only)
# =====================================================================
@router.post("/register", status_code=201)
def register_admin(
    admin: AdminContext = Depends(require_roles(AdminRole.SUPER_ADMIN)),
    form: UploadForm = Depends(upload_form()),
    db: Session = Depends(get_db),
):
    data = validate_or_raise("admin_registration", form.fields)
    created = admin_service.create_admin(db, data)
    return {
        "success": True,
        "message": "Admin registered successfully",
        "data": {"admin": AdminOut.model_validate(created).dump()},
    }


# =====================================================================
#              ACTIVATE / DEACTIVATE ADMIN  (super admin only)
# =====================================================================
@router.patch("/admins/{admin_id}/status")
def set_admin_status(
    admin_id: str,
    admin: AdminContext = Depends(require_roles(AdminRole.SUPER_ADMIN)),
    form: UploadForm = Depends(upload_form()),
    db: Session = Depends(get_db),
):
    ensure_object_id(admin_id)
    data = validate_or_raise("admin_status", form.fields)
    updated = admin_service.set_active(db, admin_id, data.is_active, acting_admin_id=admin.id)
    return {
        "success": True,
        "message": f"Admin {'activated' if updated.is_active else 'deactivated'} successfully",
        "data": {"admin": AdminOut.model_validate(updated).dump()},
    }
