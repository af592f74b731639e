from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import AuthError, ConflictError, NotFoundError, ValidationError
from app.models.admin import Admin
from app.models.base import utcnow
from app.schemas.admin import AdminCreate, AdminLogin, PasswordChange

admin_log = logger.bind(log_type="admin")


def create_admin(db: Session, data: AdminCreate) -> Admin:
    """
    Insert a new admin.

    Email uniqueness is left to the database's unique index, so two concurrent
    registrations with the same address end in exactly one row and one
    ConflictError.
    """
    admin = Admin(name=data.name, email=data.email, role=data.role.value, is_active=True)
    admin.set_password(data.password)

    db.add(admin)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Duplicate field value", [("email", "email already exists")])

    admin_log.info(f"ADMIN CREATED: {admin.email} ({admin.role})")
    return admin


def authenticate(db: Session, data: AdminLogin) -> Admin:
    admin = db.query(Admin).filter(Admin.email == data.email).first()

    if not admin or not admin.check_password(data.password):
        admin_log.warning(f"SIGN-IN FAILED: {data.email}")
        raise AuthError("Invalid credentials")

    if not admin.is_active:
        raise AuthError("Access denied. Admin account is deactivated.")

    admin.last_login = utcnow()
    db.commit()

    admin_log.info(f"SIGN-IN: {admin.email}")
    return admin


def get_admin(db: Session, admin_id: str) -> Admin:
    admin = db.get(Admin, admin_id)
    if not admin:
        raise NotFoundError("Admin not found")
    return admin


def change_password(db: Session, admin_id: str, data: PasswordChange) -> Admin:
    admin = get_admin(db, admin_id)

    if not admin.check_password(data.current_password):
        raise ValidationError(
            "Validation error", [("current_password", "Current password is incorrect")]
        )

    if admin.set_password(data.new_password):
        db.commit()
        admin_log.info(f"PASSWORD CHANGED: {admin.email}")
    return admin


def set_active(db: Session, admin_id: str, is_active: bool, acting_admin_id: str) -> Admin:
    admin = get_admin(db, admin_id)

    if admin.id == acting_admin_id and not is_active:
        raise ValidationError(
            "Validation error", [("is_active", "You cannot deactivate your own account")]
        )

    admin.is_active = is_active
    db.commit()

    admin_log.info(f"ADMIN {'ACTIVATED' if is_active else 'DEACTIVATED'}: {admin.email}")
    return admin
