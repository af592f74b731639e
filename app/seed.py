"""
Create an admin account from the command line.

    python -m app.seed --name "Principal" --email principal@school.org \
        --password 'Secret@123' --role super_admin
"""
import argparse
import sys

from loguru import logger

from app.core.config import Settings
from app.core.errors import ConflictError
from app.core.validation import validate
from app.db.session import create_db_engine, create_session_factory, init_db
from app.services.admins import create_admin


def seed_admin(session_factory, name: str, email: str, password: str, role: str = "admin"):
    result = validate(
        "admin_registration",
        {"name": name, "email": email, "password": password, "role": role},
    )
    if not result.ok:
        return None, result.errors

    db = session_factory()
    try:
        return create_admin(db, result.value), []
    finally:
        db.close()


def main(argv=None):
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("--name", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--role", default="admin", choices=["admin", "super_admin"])
    args = parser.parse_args(argv)

    settings = Settings.from_env()
    engine = create_db_engine(settings.database_url)
    init_db(engine)

    try:
        admin, errors = seed_admin(
            create_session_factory(engine), args.name, args.email, args.password, args.role
        )
    except ConflictError:
        logger.error(f"Admin {args.email} already exists")
        return 1

    if errors:
        for field, message in errors:
            logger.error(f"{field}: {message}")
        return 1

    logger.info(f"Admin created: {admin.email} ({admin.role})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
