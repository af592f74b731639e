"""
Notice write orchestration: validate, ingest the optional attachment,
persist, and clean up stored files when a write does not go through.
"""
from loguru import logger
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.dependencies import AdminContext
from app.core.errors import InternalError, NotFoundError
from app.core.validation import ensure_object_id, validate_or_raise
from app.models.base import utcnow
from app.models.notice import Notice
from app.schemas.base import Pagination
from app.schemas.notice import NoticeQuery
from app.services.attachments import AttachmentPipeline, commit_or_compensate
from app.utils.storage import IncomingFile

NOTICE_FOLDER = "notices"

admin_log = logger.bind(log_type="admin")


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


# =====================================================================
#                               READ
# =====================================================================
def list_notices(db: Session, query: NoticeQuery) -> tuple[list[Notice], Pagination]:
    q = db.query(Notice)

    if query.search:
        like = f"%{escape_like(query.search)}%"
        q = q.filter(
            or_(
                Notice.title.ilike(like, escape="\\"),
                Notice.description.ilike(like, escape="\\"),
            )
        )

    total = q.count()
    notices = (
        q.order_by(Notice.date.desc(), Notice.created_at.desc(), Notice.id.desc())
        .offset((query.page - 1) * query.limit)
        .limit(query.limit)
        .all()
    )

    return notices, Pagination.build(query.page, query.limit, total)


def get_notice(db: Session, notice_id: str) -> Notice:
    ensure_object_id(notice_id)

    notice = db.get(Notice, notice_id)
    if not notice:
        raise NotFoundError("Notice not found")
    return notice


# =====================================================================
#                               CREATE
# =====================================================================
def create_notice(
    db: Session,
    attachments: AttachmentPipeline,
    admin: AdminContext,
    fields: dict,
    file: IncomingFile | None = None,
) -> Notice:
    data = validate_or_raise("notice", fields)

    reference = attachments.ingest(file, NOTICE_FOLDER) if file else None

    notice = Notice(
        title=data.title,
        description=data.description,
        date=data.date or utcnow(),
        attachment=reference,
        created_by=admin.id,
        updated_by=admin.id,
    )
    db.add(notice)
    commit_or_compensate(db, attachments, reference, "Internal server error while creating notice")
    db.refresh(notice)

    admin_log.info(f"NOTICE CREATED: {notice.id} by {admin.email}")
    return notice


# =====================================================================
#                               UPDATE
# =====================================================================
def update_notice(
    db: Session,
    attachments: AttachmentPipeline,
    admin: AdminContext,
    notice_id: str,
    fields: dict,
    file: IncomingFile | None = None,
) -> Notice:
    notice = get_notice(db, notice_id)
    data = validate_or_raise("notice", fields)

    new_reference = attachments.ingest(file, NOTICE_FOLDER) if file else None
    old_reference = notice.attachment

    notice.title = data.title
    notice.description = data.description
    if data.date:
        notice.date = data.date
    notice.updated_by = admin.id
    if new_reference:
        notice.attachment = new_reference

    commit_or_compensate(db, attachments, new_reference, "Internal server error while updating notice")
    db.refresh(notice)

    # The old file goes only once the new reference is safely stored
    if new_reference and old_reference:
        attachments.delete(old_reference)

    admin_log.info(f"NOTICE UPDATED: {notice.id} by {admin.email}")
    return notice


# =====================================================================
#                               DELETE
# =====================================================================
def delete_notice(
    db: Session,
    attachments: AttachmentPipeline,
    admin: AdminContext,
    notice_id: str,
) -> dict:
    notice = get_notice(db, notice_id)
    summary = {"id": notice.id, "title": notice.title}

    if notice.attachment and not attachments.delete(notice.attachment):
        logger.warning(f"Attachment of notice {notice.id} could not be deleted; removing notice anyway")

    db.delete(notice)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Internal server error while deleting notice") from e

    admin_log.info(f"NOTICE DELETED: {summary['id']} by {admin.email}")
    return summary
