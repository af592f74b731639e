from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.dependencies import AdminContext
from app.core.errors import FileRejected, InternalError, NotFoundError
from app.core.validation import ensure_object_id, validate_or_raise
from app.models.base import utcnow
from app.models.gallery import GalleryItem
from app.schemas.gallery import GalleryQuery
from app.services.attachments import AttachmentPipeline, commit_or_compensate
from app.utils.storage import IncomingFile

GALLERY_FOLDER = "gallery"

admin_log = logger.bind(log_type="admin")


def list_items(db: Session, query: GalleryQuery) -> list[GalleryItem]:
    q = db.query(GalleryItem)
    if query.category:
        q = q.filter(GalleryItem.category == query.category.value)
    return q.order_by(GalleryItem.created_at.desc(), GalleryItem.id.desc()).all()


def get_item(db: Session, item_id: str) -> GalleryItem:
    ensure_object_id(item_id)

    item = db.get(GalleryItem, item_id)
    if not item:
        raise NotFoundError("Image not found")
    return item


def create_item(
    db: Session,
    attachments: AttachmentPipeline,
    admin: AdminContext,
    fields: dict,
    file: IncomingFile | None,
) -> GalleryItem:
    data = validate_or_raise("gallery", fields)

    if file is None:
        raise FileRejected("File required", [("attachment", "Please upload a file")])

    image = attachments.ingest(file, GALLERY_FOLDER, images_only=True)

    item = GalleryItem(
        title=data.title,
        description=data.description,
        category=data.category.value,
        date=data.date or utcnow(),
        image=image,
        uploaded_by=admin.id,
    )
    db.add(item)
    commit_or_compensate(db, attachments, image, "Internal server error while uploading image")
    db.refresh(item)

    admin_log.info(f"GALLERY IMAGE UPLOADED: {item.id} by {admin.email}")
    return item


def update_item(
    db: Session,
    admin: AdminContext,
    item_id: str,
    fields: dict,
    file: IncomingFile | None = None,
) -> GalleryItem:
    item = get_item(db, item_id)

    # the stored image is immutable
    if file is not None:
        raise FileRejected(
            "Unexpected file", [("attachment", "The image cannot be changed on update")]
        )

    changes = validate_or_raise("gallery_update", fields).changes()

    if "category" in changes:
        changes["category"] = changes["category"].value
    for key, value in changes.items():
        setattr(item, key, value)

    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Internal server error while updating image") from e

    db.refresh(item)
    admin_log.info(f"GALLERY IMAGE UPDATED: {item.id} by {admin.email}")
    return item


def delete_item(db: Session, attachments: AttachmentPipeline, admin: AdminContext, item_id: str):
    item = get_item(db, item_id)

    if not attachments.delete(item.image):
        logger.warning(f"Image of gallery item {item.id} could not be deleted; removing record anyway")

    db.delete(item)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise InternalError("Internal server error while deleting image") from e

    admin_log.info(f"GALLERY IMAGE DELETED: {item_id} by {admin.email}")
