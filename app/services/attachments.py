import io

from loguru import logger
from PIL import Image
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import Settings
from app.core.errors import AppError, InternalError, RejectedFileSize, RejectedFileType, StorageFailure
from app.utils.file_helpers import format_file_size
from app.utils.storage import IncomingFile, StorageBackend

storage_log = logger.bind(log_type="storage")


def inspect_image(data: bytes) -> dict:
    """Decode an image just enough to trust it; returns format and dimensions."""
    try:
        img = Image.open(io.BytesIO(data))
        info = {"format": (img.format or "").lower() or None, "width": img.width, "height": img.height}
        img.verify()
    except Exception:
        raise RejectedFileType("Invalid image file", [("attachment", "The uploaded image could not be read")])
    return info


class AttachmentPipeline:
    """
    Validates an uploaded file and hands it to the configured storage backend.

    Type and size are checked before the backend is touched, so a rejected
    file never produces a side effect. Deletion is best-effort: failures are
    logged and reported as ``False`` instead of raised.
    """

    def __init__(self, backend: StorageBackend, settings: Settings):
        self.backend = backend
        self.allowed_types = tuple(t.lower() for t in settings.allowed_file_types)
        self.max_size = settings.max_file_size

    @property
    def provider(self) -> str:
        return self.backend.provider

    def allowed_for(self, images_only: bool = False) -> tuple:
        if images_only:
            return tuple(t for t in self.allowed_types if t.startswith("image/"))
        return self.allowed_types

    def check_type(self, content_type: str | None, images_only: bool = False):
        allowed = self.allowed_for(images_only)
        if (content_type or "").lower() not in allowed:
            raise RejectedFileType(
                f"File type {content_type} is not allowed. Allowed types: {', '.join(allowed)}",
                [("attachment", "Unsupported file type")],
            )

    def check_size(self, size: int):
        if size > self.max_size:
            raise RejectedFileSize(
                "File too large",
                [("attachment", f"File size must be less than {format_file_size(self.max_size)}")],
            )

    def ingest(self, file: IncomingFile, folder: str, images_only: bool = False) -> dict:
        self.check_type(file.content_type, images_only)
        self.check_size(file.size)
        if file.size == 0:
            raise RejectedFileSize("Empty file", [("attachment", "The uploaded file is empty")])

        meta = {}
        if file.content_type.lower().startswith("image/"):
            meta = inspect_image(file.data)

        try:
            reference = self.backend.save(file, folder)
        except AppError:
            raise
        except Exception as e:
            storage_log.error(f"UPLOAD FAILED: {file.filename} -> {self.provider}: {e}")
            raise StorageFailure() from e

        for key, value in meta.items():
            if reference.get(key) is None:
                reference[key] = value

        storage_log.info(
            f"UPLOADED: {file.filename} ({format_file_size(file.size)}) -> {reference['url']}"
        )
        return reference

    def delete(self, reference: dict | None) -> bool:
        if not reference:
            return True

        try:
            deleted = self.backend.delete(reference)
        except Exception as e:
            storage_log.error(f"DELETE FAILED: {reference.get('url')} -> {e}")
            return False

        if deleted:
            storage_log.info(f"DELETED: {reference.get('url')}")
        else:
            storage_log.warning(f"DELETE NOT CONFIRMED: {reference.get('url')}")
        return deleted

    def exists(self, reference: dict) -> bool:
        return self.backend.exists(reference)


def commit_or_compensate(db, attachments: AttachmentPipeline, reference: dict | None, failure_message: str):
    """
    Commit the session. On failure roll back, delete the file this write just
    uploaded and re-raise (database errors as InternalError).
    """
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        if reference:
            attachments.delete(reference)
            storage_log.warning(f"COMPENSATED: removed {reference.get('url')} after failed commit")
        logger.error(f"{failure_message}: {e}")
        if isinstance(e, SQLAlchemyError):
            raise InternalError(failure_message) from e
        raise
