"""
Storage backends for uploaded attachments.

Both backends expose the same three calls; which one is used is decided once
at startup from ``STORAGE_BACKEND``.
"""
import os
from dataclasses import dataclass
from typing import Protocol

import cloudinary.uploader

from app.core.config import Settings
from app.models.enums import StorageProvider
from app.utils import cloudinary_utils
from app.utils.file_helpers import generate_public_id, generate_unique_filename


@dataclass
class IncomingFile:
    """A single uploaded file, fully buffered in memory."""

    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


class StorageBackend(Protocol):
    provider: str

    def save(self, file: IncomingFile, folder: str) -> dict:
        ...

    def delete(self, reference: dict) -> bool:
        ...

    def exists(self, reference: dict) -> bool:
        ...


class LocalStorage:
    """Writes files below a local upload root that is served at /uploads."""

    provider = StorageProvider.LOCAL.value

    def __init__(self, root: str, url_prefix: str = "/uploads"):
        self.root = os.path.abspath(root)
        os.makedirs(self.root, exist_ok=True)
        self.url_prefix = url_prefix.rstrip("/")

    def _resolve(self, relative_path: str) -> str:
        full = os.path.abspath(os.path.join(self.root, relative_path))
        if os.path.commonpath([full, self.root]) != self.root:
            raise ValueError(f"Path escapes upload root: {relative_path}")
        return full

    def save(self, file: IncomingFile, folder: str) -> dict:
        directory = os.path.join(self.root, folder)
        os.makedirs(directory, exist_ok=True)

        filename = generate_unique_filename(file.filename)
        relative_path = f"{folder}/{filename}"
        full_path = self._resolve(relative_path)

        try:
            with open(full_path, "xb") as fh:
                fh.write(file.data)
        except BaseException:
            # never leave a half-written file behind
            if os.path.exists(full_path):
                os.remove(full_path)
            raise

        return {
            "provider": self.provider,
            "filename": filename,
            "original_name": file.filename,
            "size": file.size,
            "mime_type": file.content_type,
            "path": relative_path,
            "url": f"{self.url_prefix}/{relative_path}",
        }

    def delete(self, reference: dict) -> bool:
        full_path = self._resolve(reference["path"])
        if os.path.exists(full_path):
            os.remove(full_path)
        return True

    def exists(self, reference: dict) -> bool:
        return os.path.isfile(self._resolve(reference["path"]))


class CloudinaryStorage:
    """Pushes files to Cloudinary under <base_folder>/<folder>."""

    provider = StorageProvider.CLOUDINARY.value

    def __init__(self, base_folder: str, timeout: int, uploader=cloudinary.uploader):
        self.base_folder = base_folder.strip("/")
        self.timeout = timeout
        self.uploader = uploader

    def save(self, file: IncomingFile, folder: str) -> dict:
        public_id = generate_public_id(folder.rstrip("s") or "file")
        result = cloudinary_utils.upload_file(
            file.data,
            folder=f"{self.base_folder}/{folder}",
            public_id=public_id,
            timeout=self.timeout,
            uploader=self.uploader,
        )

        return {
            "provider": self.provider,
            "filename": file.filename,
            "original_name": file.filename,
            "size": file.size,
            "mime_type": file.content_type,
            "url": result["url"],
            "public_id": result["public_id"],
            "format": result["format"],
            "resource_type": result["resource_type"],
            "width": result["width"],
            "height": result["height"],
        }

    def delete(self, reference: dict) -> bool:
        return cloudinary_utils.delete_file(
            reference["public_id"],
            resource_type=reference.get("resource_type"),
            uploader=self.uploader,
        )

    def exists(self, reference: dict) -> bool:
        # Cloudinary's admin API is not used; a reference with an id is assumed live
        return bool(reference.get("public_id"))


def build_storage(settings: Settings) -> StorageBackend:
    if settings.storage_backend == StorageProvider.CLOUDINARY.value:
        cloudinary_utils.configure_cloudinary(settings)
        return CloudinaryStorage(settings.cloudinary_folder, settings.upload_timeout)

    return LocalStorage(settings.upload_dir)
