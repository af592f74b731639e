import io
import os
import shutil
import tempfile
import unittest

from fastapi.testclient import TestClient
from loguru import logger
from PIL import Image

from app.core.config import Settings
from app.core.dependencies import AdminContext
from app.core.jwt import admin_token_claims, create_access_token
from app.main import create_app
from app.schemas.admin import AdminCreate
from app.services.admins import create_admin
from app.utils.storage import LocalStorage

PASSWORD = "Secret@123"
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< >>\n%%EOF\n"


def png_bytes(size=(8, 6), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_settings(tmp_dir: str, **overrides) -> Settings:
    settings = Settings(
        environment="test",
        database_url="sqlite://",
        jwt_secret="test-secret",
        upload_dir=os.path.join(tmp_dir, "uploads"),
        log_dir=os.path.join(tmp_dir, "logs"),
    )
    return settings.with_overrides(**overrides)


def stored_files(root: str) -> list[str]:
    found = []
    for dirpath, _, filenames in os.walk(root):
        found.extend(os.path.join(dirpath, name) for name in filenames)
    return found


class ApiTestCase(unittest.TestCase):
    """Fresh app, in-memory database and upload directory per test."""

    def make_storage(self, settings: Settings):
        return LocalStorage(settings.upload_dir)

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.settings = make_settings(self.tmp_dir)
        self.storage = self.make_storage(self.settings)
        self.app = create_app(self.settings, storage=self.storage)
        self.client = TestClient(self.app)

        self.admin = self.add_admin("principal@school.org", role="super_admin", name="Principal")
        self.auth = self.auth_headers(self.admin)

    def tearDown(self):
        self.client.close()
        self.app.state.engine.dispose()
        logger.remove()
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    # ---------------- helpers ----------------
    def session(self):
        return self.app.state.session_factory()

    def add_admin(self, email, role="admin", name="Test Admin", password=PASSWORD):
        db = self.session()
        try:
            return create_admin(
                db, AdminCreate(name=name, email=email, password=password, role=role)
            )
        finally:
            db.close()

    def auth_headers(self, admin, **token_kwargs) -> dict:
        token = create_access_token(admin_token_claims(admin), self.settings, **token_kwargs)
        return {"Authorization": f"Bearer {token}"}

    def context(self, admin) -> AdminContext:
        return AdminContext(id=admin.id, email=admin.email, name=admin.name, role=admin.role)

    @property
    def pipeline(self):
        return self.app.state.attachments

    def uploaded(self) -> list[str]:
        return stored_files(self.settings.upload_dir)


class FlakyStorage(LocalStorage):
    """Local storage whose delete always blows up."""

    def delete(self, reference):
        raise OSError("device busy")
