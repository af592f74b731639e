import re
import shutil
import tempfile
import unittest

from app.core.errors import RejectedFileSize, RejectedFileType, StorageFailure
from app.services.attachments import AttachmentPipeline
from app.utils.file_helpers import (
    format_file_size,
    generate_unique_filename,
    mime_category,
    sanitize_filename,
)
from app.utils.storage import CloudinaryStorage, IncomingFile, LocalStorage
from tests.support import PDF_BYTES, FlakyStorage, make_settings, png_bytes, stored_files


class BrokenStorage(LocalStorage):
    def save(self, file, folder):
        raise ConnectionError("connection reset")


class FakeUploader:
    """Records calls the way cloudinary.uploader would receive them."""

    def __init__(self, destroy_result="ok"):
        self.uploads = []
        self.destroyed = []
        self.destroy_result = destroy_result

    def upload(self, data, **options):
        self.uploads.append(options)
        return {
            "secure_url": f"https://res.cloudinary.com/demo/{options['folder']}/{options['public_id']}.png",
            "public_id": f"{options['folder']}/{options['public_id']}",
            "format": "png",
            "resource_type": "image",
            "width": 8,
            "height": 6,
            "bytes": len(data),
        }

    def destroy(self, public_id, **options):
        self.destroyed.append((public_id, options))
        return {"result": self.destroy_result}


class LocalPipelineTests(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.settings = make_settings(self.tmp_dir, max_file_size=1024)
        self.storage = LocalStorage(self.settings.upload_dir)
        self.pipeline = AttachmentPipeline(self.storage, self.settings)

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def test_pdf_is_stored_with_reference(self):
        ref = self.pipeline.ingest(
            IncomingFile("Term Dates (2024).pdf", "application/pdf", PDF_BYTES), "notices"
        )

        self.assertEqual(ref["provider"], "local")
        self.assertEqual(ref["original_name"], "Term Dates (2024).pdf")
        self.assertEqual(ref["size"], len(PDF_BYTES))
        self.assertEqual(ref["mime_type"], "application/pdf")
        self.assertTrue(ref["path"].startswith("notices/Term_Dates_2024-"))
        self.assertEqual(ref["url"], f"/uploads/{ref['path']}")
        self.assertTrue(self.pipeline.exists(ref))

    def test_image_dimensions_are_recorded(self):
        ref = self.pipeline.ingest(IncomingFile("a.png", "image/png", png_bytes((8, 6))), "gallery")
        self.assertEqual((ref["width"], ref["height"], ref["format"]), (8, 6, "png"))

    def test_disallowed_type_writes_nothing(self):
        with self.assertRaises(RejectedFileType) as ctx:
            self.pipeline.ingest(IncomingFile("run.exe", "application/x-msdownload", b"MZ"), "notices")
        self.assertIn("application/x-msdownload is not allowed", ctx.exception.message)
        self.assertEqual(stored_files(self.settings.upload_dir), [])

    def test_oversized_file_writes_nothing(self):
        with self.assertRaises(RejectedFileSize):
            self.pipeline.ingest(IncomingFile("big.pdf", "application/pdf", b"x" * 1025), "notices")
        self.assertEqual(stored_files(self.settings.upload_dir), [])

    def test_empty_file_is_rejected(self):
        with self.assertRaises(RejectedFileSize):
            self.pipeline.ingest(IncomingFile("empty.pdf", "application/pdf", b""), "notices")

    def test_corrupt_image_is_rejected(self):
        with self.assertRaises(RejectedFileType) as ctx:
            self.pipeline.ingest(IncomingFile("fake.png", "image/png", b"not really a png"), "gallery")
        self.assertEqual(ctx.exception.message, "Invalid image file")
        self.assertEqual(stored_files(self.settings.upload_dir), [])

    def test_images_only_rejects_pdf(self):
        with self.assertRaises(RejectedFileType):
            self.pipeline.ingest(
                IncomingFile("doc.pdf", "application/pdf", PDF_BYTES), "gallery", images_only=True
            )

    def test_delete_removes_file(self):
        ref = self.pipeline.ingest(IncomingFile("doc.pdf", "application/pdf", PDF_BYTES), "notices")
        self.assertTrue(self.pipeline.delete(ref))
        self.assertFalse(self.pipeline.exists(ref))
        # already gone counts as deleted
        self.assertTrue(self.pipeline.delete(ref))

    def test_delete_failure_is_reported_not_raised(self):
        pipeline = AttachmentPipeline(FlakyStorage(self.settings.upload_dir), self.settings)
        ref = pipeline.ingest(IncomingFile("doc.pdf", "application/pdf", PDF_BYTES), "notices")
        self.assertFalse(pipeline.delete(ref))

    def test_backend_error_becomes_storage_failure(self):
        pipeline = AttachmentPipeline(BrokenStorage(self.settings.upload_dir), self.settings)
        with self.assertRaises(StorageFailure) as ctx:
            pipeline.ingest(IncomingFile("doc.pdf", "application/pdf", PDF_BYTES), "notices")
        self.assertEqual(ctx.exception.status_code, 500)

    def test_reference_cannot_escape_upload_root(self):
        with self.assertRaises(ValueError):
            self.storage.delete({"path": "../../etc/passwd"})


class CloudinaryStorageTests(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.settings = make_settings(self.tmp_dir, storage_backend="cloudinary")
        self.uploader = FakeUploader()
        self.storage = CloudinaryStorage("school-website", timeout=30, uploader=self.uploader)
        self.pipeline = AttachmentPipeline(self.storage, self.settings)

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def test_upload_passes_folder_and_timeout(self):
        ref = self.pipeline.ingest(IncomingFile("team.png", "image/png", png_bytes()), "gallery")

        options = self.uploader.uploads[0]
        self.assertEqual(options["folder"], "school-website/gallery")
        self.assertEqual(options["timeout"], 30)
        self.assertEqual(options["resource_type"], "auto")
        self.assertTrue(re.match(r"^gallery_\d+_[a-z0-9]{6}$", options["public_id"]))

        self.assertEqual(ref["provider"], "cloudinary")
        self.assertTrue(ref["url"].startswith("https://"))
        self.assertEqual(ref["public_id"], f"school-website/gallery/{options['public_id']}")
        self.assertEqual(stored_files(self.settings.upload_dir), [])

    def test_missing_url_is_a_storage_failure(self):
        self.uploader.upload = lambda data, **options: {}
        with self.assertRaises(StorageFailure):
            self.pipeline.ingest(IncomingFile("team.png", "image/png", png_bytes()), "gallery")

    def test_delete_uses_public_id_and_resource_type(self):
        ref = self.pipeline.ingest(IncomingFile("team.png", "image/png", png_bytes()), "gallery")
        self.assertTrue(self.pipeline.delete(ref))

        public_id, options = self.uploader.destroyed[0]
        self.assertEqual(public_id, ref["public_id"])
        self.assertEqual(options["resource_type"], "image")
        self.assertTrue(options["invalidate"])

    def test_not_found_counts_as_deleted(self):
        self.uploader.destroy_result = "not found"
        self.assertTrue(self.pipeline.delete({"public_id": "gone", "url": "https://x"}))

    def test_unconfirmed_delete(self):
        self.uploader.destroy_result = "error"
        self.assertFalse(self.pipeline.delete({"public_id": "stuck", "url": "https://x"}))


class FileHelperTests(unittest.TestCase):
    def test_sanitize_filename(self):
        self.assertEqual(sanitize_filename("my  file (final)!.pdf"), "my_file_final_.pdf")

    def test_unique_filename_shape(self):
        name = generate_unique_filename("Annual Report.PDF")
        self.assertTrue(re.match(r"^Annual_Report-\d{13}-[a-z0-9]{6}\.pdf$", name), name)
        self.assertNotEqual(name, generate_unique_filename("Annual Report.PDF"))

    def test_format_file_size(self):
        self.assertEqual(format_file_size(0), "0 Bytes")
        self.assertEqual(format_file_size(1536), "1.5 KB")
        self.assertEqual(format_file_size(5 * 1024 * 1024), "5 MB")

    def test_mime_category(self):
        self.assertEqual(mime_category("image/png"), "image")
        self.assertEqual(mime_category("application/pdf"), "pdf")
        self.assertEqual(mime_category("application/msword"), "document")
        self.assertIsNone(mime_category(None))


if __name__ == "__main__":
    unittest.main()
