import os
import unittest
from unittest import mock

from sqlalchemy.exc import OperationalError

from app.core.errors import InternalError
from app.services import gallery as gallery_service
from app.utils.storage import IncomingFile
from tests.support import PDF_BYTES, ApiTestCase, FlakyStorage, png_bytes


class GalleryApiTests(ApiTestCase):
    def upload(self, fields=None, files=None, headers=None):
        fields = fields or {"title": "Annual day", "category": "events"}
        if files is None:
            files = {"attachment": ("stage.png", png_bytes((12, 9)), "image/png")}
        return self.client.post(
            "/api/gallery", data=fields, files=files, headers=headers or self.auth
        )

    def test_upload_image(self):
        res = self.upload()
        self.assertEqual(res.status_code, 201)

        item = res.json()["data"]["item"]
        self.assertEqual(item["title"], "Annual day")
        self.assertEqual(item["category"], "events")
        self.assertEqual(item["uploadedBy"]["email"], "principal@school.org")
        self.assertEqual((item["image"]["width"], item["image"]["height"]), (12, 9))
        self.assertTrue(item["image"]["path"].startswith("gallery/stage-"))
        self.assertEqual(len(self.uploaded()), 1)

    def test_image_is_required(self):
        res = self.client.post(
            "/api/gallery", data={"title": "Annual day", "category": "events"}, headers=self.auth
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["message"], "File required")

    def test_json_body_cannot_carry_an_image(self):
        res = self.client.post(
            "/api/gallery", json={"title": "Annual day", "category": "events"}, headers=self.auth
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["errors"], [{"field": "attachment", "message": "Please upload a file"}])

    def test_pdf_is_not_an_image(self):
        res = self.upload(files={"attachment": ("doc.pdf", PDF_BYTES, "application/pdf")})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(self.uploaded(), [])

    def test_unknown_category(self):
        res = self.upload(fields={"title": "Party", "category": "parties"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["errors"][0]["field"], "category")
        self.assertEqual(self.uploaded(), [])

    def test_requires_authentication(self):
        res = self.client.post(
            "/api/gallery",
            data={"title": "Annual day", "category": "events"},
            files={"attachment": ("stage.png", png_bytes(), "image/png")},
        )
        self.assertEqual(res.status_code, 401)
        self.assertEqual(self.uploaded(), [])

    def test_list_filters_by_category(self):
        self.upload(fields={"title": "Relay", "category": "sports"})
        self.upload(fields={"title": "Library", "category": "campus"})
        self.upload(fields={"title": "Football", "category": "sports"})

        everything = self.client.get("/api/gallery").json()["data"]["items"]
        self.assertEqual(len(everything), 3)

        sports = self.client.get("/api/gallery", params={"category": "sports"}).json()["data"]["items"]
        self.assertEqual(sorted(i["title"] for i in sports), ["Football", "Relay"])

        res = self.client.get("/api/gallery", params={"category": "parties"})
        self.assertEqual(res.status_code, 400)

    def test_get_item(self):
        item_id = self.upload().json()["data"]["item"]["id"]
        res = self.client.get(f"/api/gallery/{item_id}")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["item"]["id"], item_id)

        missing = self.client.get(f"/api/gallery/{'c' * 32}")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["message"], "Image not found")

    def test_partial_update(self):
        item = self.upload().json()["data"]["item"]

        res = self.client.put(
            f"/api/gallery/{item['id']}", json={"category": "cultural"}, headers=self.auth
        )
        self.assertEqual(res.status_code, 200)
        updated = res.json()["data"]["item"]
        self.assertEqual(updated["category"], "cultural")
        self.assertEqual(updated["title"], "Annual day")
        self.assertEqual(updated["image"], item["image"])

    def test_update_rejects_bad_category(self):
        item = self.upload().json()["data"]["item"]
        res = self.client.put(
            f"/api/gallery/{item['id']}", json={"category": "nope"}, headers=self.auth
        )
        self.assertEqual(res.status_code, 400)

    def test_update_refuses_a_new_image(self):
        item = self.upload().json()["data"]["item"]

        res = self.client.put(
            f"/api/gallery/{item['id']}",
            data={"title": "Renamed"},
            files={"attachment": ("other.png", png_bytes((4, 4)), "image/png")},
            headers=self.auth,
        )
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()["message"], "Unexpected file")

        stored = self.client.get(f"/api/gallery/{item['id']}").json()["data"]["item"]
        self.assertEqual(stored["title"], "Annual day")
        self.assertEqual(stored["image"], item["image"])
        self.assertEqual(len(self.uploaded()), 1)

    def test_delete_removes_image(self):
        item = self.upload().json()["data"]["item"]
        path = os.path.join(self.settings.upload_dir, item["image"]["path"])
        self.assertTrue(os.path.exists(path))

        res = self.client.delete(f"/api/gallery/{item['id']}", headers=self.auth)
        self.assertEqual(res.status_code, 200)
        self.assertFalse(os.path.exists(path))
        self.assertEqual(self.client.get(f"/api/gallery/{item['id']}").status_code, 404)

    def test_delete_malformed_id(self):
        res = self.client.delete("/api/gallery/xyz", headers=self.auth)
        self.assertEqual(res.status_code, 400)


class GalleryStorageDeleteFailureTests(ApiTestCase):
    def make_storage(self, settings):
        return FlakyStorage(settings.upload_dir)

    def test_item_is_deleted_even_if_image_delete_fails(self):
        res = self.client.post(
            "/api/gallery",
            data={"title": "Science fair", "category": "academic"},
            files={"attachment": ("fair.png", png_bytes(), "image/png")},
            headers=self.auth,
        )
        item_id = res.json()["data"]["item"]["id"]

        res = self.client.delete(f"/api/gallery/{item_id}", headers=self.auth)
        self.assertEqual(res.status_code, 200)
        self.assertEqual(self.client.get(f"/api/gallery/{item_id}").status_code, 404)
        self.assertEqual(len(self.uploaded()), 1)


class GalleryCompensationTests(ApiTestCase):
    def test_failed_commit_removes_image(self):
        db = self.session()
        failure = OperationalError("COMMIT", {}, Exception("database is locked"))

        with mock.patch.object(db, "commit", side_effect=failure):
            with self.assertRaises(InternalError):
                gallery_service.create_item(
                    db,
                    self.pipeline,
                    self.context(self.admin),
                    {"title": "Choir", "category": "cultural"},
                    IncomingFile("choir.png", "image/png", png_bytes()),
                )
        db.close()

        self.assertEqual(self.uploaded(), [])
        self.assertEqual(self.client.get("/api/gallery").json()["data"]["items"], [])


if __name__ == "__main__":
    unittest.main()
