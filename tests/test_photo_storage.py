import tempfile
import unittest
import uuid
from pathlib import Path
from unittest import mock

from app.services.photo_storage import PhotoStorage, PhotoUpload, generate_photo_filename


class PhotoStorageTest(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.storage = PhotoStorage(
            Path(self._tmp.name) / "images" / "products",
            allowed_extensions={".jpg", ".png"},
            max_bytes=8,
        )

    def tearDown(self):
        self._tmp.cleanup()

    def test_generated_names_keep_extension_and_differ(self):
        first = generate_photo_filename("Front View.JPG")
        second = generate_photo_filename("Front View.JPG")

        self.assertTrue(first.endswith(".jpg"))
        self.assertNotEqual(first, second)
        self.assertNotIn("Front", first)

    def test_generated_name_is_a_hyphenated_uuid(self):
        stem, _, extension = generate_photo_filename("photo.PNG").rpartition(".")

        self.assertEqual(extension, "png")
        self.assertEqual(str(uuid.UUID(stem)), stem)

    def test_save_creates_directory_and_writes_bytes(self):
        file_name = self.storage.save(PhotoUpload(content=b"abc", filename="a.png"))

        self.assertTrue(self.storage.exists(file_name))
        self.assertEqual(self.storage.path_for(file_name).read_bytes(), b"abc")

    def test_delete_missing_file_is_not_an_error(self):
        self.storage.ensure_dir()

        self.assertFalse(self.storage.delete("missing.png"))
        self.assertFalse(self.storage.delete(None))

    def test_delete_swallows_os_errors(self):
        file_name = self.storage.save(PhotoUpload(content=b"abc", filename="a.png"))

        with mock.patch.object(Path, "unlink", side_effect=PermissionError("locked")):
            self.assertFalse(self.storage.delete(file_name))
        self.assertTrue(self.storage.exists(file_name))

    def test_names_cannot_escape_the_directory(self):
        outside = Path(self._tmp.name) / "secret.png"
        outside.write_bytes(b"keep")

        self.storage.ensure_dir()
        self.storage.delete("../../secret.png")

        self.assertTrue(outside.exists())
        self.assertEqual(self.storage.path_for("../../secret.png").parent, self.storage.directory)

    def test_check_reports_rejected_uploads(self):
        self.assertEqual(self.storage.check(PhotoUpload(content=b"abc", filename="a.jpg")), {})
        self.assertIn("photo", self.storage.check(PhotoUpload(content=b"", filename="a.jpg")))
        self.assertIn("photo", self.storage.check(PhotoUpload(content=b"abc", filename="a.gif")))
        self.assertIn("photo", self.storage.check(PhotoUpload(content=b"123456789", filename="a.jpg")))

    def test_any_extension_when_unrestricted(self):
        storage = PhotoStorage(self._tmp.name)

        self.assertEqual(storage.check(PhotoUpload(content=b"abc", filename="scan")), {})


if __name__ == "__main__":
    unittest.main()
