"""Unit tests for ImageStore."""
from __future__ import annotations

import io
import re
import tempfile
import unittest
from pathlib import Path

from PIL import Image

from filmstock.film_lib.errors import StorageWriteFailed
from filmstock.film_lib.imaging import encode_jpeg
from filmstock.film_lib.orientation import read_exif_orientation, tag_orientation
from filmstock.film_lib.store import ImageStore, is_safe_component


def gradient_image(width: int = 64, height: int = 48) -> Image.Image:
    img = Image.new("RGB", (width, height))
    for x in range(width):
        for y in range(height):
            img.putpixel((x, y), (x * 4 % 256, y * 5 % 256, (x + y) % 256))
    return img


class ImageStoreTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        root = Path(self.tmpdir.name)
        self.primary = root / "UserImages"
        self.shared = root / "shared" / "UserImages"
        self.store = ImageStore(self.primary, self.shared)

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def test_save_generates_slug_and_suffix(self) -> None:
        identifier = self.store.save(gradient_image(), "Kodak", "Portra 400 (NC)")
        self.assertRegex(identifier, re.compile(r"^portra400nc_[0-9a-f]{8}$"))
        other = self.store.save(gradient_image(), "Kodak", "Portra 400 (NC)")
        self.assertNotEqual(identifier, other)

    def test_save_writes_primary_and_identical_mirror(self) -> None:
        identifier = self.store.save(gradient_image(), "Kodak", "Portra 400")
        primary = self.primary / "Kodak" / f"{identifier}.jpg"
        mirror = self.shared / "Kodak" / f"{identifier}.jpg"
        self.assertTrue(primary.is_file())
        self.assertEqual(primary.read_bytes(), mirror.read_bytes())
        with Image.open(primary) as img:
            self.assertEqual(img.format, "JPEG")

    def test_round_trip_pixels(self) -> None:
        source = gradient_image()
        identifier = self.store.save(source, "Ilford", "HP5")
        loaded = self.store.load(identifier, "Ilford")
        self.assertIsNotNone(loaded)
        self.assertEqual(loaded.size, source.size)
        with Image.open(io.BytesIO(encode_jpeg(source))) as expected:
            self.assertEqual(loaded.tobytes(), expected.convert("RGB").tobytes())

    def test_save_keeps_orientation_tag(self) -> None:
        source = tag_orientation(gradient_image(), 6)
        identifier = self.store.save(source, "Ilford", "HP5")
        self.assertEqual(read_exif_orientation(self.store.load(identifier, "Ilford")), 6)

    def test_save_converts_alpha_images(self) -> None:
        identifier = self.store.save(Image.new("RGBA", (10, 10), (1, 2, 3, 128)), "Kodak", "Gold")
        self.assertEqual(self.store.load(identifier, "Kodak").mode, "RGB")

    def test_load_reads_primary_only(self) -> None:
        identifier = self.store.save(gradient_image(), "Kodak", "Gold 200")
        self.store.path_for(identifier, "Kodak").unlink()
        self.assertIsNone(self.store.load(identifier, "Kodak"))

    def test_load_missing(self) -> None:
        self.assertIsNone(self.store.load("nothing_00000000", "Kodak"))

    def test_delete_removes_both_copies_and_empty_dirs(self) -> None:
        identifier = self.store.save(gradient_image(), "Kodak", "Gold 200")
        self.assertTrue(self.store.delete(identifier, "Kodak"))
        self.assertIsNone(self.store.load(identifier, "Kodak"))
        self.assertFalse((self.primary / "Kodak").exists())
        self.assertFalse((self.shared / "Kodak").exists())

    def test_delete_keeps_directory_with_other_images(self) -> None:
        first = self.store.save(gradient_image(), "Kodak", "Gold 200")
        second = self.store.save(gradient_image(), "Kodak", "Ektar 100")
        self.store.delete(first, "Kodak")
        self.assertTrue((self.primary / "Kodak").is_dir())
        self.assertTrue((self.shared / "Kodak").is_dir())
        self.assertIsNotNone(self.store.load(second, "Kodak"))

    def test_delete_is_idempotent(self) -> None:
        identifier = self.store.save(gradient_image(), "Kodak", "Gold 200")
        self.assertTrue(self.store.delete(identifier, "Kodak"))
        self.assertFalse(self.store.delete(identifier, "Kodak"))

    def test_list_all_sorted_by_manufacturer_then_identifier(self) -> None:
        b_id = self.store.save(gradient_image(), "B", "Film")
        a_second = self.store.save(gradient_image(), "A", "Zeta")
        a_first = self.store.save(gradient_image(), "A", "Alpha")
        listed = [(item.manufacturer, item.identifier) for item in self.store.list_all()]
        self.assertEqual(listed, [("A", a_first), ("A", a_second), ("B", b_id)])

    def test_list_all_filters_extensions_case_insensitively(self) -> None:
        folder = self.primary / "Kodak"
        folder.mkdir(parents=True)
        gradient_image().save(folder / "upper.JPEG", format="JPEG")
        gradient_image().save(folder / "art.png", format="PNG")
        (folder / "notes.txt").write_text("x", encoding="utf-8")
        listed = list(self.store.list_all())
        self.assertEqual([item.identifier for item in listed], ["upper"])
        self.assertEqual(listed[0].open().size, (64, 48))

    def test_list_all_empty_store(self) -> None:
        self.assertEqual(list(ImageStore(self.primary / "missing").list_all()), [])


class ImageStoreFailureTests(unittest.TestCase):
    def setUp(self) -> None:
        self.tmpdir = tempfile.TemporaryDirectory()
        self.root = Path(self.tmpdir.name)
        self.blocker = self.root / "blocker"
        self.blocker.write_text("not a directory", encoding="utf-8")

    def tearDown(self) -> None:
        self.tmpdir.cleanup()

    def test_mirror_failure_is_swallowed(self) -> None:
        store = ImageStore(self.root / "UserImages", self.blocker)
        identifier = store.save(gradient_image(), "Kodak", "Gold")
        self.assertIsNotNone(store.load(identifier, "Kodak"))
        self.assertTrue(store.delete(identifier, "Kodak"))

    def test_primary_failure_raises(self) -> None:
        store = ImageStore(self.blocker)
        source = gradient_image()
        with self.assertRaises(StorageWriteFailed):
            store.save(source, "Kodak", "Gold")
        # Caller's image is still usable
        self.assertEqual(source.size, (64, 48))

    def test_names_outside_the_store_are_rejected(self) -> None:
        store = ImageStore(self.root / "store" / "UserImages")
        outside = self.root / "x.jpg"
        gradient_image().save(outside, format="JPEG")
        self.assertIsNone(store.load("../../x", "Kodak"))
        self.assertFalse(store.exists("x", ".."))
        self.assertFalse(store.delete("../../x", "Kodak"))
        self.assertTrue(outside.is_file())
        with self.assertRaises(ValueError):
            store.path_for("x", "a/b")
        with self.assertRaises(StorageWriteFailed):
            store.save(gradient_image(), "..", "Gold")
        self.assertFalse((self.root / "store").exists())

    def test_is_safe_component(self) -> None:
        self.assertTrue(is_safe_component("Kodak"))
        self.assertTrue(is_safe_component("portra400_0a1b2c3d"))
        for value in ("", ".", "..", "a/b", "a\\b"):
            self.assertFalse(is_safe_component(value), value)

    def test_no_shared_root(self) -> None:
        store = ImageStore(self.root / "UserImages")
        identifier = store.save(gradient_image(), "Kodak", "Gold")
        self.assertIsNone(store.mirror_path_for(identifier, "Kodak"))
        self.assertTrue(store.delete(identifier, "Kodak"))


if __name__ == "__main__":
    unittest.main()
