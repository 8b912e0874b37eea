import unittest

from PIL import Image

from filmstock.film_lib.orientation import (
    display_upright,
    normalize_orientation,
    read_exif_orientation,
    tag_orientation,
)


class OrientationHelpersTests(unittest.TestCase):
    def test_normalize_orientation_filters_values(self) -> None:
        self.assertEqual(normalize_orientation("3"), 3)
        self.assertIsNone(normalize_orientation("not-int"))
        self.assertIsNone(normalize_orientation(42))
        self.assertIsNone(normalize_orientation(None))

    def test_tag_and_read(self) -> None:
        img = tag_orientation(Image.new("RGB", (2, 1)), 6)
        self.assertEqual(read_exif_orientation(img), 6)
        self.assertIn("exif", img.info)

    def test_upright_tag_is_removed(self) -> None:
        img = tag_orientation(Image.new("RGB", (2, 1)), 6)
        tag_orientation(img, 1)
        self.assertIsNone(read_exif_orientation(img))

    def test_untagged_image(self) -> None:
        self.assertIsNone(read_exif_orientation(Image.new("RGB", (2, 1))))

    def test_display_upright_applies_rotation(self) -> None:
        img = Image.new("RGB", (2, 1))
        img.putpixel((0, 0), (255, 0, 0))
        img.putpixel((1, 0), (0, 0, 255))
        rotated = display_upright(tag_orientation(img, 8))
        self.assertEqual(rotated.size, (1, 2))
        pixels = [rotated.getpixel((0, 0)), rotated.getpixel((0, 1))]
        self.assertCountEqual(pixels, [(255, 0, 0), (0, 0, 255)])


if __name__ == "__main__":
    unittest.main()
