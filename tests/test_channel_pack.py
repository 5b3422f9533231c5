import os

import numpy as np
from PIL import Image

from babylon_pbr_export.core.errors import ChannelPackError
from babylon_pbr_export.materials.channel_pack import (
    ChannelPackRequest,
    default_channel_value,
    merge_channels,
    pack,
)

from helpers import ExportTestBase, write_image, write_pixels

COLOR_ALPHA = ((0, 0), (0, 1), (0, 2), (1, 0))


class ChannelPackRequestTest(ExportTestBase):

    def test_sources_are_padded_to_four_slots(self):
        request = ChannelPackRequest(["a.png"], [0, 0, 0, 0], COLOR_ALPHA)
        self.assertEqual(request.slots, ["a.png", None, None, None])

    def test_invalid_requests(self):
        with self.assertRaises(ValueError):
            ChannelPackRequest(["a.png"] * 5, [0, 0, 0, 0], COLOR_ALPHA)
        with self.assertRaises(ValueError):
            ChannelPackRequest(["a.png"], [0, 0, 0], COLOR_ALPHA)
        with self.assertRaises(ValueError):
            ChannelPackRequest(["a.png"], [0, 0, 0, 0], ((0, 0), (0, 1), (0, 2), (0, 4)))

    def test_default_channel_value(self):
        self.assertEqual(default_channel_value(0.0), 0)
        self.assertEqual(default_channel_value(1.0), 255)
        self.assertEqual(default_channel_value(0.4), 102)
        self.assertEqual(default_channel_value(1.7), 255)


class MergeChannelsTest(ExportTestBase):

    def test_samples_configured_channels(self):
        color = write_image(self.path("color.png"), rgba=(10, 20, 30, 40))
        alpha = write_image(self.path("alpha.png"), rgba=(50, 60, 70, 80))
        request = ChannelPackRequest([color, alpha], [0, 0, 0, 0], COLOR_ALPHA)
        merged = merge_channels(request)
        self.assertEqual(merged.shape, (4, 4, 4))
        self.assertTrue(np.all(merged == np.array([10, 20, 30, 50], dtype=np.uint8)))

    def test_per_pixel_copy(self):
        pixels = np.zeros((2, 2, 4), dtype=np.uint8)
        pixels[0, 1] = (1, 2, 3, 255)
        pixels[1, 0] = (4, 5, 6, 255)
        source = write_pixels(self.path("gradient.png"), pixels)
        request = ChannelPackRequest([None, source], [0.0, 0.0, 0.0, 1.0],
                                     ((1, 2), (1, 1), (1, 0), (0, 0)))
        merged = merge_channels(request)
        self.assertEqual(tuple(merged[0, 1]), (3, 2, 1, 255))
        self.assertEqual(tuple(merged[1, 0]), (6, 5, 4, 255))
        self.assertEqual(tuple(merged[0, 0]), (0, 0, 0, 255))

    def test_default_substitution_for_missing_source(self):
        color = write_image(self.path("color.png"), rgba=(10, 20, 30, 255))
        request = ChannelPackRequest([color, None], [0.0, 0.0, 0.0, 0.4], COLOR_ALPHA)
        merged = merge_channels(request)
        self.assertTrue(np.all(merged[..., 3] == 102))

    def test_dimension_mismatch_fails(self):
        small = write_image(self.path("small.png"), size=4)
        large = write_image(self.path("large.png"), size=8)
        with self.assertRaises(ChannelPackError):
            merge_channels(ChannelPackRequest([small, large], [0, 0, 0, 0], COLOR_ALPHA))

    def test_non_square_source_fails(self):
        wide = write_image(self.path("wide.png"), size=8, height=4)
        with self.assertRaises(ChannelPackError):
            merge_channels(ChannelPackRequest([wide, None], [0, 0, 0, 0], COLOR_ALPHA))

    def test_missing_file_fails(self):
        with self.assertRaises(ChannelPackError):
            merge_channels(ChannelPackRequest([self.path("nope.png")], [0, 0, 0, 0], COLOR_ALPHA))

    def test_undecodable_file_fails(self):
        path = self.path("broken.png")
        with open(path, "wb") as f:
            f.write(b"not an image")
        with self.assertRaises(ChannelPackError):
            merge_channels(ChannelPackRequest([path], [0, 0, 0, 0], COLOR_ALPHA))

    def test_without_any_source_fails(self):
        with self.assertRaises(ChannelPackError):
            merge_channels(ChannelPackRequest([None, None], [0, 0, 0, 0], COLOR_ALPHA))


class PackTest(ExportTestBase):

    def test_writes_png_destination(self):
        color = write_image(self.path("color.png"), rgba=(10, 20, 30, 255))
        destination = self.path("color_RGBA.png")
        request = ChannelPackRequest([color, None], [0, 0, 0, 0.5], COLOR_ALPHA, destination)
        pixels = pack(request, 100, self.log)
        self.assertIsNotNone(pixels)
        with Image.open(destination) as img:
            self.assertEqual(img.mode, "RGBA")
            self.assertEqual(img.getpixel((0, 0)), (10, 20, 30, 128))

    def test_jpeg_destination_is_rgb(self):
        color = write_image(self.path("color.png"), rgba=(200, 200, 200, 255))
        destination = self.path("packed.jpg")
        request = ChannelPackRequest([color], [0, 0, 0, 1.0], COLOR_ALPHA, destination)
        self.assertIsNotNone(pack(request, 90, self.log))
        with Image.open(destination) as img:
            self.assertEqual(img.mode, "RGB")

    def test_failure_is_reported_and_nothing_written(self):
        small = write_image(self.path("small.png"), size=4)
        large = write_image(self.path("large.png"), size=8)
        destination = self.path("merged.png")
        request = ChannelPackRequest([small, large], [0, 0, 0, 0], COLOR_ALPHA, destination)
        self.assertIsNone(pack(request, 100, self.log))
        self.assertFalse(os.path.exists(destination))
        self.assertEqual(self.log.error_count, 1)
        self.assertLogged("ERROR", "not equal")

    def test_output_is_deterministic(self):
        color = write_image(self.path("color.png"), rgba=(12, 34, 56, 255))
        alpha = write_image(self.path("alpha.png"), rgba=(78, 0, 0, 255))
        outputs = []
        for name in ("first.png", "second.png"):
            request = ChannelPackRequest([color, alpha], [0, 0, 0, 0], COLOR_ALPHA, self.path(name))
            pack(request, 100, self.log)
            with open(self.path(name), "rb") as f:
                outputs.append(f.read())
        self.assertEqual(outputs[0], outputs[1])

    def test_oversized_image_is_reported(self):
        self.addCleanup(setattr, Image, "MAX_IMAGE_PIXELS", Image.MAX_IMAGE_PIXELS)
        source = write_image(self.path("huge.png"), size=8)
        Image.MAX_IMAGE_PIXELS = 16
        destination = self.path("huge_ORM.jpg")
        request = ChannelPackRequest([source], [1, 1, 1, 1], COLOR_ALPHA, destination)
        self.assertIsNone(pack(request, 100, self.log))
        self.assertFalse(os.path.exists(destination))
        self.assertLogged("ERROR", "Failed to load")
