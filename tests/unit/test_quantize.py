import sys
import unittest
from pathlib import Path

from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from inkboard_renderer.quantize import (
    PATTERNS,
    build_test_pattern,
    pack_frame,
    quantize_for_eink,
    threshold,
    to_grayscale,
)


class QuantizeTests(unittest.TestCase):
    def test_grayscale_weights(self):
        img = Image.new("RGB", (1, 1), (255, 0, 0))
        self.assertEqual(to_grayscale(img).getpixel((0, 0)), 76)

    def test_threshold_boundary(self):
        img = Image.new("L", (3, 1))
        img.putdata([128, 129, 0])
        out = threshold(img)
        self.assertEqual(list(out.getdata()), [0, 255, 0])

    def test_one_bit_mode(self):
        img = build_test_pattern("h-gradient", width=64, height=8)
        out = quantize_for_eink(img, 1)
        self.assertEqual(out.mode, "1")
        self.assertEqual(out.size, (64, 8))

    def test_one_bit_is_idempotent(self):
        img = build_test_pattern("quadrants", width=40, height=20)
        once = quantize_for_eink(img, 1)
        twice = quantize_for_eink(once, 1)
        self.assertEqual(once.tobytes(), twice.tobytes())

    def test_four_bit_keeps_grayscale(self):
        img = build_test_pattern("v-gradient", width=16, height=32)
        out = quantize_for_eink(img, 4)
        self.assertEqual(out.mode, "L")
        self.assertEqual(out.tobytes(), to_grayscale(img).tobytes())

    def test_unsupported_depth(self):
        img = Image.new("RGB", (4, 4))
        with self.assertRaises(ValueError):
            quantize_for_eink(img, 2)
        with self.assertRaises(ValueError):
            pack_frame(img, 8)


class PackFrameTests(unittest.TestCase):
    def test_mono_frame_size(self):
        frame = pack_frame(Image.new("RGB", (800, 480), (255, 255, 255)), 1)
        self.assertEqual(frame.pixel_format, "MONO1_MSB")
        self.assertEqual(len(frame.bytes), 800 * 480 // 8)
        self.assertEqual(set(frame.bytes), {0xFF})

    def test_mono_bits_msb_first(self):
        img = Image.new("L", (8, 1), 0)
        img.putpixel((0, 0), 255)
        self.assertEqual(pack_frame(img, 1).bytes, bytes([0x80]))

    def test_gray4_frame_size(self):
        frame = pack_frame(Image.new("L", (800, 480), 0), 4)
        self.assertEqual(frame.pixel_format, "GRAY4_MSB")
        self.assertEqual(len(frame.bytes), 800 * 480 // 2)
        self.assertEqual(set(frame.bytes), {0x00})

    def test_odd_width_rows_are_padded(self):
        img = Image.new("L", (5, 2), 0)
        self.assertEqual(len(pack_frame(img, 4).bytes), 3 * 2)
        self.assertEqual(len(pack_frame(img, 1).bytes), 1 * 2)


class PatternTests(unittest.TestCase):
    def test_all_patterns_match_size(self):
        for name in PATTERNS:
            img = build_test_pattern(name, width=80, height=48)
            self.assertEqual(img.size, (80, 48), name)
            self.assertEqual(img.mode, "RGB", name)

    def test_checkerboard_corners(self):
        img = build_test_pattern("checkerboard", width=48, height=48)
        self.assertEqual(img.getpixel((0, 0)), (255, 255, 255))
        self.assertEqual(img.getpixel((24, 0)), (0, 0, 0))

    def test_unknown_pattern(self):
        with self.assertRaises(ValueError):
            build_test_pattern("plasma", width=8, height=8)


if __name__ == "__main__":
    unittest.main()
