import sys
import tempfile
import unittest
from pathlib import Path

from PIL import Image

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

from inkboard_renderer.models import LineElement, RectElement, TextElement
from inkboard_renderer.primitives import RasterBackend, bresenham_points, create_backend, encode_image
from inkboard_renderer.vector import VectorBackend

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)


class BresenhamTests(unittest.TestCase):
    def test_shallow_line(self):
        self.assertEqual(
            list(bresenham_points(0, 0, 5, 2)),
            [(0, 0), (1, 0), (2, 1), (3, 1), (4, 2), (5, 2)],
        )

    def test_vertical_line(self):
        self.assertEqual(list(bresenham_points(0, 0, 0, 3)), [(0, 0), (0, 1), (0, 2), (0, 3)])

    def test_steep_line(self):
        self.assertEqual(
            list(bresenham_points(0, 0, 2, 5)),
            [(0, 0), (0, 1), (1, 2), (1, 3), (2, 4), (2, 5)],
        )

    def test_reversed_line(self):
        self.assertEqual(
            list(bresenham_points(5, 2, 0, 0)),
            [(5, 2), (4, 2), (3, 1), (2, 1), (1, 0), (0, 0)],
        )

    def test_single_point(self):
        self.assertEqual(list(bresenham_points(3, 3, 3, 3)), [(3, 3)])


class RasterBackendTests(unittest.TestCase):
    def setUp(self):
        self.backend = RasterBackend()
        self.canvas = self.backend.create_canvas(64, 48)

    def pixel(self, x, y):
        return self.canvas.image.getpixel((x, y))

    def test_canvas_starts_white(self):
        self.assertEqual(self.canvas.image.size, (64, 48))
        self.assertEqual(self.pixel(0, 0), WHITE)

    def test_rect_outline(self):
        self.backend.draw_rect(self.canvas, 10, 10, 20, 10, fill=None, stroke="#000", stroke_width=1)
        self.assertEqual(self.pixel(10, 10), BLACK)
        self.assertEqual(self.pixel(29, 19), BLACK)
        self.assertEqual(self.pixel(29, 10), BLACK)
        self.assertEqual(self.pixel(15, 15), WHITE)
        self.assertEqual(self.pixel(30, 10), WHITE)

    def test_thick_outline_stays_inside(self):
        self.backend.draw_rect(self.canvas, 10, 10, 20, 10, fill=None, stroke="#000", stroke_width=2)
        self.assertEqual(self.pixel(11, 11), BLACK)
        self.assertEqual(self.pixel(12, 12), WHITE)
        self.assertEqual(self.pixel(9, 10), WHITE)

    def test_rect_fill(self):
        self.backend.draw_rect(self.canvas, 5, 5, 3, 3, fill="#000", stroke=None)
        for x in range(5, 8):
            for y in range(5, 8):
                self.assertEqual(self.pixel(x, y), BLACK)
        self.assertEqual(self.pixel(8, 8), WHITE)
        self.assertEqual(self.pixel(4, 5), WHITE)

    def test_out_of_bounds_is_clipped(self):
        self.backend.draw_rect(self.canvas, -10, -10, 1000, 1000, fill="#000", stroke="#000", stroke_width=3)
        self.backend.draw_line(self.canvas, -5, -5, 900, 600)
        self.backend.draw_rect(self.canvas, 100, 100, 10, 10, fill="#000")
        self.assertEqual(self.canvas.image.size, (64, 48))
        self.assertEqual(self.pixel(63, 47), BLACK)

    def test_zero_size_rect_draws_nothing(self):
        self.backend.draw_rect(self.canvas, 5, 5, 0, 10, fill="#000")
        self.assertEqual(self.pixel(5, 5), WHITE)

    def test_line_follows_bresenham(self):
        self.backend.draw_line(self.canvas, 0, 0, 5, 2)
        for point in bresenham_points(0, 0, 5, 2):
            self.assertEqual(self.pixel(*point), BLACK)
        self.assertEqual(self.pixel(1, 1), WHITE)

    def test_draw_text_returns_next_baseline(self):
        y = self.backend.draw_text(self.canvas, "hello world foo", 0, 0, font_size=16, max_width=60)
        self.assertEqual(y, 60)

    def test_draw_text_single_line_without_width(self):
        y = self.backend.draw_text(self.canvas, "hi", 2, 4, font_size=12)
        self.assertEqual(y, 24)

    def test_text_marks_pixels(self):
        self.backend.draw_text(self.canvas, "HH", 2, 2, font_size=24)
        colors = {color for _, color in self.canvas.image.getcolors(64 * 48)}
        self.assertIn(WHITE, colors)
        self.assertGreater(len(colors), 1)

    def test_paint_dispatches_elements(self):
        elements = (
            RectElement(0, 0, 4, 4, fill="#000"),
            LineElement(10, 0, 10, 5),
            TextElement(20, 20, "x", font_size=12),
        )
        self.backend.paint(self.canvas, elements)
        self.assertEqual(self.pixel(1, 1), BLACK)
        self.assertEqual(self.pixel(10, 3), BLACK)

    def test_paint_rejects_unknown_element(self):
        with self.assertRaises(TypeError):
            self.backend.paint(self.canvas, [object()])

    def test_save_to_file_uses_suffix(self):
        self.backend.draw_rect(self.canvas, 0, 0, 8, 8, fill="#000")
        with tempfile.TemporaryDirectory() as tmp:
            path = self.backend.save_to_file(self.canvas, Path(tmp) / "out" / "frame.bmp")
            self.assertTrue(path.exists())
            self.assertEqual(path.read_bytes()[:2], b"BM")


class BackendFactoryTests(unittest.TestCase):
    def test_known_backends(self):
        self.assertIsInstance(create_backend("raster"), RasterBackend)
        self.assertIsInstance(create_backend("Vector"), VectorBackend)

    def test_unknown_backend(self):
        with self.assertRaises(ValueError):
            create_backend("canvas2d")

    def test_encode_rejects_unknown_format(self):
        with self.assertRaises(ValueError):
            encode_image(Image.new("L", (2, 2)), "gif")

    def test_encode_png_signature(self):
        self.assertEqual(encode_image(Image.new("L", (2, 2)), "png")[:8], b"\x89PNG\r\n\x1a\n")


if __name__ == "__main__":
    unittest.main()
