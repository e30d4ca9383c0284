import json
import sys
import tempfile
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]
sys.path.insert(0, str(ROOT / "packages" / "core"))

from inkboard_core.config import AppConfig, load_config, save_config


class ConfigTests(unittest.TestCase):
    def test_load_default_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "missing.json"
            cfg = load_config(path)
            self.assertIsInstance(cfg, AppConfig)
            self.assertEqual((cfg.display.width, cfg.display.height), (800, 480))
            self.assertEqual(cfg.display.color_depth, 1)
            self.assertEqual(cfg.render.backend, "raster")
            self.assertEqual(cfg.render.timezone, "Australia/Melbourne")
            self.assertEqual(cfg.layout.current, "dashboard")

    def test_save_and_reload(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "config.json"
            cfg = load_config(path)
            cfg.display.color_depth = 4
            cfg.render.backend = "vector"
            cfg.layout.current = "focus-news"
            save_config(cfg, path)
            reloaded = load_config(path)
            self.assertEqual(reloaded.display.color_depth, 4)
            self.assertEqual(reloaded.render.backend, "vector")
            self.assertEqual(reloaded.layout.current, "focus-news")

    def test_invalid_values_are_normalized(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            raw = {
                "display": {"width": 99999, "height": "abc", "color_depth": 3},
                "render": {"backend": "opengl", "image_format": "GIF", "timezone": ""},
                "layout": {"current": "", "templates": []},
                "logging": {"keep_log_files": 0, "level": "debug"},
                "unknown": {"x": 1},
            }
            path.write_text(json.dumps(raw), encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.display.width, 4096)
            self.assertEqual(cfg.display.height, 480)
            self.assertEqual(cfg.display.color_depth, 1)
            self.assertEqual(cfg.render.backend, "raster")
            self.assertEqual(cfg.render.image_format, "png")
            self.assertEqual(cfg.render.timezone, "Australia/Melbourne")
            self.assertEqual(cfg.layout.current, "dashboard")
            self.assertEqual(cfg.layout.templates, {})
            self.assertEqual(cfg.logging.keep_log_files, 2)
            self.assertEqual(cfg.logging.level, "DEBUG")

    def test_corrupt_file_falls_back(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.json"
            path.write_text("{not json", encoding="utf-8")
            cfg = load_config(path)
            self.assertEqual(cfg.display.width, 800)


if __name__ == "__main__":
    unittest.main()
