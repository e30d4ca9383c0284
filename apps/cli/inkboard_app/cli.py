"""CLI entrypoints for Inkboard frame rendering, layout inspection and test patterns."""

from __future__ import annotations

import argparse
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any

from inkboard_core import AppConfig, load_config, save_config
from inkboard_core.config import config_path
from inkboard_core.logging_setup import configure_logging
from inkboard_renderer import LayoutEngine, VectorBackend, build_test_pattern, quantize_for_eink
from inkboard_renderer.quantize import PATTERNS

logger = logging.getLogger("inkboard.cli")


def _print_json(data: object) -> None:
    print(json.dumps(data, indent=2, sort_keys=True, default=str))


def _config_file(args: argparse.Namespace) -> Path | None:
    raw = getattr(args, "config", None)
    return Path(raw).expanduser() if raw else None


def _load_data(path: str) -> dict[str, Any]:
    data = json.loads(Path(path).expanduser().read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise SystemExit(f"data file must hold a JSON object: {path}")
    return data


def _apply_overrides(cfg: AppConfig, args: argparse.Namespace) -> AppConfig:
    if getattr(args, "backend", None):
        cfg.render.backend = args.backend
    if getattr(args, "color_depth", None):
        cfg.display.color_depth = args.color_depth
    if getattr(args, "format", None):
        cfg.render.image_format = args.format
    return cfg


def cmd_render(args: argparse.Namespace) -> int:
    cfg = _apply_overrides(load_config(_config_file(args)), args)
    engine = LayoutEngine.from_config(cfg)
    data = _load_data(args.data)

    frame = None
    if args.frame:
        result, frame = engine.render_frame(data, args.layout)
    else:
        result = engine.render(data, args.layout)
    out = Path(args.out or f"frame.{result.image_format}").expanduser()
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_bytes(result.data)

    payload: dict[str, Any] = {
        "success": True,
        "layout": result.layout,
        "width": result.width,
        "height": result.height,
        "color_depth": result.color_depth,
        "format": result.image_format,
        "bytes": len(result.data),
        "out": str(out),
    }
    if frame is not None:
        frame_path = Path(args.frame).expanduser()
        frame_path.parent.mkdir(parents=True, exist_ok=True)
        frame_path.write_bytes(frame.bytes)
        payload["frame"] = {"path": str(frame_path), "pixel_format": frame.pixel_format, "bytes": len(frame.bytes)}

    _print_json(payload)
    return 0


def cmd_layouts(args: argparse.Namespace) -> int:
    engine = LayoutEngine.from_config(load_config(_config_file(args)))
    _print_json(
        [
            {
                "name": template.name,
                "title": template.title,
                "focus": template.focus,
                "zones": [asdict(zone) for zone in template.zones],
            }
            for template in (engine.layouts[name] for name in engine.list_layouts())
        ]
    )
    return 0


def cmd_draw_list(args: argparse.Namespace) -> int:
    engine = LayoutEngine.from_config(load_config(_config_file(args)))
    elements = engine.build_draw_list(_load_data(args.data), args.layout)

    if args.svg:
        backend = VectorBackend()
        canvas = backend.create_canvas(engine.width, engine.height)
        backend.paint(canvas, elements)
        print(backend.to_svg(canvas))
        return 0

    _print_json([asdict(el) for el in elements])
    return 0


def cmd_test_pattern(args: argparse.Namespace) -> int:
    cfg = load_config(_config_file(args))
    width, height = cfg.display.width, cfg.display.height
    depth = args.color_depth or cfg.display.color_depth

    image = quantize_for_eink(build_test_pattern(args.pattern, width=width, height=height), depth)
    out = Path(args.out).expanduser()
    out.parent.mkdir(parents=True, exist_ok=True)
    image.save(out)
    logger.info("test pattern written", extra={"event": "test_pattern"})

    _print_json({"success": True, "pattern": args.pattern, "color_depth": depth, "out": str(out)})
    return 0


def cmd_config_show(args: argparse.Namespace) -> int:
    path = _config_file(args) or config_path()
    payload = asdict(load_config(path))
    payload["path"] = str(path)
    _print_json(payload)
    return 0


def cmd_config_init(args: argparse.Namespace) -> int:
    path = save_config(load_config(_config_file(args)), _config_file(args))
    _print_json({"success": True, "path": str(path)})
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="inkboard", description="Inkboard e-ink layout renderer")
    sub = parser.add_subparsers(dest="command", required=True)

    render_cmd = sub.add_parser("render", help="Render a data file to an image")
    render_cmd.add_argument("--data", required=True, help="JSON file mapping plugin names to payloads")
    render_cmd.add_argument("--layout", default=None, help="Layout name (defaults to configured layout)")
    render_cmd.add_argument("--out", default=None, help="Output image path")
    render_cmd.add_argument("--backend", choices=["raster", "vector"], default=None)
    render_cmd.add_argument("--color-depth", type=int, choices=[1, 4], default=None)
    render_cmd.add_argument("--format", choices=["png", "bmp"], default=None)
    render_cmd.add_argument("--frame", default=None, help="Also write packed panel bytes to this path")
    render_cmd.add_argument("--config", default=None, help="Optional config file path")
    render_cmd.set_defaults(func=cmd_render)

    layouts_cmd = sub.add_parser("layouts", help="List layout templates")
    layouts_cmd.add_argument("--config", default=None, help="Optional config file path")
    layouts_cmd.set_defaults(func=cmd_layouts)

    draw_cmd = sub.add_parser("draw-list", help="Print the draw list for a data file")
    draw_cmd.add_argument("--data", required=True, help="JSON file mapping plugin names to payloads")
    draw_cmd.add_argument("--layout", default=None)
    draw_cmd.add_argument("--svg", action="store_true", help="Print an SVG document instead of JSON")
    draw_cmd.add_argument("--config", default=None, help="Optional config file path")
    draw_cmd.set_defaults(func=cmd_draw_list)

    pat_cmd = sub.add_parser("test-pattern", help="Write a deterministic test pattern")
    pat_cmd.add_argument("--pattern", default="quadrants", choices=list(PATTERNS))
    pat_cmd.add_argument("--out", required=True, help="Output image path")
    pat_cmd.add_argument("--color-depth", type=int, choices=[1, 4], default=None)
    pat_cmd.add_argument("--config", default=None, help="Optional config file path")
    pat_cmd.set_defaults(func=cmd_test_pattern)

    config_cmd = sub.add_parser("config", help="Inspect or create the config file")
    config_sub = config_cmd.add_subparsers(dest="config_cmd", required=True)
    show_cmd = config_sub.add_parser("show", help="Print effective configuration")
    show_cmd.add_argument("--config", default=None, help="Optional config file path")
    show_cmd.set_defaults(func=cmd_config_show)
    init_cmd = config_sub.add_parser("init", help="Write configuration with defaults filled in")
    init_cmd.add_argument("--config", default=None, help="Optional config file path")
    init_cmd.set_defaults(func=cmd_config_init)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    cfg = load_config(_config_file(args))
    configure_logging(cfg.logging, console=False)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
