from __future__ import annotations

import runpy
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "apps" / "cli"))
sys.path.insert(0, str(ROOT / "packages" / "core"))
sys.path.insert(0, str(ROOT / "packages" / "renderer"))

import inkboard_app.__main__ as cli_main


def test_main_defaults_to_layouts(monkeypatch) -> None:
    calls: list[list[str]] = []
    monkeypatch.setattr(cli_main, "_cli_main", lambda argv=None: calls.append(list(argv or [])) or 0)

    rc = cli_main.main([])
    assert rc == 0
    assert calls == [["layouts"]]


def test_main_passes_through_args(monkeypatch) -> None:
    calls: list[list[str]] = []
    monkeypatch.setattr(cli_main, "_cli_main", lambda argv=None: calls.append(list(argv or [])) or 0)

    rc = cli_main.main(["render", "--data", "d.json"])
    assert rc == 0
    assert calls == [["render", "--data", "d.json"]]


def test_main_module_runpath_without_package_context() -> None:
    main_path = ROOT / "apps" / "cli" / "inkboard_app" / "__main__.py"
    result = runpy.run_path(str(main_path))
    assert "main" in result
