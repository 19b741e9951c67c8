from __future__ import annotations

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]


def _project_lines() -> list[str]:
    return (BASE_DIR / "pyproject.toml").read_text(encoding="utf-8").splitlines()


def test_metadata_does_not_ship_design_documents():
    readme = [line for line in _project_lines() if line.replace(" ", "").startswith("readme=")]
    for line in readme:
        target = line.split("=", 1)[1].strip().strip('"')
        assert target not in {"SPEC_FULL.md", "DESIGN.md", "spec.md"}


def test_declared_modules_exist():
    assert (BASE_DIR / "app.py").is_file()
    assert (BASE_DIR / "core" / "scoring.py").is_file()
