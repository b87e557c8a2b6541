"""Shared fixtures for the wren test suite."""

from pathlib import Path

import pytest

from wren.app import App
from wren.config import AppConfig

TEMPLATES_DIR = Path(__file__).parent / "templates"


@pytest.fixture
def static_dir(tmp_path: Path) -> Path:
    """A static root with a few typed files and nested directories."""
    static = tmp_path / "static"
    static.mkdir()
    (static / "style.css").write_text("body { color: red; }")
    (static / "app.js").write_text("console.log('hello');")
    (static / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\n")
    (static / "data.unknownext").write_bytes(b"\x00\x01\x02\x03")
    (static / "index.html").write_text("<h1>Home</h1>")

    docs = static / "docs"
    docs.mkdir()
    (docs / "index.html").write_text("<h1>Docs</h1>")
    (static / "empty").mkdir()

    (tmp_path / "secret.txt").write_text("top secret")
    return static


@pytest.fixture
def make_app(static_dir: Path):
    """Build an App wired to the test templates and the static fixture."""

    def _make(**overrides: object) -> App:
        options: dict[str, object] = {"template_dir": TEMPLATES_DIR, "static_dir": static_dir}
        options.update(overrides)
        return App(config=AppConfig(**options))

    return _make
