"""Shared fixtures: an in-memory object store and a small asset tree."""

from pathlib import Path

import pytest

from fake_storage import FakeStorage


@pytest.fixture
def fake_storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def asset_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Working directory holding app.js, style.css and logo.png."""
    (tmp_path / "app.js").write_bytes(b"console.log('hello');\n")
    (tmp_path / "style.css").write_bytes(b"body { margin: 0; }\n")
    (tmp_path / "logo.png").write_bytes(b"\x89PNG\r\n\x1a\nnot really a png")
    monkeypatch.chdir(tmp_path)
    return tmp_path
