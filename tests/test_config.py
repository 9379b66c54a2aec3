from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from familygraph.config import get_settings
from familygraph.models import Orientation


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("FAMILYGRAPH_DB", raising=False)
    monkeypatch.delenv("FAMILYGRAPH_ORIENTATION", raising=False)
    # Keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)


def test_defaults() -> None:
    settings = get_settings()
    assert settings.db_path == Path("./family_tree.db")
    assert settings.orientation == Orientation.VERTICAL


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("FAMILYGRAPH_DB", str(tmp_path / "x.db"))
    monkeypatch.setenv("FAMILYGRAPH_ORIENTATION", " Horizontal ")

    settings = get_settings()
    assert settings.db_path == tmp_path / "x.db"
    assert settings.orientation == Orientation.HORIZONTAL


def test_dotenv_file(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("FAMILYGRAPH_ORIENTATION=horizontal\n", encoding="utf-8")

    assert get_settings().orientation == Orientation.HORIZONTAL


def test_invalid_orientation(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FAMILYGRAPH_ORIENTATION", "sideways")

    with pytest.raises(ValidationError) as excinfo:
        get_settings()
    assert excinfo.value.errors()[0]["loc"] == ("orientation",)
