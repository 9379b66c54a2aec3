from __future__ import annotations

import json
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from familygraph import cli
from familygraph.cli import app
from familygraph.gedcom import export_gedcom, import_gedcom
from familygraph.models import FamilyTree

runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep table rows on one line regardless of the terminal
    monkeypatch.setattr(cli, "console", Console(width=200))


@pytest.fixture()
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "family_tree.db"


@pytest.fixture()
def imported(tmp_path: Path, db_path: Path, sample_tree: FamilyTree) -> str:
    ged = tmp_path / "smith.ged"
    ged.write_text(export_gedcom(sample_tree), encoding="utf-8")

    result = runner.invoke(app, ["import", str(ged), "--tree-id", "smith", "--db", str(db_path)])
    assert result.exit_code == 0, result.output
    return "smith"


def test_import_reports_counts(tmp_path: Path, db_path: Path, sample_tree: FamilyTree) -> None:
    ged = tmp_path / "smith.ged"
    ged.write_text(export_gedcom(sample_tree), encoding="utf-8")

    result = runner.invoke(app, ["import", str(ged), "--tree-id", "smith", "--public", "--db", str(db_path)])

    assert result.exit_code == 0, result.output
    assert "smith" in result.output
    assert "11" in result.output
    assert "Parent links" in result.output
    assert "14" in result.output
    assert "William Smith" in result.output


def test_import_duplicate_id_fails(tmp_path: Path, db_path: Path, imported: str) -> None:
    ged = tmp_path / "again.ged"
    ged.write_text("0 HEAD\n0 @I1@ INDI\n1 NAME A /B/\n0 TRLR\n", encoding="utf-8")

    result = runner.invoke(app, ["import", str(ged), "--tree-id", imported, "--db", str(db_path)])
    assert result.exit_code == 1
    assert "already exists" in result.output


def test_trees_lists_imported(db_path: Path, imported: str) -> None:
    result = runner.invoke(app, ["trees", "--db", str(db_path)])

    assert result.exit_code == 0, result.output
    assert imported in result.output
    assert "Smith Family" in result.output


def test_trees_empty(db_path: Path) -> None:
    result = runner.invoke(app, ["trees", "--db", str(db_path)])

    assert result.exit_code == 0
    assert "No trees stored" in result.output


def test_layout_prints_json(db_path: Path, imported: str) -> None:
    result = runner.invoke(app, ["layout", imported, "--orientation", "horizontal", "--db", str(db_path)])

    assert result.exit_code == 0, result.output
    data = json.loads(result.stdout)
    assert data["orientation"] == "horizontal"
    assert len(data["nodes"]) == 11


def test_layout_rejects_unknown_orientation(db_path: Path, imported: str) -> None:
    result = runner.invoke(app, ["layout", imported, "--orientation", "diagonal", "--db", str(db_path)])

    assert result.exit_code == 1
    assert "Unknown orientation" in result.output


def test_export_round_trips(tmp_path: Path, db_path: Path, imported: str) -> None:
    out = tmp_path / "out.ged"

    result = runner.invoke(app, ["export", imported, "--output", str(out), "--db", str(db_path)])

    assert result.exit_code == 0, result.output
    tree = import_gedcom(out.read_text(encoding="utf-8"))
    assert len(tree.persons) == 11
    assert len(tree.families) == 3


def test_unknown_tree_fails(db_path: Path) -> None:
    result = runner.invoke(app, ["export", "missing", "--db", str(db_path)])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_relatives_table(db_path: Path, imported: str) -> None:
    layout_result = runner.invoke(app, ["layout", imported, "--db", str(db_path)])
    john = next(
        n["id"]
        for n in json.loads(layout_result.stdout)["nodes"]
        if n["generation"] == 1
    )

    result = runner.invoke(app, ["relatives", imported, john, "--db", str(db_path)])

    assert result.exit_code == 0, result.output
    assert "Parent" in result.output
    assert "William Smith" in result.output


def test_relatives_unknown_person(db_path: Path, imported: str) -> None:
    result = runner.invoke(app, ["relatives", imported, "nobody", "--db", str(db_path)])

    assert result.exit_code == 1
    assert "not found" in result.output


def test_plot_writes_file(tmp_path: Path, db_path: Path, imported: str) -> None:
    out = tmp_path / "tree.png"

    result = runner.invoke(app, ["plot", imported, "--output", str(out), "--db", str(db_path)])

    assert result.exit_code == 0, result.output
    assert out.exists()


def test_import_reads_declared_charset(tmp_path: Path, db_path: Path) -> None:
    ged = tmp_path / "latin1.ged"
    ged.write_bytes("0 HEAD\n1 CHAR ANSI\n0 @I1@ INDI\n1 NAME José /Müller/\n0 TRLR\n".encode("latin-1"))

    result = runner.invoke(app, ["import", str(ged), "--db", str(db_path)])

    assert result.exit_code == 0, result.output
    assert "José Müller" in result.output


def test_import_unknown_charset_fails(tmp_path: Path, db_path: Path) -> None:
    ged = tmp_path / "odd.ged"
    ged.write_bytes(b"0 HEAD\n1 CHAR KLINGON\n0 @I1@ INDI\n0 TRLR\n")

    result = runner.invoke(app, ["import", str(ged), "--db", str(db_path)])

    assert result.exit_code == 1
    assert "KLINGON" in result.output
    assert not db_path.exists()


def test_import_invalid_syntax_fails(tmp_path: Path, db_path: Path) -> None:
    ged = tmp_path / "broken.ged"
    ged.write_text("0 HEAD\n1 CHAR UTF-8\nnot a gedcom line\n0 TRLR\n", encoding="utf-8")

    result = runner.invoke(app, ["import", str(ged), "--db", str(db_path)])

    assert result.exit_code == 1
    assert "Invalid syntax" in result.output


def test_invalid_orientation_setting_fails(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FAMILYGRAPH_ORIENTATION", "sideways")

    result = runner.invoke(app, ["trees"])

    assert result.exit_code == 1
    assert "Invalid setting orientation" in result.output
