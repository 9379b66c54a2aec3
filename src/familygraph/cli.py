"""familygraph CLI - Main entry point."""

import json
import logging
import uuid
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from familygraph.config import Settings, get_settings
from familygraph.database import TreeNotFoundError, create_database, list_trees, load_tree, store_tree
from familygraph.gedcom import GedcomError, export_gedcom, import_gedcom
from familygraph.graph import build_graph, unreachable_persons
from familygraph.layout import calculate_layout
from familygraph.models import FamilyTree, Orientation, full_name, life_span
from familygraph.relationships import get_person_relationships

app = typer.Typer(
    name="familygraph",
    help="Family tree layout, relationships and GEDCOM import/export",
    add_completion=False,
)
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(part) for part in err["loc"])
            console.print(f"[red]Invalid setting {escape(field)}: {escape(err['msg'])}[/red]")
        raise typer.Exit(1) from e


def _db_path(db_path: Path | None) -> Path:
    return db_path or _settings().db_path


def _orientation(orientation: str | None) -> str:
    value = orientation or _settings().orientation
    if value not in Orientation.ALL:
        console.print(f"[red]Unknown orientation {value!r} (expected one of {', '.join(Orientation.ALL)})[/red]")
        raise typer.Exit(1)
    return value


def _load(db_path: Path | None, tree_id: str) -> FamilyTree:
    conn = create_database(_db_path(db_path))
    try:
        return load_tree(conn, tree_id)
    except TreeNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    finally:
        conn.close()


def _warn_unreachable(tree: FamilyTree) -> None:
    missing = unreachable_persons(tree)
    if missing:
        console.print(f"[yellow]{len(missing)} person(s) are not connected to the root and are left out[/yellow]")


@app.command("import")
def import_tree(
    path: Path = typer.Argument(..., help="GEDCOM file to import", exists=True, dir_okay=False),
    tree_id: str | None = typer.Option(None, "--tree-id", help="Id for the new tree (default: random)"),
    public: bool = typer.Option(False, "--public", help="Mark the tree as public"),
    db_path: Path | None = typer.Option(None, "--db", help="Path to SQLite database"),
) -> None:
    """Import a GEDCOM file as a new tree."""
    try:
        tree = import_gedcom(path.read_bytes())
    except GedcomError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(1) from e
    new_id = tree_id or str(uuid.uuid4())

    conn = create_database(_db_path(db_path))
    try:
        store_tree(conn, new_id, tree, is_public=public)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    finally:
        conn.close()

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Metric", style="dim")
    table.add_column("Value", justify="right")
    table.add_row("Tree Id", new_id)
    table.add_row("Name", tree.name)
    table.add_row("Persons", str(len(tree.persons)))
    table.add_row("Families", str(len(tree.families)))
    kinds = [kind for _, _, kind in build_graph(tree).edges(data="relationship_type")]
    table.add_row("Couples", str(kinds.count("SPOUSE_OF")))
    table.add_row("Parent links", str(kinds.count("PARENT_OF")))
    root = tree.persons.get(tree.root_person_id)
    table.add_row("Root", full_name(root) if root else "-")
    console.print(table)
    _warn_unreachable(tree)


@app.command("export")
def export_tree(
    tree_id: str = typer.Argument(..., help="Tree to export"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output file (default: stdout)"),
    db_path: Path | None = typer.Option(None, "--db", help="Path to SQLite database"),
) -> None:
    """Export a stored tree as GEDCOM."""
    text = export_gedcom(_load(db_path, tree_id))
    if output:
        output.write_text(text, encoding="utf-8")
        console.print(f"[green]GEDCOM written to {output}[/green]")
    else:
        typer.echo(text, nl=False)


@app.command()
def layout(
    tree_id: str = typer.Argument(..., help="Tree to lay out"),
    orientation: str | None = typer.Option(None, "--orientation", help="vertical or horizontal"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output JSON file (default: stdout)"),
    db_path: Path | None = typer.Option(None, "--db", help="Path to SQLite database"),
) -> None:
    """Compute node coordinates and edge routes as JSON."""
    tree = _load(db_path, tree_id)
    result = calculate_layout(tree, _orientation(orientation))
    text = json.dumps(result.to_dict(), indent=2)
    if output:
        output.write_text(text, encoding="utf-8")
        console.print(f"[green]Layout written to {output}[/green]")
        _warn_unreachable(tree)
    else:
        typer.echo(text)


@app.command()
def relatives(
    tree_id: str = typer.Argument(..., help="Tree containing the person"),
    person_id: str = typer.Argument(..., help="Person to describe"),
    db_path: Path | None = typer.Option(None, "--db", help="Path to SQLite database"),
) -> None:
    """Show spouses, parents, children, siblings and cousins of a person."""
    tree = _load(db_path, tree_id)
    person = tree.persons.get(person_id)
    if person is None:
        console.print(f"[red]Person {person_id!r} not found in tree {tree_id!r}[/red]")
        raise typer.Exit(1)

    rels = get_person_relationships(person_id, tree)
    table = Table(show_header=True, header_style="bold cyan", title=full_name(person))
    table.add_column("Relationship", style="dim")
    table.add_column("Name")
    table.add_column("Dates")
    table.add_column("Id", style="dim")
    for label, people in rels.by_label().items():
        for p in people:
            table.add_row(label.title(), full_name(p), life_span(p), p.id)

    console.print(table)


@app.command()
def plot(
    tree_id: str = typer.Argument(..., help="Tree to plot"),
    orientation: str | None = typer.Option(None, "--orientation", help="vertical or horizontal"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Image file (png, svg, pdf)"),
    db_path: Path | None = typer.Option(None, "--db", help="Path to SQLite database"),
) -> None:
    """Render a preview image of the computed layout."""
    from familygraph.plotting import plot_layout

    tree = _load(db_path, tree_id)
    plot_layout(tree, calculate_layout(tree, _orientation(orientation)), output)
    if output:
        console.print(f"[green]Preview saved to {output}[/green]")
    _warn_unreachable(tree)


@app.command()
def trees(
    public_only: bool = typer.Option(False, "--public", help="Only list public trees"),
    db_path: Path | None = typer.Option(None, "--db", help="Path to SQLite database"),
) -> None:
    """List stored trees."""
    conn = create_database(_db_path(db_path))
    try:
        rows = list_trees(conn, public_only=public_only)
    finally:
        conn.close()

    if not rows:
        console.print("[yellow]No trees stored.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Id", style="dim")
    table.add_column("Name")
    table.add_column("Public")
    table.add_column("Persons", justify="right")
    table.add_column("Families", justify="right")
    for row in rows:
        table.add_row(
            row["id"],
            row["name"],
            "yes" if row["is_public"] else "no",
            str(row["persons"]),
            str(row["families"]),
        )
    console.print(table)


if __name__ == "__main__":
    app()
