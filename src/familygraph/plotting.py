"""Visualization of computed family tree layouts."""

import logging
from pathlib import Path

from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.patches import FancyBboxPatch

from familygraph.layout import SPOUSE_EDGE, LayoutResult, LayoutSettings
from familygraph.models import FamilyTree, Gender, Orientation, Person

log = logging.getLogger(__name__)

FILL_COLORS = {Gender.MALE: "lightblue", Gender.FEMALE: "lightpink"}
DEFAULT_FILL = "lightgray"

# Layout units per inch of figure size
UNITS_PER_INCH = 100


def plot_layout(
    tree: FamilyTree,
    layout: LayoutResult,
    output_path: Path | None = None,
    settings: LayoutSettings | None = None,
) -> None:
    """
    Draw a computed layout: one rounded box per person and the exact edge polylines.

    Args:
        tree: The tree the layout was computed from (for labels and colors)
        layout: Result of `calculate_layout` with the same settings
        output_path: Where to save the image (PNG, SVG or PDF). If None, displays interactively.
        settings: The LayoutSettings used for the layout (node size)
    """
    s = settings or LayoutSettings()
    figsize = (
        max(4.0, layout.bounds.width / UNITS_PER_INCH),
        max(3.0, layout.bounds.height / UNITS_PER_INCH),
    )

    if output_path:
        fig = Figure(figsize=figsize)
    else:
        import matplotlib.pyplot as plt

        fig = plt.figure(figsize=figsize)

    ax = fig.add_subplot()
    draw_layout(ax, tree, layout, s)

    if output_path:
        # Determine format from extension
        ext = output_path.suffix.lower().lstrip(".")
        if ext not in ("png", "svg", "pdf"):
            ext = "png"
        fig.savefig(output_path, format=ext, dpi=150, bbox_inches="tight")
        log.info("Layout saved to %s", output_path)
    else:
        plt.show()


def draw_layout(ax: Axes, tree: FamilyTree, layout: LayoutResult, settings: LayoutSettings) -> None:
    # Horizontal layouts are transposed, so boxes are too
    if layout.orientation == Orientation.HORIZONTAL:
        box_w, box_h = settings.node_height, settings.node_width
    else:
        box_w, box_h = settings.node_width, settings.node_height

    for edge in layout.edges:
        xs, ys = zip(*edge.points())
        ax.plot(xs, ys, color="darkgray", linewidth=1.0 if edge.kind == SPOUSE_EDGE else 1.5, zorder=1)

    for node in layout.nodes:
        person = tree.persons[node.id]
        ax.add_patch(
            FancyBboxPatch(
                (node.x, node.y),
                box_w,
                box_h,
                boxstyle="round,pad=0,rounding_size=8",
                facecolor=FILL_COLORS.get(person.gender, DEFAULT_FILL),
                edgecolor="gray",
                zorder=2,
            )
        )
        ax.text(
            node.x + box_w / 2,
            node.y + box_h / 2,
            _label(person),
            ha="center",
            va="center",
            fontsize=7,
            zorder=3,
        )

    ax.set_xlim(0, max(layout.bounds.width, 1))
    # Screen coordinates: y grows downward
    ax.set_ylim(max(layout.bounds.height, 1), 0)
    ax.set_aspect("equal")
    ax.axis("off")


def _label(person: Person) -> str:
    # Years from ISO dates (YYYY-MM-DD)
    birth_year = (person.birth_date or "")[:4]
    death_year = (person.death_date or "")[:4]
    return f"{person.given_name}\n{person.family_name}\n{birth_year}-{death_year}"
