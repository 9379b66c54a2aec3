"""
Layout engine for family trees.

Computes node positions for vertical and horizontal orientations: one row per
generation, spouse pairs kept side by side, and orthogonal T-junction routes
from each parent pair down to its children.
"""

import logging
from dataclasses import asdict, dataclass, field, replace
from typing import Any

from familygraph.generations import GenerationData, assign_generations
from familygraph.models import FamilyTree, Orientation

log = logging.getLogger(__name__)

SPOUSE_EDGE = "spouse"
PARENT_CHILD_EDGE = "parent-child"


@dataclass(frozen=True)
class LayoutSettings:
    node_width: float = 120
    node_height: float = 80
    horizontal_gap: float = 40
    spouse_gap: float = 20
    vertical_gap: float = 100
    padding: float = 50
    junction_offset: float = 50  # below the bottom of the parent row

    @property
    def row_pitch(self) -> float:
        return self.node_height + self.vertical_gap


@dataclass
class LayoutNode:
    id: str
    x: float
    y: float
    generation: int


@dataclass
class EdgeRouting:
    """
    Right-angle routing data for a parent-child edge.

    In a vertical layout `midpoint` is an x coordinate and `junction` and
    `spouse_edge` are y coordinates; a horizontal layout swaps the axes.
    """

    midpoint: float  # center between the parents
    junction: float  # the shared line the children hang from
    spouse_edge: float  # where the route leaves the parents


@dataclass
class LayoutEdge:
    id: str
    kind: str
    source: str
    target: str
    x1: float
    y1: float
    x2: float
    y2: float
    routing: EdgeRouting | None = None
    orientation: str = Orientation.VERTICAL

    def points(self) -> list[tuple[float, float]]:
        """Return the polyline to draw for this edge."""
        if self.routing is None:
            return [(self.x1, self.y1), (self.x2, self.y2)]

        r = self.routing
        if self.orientation == Orientation.HORIZONTAL:
            return [
                (r.spouse_edge, r.midpoint),
                (r.junction, r.midpoint),
                (r.junction, self.y2),
                (self.x2, self.y2),
            ]
        return [
            (r.midpoint, r.spouse_edge),
            (r.midpoint, r.junction),
            (self.x2, r.junction),
            (self.x2, self.y2),
        ]


@dataclass
class Bounds:
    width: float
    height: float


@dataclass
class LayoutResult:
    nodes: list[LayoutNode] = field(default_factory=list)
    edges: list[LayoutEdge] = field(default_factory=list)
    bounds: Bounds = field(default_factory=lambda: Bounds(0, 0))
    orientation: str = Orientation.VERTICAL

    def node(self, person_id: str) -> LayoutNode | None:
        for n in self.nodes:
            if n.id == person_id:
                return n
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "orientation": self.orientation,
            "nodes": [asdict(n) for n in self.nodes],
            "edges": [asdict(e) for e in self.edges],
            "bounds": asdict(self.bounds),
        }


def calculate_layout(
    tree: FamilyTree,
    orientation: str = Orientation.VERTICAL,
    settings: LayoutSettings | None = None,
) -> LayoutResult:
    """Calculate layout based on orientation."""
    if orientation not in Orientation.ALL:
        raise ValueError(f"Unknown orientation: {orientation!r}")

    vertical = calculate_vertical_layout(tree, settings)
    if orientation == Orientation.HORIZONTAL:
        return _transpose(vertical)
    return vertical


def calculate_vertical_layout(tree: FamilyTree, settings: LayoutSettings | None = None) -> LayoutResult:
    """Calculate vertical layout (ancestors at top, descendants below)."""
    s = settings or LayoutSettings()
    gen_data = assign_generations(tree)
    if not gen_data.person_generation:
        return LayoutResult()

    spouse_of = _spouse_pairs(tree, gen_data)
    levels = gen_data.levels()
    min_gen = levels[0]

    # Lay out each row from x=0, remembering its occupied width
    rows: dict[int, list[LayoutNode]] = {}
    row_width: dict[int, float] = {}
    for gen in levels:
        row: list[LayoutNode] = []
        x = 0.0
        prev: str | None = None
        for person_id in _row_order(gen_data.generations[gen], spouse_of):
            if prev is not None:
                x += s.spouse_gap if spouse_of.get(prev) == person_id else s.horizontal_gap
            row.append(LayoutNode(person_id, x, (gen - min_gen) * s.row_pitch, gen))
            x += s.node_width
            prev = person_id
        rows[gen] = row
        row_width[gen] = x

    max_width = max(row_width.values())

    # Center each generation within the widest row
    for gen, row in rows.items():
        _shift_row(row, (max_width - row_width[gen]) / 2)

    # Re-center the root's row on the overall extent. Every row is already
    # centered within the widest one, so this never moves anything today; it
    # keeps the guarantee if rows stop being centered independently.
    all_nodes = [n for gen in levels for n in rows[gen]]
    left = min(n.x for n in all_nodes)
    right = max(n.x for n in all_nodes) + s.node_width
    root_row = rows[gen_data.person_generation[tree.root_person_id]]
    root_center = (root_row[0].x + root_row[-1].x + s.node_width) / 2
    _shift_row(root_row, (left + right) / 2 - root_center)

    # Padding so nodes are not at the edge
    for n in all_nodes:
        n.x += s.padding
        n.y += s.padding

    by_id = {n.id: n for n in all_nodes}
    edges: list[LayoutEdge] = []
    for family in tree.families:
        edges.extend(_family_edges(family.id, family.parents, family.children, by_id, s))

    bounds = Bounds(
        width=max_width + s.padding * 2,
        height=(levels[-1] - min_gen) * s.row_pitch + s.node_height + s.padding * 2,
    )
    log.debug("Laid out %d nodes and %d edges in %d rows", len(all_nodes), len(edges), len(levels))
    return LayoutResult(all_nodes, edges, bounds, Orientation.VERTICAL)


def _spouse_pairs(tree: FamilyTree, gen_data: GenerationData) -> dict[str, str]:
    """
    Map each displayed spouse to their partner.

    The first family with exactly two placed parents in the same generation
    wins; a person already in a displayed pair is not paired again.
    """
    spouse_of: dict[str, str] = {}
    placed = gen_data.person_generation
    for family in tree.families:
        parents = [pid for pid in family.parents if pid in placed]
        if len(parents) != 2:
            continue
        a, b = parents
        if a == b or a in spouse_of or b in spouse_of:
            continue
        if placed[a] != placed[b]:
            continue
        spouse_of[a] = b
        spouse_of[b] = a
    return spouse_of


def _row_order(discovered: list[str], spouse_of: dict[str, str]) -> list[str]:
    """Discovery order, with each spouse pulled in right after their partner."""
    in_row = set(discovered)
    ordered: list[str] = []
    seen: set[str] = set()
    for person_id in discovered:
        if person_id in seen:
            continue
        ordered.append(person_id)
        seen.add(person_id)
        partner = spouse_of.get(person_id)
        if partner is not None and partner in in_row and partner not in seen:
            ordered.append(partner)
            seen.add(partner)
    return ordered


def _shift_row(row: list[LayoutNode], dx: float) -> None:
    for n in row:
        n.x += dx


def _family_edges(
    family_id: str,
    parent_ids: list[str],
    child_ids: list[str],
    by_id: dict[str, LayoutNode],
    s: LayoutSettings,
) -> list[LayoutEdge]:
    parents = [by_id[pid] for pid in parent_ids if pid in by_id]
    children = [by_id[cid] for cid in child_ids if cid in by_id]
    if not parents or not children:
        return []

    edges: list[LayoutEdge] = []

    # Line between the two parents
    if len(parents) == 2:
        left, right = sorted(parents, key=lambda n: n.x)
        edges.append(
            LayoutEdge(
                id=f"family-{family_id}-spouse",
                kind=SPOUSE_EDGE,
                source=parents[0].id,
                target=parents[1].id,
                x1=left.x + s.node_width,
                y1=left.y + s.node_height / 2,
                x2=right.x,
                y2=right.y + s.node_height / 2,
            )
        )

    midpoint_x = sum(p.x for p in parents) / len(parents) + s.node_width / 2
    parent_bottom = max(p.y for p in parents) + s.node_height
    if len(parents) == 2:
        spouse_edge_y = parents[0].y + s.node_height / 2
    else:
        spouse_edge_y = parent_bottom
    junction_y = parent_bottom + s.junction_offset

    for idx, child in enumerate(children):
        edges.append(
            LayoutEdge(
                id=f"family-{family_id}-child-{idx}",
                kind=PARENT_CHILD_EDGE,
                source=parents[0].id,
                target=child.id,
                x1=midpoint_x,
                y1=spouse_edge_y,
                x2=child.x + s.node_width / 2,
                y2=child.y,
                routing=EdgeRouting(midpoint=midpoint_x, junction=junction_y, spouse_edge=spouse_edge_y),
            )
        )

    return edges


def _transpose(vertical: LayoutResult) -> LayoutResult:
    """Calculate horizontal layout (ancestors at left) by swapping x and y."""
    nodes = [replace(n, x=n.y, y=n.x) for n in vertical.nodes]
    edges = [
        replace(
            e,
            x1=e.y1,
            y1=e.x1,
            x2=e.y2,
            y2=e.x2,
            orientation=Orientation.HORIZONTAL,
        )
        for e in vertical.edges
    ]
    bounds = Bounds(width=vertical.bounds.height, height=vertical.bounds.width)
    return LayoutResult(nodes, edges, bounds, Orientation.HORIZONTAL)
