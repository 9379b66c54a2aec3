"""Generation assignment relative to the tree's root person."""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import NamedTuple

from familygraph.graph import EDGE_KINDS, GENERATION_WEIGHT, build_generation_graph, neighbors_of_kind
from familygraph.models import FamilyTree

log = logging.getLogger(__name__)


class GenerationData(NamedTuple):
    person_generation: dict[str, int]
    generations: dict[int, list[str]]  # generation -> person ids in discovery order

    def levels(self) -> list[int]:
        return sorted(self.generations)


@dataclass
class _Traversal:
    """Bookkeeping for one breadth-first pass; never shared between calls."""

    queue: deque[str] = field(default_factory=deque)
    person_generation: dict[str, int] = field(default_factory=dict)
    generations: dict[int, list[str]] = field(default_factory=dict)

    def discover(self, person_id: str, generation: int) -> None:
        # First assignment wins
        if person_id in self.person_generation:
            return
        self.person_generation[person_id] = generation
        self.generations.setdefault(generation, []).append(person_id)
        self.queue.append(person_id)


def assign_generations(tree: FamilyTree) -> GenerationData:
    """
    Assign an integer generation to every person reachable from the root.

    The root is generation 0, co-parents share a generation, children sit one
    generation below their parents and parents one above. The traversal is
    breadth-first and follows co-parents, then children, then parents, so a
    person reachable along paths that disagree keeps the generation of the
    path discovered first.

    Args:
        tree: The family tree snapshot

    Returns:
        GenerationData; both mappings are empty when the root is missing
    """
    state = _Traversal()

    if tree.root_person_id not in tree.persons:
        log.warning("Root person %r not found; no generations assigned", tree.root_person_id)
        return GenerationData({}, {})

    G = build_generation_graph(tree)
    state.discover(tree.root_person_id, 0)

    while state.queue:
        person_id = state.queue.popleft()
        generation = state.person_generation[person_id]
        for kind in EDGE_KINDS:
            for nb in neighbors_of_kind(G, person_id, kind):
                state.discover(nb, generation + GENERATION_WEIGHT[kind])

    skipped = len(tree.persons) - len(state.person_generation)
    if skipped:
        log.debug("%d person(s) unreachable from root %r", skipped, tree.root_person_id)

    return GenerationData(state.person_generation, state.generations)
