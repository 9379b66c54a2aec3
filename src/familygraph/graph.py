"""NetworkX graph building and operations."""

import logging

import networkx as nx

from familygraph.models import FamilyTree, Person

log = logging.getLogger(__name__)

# Generation-graph edge kinds, in the order a traversal should follow them
SPOUSE = "spouse"
CHILD = "child"
PARENT = "parent"
EDGE_KINDS = (SPOUSE, CHILD, PARENT)

# Generation offset when following an edge of each kind
GENERATION_WEIGHT = {SPOUSE: 0, CHILD: 1, PARENT: -1}


def build_graph(tree: FamilyTree) -> nx.DiGraph:
    """Build a NetworkX directed graph of persons with PARENT_OF and SPOUSE_OF edges."""
    G = nx.DiGraph()

    for pid, person in tree.persons.items():
        G.add_node(
            pid,
            person_name=f"{person.given_name} {person.family_name}".strip(),
            gender=person.gender,
            birth_date=person.birth_date,
            death_date=person.death_date,
        )

    for family in tree.families:
        parents = _existing(tree, family.parents)
        children = _existing(tree, family.children)

        # Spouse relationship (first two parents; more is not a couple)
        if len(parents) >= 2:
            G.add_edge(parents[0], parents[1], relationship_type="SPOUSE_OF", family_id=family.id)

        for parent_id in parents:
            for child_id in children:
                G.add_edge(parent_id, child_id, relationship_type="PARENT_OF", family_id=family.id)

    return G


def build_generation_graph(tree: FamilyTree) -> nx.MultiDiGraph:
    """
    Build the generation-weighted graph used for generation assignment.

    Every family contributes, for its resolvable members only:
    - a `spouse` edge (weight 0) in both directions between each pair of co-parents
    - a `child` edge (weight +1) from each parent to each child
    - a `parent` edge (weight -1) from each child back to each parent

    Edges keep family list order, so traversals over this graph are deterministic.
    """
    G = nx.MultiDiGraph()
    G.add_nodes_from(tree.persons)

    for family in tree.families:
        parents = _existing(tree, family.parents)
        children = _existing(tree, family.children)

        for a in parents:
            for b in parents:
                if a != b:
                    G.add_edge(a, b, kind=SPOUSE, weight=GENERATION_WEIGHT[SPOUSE])

        for parent_id in parents:
            for child_id in children:
                G.add_edge(parent_id, child_id, kind=CHILD, weight=GENERATION_WEIGHT[CHILD])
                G.add_edge(child_id, parent_id, kind=PARENT, weight=GENERATION_WEIGHT[PARENT])

    return G


def neighbors_of_kind(G: nx.MultiDiGraph, node: str, kind: str) -> list[str]:
    """Return the distinct neighbors reached from `node` through edges of `kind`."""
    out: list[str] = []
    for _, nb, edge_kind in G.out_edges(node, data="kind"):
        if edge_kind == kind and nb not in out:
            out.append(nb)
    return out


def unreachable_persons(tree: FamilyTree) -> list[Person]:
    """Return persons that cannot be reached from the root through family links."""
    if tree.root_person_id not in tree.persons:
        return list(tree.persons.values())

    G = build_generation_graph(tree)
    # Every edge has a reverse edge, so descendants == connected component
    reachable = nx.descendants(G, tree.root_person_id) | {tree.root_person_id}
    return [p for pid, p in tree.persons.items() if pid not in reachable]


def _existing(tree: FamilyTree, person_ids: list[str]) -> list[str]:
    out = []
    for pid in person_ids:
        if pid in tree.persons:
            out.append(pid)
        else:
            log.debug("Skipping dangling person reference %r", pid)
    return out
