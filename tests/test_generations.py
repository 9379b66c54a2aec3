from __future__ import annotations

from familygraph.generations import assign_generations
from familygraph.models import Family, FamilyTree, Person


def _tree(person_ids: list[str], families: list[Family], root: str) -> FamilyTree:
    persons = {pid: Person(id=pid, given_name=pid, family_name="") for pid in person_ids}
    return FamilyTree(name="t", persons=persons, families=families, root_person_id=root)


def test_three_generation_example(sample_tree: FamilyTree) -> None:
    data = assign_generations(sample_tree)

    assert {pid for pid, g in data.person_generation.items() if g == 0} == {"W", "M"}
    assert {pid for pid, g in data.person_generation.items() if g == 1} == {"J", "A", "S", "B"}
    assert {pid for pid, g in data.person_generation.items() if g == 2} == {"E", "M2", "C1", "C2", "C3"}
    assert data.levels() == [0, 1, 2]


def test_generations_list_discovery_order(sample_tree: FamilyTree) -> None:
    data = assign_generations(sample_tree)

    assert data.generations[0] == ["W", "M"]
    # Children of the root first, then the spouses found while visiting them
    assert data.generations[1] == ["J", "S", "A", "B"]
    assert data.generations[2] == ["E", "M2", "C1", "C2", "C3"]


def test_children_one_below_parents_and_co_parents_level(sample_tree: FamilyTree) -> None:
    gen = assign_generations(sample_tree).person_generation

    for family in sample_tree.families:
        for parent in family.parents:
            assert gen[parent] == gen[family.parents[0]]
            for child in family.children:
                assert gen[child] == gen[parent] + 1


def test_ancestors_get_negative_generations() -> None:
    tree = _tree(
        ["gp", "p", "me"],
        [Family(id="f1", parents=["gp"], children=["p"]), Family(id="f2", parents=["p"], children=["me"])],
        root="me",
    )

    assert assign_generations(tree).person_generation == {"me": 0, "p": -1, "gp": -2}


def test_missing_root_gives_empty_result(sample_tree: FamilyTree) -> None:
    sample_tree.root_person_id = "nobody"

    data = assign_generations(sample_tree)
    assert data.person_generation == {}
    assert data.generations == {}


def test_unreachable_persons_are_excluded() -> None:
    tree = _tree(["r", "c", "loner"], [Family(id="f1", parents=["r"], children=["c"])], root="r")

    data = assign_generations(tree)
    assert "loner" not in data.person_generation
    assert all("loner" not in ids for ids in data.generations.values())


def test_cycle_keeps_first_assignment() -> None:
    # r is both parent and child of x
    tree = _tree(
        ["r", "x"],
        [Family(id="f1", parents=["r"], children=["x"]), Family(id="f2", parents=["x"], children=["r"])],
        root="r",
    )

    assert assign_generations(tree).person_generation == {"r": 0, "x": 1}


def test_dangling_references_are_skipped() -> None:
    tree = _tree(["r", "c"], [Family(id="f1", parents=["r", "ghost"], children=["c", "missing"])], root="r")

    assert assign_generations(tree).person_generation == {"r": 0, "c": 1}


def test_each_call_starts_fresh(sample_tree: FamilyTree) -> None:
    first = assign_generations(sample_tree)
    second = assign_generations(sample_tree)

    assert first == second
    assert first.person_generation is not second.person_generation
