"""Kinship relationships between persons in a family tree."""

from dataclasses import dataclass, field

from familygraph.models import FamilyTree, Person


@dataclass
class PersonRelationships:
    spouses: list[Person] = field(default_factory=list)
    parents: list[Person] = field(default_factory=list)
    children: list[Person] = field(default_factory=list)
    siblings: list[Person] = field(default_factory=list)
    cousins: list[Person] = field(default_factory=list)

    def by_label(self) -> dict[str, list[Person]]:
        return {
            "spouse": self.spouses,
            "parent": self.parents,
            "child": self.children,
            "sibling": self.siblings,
            "cousin": self.cousins,
        }


def get_person_relationships(person_id: str, tree: FamilyTree) -> PersonRelationships:
    """
    Calculate all relationships for a person in the family tree.

    Cousins are first cousins only: children of the siblings of the person's
    parents. Full and half siblings are not distinguished. A person with no
    family memberships gets five empty lists.
    """
    spouses: list[str] = []
    parents: list[str] = []
    children: list[str] = []
    siblings: list[str] = []

    # Families where this person is a parent (spouses and children)
    for family in tree.families_as_parent(person_id):
        spouses.extend(pid for pid in family.parents if pid != person_id)
        children.extend(family.children)

    # Families where this person is a child (parents and siblings)
    for family in tree.families_as_child(person_id):
        parents.extend(family.parents)
        siblings.extend(cid for cid in family.children if cid != person_id)

    parent_ids = {p.id for p in tree.resolve(parents)}

    # Grandparent families -> aunts and uncles (excluding own parents)
    aunt_uncle_ids: set[str] = set()
    for family in tree.families:
        if any(cid in parent_ids for cid in family.children):
            aunt_uncle_ids.update(cid for cid in family.children if cid not in parent_ids)

    cousins: list[str] = []
    for family in tree.families:
        if any(pid in aunt_uncle_ids for pid in family.parents):
            cousins.extend(family.children)

    return PersonRelationships(
        spouses=_unique(tree, spouses),
        parents=_unique(tree, parents),
        children=_unique(tree, children),
        siblings=_unique(tree, siblings),
        cousins=_unique(tree, cousins),
    )


def describe_relationship(person_id: str, other_id: str, tree: FamilyTree) -> str | None:
    """Return how `other_id` relates to `person_id` ("spouse", "parent", ...), or None."""
    rels = get_person_relationships(person_id, tree)
    for label, people in rels.by_label().items():
        if any(p.id == other_id for p in people):
            return label
    return None


def _unique(tree: FamilyTree, person_ids: list[str]) -> list[Person]:
    # De-duplicate while preserving first-seen order
    return tree.resolve(list(dict.fromkeys(person_ids)))
