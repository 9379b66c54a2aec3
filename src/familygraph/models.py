"""Data classes for family tree entities."""

from dataclasses import dataclass, field


class Gender:
    MALE = "male"
    FEMALE = "female"
    UNSPECIFIED = "unspecified"


class FamilyStatus:
    MARRIED = "married"
    DIVORCED = "divorced"
    SEPARATED = "separated"
    PARTNER = "partner"
    UNKNOWN = "unknown"


class Orientation:
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"

    ALL = (VERTICAL, HORIZONTAL)


@dataclass
class Person:
    id: str
    given_name: str
    family_name: str
    birth_date: str | None = None  # ISO format YYYY-MM-DD, or raw text if unparseable
    death_date: str | None = None
    gender: str | None = None
    notes: str | None = None


@dataclass
class Family:
    id: str
    parents: list[str] = field(default_factory=list)
    children: list[str] = field(default_factory=list)  # birth order
    marriage_date: str | None = None
    divorce_date: str | None = None
    status: str | None = None


@dataclass
class FamilyTree:
    name: str
    persons: dict[str, Person]
    families: list[Family]
    root_person_id: str
    description: str | None = None

    def resolve(self, person_ids: list[str]) -> list[Person]:
        """Return the Person records for `person_ids`, skipping dangling references."""
        return [self.persons[pid] for pid in person_ids if pid in self.persons]

    def families_as_parent(self, person_id: str) -> list[Family]:
        return [f for f in self.families if person_id in f.parents]

    def families_as_child(self, person_id: str) -> list[Family]:
        return [f for f in self.families if person_id in f.children]


def full_name(person: Person) -> str:
    return f"{person.given_name or ''} {person.family_name or ''}".strip()


def life_span(person: Person) -> str:
    """Format birth/death dates for display, e.g. "1945-03-15 - 2015-11-22"."""
    birth = person.birth_date or "?"
    death = f" - {person.death_date}" if person.death_date else ""
    return f"{birth}{death}"


def search_persons(tree: FamilyTree, query: str) -> list[Person]:
    """Case-insensitive substring search over full names."""
    q = (query or "").strip().lower()
    if not q:
        return []
    return [p for p in tree.persons.values() if q in full_name(p).lower()]
