from __future__ import annotations

import itertools
from collections.abc import Callable

import pytest

from familygraph.models import Family, FamilyStatus, FamilyTree, Gender, Person


def _person(pid: str, given: str, family: str, gender: str, birth: str | None = None) -> Person:
    return Person(id=pid, given_name=given, family_name=family, birth_date=birth, gender=gender)


@pytest.fixture()
def sample_tree() -> FamilyTree:
    """
    Three generations rooted at William:

        William + Margaret
          John + Mary -> Emma, Michael
          Sarah + David -> Chris, Laura, Tom
    """
    persons = [
        _person("W", "William", "Smith", Gender.MALE, "1920-05-01"),
        _person("M", "Margaret", "Smith", Gender.FEMALE, "1922-08-14"),
        _person("J", "John", "Smith", Gender.MALE, "1945-03-15"),
        _person("A", "Mary", "Smith", Gender.FEMALE, "1947-11-02"),
        _person("S", "Sarah", "Johnson", Gender.FEMALE, "1948-01-30"),
        _person("B", "David", "Johnson", Gender.MALE, "1946-07-07"),
        _person("E", "Emma", "Smith", Gender.FEMALE, "1970-02-20"),
        _person("M2", "Michael", "Smith", Gender.MALE, "1972-09-09"),
        _person("C1", "Chris", "Johnson", Gender.MALE, "1973-04-04"),
        _person("C2", "Laura", "Johnson", Gender.FEMALE, "1975-12-24"),
        _person("C3", "Tom", "Johnson", Gender.MALE, "1978-06-01"),
    ]
    persons[0].death_date = "1999-10-10"
    persons[2].notes = "Engineer\nLoved sailing"

    families = [
        Family(id="f1", parents=["W", "M"], children=["J", "S"], marriage_date="1943-06-12", status=FamilyStatus.MARRIED),
        Family(id="f2", parents=["J", "A"], children=["E", "M2"], marriage_date="1968-09-01", status=FamilyStatus.MARRIED),
        Family(id="f3", parents=["S", "B"], children=["C1", "C2", "C3"], status=FamilyStatus.PARTNER),
    ]
    return FamilyTree(
        name="Smith Family",
        persons={p.id: p for p in persons},
        families=families,
        root_person_id="W",
        description="Three generations of the Smith family",
    )


@pytest.fixture()
def id_factory() -> Callable[[], str]:
    # Deterministic identifiers: id1, id2, ...
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"
