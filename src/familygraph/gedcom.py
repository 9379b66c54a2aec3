"""
GEDCOM import and export.

Import reads the document with ged4py's GedcomReader: INDI records first, then
FAM records, with HUSB/WIFE/CHIL pointers mapped to freshly minted identifiers
afterwards, so families may refer to individuals that appear later in the file.
Family membership comes from the FAM records alone; FAMS/FAMC pointers on
individuals only steer the choice of root.

Export writes GEDCOM 5.5.1 lineage-linked text. Parent roles are inferred from
gender (male parents become HUSB, everyone else WIFE), so the original
husband/wife labels do not survive a round trip.
"""

import io
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date

from ged4py import GedcomReader
from ged4py.date import DateValue, DateValueVisitor
from ged4py.model import Record
from ged4py.parser import IntegrityError, ParserError

from familygraph.dates import MONTHS, format_gedcom_date, parse_gedcom_date
from familygraph.models import Family, FamilyStatus, FamilyTree, Gender, Person

log = logging.getLogger(__name__)

DEFAULT_TREE_NAME = "Imported Family Tree"

SEX_TO_GENDER = {"M": Gender.MALE, "F": Gender.FEMALE}
GENDER_TO_SEX = {Gender.MALE: "M", Gender.FEMALE: "F", Gender.UNSPECIFIED: "U"}


class GedcomError(ValueError):
    """The document cannot be read as GEDCOM."""


@dataclass
class _Individual:
    xref: str | None
    person: Person
    famc_count: int = 0


@dataclass
class _Family:
    xref: str | None
    parents: list[str] = field(default_factory=list)  # HUSB/WIFE pointers in document order
    children: list[str] = field(default_factory=list)
    marriage_date: str | None = None
    divorce_date: str | None = None


class _DateText(DateValueVisitor):
    """Render a ged4py date value back as GEDCOM date text."""

    def visitSimple(self, value):
        return str(value.date)

    def visitPeriod(self, value):
        return f"FROM {value.date1} TO {value.date2}"

    def visitFrom(self, value):
        return f"FROM {value.date}"

    def visitTo(self, value):
        return f"TO {value.date}"

    def visitRange(self, value):
        return f"BET {value.date1} AND {value.date2}"

    def visitBefore(self, value):
        return f"BEF {value.date}"

    def visitAfter(self, value):
        return f"AFT {value.date}"

    def visitAbout(self, value):
        return f"ABT {value.date}"

    def visitCalculated(self, value):
        return f"CAL {value.date}"

    def visitEstimated(self, value):
        return f"EST {value.date}"

    def visitInterpreted(self, value):
        return f"INT {value.date} ({value.phrase})"

    def visitPhrase(self, value):
        # Unparseable values come back as phrases; keep them verbatim
        return value.phrase


_DATE_TEXT = _DateText()


# ============================================================================
# Import
# ============================================================================


def import_gedcom(data: str | bytes, id_factory: Callable[[], str] | None = None) -> FamilyTree:
    """
    Parse a GEDCOM document and convert it to a FamilyTree.

    Args:
        data: GEDCOM document. Text is read as is; bytes are decoded with the
            charset named by the BOM or the header's CHAR line (ANSEL if neither).
        id_factory: Mints identifiers for persons and families (defaults to uuid4 strings)

    Returns:
        The decoded tree. The root is the first individual without a FAMC
        pointer, or the first individual when every one of them has one.

    Raises:
        GedcomError: the document has invalid line syntax, broken level
            nesting, or an unknown or undecodable character set.
    """
    new_id = id_factory or (lambda: str(uuid.uuid4()))

    if isinstance(data, str):
        raw, encoding = data.lstrip("\ufeff").encode("utf-8"), "utf-8"
    else:
        raw, encoding = data, None

    # GedcomReader rejects blank lines as invalid syntax
    lines = [line for line in raw.splitlines() if line.strip()]
    if not lines:
        return _build_tree(None, None, [], [], new_id)

    try:
        with GedcomReader(io.BytesIO(b"\n".join(lines) + b"\n"), encoding=encoding) as reader:
            name, description = _read_header(reader.header)
            individuals = [_read_individual(rec, new_id) for rec in reader.records0("INDI")]
            families = [_read_family(rec) for rec in reader.records0("FAM")]
    except (ParserError, IntegrityError, UnicodeDecodeError, OSError) as e:
        # OSError: the header runs to the end of the document
        raise GedcomError(f"Cannot read GEDCOM: {e}") from e

    return _build_tree(name, description, individuals, families, new_id)


def _read_header(header: Record | None) -> tuple[str | None, str | None]:
    """Tree name and description from the header NOTE (CONT lines are already joined)."""
    note = header.sub_tag("NOTE") if header is not None else None
    if note is None or not note.value:
        return None, None
    name, _, description = note.value.partition("\n")
    return name.strip() or None, description or None


def _read_individual(rec: Record, new_id: Callable[[], str]) -> _Individual:
    sex_rec = rec.sub_tag("SEX")
    if sex_rec is None:
        gender = None
    else:
        gender = SEX_TO_GENDER.get((sex_rec.value or "").strip()[:1].upper(), Gender.UNSPECIFIED)

    notes = [note.value or "" for note in rec.sub_tags("NOTE")]

    person = Person(
        id=new_id(),
        given_name=rec.name.given,
        family_name=rec.name.surname,
        birth_date=_event_date(rec, "BIRT"),
        death_date=_event_date(rec, "DEAT"),
        gender=gender,
        notes="\n".join(notes) if notes else None,
    )
    return _Individual(rec.xref_id, person, famc_count=len(rec.sub_tags("FAMC", follow=False)))


def _read_family(rec: Record) -> _Family:
    return _Family(
        xref=rec.xref_id,
        parents=[p.value for p in rec.sub_tags("HUSB", "WIFE", follow=False)],
        children=[c.value for c in rec.sub_tags("CHIL", follow=False)],
        marriage_date=_event_date(rec, "MARR"),
        divorce_date=_event_date(rec, "DIV"),
    )


def _event_date(rec: Record, event: str) -> str | None:
    date_rec = rec.sub_tag(f"{event}/DATE")
    if date_rec is None:
        return None
    value = date_rec.value
    if isinstance(value, DateValue):
        value = value.accept(_DATE_TEXT)
    return parse_gedcom_date(value)


def _build_tree(
    name: str | None,
    description: str | None,
    individuals: list[_Individual],
    families: list[_Family],
    new_id: Callable[[], str],
) -> FamilyTree:
    # Map GEDCOM pointers to freshly minted ids
    person_ids: dict[str, str] = {}
    persons: dict[str, Person] = {}
    root_person_id = ""

    for indi in individuals:
        pid = indi.person.id
        if indi.xref is not None:
            if indi.xref in person_ids:
                log.warning("Duplicate individual pointer %s; keeping the first", indi.xref)
            else:
                person_ids[indi.xref] = pid
        persons[pid] = indi.person
        if indi.famc_count > 1:
            log.warning("Individual %s has %d FAMC pointers; keeping all of them", indi.xref, indi.famc_count)
        if not root_person_id and not indi.famc_count:
            root_person_id = pid

    # Fallback to first person if no root found
    if not root_person_id and persons:
        root_person_id = next(iter(persons))

    out_families: list[Family] = []
    for fam in families:
        if fam.divorce_date:
            status = FamilyStatus.DIVORCED
        elif fam.marriage_date:
            status = FamilyStatus.MARRIED
        else:
            status = None
        out_families.append(
            Family(
                id=new_id(),
                parents=_resolve_pointers(fam.parents, person_ids),
                children=_resolve_pointers(fam.children, person_ids),
                marriage_date=fam.marriage_date,
                divorce_date=fam.divorce_date,
                status=status,
            )
        )

    log.debug("Imported %d persons and %d families", len(persons), len(out_families))

    return FamilyTree(
        name=name or DEFAULT_TREE_NAME,
        persons=persons,
        families=out_families,
        root_person_id=root_person_id,
        description=description,
    )


def _resolve_pointers(xrefs: list[str | None], id_map: dict[str, str]) -> list[str]:
    out = []
    for xref in xrefs:
        if xref in id_map:
            out.append(id_map[xref])
        else:
            log.debug("Dropping dangling pointer %r", xref)
    return out


# ============================================================================
# Export
# ============================================================================


def export_gedcom(tree: FamilyTree, exported_on: date | None = None) -> str:
    """Convert a FamilyTree to GEDCOM text."""
    today = exported_on or date.today()
    lines: list[str] = [
        "0 HEAD",
        "1 SOUR familygraph",
        "2 NAME familygraph",
        "1 GEDC",
        "2 VERS 5.5.1",
        "2 FORM LINEAGE-LINKED",
        "1 CHAR UTF-8",
        f"1 DATE {today.day} {MONTHS[today.month - 1]} {today.year}",
    ]
    # Tree name and description travel as the header note
    if tree.name or tree.description:
        lines.append(_line(1, "NOTE", tree.name or ""))
        if tree.description:
            for desc_line in tree.description.split("\n"):
                lines.append(_line(2, "CONT", desc_line))

    for person in tree.persons.values():
        lines.extend(_individual_record(person, tree))

    for family in tree.families:
        lines.extend(_family_record(family, tree))

    lines.append("0 TRLR")
    return "\n".join(lines) + "\n"


def _individual_record(person: Person, tree: FamilyTree) -> list[str]:
    lines = [f"0 @{person.id}@ INDI"]

    lines.append(_line(1, "NAME", f"{person.given_name or ''} /{person.family_name or ''}/".strip()))
    if person.given_name:
        lines.append(_line(2, "GIVN", person.given_name))
    if person.family_name:
        lines.append(_line(2, "SURN", person.family_name))

    if person.gender:
        lines.append(_line(1, "SEX", GENDER_TO_SEX.get(person.gender, "U")))

    for tag, value in (("BIRT", person.birth_date), ("DEAT", person.death_date)):
        gedcom_date = format_gedcom_date(value)
        if gedcom_date:
            lines.append(f"1 {tag}")
            lines.append(_line(2, "DATE", gedcom_date))

    if person.notes is not None:
        note_lines = person.notes.split("\n")
        lines.append(_line(1, "NOTE", note_lines[0]))
        # Continuation lines for multi-line notes
        for note_line in note_lines[1:]:
            lines.append(_line(2, "CONT", note_line))

    for family in tree.families:
        if person.id in family.parents:
            lines.append(f"1 FAMS @{family.id}@")
    for family in tree.families:
        if person.id in family.children:
            lines.append(f"1 FAMC @{family.id}@")

    return lines


def _family_record(family: Family, tree: FamilyTree) -> list[str]:
    lines = [f"0 @{family.id}@ FAM"]

    # Lossy: the role is inferred from gender, not stored on the family
    for parent in tree.resolve(family.parents):
        tag = "HUSB" if parent.gender == Gender.MALE else "WIFE"
        lines.append(f"1 {tag} @{parent.id}@")

    for child in tree.resolve(family.children):
        lines.append(f"1 CHIL @{child.id}@")

    for tag, value in (("MARR", family.marriage_date), ("DIV", family.divorce_date)):
        gedcom_date = format_gedcom_date(value)
        if gedcom_date:
            lines.append(f"1 {tag}")
            lines.append(_line(2, "DATE", gedcom_date))

    return lines


def _line(level: int, tag: str, value: str) -> str:
    return f"{level} {tag} {value}" if value else f"{level} {tag}"
