"""
familygraph - genealogical graph engine.

Generation assignment, spouse-aware layout with orthogonal edge routing,
kinship relationships, and GEDCOM import/export over an in-memory family tree.
"""

from familygraph.gedcom import GedcomError, export_gedcom, import_gedcom
from familygraph.generations import GenerationData, assign_generations
from familygraph.layout import LayoutResult, LayoutSettings, calculate_layout
from familygraph.models import Family, FamilyTree, Person
from familygraph.relationships import PersonRelationships, get_person_relationships

__version__ = "0.1.0"

__all__ = [
    "Family",
    "FamilyTree",
    "GedcomError",
    "GenerationData",
    "LayoutResult",
    "LayoutSettings",
    "Person",
    "PersonRelationships",
    "assign_generations",
    "calculate_layout",
    "export_gedcom",
    "get_person_relationships",
    "import_gedcom",
]
