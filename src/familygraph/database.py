"""SQLite database operations for family tree storage."""

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from familygraph.models import Family, FamilyTree, Person

log = logging.getLogger(__name__)


class TreeNotFoundError(LookupError):
    pass


def create_database(db_path: Path | str) -> sqlite3.Connection:
    """Open (creating if needed) the SQLite database with the family tree tables."""
    conn = sqlite3.connect(db_path)
    conn.execute("PRAGMA foreign_keys = ON")
    cursor = conn.cursor()

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS tree (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            description TEXT,
            is_public INTEGER NOT NULL DEFAULT 0,
            root_person_id TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS person (
            tree_id TEXT NOT NULL,
            id TEXT NOT NULL,
            position INTEGER NOT NULL,
            given_name TEXT NOT NULL,
            family_name TEXT NOT NULL,
            birth_date TEXT,
            death_date TEXT,
            gender TEXT,
            notes TEXT,
            PRIMARY KEY (tree_id, id),
            FOREIGN KEY (tree_id) REFERENCES tree(id)
        )
    """)

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS family (
            tree_id TEXT NOT NULL,
            id TEXT NOT NULL,
            position INTEGER NOT NULL,
            marriage_date TEXT,
            divorce_date TEXT,
            status TEXT,
            PRIMARY KEY (tree_id, id),
            FOREIGN KEY (tree_id) REFERENCES tree(id)
        )
    """)

    # Parent and child links; `position` keeps parent order and birth order.
    # person_id is not a foreign key: dangling references are stored as given.
    cursor.execute("""
        CREATE TABLE IF NOT EXISTS family_member (
            tree_id TEXT NOT NULL,
            family_id TEXT NOT NULL,
            role TEXT NOT NULL CHECK (role IN ('parent', 'child')),
            position INTEGER NOT NULL,
            person_id TEXT NOT NULL,
            FOREIGN KEY (tree_id, family_id) REFERENCES family(tree_id, id)
        )
    """)

    conn.commit()
    return conn


def store_tree(conn: sqlite3.Connection, tree_id: str, tree: FamilyTree, is_public: bool = False) -> None:
    """Insert a complete tree in a single transaction."""
    exists = conn.execute("SELECT 1 FROM tree WHERE id = ?", (tree_id,)).fetchone()
    if exists:
        raise ValueError(f"Tree {tree_id!r} already exists")

    with conn:
        conn.execute(
            """
            INSERT INTO tree (id, name, description, is_public, root_person_id, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                tree_id,
                tree.name,
                tree.description,
                int(is_public),
                tree.root_person_id,
                datetime.now(timezone.utc).isoformat(),
            ),
        )

        conn.executemany(
            """
            INSERT INTO person
            (tree_id, id, position, given_name, family_name, birth_date, death_date, gender, notes)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            [
                (
                    tree_id,
                    p.id,
                    i,
                    p.given_name or "",
                    p.family_name or "",
                    p.birth_date,
                    p.death_date,
                    p.gender,
                    p.notes,
                )
                for i, p in enumerate(tree.persons.values())
            ],
        )

        conn.executemany(
            """
            INSERT INTO family (tree_id, id, position, marriage_date, divorce_date, status)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            [
                (tree_id, f.id, i, f.marriage_date, f.divorce_date, f.status)
                for i, f in enumerate(tree.families)
            ],
        )

        members = []
        for f in tree.families:
            members.extend((tree_id, f.id, "parent", i, pid) for i, pid in enumerate(f.parents))
            members.extend((tree_id, f.id, "child", i, cid) for i, cid in enumerate(f.children))
        conn.executemany(
            """
            INSERT INTO family_member (tree_id, family_id, role, position, person_id)
            VALUES (?, ?, ?, ?, ?)
            """,
            members,
        )

    log.info(
        "Stored tree %s (%d persons, %d families)", tree_id, len(tree.persons), len(tree.families)
    )


def load_tree(conn: sqlite3.Connection, tree_id: str) -> FamilyTree:
    """Load a tree snapshot by id."""
    row = conn.execute(
        "SELECT name, description, root_person_id FROM tree WHERE id = ?", (tree_id,)
    ).fetchone()
    if row is None:
        raise TreeNotFoundError(f"Tree {tree_id!r} not found")
    name, description, root_person_id = row

    persons: dict[str, Person] = {}
    for pid, given, family_name, birth, death, gender, notes in conn.execute(
        """
        SELECT id, given_name, family_name, birth_date, death_date, gender, notes
        FROM person WHERE tree_id = ? ORDER BY position
        """,
        (tree_id,),
    ).fetchall():
        persons[pid] = Person(
            id=pid,
            given_name=given,
            family_name=family_name,
            birth_date=birth,
            death_date=death,
            gender=gender,
            notes=notes,
        )

    families: dict[str, Family] = {}
    for fid, marriage, divorce, status in conn.execute(
        """
        SELECT id, marriage_date, divorce_date, status
        FROM family WHERE tree_id = ? ORDER BY position
        """,
        (tree_id,),
    ).fetchall():
        families[fid] = Family(id=fid, marriage_date=marriage, divorce_date=divorce, status=status)

    for fid, role, pid in conn.execute(
        """
        SELECT family_id, role, person_id
        FROM family_member WHERE tree_id = ? ORDER BY family_id, role, position
        """,
        (tree_id,),
    ).fetchall():
        family = families.get(fid)
        if family is None:
            continue
        if role == "parent":
            family.parents.append(pid)
        else:
            family.children.append(pid)

    return FamilyTree(
        name=name,
        persons=persons,
        families=list(families.values()),
        root_person_id=root_person_id,
        description=description,
    )


def list_trees(conn: sqlite3.Connection, public_only: bool = False) -> list[dict]:
    """List stored trees with their person and family counts."""
    query = """
        SELECT t.id, t.name, t.is_public,
               (SELECT COUNT(*) FROM person p WHERE p.tree_id = t.id),
               (SELECT COUNT(*) FROM family f WHERE f.tree_id = t.id)
        FROM tree t
    """
    if public_only:
        query += " WHERE t.is_public = 1"
    query += " ORDER BY t.created_at, t.id"

    return [
        {
            "id": tid,
            "name": name,
            "is_public": bool(is_public),
            "persons": n_persons,
            "families": n_families,
        }
        for tid, name, is_public, n_persons, n_families in conn.execute(query).fetchall()
    ]
