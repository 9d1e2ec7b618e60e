"""
DuckDB-backed access to the live course tables.

The sync engine needs very little from its store: three plain reads
(``courses``, ``modules``, ``lessons``) and one keyed upsert per entity
type.  :class:`ContentStore` wraps a DuckDB connection and exposes
exactly that, returning pydantic records so the rest of the pipeline
never touches raw tuples.

Upserts are keyed on ``id`` and only write the columns present in each
row payload, so a lesson row carrying just ``video_url`` leaves its
``content`` untouched.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Iterable, List, Sequence

import duckdb

from course_sync.models import DbCourse, DbLesson, DbModule, DbSnapshot

SCHEMA = {
    "courses": """
        CREATE TABLE IF NOT EXISTS courses (
            id VARCHAR PRIMARY KEY,
            title VARCHAR NOT NULL
        )
    """,
    "modules": """
        CREATE TABLE IF NOT EXISTS modules (
            id VARCHAR PRIMARY KEY,
            course_id VARCHAR NOT NULL,
            title VARCHAR NOT NULL,
            description VARCHAR,
            order_index INTEGER
        )
    """,
    "lessons": """
        CREATE TABLE IF NOT EXISTS lessons (
            id VARCHAR PRIMARY KEY,
            module_id VARCHAR NOT NULL,
            title VARCHAR NOT NULL,
            content VARCHAR,
            video_url VARCHAR
        )
    """,
}

# Columns the engine is allowed to write, per table.
WRITABLE_COLUMNS = {
    "modules": ("description",),
    "lessons": ("content", "video_url"),
}


class ContentStore:
    """Thin wrapper around a DuckDB database holding the course tables."""

    def __init__(self, db_path: str) -> None:
        if db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)
        self.db_path = db_path
        self.con = duckdb.connect(database=db_path, read_only=False)

    def __enter__(self) -> "ContentStore":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def close(self) -> None:
        self.con.close()

    def ensure_schema(self) -> None:
        for ddl in SCHEMA.values():
            self.con.execute(ddl)

    def _select(self, sql: str) -> List[Dict[str, Any]]:
        cursor = self.con.execute(sql)
        columns = [d[0] for d in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def fetch_courses(self) -> List[DbCourse]:
        return [DbCourse(**row) for row in self._select("SELECT id, title FROM courses ORDER BY rowid")]

    def fetch_modules(self) -> List[DbModule]:
        rows = self._select(
            "SELECT id, course_id, title, description, order_index FROM modules ORDER BY rowid"
        )
        return [DbModule(**row) for row in rows]

    def fetch_lessons(self) -> List[DbLesson]:
        rows = self._select("SELECT id, module_id, title, content, video_url FROM lessons ORDER BY rowid")
        return [DbLesson(**row) for row in rows]

    def load_snapshot(self) -> DbSnapshot:
        """Read the three tables; each read is independent of the others."""
        return DbSnapshot(
            courses=self.fetch_courses(),
            modules=self.fetch_modules(),
            lessons=self.fetch_lessons(),
        )

    def upsert(self, table: str, rows: Iterable[Dict[str, Any]]) -> int:
        """
        Write ``rows`` into ``table`` keyed by ``id``.

        Each row must hold ``id`` plus any subset of the table's writable
        columns.  Rows are grouped by their column set so each group is a
        single ``executemany`` call.

        :return: The number of rows written.
        :raises ValueError: if a row targets a column the engine may not write.
        """
        allowed = WRITABLE_COLUMNS[table]
        groups: Dict[Sequence[str], List[List[Any]]] = {}
        for row in rows:
            columns = tuple(sorted(k for k in row if k != "id"))
            unknown = [c for c in columns if c not in allowed]
            if unknown:
                raise ValueError(f"Cannot write column(s) {unknown} on table '{table}'")
            if not columns:
                continue
            groups.setdefault(columns, []).append([row[c] for c in columns] + [row["id"]])

        written = 0
        for columns, params in groups.items():
            assignments = ", ".join(f"{c} = ?" for c in columns)
            self.con.executemany(f"UPDATE {table} SET {assignments} WHERE id = ?", params)
            written += len(params)
        return written

    def upsert_modules(self, rows: Iterable[Dict[str, Any]]) -> int:
        return self.upsert("modules", rows)

    def upsert_lessons(self, rows: Iterable[Dict[str, Any]]) -> int:
        return self.upsert("lessons", rows)


def open_store(db_path: str, *, create: bool = False) -> ContentStore:
    """Open the store at ``db_path``, creating the tables when ``create`` is set."""
    store = ContentStore(db_path)
    if create:
        store.ensure_schema()
    return store
