"""Seeding helper for tests that need rows in a temporary DuckDB store."""


def insert_rows(store, table, rows):
    for row in rows:
        columns = list(row)
        placeholders = ", ".join("?" for _ in columns)
        store.con.execute(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
            [row[c] for c in columns],
        )
