import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
pytest.importorskip("duckdb")

from course_sync.stores.content_store import open_store
from testes.store_fixtures import insert_rows


@pytest.fixture
def store(tmp_path):
    s = open_store(str(tmp_path / "data" / "courses.duckdb"), create=True)
    insert_rows(s, "courses", [{"id": "c1", "title": "Blues Guitar"}])
    insert_rows(s, "modules", [
        {"id": "m1", "course_id": "c1", "title": "Intro", "description": None, "order_index": 0},
        {"id": "m2", "course_id": "c1", "title": "Shuffles", "description": "Existing", "order_index": 1},
    ])
    insert_rows(s, "lessons", [
        {"id": "l1", "module_id": "m1", "title": "Turnarounds", "content": "Keep me", "video_url": None},
        {"id": "l2", "module_id": "m1", "title": "Endings", "content": None, "video_url": None},
    ])
    yield s
    s.close()


def test_snapshot_reads_all_three_tables(store):
    snapshot = store.load_snapshot()
    assert [c.title for c in snapshot.courses] == ["Blues Guitar"]
    assert [(m.id, m.order_index) for m in snapshot.modules] == [("m1", 0), ("m2", 1)]
    assert snapshot.modules[0].description is None
    assert [lsn.id for lsn in snapshot.lessons] == ["l1", "l2"]


def test_upsert_only_touches_given_columns(store):
    written = store.upsert_lessons([
        {"id": "l1", "video_url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"},
        {"id": "l2", "content": "New text", "video_url": "dyntube:k1"},
    ])
    assert written == 2
    lessons = {lsn.id: lsn for lsn in store.fetch_lessons()}
    assert lessons["l1"].content == "Keep me"
    assert lessons["l1"].video_url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    assert lessons["l2"].content == "New text"
    assert lessons["l2"].video_url == "dyntube:k1"


def test_upsert_is_idempotent(store):
    rows = [{"id": "m1", "description": "Filled"}]
    store.upsert_modules(rows)
    store.upsert_modules(rows)
    modules = {m.id: m for m in store.fetch_modules()}
    assert modules["m1"].description == "Filled"
    assert modules["m2"].description == "Existing"
    assert len(modules) == 2


def test_upsert_refuses_non_content_columns(store):
    with pytest.raises(ValueError):
        store.upsert_modules([{"id": "m1", "title": "Renamed"}])
    assert store.fetch_modules()[0].title == "Intro"


def test_numeric_ids_are_read_as_strings(tmp_path):
    s = open_store(str(tmp_path / "ids.duckdb"))
    try:
        s.con.execute("CREATE TABLE courses (id INTEGER, title VARCHAR)")
        s.con.execute("INSERT INTO courses VALUES (7, 'Piano')")
        assert s.fetch_courses()[0].id == "7"
    finally:
        s.close()
