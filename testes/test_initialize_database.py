import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
pytest.importorskip("duckdb")
pytest.importorskip("pandas")

from course_sync.stores.content_store import open_store
from scripts.initialize_database import initialize_database


def _write_csvs(csv_dir):
    (csv_dir / "courses.csv").write_text("id,title\n1,Blues Guitar\n2,Music Theory\n", encoding="utf-8")
    (csv_dir / "modules.csv").write_text(
        "id,course_id,title,description,order_index\n"
        "10,1,Intro,,0\n"
        "11,1,Shuffles,Twelve bar shuffles,\n",
        encoding="utf-8",
    )
    (csv_dir / "lessons.csv").write_text(
        "ID,Module_ID,Title,Content,Video_URL,extra\n"
        "100,10,Turnarounds,,https://www.youtube.com/watch?v=dQw4w9WgXcQ,x\n",
        encoding="utf-8",
    )


def test_creates_schema_without_csv_dir(tmp_path):
    db_path = str(tmp_path / "courses.duckdb")
    assert initialize_database(db_path) == {"courses": 0, "modules": 0, "lessons": 0}
    with open_store(db_path) as store:
        assert store.load_snapshot().courses == []


def test_loads_csvs_and_maps_blank_cells_to_null(tmp_path):
    _write_csvs(tmp_path)
    db_path = str(tmp_path / "courses.duckdb")
    inserted = initialize_database(db_path, str(tmp_path))
    assert inserted == {"courses": 2, "modules": 2, "lessons": 1}

    with open_store(db_path) as store:
        snapshot = store.load_snapshot()
    intro, shuffles = snapshot.modules
    assert intro.id == "10" and intro.course_id == "1"
    assert intro.description is None and intro.order_index == 0
    assert shuffles.description == "Twelve bar shuffles" and shuffles.order_index is None
    turnarounds = snapshot.lessons[0]
    assert turnarounds.content is None
    assert turnarounds.video_url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def test_tables_with_rows_are_not_reloaded(tmp_path):
    _write_csvs(tmp_path)
    db_path = str(tmp_path / "courses.duckdb")
    initialize_database(db_path, str(tmp_path))
    assert initialize_database(db_path, str(tmp_path)) == {"courses": 0, "modules": 0, "lessons": 0}
    with open_store(db_path) as store:
        assert len(store.fetch_courses()) == 2


def test_missing_columns_are_reported(tmp_path):
    (tmp_path / "courses.csv").write_text("id,name\n1,Blues Guitar\n", encoding="utf-8")
    with pytest.raises(ValueError, match="title"):
        initialize_database(str(tmp_path / "courses.duckdb"), str(tmp_path))
