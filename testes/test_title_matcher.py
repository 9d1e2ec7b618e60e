import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from course_sync.matchers.title_matcher import match_courses, match_export, normalize_title
from course_sync.models import (
    DbCourse,
    DbLesson,
    DbModule,
    DbSnapshot,
    ParsedExport,
    ParsedLesson,
    ParsedModule,
)


def test_timecode_and_whitespace_are_ignored():
    assert normalize_title("The Blues – 3.05") == normalize_title("the   blues")
    assert normalize_title("Scales - 12.40") == "scales"
    assert normalize_title("Intro &#8211; 2.15") == "intro"
    assert normalize_title("  Rock &amp; Roll  ") == "rock & roll"


def test_timecode_only_stripped_at_the_end():
    assert normalize_title("Take 5 – 3.05 remix") == "take 5 – 3.05 remix"


def test_course_matches_by_containment_in_either_direction():
    db = [DbCourse(id="c1", title="Blues Guitar Masterclass"), DbCourse(id="c2", title="Piano")]
    wp = {"10": "Blues Guitar", "11": "Jazz Piano Basics", "12": "Drums"}
    assert match_courses(wp, db) == {"10": "c1", "11": "c2"}


def test_course_first_match_wins_on_overlapping_names():
    db = [DbCourse(id="c1", title="Guitar"), DbCourse(id="c2", title="Guitar Basics")]
    assert match_courses({"10": "Guitar Basics"}, db) == {"10": "c1"}


def test_empty_titles_never_match():
    db = [DbCourse(id="c1", title=""), DbCourse(id="c2", title="Blues")]
    assert match_courses({"10": "Blues"}, db) == {"10": "c2"}
    assert match_courses({"11": "   "}, db) == {}


def _snapshot():
    return DbSnapshot(
        courses=[DbCourse(id="c1", title="Blues Guitar"), DbCourse(id="c2", title="Music Theory")],
        modules=[
            DbModule(id="m1", course_id="c1", title="Intro"),
            DbModule(id="m2", course_id="c1", title="Shuffles"),
            DbModule(id="m3", course_id="c2", title="Intro"),
        ],
        lessons=[
            DbLesson(id="l1", module_id="m1", title="Turnarounds – 4.10"),
            DbLesson(id="l2", module_id="m3", title="Intervals"),
        ],
    )


def test_modules_match_exactly_within_resolved_course():
    parsed = ParsedExport(
        wp_courses={"10": "Blues Guitar"},
        modules=[
            ParsedModule(title="INTRO", wp_id="20", wp_course_id="10"),
            ParsedModule(title="Intro to Shuffles", wp_id="21", wp_course_id="10"),
        ],
    )
    report = match_export(parsed, _snapshot())
    assert report.course_map == {"10": "c1"}
    assert report.modules[0].db_id == "m1"
    assert not report.modules[1].matched
    assert report.modules[1].reason == "no_title_match"
    assert report.modules[1].path == "Blues Guitar > Intro to Shuffles"


def test_lesson_matches_on_course_even_when_module_does_not():
    parsed = ParsedExport(
        wp_courses={"10": "Blues Guitar"},
        modules=[ParsedModule(title="Week 1", wp_id="20", wp_course_id="10")],
        lessons=[ParsedLesson(title="Turnarounds", wp_id="30", wp_course_id="10", wp_module_id="20")],
    )
    report = match_export(parsed, _snapshot())
    assert not report.modules[0].matched
    assert report.lessons[0].db_id == "l1"
    assert report.lessons[0].path == "Blues Guitar > Week 1 > Turnarounds"


def test_unmatched_course_unmatches_everything_beneath_it():
    parsed = ParsedExport(
        wp_courses={"10": "Banjo Bootcamp"},
        modules=[ParsedModule(title="Intro", wp_id="20", wp_course_id="10")],
        lessons=[ParsedLesson(title="Intervals", wp_id="30", wp_course_id="10", wp_module_id="20")],
    )
    report = match_export(parsed, _snapshot())
    assert report.course_map == {}
    assert report.unmatched_courses == ["Banjo Bootcamp"]
    assert [(m.reason, m.path) for m in report.unmatched_modules()] == [
        ("course_unmatched", "Banjo Bootcamp > Intro")
    ]
    assert [(lsn.reason, lsn.path) for lsn in report.unmatched_lessons()] == [
        ("course_unmatched", "Banjo Bootcamp > Intro > Intervals")
    ]


def test_lessons_whose_module_is_missing_from_db_are_not_indexed():
    snapshot = _snapshot()
    snapshot.lessons.append(DbLesson(id="l9", module_id="gone", title="Ghost"))
    parsed = ParsedExport(
        wp_courses={"10": "Blues Guitar"},
        lessons=[ParsedLesson(title="Ghost", wp_id="30", wp_course_id="10")],
    )
    report = match_export(parsed, snapshot)
    assert report.lessons[0].reason == "no_title_match"
    assert report.lessons[0].path == "Blues Guitar > Ghost"


def test_duplicate_db_titles_resolve_to_the_last_stored_row():
    snapshot = _snapshot()
    snapshot.modules.append(DbModule(id="m9", course_id="c1", title="Intro &#8211; 2.15"))
    snapshot.lessons.append(DbLesson(id="l9", module_id="m9", title="turnarounds"))
    parsed = ParsedExport(
        wp_courses={"10": "Blues Guitar"},
        modules=[ParsedModule(title="Intro", wp_id="20", wp_course_id="10")],
        lessons=[ParsedLesson(title="Turnarounds", wp_id="30", wp_course_id="10", wp_module_id="20")],
    )
    report = match_export(parsed, snapshot)
    assert report.modules[0].db_id == "m9"
    assert report.lessons[0].db_id == "l9"
