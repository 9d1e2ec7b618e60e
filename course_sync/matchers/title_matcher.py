from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Tuple

from course_sync.models import (
    DbCourse,
    DbLesson,
    DbModule,
    DbSnapshot,
    MatchReport,
    MatchResult,
    ParsedExport,
)
from course_sync.parsers.content_formatter import decode_entities

# Trailing video length appended to LearnDash titles, e.g. "The Blues – 3.05".
_TIMECODE = re.compile(r"[–—-]\s*\d+\.\d+\s*$")

ModuleKey = Tuple[str, str]


def normalize_title(title: Optional[str]) -> str:
    """Decode entities, lowercase, collapse whitespace and drop a trailing timecode."""
    text = decode_entities(title or "").lower()
    text = re.sub(r"\s+", " ", text)
    text = _TIMECODE.sub("", text)
    return text.strip()


def match_courses(wp_courses: Dict[str, str], db_courses: Iterable[DbCourse]) -> Dict[str, str]:
    """
    Map WordPress course ids to database course ids.

    A database course matches when either normalized title contains the
    other.  Candidates are tried in the order given and the first hit
    wins, so two DB courses sharing a name fragment ("Guitar" and
    "Guitar Basics") resolve by position.
    """
    candidates = [(c.id, normalize_title(c.title)) for c in db_courses]
    course_map: Dict[str, str] = {}
    for wp_id, wp_title in wp_courses.items():
        wp_norm = normalize_title(wp_title)
        if not wp_norm:
            continue
        for db_id, db_norm in candidates:
            if db_norm and (db_norm in wp_norm or wp_norm in db_norm):
                course_map[wp_id] = db_id
                break
    return course_map


def index_modules(db_modules: Iterable[DbModule]) -> Dict[ModuleKey, DbModule]:
    index: Dict[ModuleKey, DbModule] = {}
    for m in db_modules:
        index[(m.course_id, normalize_title(m.title))] = m
    return index


def index_lessons(db_modules: Iterable[DbModule], db_lessons: Iterable[DbLesson]) -> Dict[ModuleKey, DbLesson]:
    """Key lessons by the course owning their module; orphan lessons are left out."""
    module_course = {m.id: m.course_id for m in db_modules}
    index: Dict[ModuleKey, DbLesson] = {}
    for lesson in db_lessons:
        course_id = module_course.get(lesson.module_id)
        if course_id is None:
            continue
        index[(course_id, normalize_title(lesson.title))] = lesson
    return index


def match_modules(
    parsed: ParsedExport, course_map: Dict[str, str], module_index: Dict[ModuleKey, DbModule]
) -> List[MatchResult]:
    results: List[MatchResult] = []
    for module in parsed.modules:
        path = f"{parsed.course_name(module.wp_course_id)} > {module.title}"
        db_course_id = course_map.get(module.wp_course_id)
        if db_course_id is None:
            results.append(MatchResult(kind="module", wp_id=module.wp_id, path=path, reason="course_unmatched"))
            continue
        db_module = module_index.get((db_course_id, normalize_title(module.title)))
        if db_module is None:
            results.append(MatchResult(kind="module", wp_id=module.wp_id, path=path, reason="no_title_match"))
        else:
            results.append(MatchResult(kind="module", wp_id=module.wp_id, path=path, db_id=db_module.id))
    return results


def match_lessons(
    parsed: ParsedExport, course_map: Dict[str, str], lesson_index: Dict[ModuleKey, DbLesson]
) -> List[MatchResult]:
    """
    Resolve lessons by their own course reference.

    The parent module id carried in the export is only used to build the
    human readable path; a lesson whose module went unmatched can still
    match on ``(course, title)``.
    """
    module_titles = {m.wp_id: m.title for m in parsed.modules if m.wp_id}
    results: List[MatchResult] = []
    for lesson in parsed.lessons:
        parts = [parsed.course_name(lesson.wp_course_id)]
        if module_titles.get(lesson.wp_module_id):
            parts.append(module_titles[lesson.wp_module_id])
        parts.append(lesson.title)
        path = " > ".join(parts)

        db_course_id = course_map.get(lesson.wp_course_id)
        if db_course_id is None:
            results.append(MatchResult(kind="lesson", wp_id=lesson.wp_id, path=path, reason="course_unmatched"))
            continue
        db_lesson = lesson_index.get((db_course_id, normalize_title(lesson.title)))
        if db_lesson is None:
            results.append(MatchResult(kind="lesson", wp_id=lesson.wp_id, path=path, reason="no_title_match"))
        else:
            results.append(MatchResult(kind="lesson", wp_id=lesson.wp_id, path=path, db_id=db_lesson.id))
    return results


def match_export(parsed: ParsedExport, snapshot: DbSnapshot) -> MatchReport:
    """Run the course, module and lesson tiers against one database snapshot."""
    course_map = match_courses(parsed.wp_courses, snapshot.courses)
    unmatched_courses = [title for wp_id, title in parsed.wp_courses.items() if wp_id not in course_map]
    return MatchReport(
        course_map=course_map,
        unmatched_courses=unmatched_courses,
        modules=match_modules(parsed, course_map, index_modules(snapshot.modules)),
        lessons=match_lessons(parsed, course_map, index_lessons(snapshot.modules, snapshot.lessons)),
    )
