"""
High-level orchestration of the WordPress course-content sync.

This module defines a :class:`CourseContentSyncTool` class that ties
together the extractor, parsers, matcher, planner and content store
into the three operations exposed to operators:

``audit``
    Database only.  Lists modules that have no lessons, grouped by
    course with the worst courses first.
``parse-xml``
    Export only.  Parses the document and reports totals plus a small
    per-course sample, to sanity-check an export before reconciling.
``sync-content``
    The full pipeline: parse, load a database snapshot, match, plan and,
    only when the caller passes ``dryRun: false``, write the proposed
    fills as keyed upserts.

Configuration is supplied via a JSON file path or directly as a
dictionary.  The ``database`` section holds the DuckDB ``path``; the
``sync`` section holds the length floors, sample sizes and the report
directory.  Requests are plain dictionaries shaped like
``{"action": ..., "xmlContent": ..., "dryRun": ...}`` and
:meth:`CourseContentSyncTool.handle_request` returns an HTTP-style
``(status, payload)`` pair.
"""

from __future__ import annotations

import json
import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from course_sync.extractors.wordpress_extractor import parse_wordpress_export
from course_sync.matchers.title_matcher import match_export
from course_sync.models import MatchReport, ReconciliationPlan, SyncRequest
from course_sync.reconcilers.planner import Thresholds, plan_updates
from course_sync.stores.content_store import ContentStore, open_store
from course_sync.utils.errors import BackendNotConfiguredError, SyncRequestError
from course_sync.utils.reports import report_error, report_ok


def _request_error_message(exc: ValidationError) -> str:
    err = exc.errors()[0]
    if err.get("type") == "missing":
        return "Action required"
    ctx_error = (err.get("ctx") or {}).get("error")
    return str(ctx_error) if ctx_error else err.get("msg", "Invalid request")


class CourseContentSyncTool:
    """
    Encapsulates configuration and behavior for reconciling a LearnDash
    export with the live course database.  Unmatched entities and
    proposed or applied updates are recorded using the
    :mod:`course_sync.utils.reports` module.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, *, config_file: Optional[str] = None) -> None:
        if config_file and os.path.exists(config_file):
            with open(config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        elif config is None:
            config = {}

        config.setdefault("database", {})
        config["database"].setdefault("path", os.getenv("COURSE_SYNC_DB_PATH", ""))

        config.setdefault("sync", {})
        config["sync"].setdefault("module_text_floor", 50)
        config["sync"].setdefault("module_existing_floor", 100)
        config["sync"].setdefault("lesson_text_floor", 20)
        config["sync"].setdefault("lesson_existing_floor", 50)
        config["sync"].setdefault("audit_description_floor", 50)
        config["sync"].setdefault("sample_limit", 30)
        config["sync"].setdefault("summary_module_limit", 5)
        config["sync"].setdefault("reports_dir", os.path.join("reports", "sync"))

        self.config = config
        self.thresholds = Thresholds.from_config(config["sync"])
        self.reports_dir: str = config["sync"]["reports_dir"]
        self.sample_limit: int = int(config["sync"]["sample_limit"])

    def log_message(self, message: str, level: str = "INFO") -> None:
        print(f"[{level}] {message}")
        os.makedirs(self.reports_dir, exist_ok=True)
        with open(os.path.join(self.reports_dir, "sync.log"), "a", encoding="utf-8") as f:
            f.write(f"{datetime.now().isoformat(timespec='seconds')} {level}: {message}\n")

    def _open_store(self) -> ContentStore:
        db_path = self.config["database"].get("path")
        if not db_path:
            raise BackendNotConfiguredError()
        return open_store(db_path)

    ###########################################################################
    # Request dispatch
    ###########################################################################

    def validate_request(self, body: Any) -> SyncRequest:
        if not isinstance(body, dict):
            raise SyncRequestError("Invalid request body")
        try:
            return SyncRequest.model_validate(body)
        except ValidationError as e:
            raise SyncRequestError(_request_error_message(e)) from e

    def handle_request(self, body: Any) -> Tuple[int, Dict[str, Any]]:
        """
        Validate and run one request.

        Malformed requests return ``400`` before any work starts.  Any
        other exception is caught here, logged once and returned as a
        ``500`` carrying the underlying message; re-running is safe
        because every write is a keyed fill of an empty field.

        :param body: The decoded JSON request.
        :return: A ``(status, payload)`` pair.
        """
        try:
            request = self.validate_request(body)
        except SyncRequestError as e:
            return e.status, {"success": False, "error": str(e)}

        try:
            if request.action == "audit":
                payload = self.audit()
            elif request.action == "parse-xml":
                payload = self.parse_xml(request.xml_content or "")
            else:
                payload = {"results": self.sync_content(request.xml_content or "", dry_run=request.dry_run)}
        except Exception as e:
            self.log_message(f"{request.action} failed: {e}", level="ERROR")
            return 500, {"success": False, "error": str(e) or e.__class__.__name__}

        return 200, {"success": True, **payload}

    ###########################################################################
    # Operations
    ###########################################################################

    def audit(self) -> Dict[str, Any]:
        """List modules without lessons, grouped by course, worst course first."""
        with self._open_store() as store:
            snapshot = store.load_snapshot()

        lesson_count: Dict[str, int] = {}
        for lesson in snapshot.lessons:
            lesson_count[lesson.module_id] = lesson_count.get(lesson.module_id, 0) + 1

        floor = int(self.config["sync"]["audit_description_floor"])
        course_titles = {c.id: c.title for c in snapshot.courses}
        by_course: Dict[str, List[Dict[str, Any]]] = {}
        for m in snapshot.modules:
            if lesson_count.get(m.id, 0):
                continue
            by_course.setdefault(m.course_id, []).append({
                "moduleId": m.id,
                "moduleTitle": m.title,
                "courseId": m.course_id,
                "courseTitle": course_titles.get(m.course_id, "Unknown"),
                "hasDescription": len(m.description or "") > floor,
                "orderIndex": m.order_index,
            })

        groups = []
        for course_id, modules in by_course.items():
            modules.sort(key=lambda d: (d["orderIndex"] is None, d["orderIndex"] or 0))
            groups.append({
                "courseId": course_id,
                "courseTitle": course_titles.get(course_id, "Unknown"),
                "emptyModuleCount": len(modules),
                "modules": modules,
            })
        groups.sort(key=lambda g: (-g["emptyModuleCount"], g["courseTitle"]))

        course_stats = []
        for course in snapshot.courses:
            modules = [m for m in snapshot.modules if m.course_id == course.id]
            course_stats.append({
                "courseId": course.id,
                "courseTitle": course.title,
                "moduleCount": len(modules),
                "lessonCount": sum(lesson_count.get(m.id, 0) for m in modules),
                "emptyModules": sum(1 for m in modules if not lesson_count.get(m.id, 0)),
            })
        course_stats.sort(key=lambda s: -s["emptyModules"])

        empty_modules = [m for g in groups for m in g["modules"]]
        self.log_message(f"Audit found {len(empty_modules)} modules without lessons")
        return {
            "totalEmptyModules": len(empty_modules),
            "emptyModules": empty_modules,
            "emptyModulesByCourse": groups,
            "courseStats": course_stats,
        }

    def parse_xml(self, xml_content: str) -> Dict[str, Any]:
        """Parse an export without touching the database and summarize it per course."""
        parsed = parse_wordpress_export(xml_content)
        limit = int(self.config["sync"]["summary_module_limit"])

        courses: Dict[str, Dict[str, Any]] = {}

        def course_entry(wp_course_id: str) -> Dict[str, Any]:
            if wp_course_id not in courses:
                courses[wp_course_id] = {
                    "course": parsed.course_name(wp_course_id),
                    "moduleCount": 0,
                    "lessonCount": 0,
                    "modules": [],
                }
            return courses[wp_course_id]

        for m in parsed.modules:
            entry = course_entry(m.wp_course_id)
            entry["moduleCount"] += 1
            if len(entry["modules"]) < limit:
                entry["modules"].append({
                    "title": m.title,
                    "hasContent": len(m.formatted_description) > self.thresholds.module_text_floor,
                    "youtubeCount": len(m.youtube_urls),
                    "spotifyCount": len(m.spotify_urls),
                })
        for lesson in parsed.lessons:
            course_entry(lesson.wp_course_id)["lessonCount"] += 1

        self.log_message(
            f"Parsed {len(parsed.wp_courses)} courses, {len(parsed.modules)} modules, {len(parsed.lessons)} lessons"
        )
        return {
            "totalCourses": len(parsed.wp_courses),
            "totalModules": len(parsed.modules),
            "totalLessons": len(parsed.lessons),
            "totalYoutubeUrls": sum(len(m.youtube_urls) for m in parsed.modules),
            "totalSpotifyUrls": sum(len(m.spotify_urls) for m in parsed.modules),
            "lessonsWithVideo": sum(1 for lesson in parsed.lessons if lesson.video_url),
            "lessonsWithSoundslice": sum(1 for lesson in parsed.lessons if lesson.soundslice_url),
            "summary": list(courses.values()),
        }

    def sync_content(self, xml_content: str, *, dry_run: bool = True) -> Dict[str, Any]:
        """
        Reconcile an export with the database and optionally apply the fills.

        :param xml_content: The export document.
        :param dry_run: When ``True`` (the default) nothing is written.
        :return: Counts, bounded unmatched samples and sample proposals.
        """
        self.log_message("Parsing export...")
        parsed = parse_wordpress_export(xml_content)

        modules_written = 0
        lessons_written = 0
        with self._open_store() as store:
            snapshot = store.load_snapshot()
            report = match_export(parsed, snapshot)
            plan = plan_updates(parsed, report, snapshot, self.thresholds)

            if not dry_run:
                module_rows = plan.module_rows()
                self.log_message(f"Applying {len(module_rows)} module updates...")
                if module_rows:
                    modules_written = store.upsert_modules(module_rows)

                lesson_rows = plan.lesson_rows()
                self.log_message(f"Applying {len(lesson_rows)} lesson updates...")
                if lesson_rows:
                    lessons_written = store.upsert_lessons(lesson_rows)

        self._write_reports(report, plan, applied=not dry_run)

        limit = self.sample_limit
        unmatched_modules = report.unmatched_modules()
        unmatched_lessons = report.unmatched_lessons()
        module_rows = plan.module_rows()
        lesson_rows = plan.lesson_rows()
        self.log_message(
            f"{'Dry-run: ' if dry_run else ''}{len(module_rows)} module and {len(lesson_rows)} lesson updates, "
            f"{len(unmatched_modules)} modules and {len(unmatched_lessons)} lessons unmatched"
        )
        return {
            "dryRun": dry_run,
            "wpCoursesFound": len(parsed.wp_courses),
            "wpModulesFound": len(parsed.modules),
            "wpLessonsFound": len(parsed.lessons),
            "coursesMapped": len(report.course_map),
            "coursesNotMapped": report.unmatched_courses[:limit],
            "moduleUpdatesQueued": len(module_rows),
            "lessonUpdatesQueued": len(lesson_rows),
            "lessonVideoUpdatesQueued": plan.count("lessons", "video_url"),
            "lessonContentUpdatesQueued": plan.count("lessons", "content"),
            "modulesNotFound": [m.path for m in unmatched_modules[:limit]],
            "lessonsNotFound": [lesson.path for lesson in unmatched_lessons[:limit]],
            "totalModulesNotFound": len(unmatched_modules),
            "totalLessonsNotFound": len(unmatched_lessons),
            "sampleModuleUpdates": [
                {"id": row["id"], "descLen": len(row["description"]), "preview": row["description"][:200]}
                for row in module_rows[:3]
            ],
            "sampleLessonUpdates": [
                {
                    "id": row["id"],
                    "fields": sorted(k for k in row if k != "id"),
                    "videoUrl": row.get("video_url"),
                    "contentLen": len(row.get("content") or ""),
                }
                for row in lesson_rows[:3]
            ],
            "modulesUpdated": modules_written,
            "lessonsUpdated": lessons_written,
        }

    def _write_reports(self, report: MatchReport, plan: ReconciliationPlan, *, applied: bool) -> None:
        for title in report.unmatched_courses:
            report_error("COURSE_NOT_MAPPED", {"kind": "course", "path": title}, report_dir=self.reports_dir)
        for match in report.unmatched_modules() + report.unmatched_lessons():
            code = "MODULE_NOT_FOUND" if match.kind == "module" else "LESSON_NOT_FOUND"
            report_error(code, match.model_dump(exclude={"db_id"}), report_dir=self.reports_dir)
        code = "UPDATE_APPLIED" if applied else "UPDATE_PROPOSED"
        for proposal in plan.proposals:
            report_ok(
                code,
                {"table": proposal.table, "id": proposal.id, "title": proposal.title, "field": proposal.field},
                {"valueLen": len(proposal.value)},
                report_dir=self.reports_dir,
            )
