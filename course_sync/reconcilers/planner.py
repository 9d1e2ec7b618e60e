"""
Safe-to-backfill decisions for matched modules and lessons.

:func:`plan_updates` walks the match results produced by
:func:`course_sync.matchers.title_matcher.match_export` and compares
each matched WordPress entity with the stored row taken from the
snapshot loaded in the same run.  A field is proposed only when it is
empty or shorter than a floor, and never when it already holds the
value we would write.  Because the stored state is re-read on every
invocation, a second run after applying the plan proposes nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from course_sync.models import (
    DbSnapshot,
    MatchReport,
    ParsedExport,
    ParsedModule,
    ProposedUpdate,
    ReconciliationPlan,
)


@dataclass(frozen=True)
class Thresholds:
    module_text_floor: int = 50
    module_existing_floor: int = 100
    lesson_text_floor: int = 20
    lesson_existing_floor: int = 50

    @classmethod
    def from_config(cls, sync_cfg: Dict[str, Any]) -> "Thresholds":
        return cls(
            module_text_floor=int(sync_cfg.get("module_text_floor", cls.module_text_floor)),
            module_existing_floor=int(sync_cfg.get("module_existing_floor", cls.module_existing_floor)),
            lesson_text_floor=int(sync_cfg.get("lesson_text_floor", cls.lesson_text_floor)),
            lesson_existing_floor=int(sync_cfg.get("lesson_existing_floor", cls.lesson_existing_floor)),
        )


def build_module_description(module: ParsedModule) -> str:
    """Formatted text followed by the module's YouTube and Spotify URLs, one per line."""
    description = module.formatted_description
    if module.youtube_urls:
        description += "\n\n" + "\n".join(module.youtube_urls)
    if module.spotify_urls:
        description += "\n\n" + "\n".join(module.spotify_urls)
    return description


def _is_short(value: Optional[str], floor: int) -> bool:
    return len(value or "") < floor


def plan_updates(
    parsed: ParsedExport,
    report: MatchReport,
    snapshot: DbSnapshot,
    thresholds: Optional[Thresholds] = None,
) -> ReconciliationPlan:
    """
    Build the list of field fills for every matched module and lesson.

    :param parsed: The parsed export.
    :param report: Match results, in the same order as ``parsed``.
    :param snapshot: Stored rows read in this invocation.
    :param thresholds: Length floors; defaults match the production tool.
    :return: A :class:`ReconciliationPlan` holding only fill proposals.
    """
    thresholds = thresholds or Thresholds()
    modules_by_id = {m.id: m for m in snapshot.modules}
    lessons_by_id = {lesson.id: lesson for lesson in snapshot.lessons}
    proposals: List[ProposedUpdate] = []
    # Several export entities can resolve to one row.  The first one carrying
    # usable text owns the field, whether or not it ends up proposing, so a
    # later duplicate never competes with a value already written.
    claimed = set()

    def claim(table: str, row_id: str, field: str) -> bool:
        key = (table, row_id, field)
        if key in claimed:
            return False
        claimed.add(key)
        return True

    for wp_module, match in zip(parsed.modules, report.modules):
        db_module = modules_by_id.get(match.db_id) if match.matched else None
        if db_module is None:
            continue
        if len(wp_module.formatted_description) <= thresholds.module_text_floor:
            continue
        if not claim("modules", db_module.id, "description"):
            continue
        if not _is_short(db_module.description, thresholds.module_existing_floor):
            continue
        description = build_module_description(wp_module)
        if description == db_module.description:
            continue
        proposals.append(ProposedUpdate(
            table="modules", id=db_module.id, field="description", value=description, title=db_module.title,
        ))

    for wp_lesson, match in zip(parsed.lessons, report.lessons):
        db_lesson = lessons_by_id.get(match.db_id) if match.matched else None
        if db_lesson is None:
            continue
        if wp_lesson.video_url and claim("lessons", db_lesson.id, "video_url") and not db_lesson.video_url:
            proposals.append(ProposedUpdate(
                table="lessons", id=db_lesson.id, field="video_url", value=wp_lesson.video_url, title=db_lesson.title,
            ))
        if (
            len(wp_lesson.formatted_content) > thresholds.lesson_text_floor
            and claim("lessons", db_lesson.id, "content")
            and _is_short(db_lesson.content, thresholds.lesson_existing_floor)
            and wp_lesson.formatted_content != db_lesson.content
        ):
            proposals.append(ProposedUpdate(
                table="lessons", id=db_lesson.id, field="content", value=wp_lesson.formatted_content,
                title=db_lesson.title,
            ))

    return ReconciliationPlan(proposals=proposals)
