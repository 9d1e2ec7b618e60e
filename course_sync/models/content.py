from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

EntityKind = Literal["course", "module", "lesson"]

ACTIONS = ("audit", "parse-xml", "sync-content")


class RawExportItem(BaseModel):
    wp_id: str = ""
    kind: EntityKind
    raw_title: str = Field(..., min_length=1)
    raw_content: str = ""
    course_ref_id: str = ""
    parent_module_ref_id: str = ""


class ParsedModule(BaseModel):
    title: str
    wp_id: str
    wp_course_id: str
    formatted_description: str = ""
    youtube_urls: List[str] = Field(default_factory=list)
    spotify_urls: List[str] = Field(default_factory=list)
    order: int = 0


class ParsedLesson(BaseModel):
    title: str
    wp_id: str
    wp_course_id: str
    wp_module_id: str = ""
    formatted_content: str = ""
    video_url: Optional[str] = None
    soundslice_url: Optional[str] = None
    order: int = 0


class ParsedExport(BaseModel):
    modules: List[ParsedModule] = Field(default_factory=list)
    lessons: List[ParsedLesson] = Field(default_factory=list)
    wp_courses: Dict[str, str] = Field(default_factory=dict)

    def course_name(self, wp_course_id: str) -> str:
        return self.wp_courses.get(wp_course_id) or f"WP Course {wp_course_id}"


class DbCourse(BaseModel):
    id: str
    title: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, v: Any) -> Any:
        return str(v) if v is not None else v


class DbModule(BaseModel):
    id: str
    course_id: str
    title: str = ""
    description: Optional[str] = None
    order_index: Optional[int] = None

    @field_validator("id", "course_id", mode="before")
    @classmethod
    def _stringify_ids(cls, v: Any) -> Any:
        return str(v) if v is not None else v


class DbLesson(BaseModel):
    id: str
    module_id: str
    title: str = ""
    content: Optional[str] = None
    video_url: Optional[str] = None

    @field_validator("id", "module_id", mode="before")
    @classmethod
    def _stringify_ids(cls, v: Any) -> Any:
        return str(v) if v is not None else v


class DbSnapshot(BaseModel):
    courses: List[DbCourse] = Field(default_factory=list)
    modules: List[DbModule] = Field(default_factory=list)
    lessons: List[DbLesson] = Field(default_factory=list)


class MatchResult(BaseModel):
    kind: EntityKind
    wp_id: str
    path: str
    db_id: Optional[str] = None
    reason: Optional[Literal["course_unmatched", "no_title_match"]] = None

    @property
    def matched(self) -> bool:
        return self.db_id is not None


class MatchReport(BaseModel):
    course_map: Dict[str, str] = Field(default_factory=dict)
    unmatched_courses: List[str] = Field(default_factory=list)
    modules: List[MatchResult] = Field(default_factory=list)
    lessons: List[MatchResult] = Field(default_factory=list)

    def unmatched_modules(self) -> List[MatchResult]:
        return [m for m in self.modules if not m.matched]

    def unmatched_lessons(self) -> List[MatchResult]:
        return [lesson for lesson in self.lessons if not lesson.matched]


class ProposedUpdate(BaseModel):
    table: Literal["modules", "lessons"]
    id: str
    field: Literal["description", "content", "video_url"]
    value: str
    title: str = ""


class ReconciliationPlan(BaseModel):
    proposals: List[ProposedUpdate] = Field(default_factory=list)

    def _rows(self, table: str) -> List[Dict[str, str]]:
        rows: Dict[str, Dict[str, str]] = {}
        for p in self.proposals:
            if p.table != table:
                continue
            rows.setdefault(p.id, {"id": p.id})[p.field] = p.value
        return list(rows.values())

    def module_rows(self) -> List[Dict[str, str]]:
        """One ``{"id", "description"}`` payload per module to upsert."""
        return self._rows("modules")

    def lesson_rows(self) -> List[Dict[str, str]]:
        """One payload per lesson, holding only the fields being filled."""
        return self._rows("lessons")

    def count(self, table: str, field: Optional[str] = None) -> int:
        return sum(1 for p in self.proposals if p.table == table and (field is None or p.field == field))


class SyncRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str
    xml_content: Optional[str] = Field(None, alias="xmlContent")
    dry_run: bool = Field(True, alias="dryRun")

    @field_validator("dry_run", mode="before")
    @classmethod
    def _only_false_applies(cls, v: Any) -> bool:
        # Anything but a literal false, including "false", 0 and null, stays a dry run.
        return v is not False

    @field_validator("action", mode="before")
    @classmethod
    def _known_action(cls, v: Any) -> Any:
        if v not in ACTIONS:
            raise ValueError("Unknown action. Use: " + ", ".join(ACTIONS))
        return v

    @model_validator(mode="after")
    def _xml_required(self) -> "SyncRequest":
        if self.action != "audit" and not (self.xml_content or "").strip():
            raise ValueError("XML content required")
        return self
