"""
Pydantic records shared by every stage of the sync pipeline.
"""

from .content import (
    ACTIONS,
    DbCourse,
    DbLesson,
    DbModule,
    DbSnapshot,
    MatchReport,
    MatchResult,
    ParsedExport,
    ParsedLesson,
    ParsedModule,
    ProposedUpdate,
    RawExportItem,
    ReconciliationPlan,
    SyncRequest,
)

__all__ = [
    "ACTIONS",
    "DbCourse",
    "DbLesson",
    "DbModule",
    "DbSnapshot",
    "MatchReport",
    "MatchResult",
    "ParsedExport",
    "ParsedLesson",
    "ParsedModule",
    "ProposedUpdate",
    "RawExportItem",
    "ReconciliationPlan",
    "SyncRequest",
]
