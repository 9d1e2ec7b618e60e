"""
Title normalization and hierarchical WordPress → database matching.
"""

from .title_matcher import match_courses, match_export, normalize_title

__all__ = ["match_courses", "match_export", "normalize_title"]
