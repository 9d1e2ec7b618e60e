"""
Content parsers used by the sync pipeline.

This subpackage exposes ``format_content`` and ``decode_entities`` from
:mod:`course_sync.parsers.content_formatter` and the media reference
helpers from :mod:`course_sync.parsers.media_extractor`.
"""

from .content_formatter import decode_entities, format_content
from .media_extractor import MediaRefs, extract_media, pick_primary_video

__all__ = ["decode_entities", "format_content", "MediaRefs", "extract_media", "pick_primary_video"]
