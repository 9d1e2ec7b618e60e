"""
Media reference extraction from raw LearnDash content.

Four kinds of references are recognized: YouTube videos, Spotify
items, Soundslice notation players and self-hosted videos (DynTube
embed keys or R2 bucket files).  YouTube and Spotify references are
returned as ordered, de-duplicated lists of canonical URLs; Soundslice
and hosted video only ever yield the first match.

The extractor reads the *raw* post content, never the output of
:func:`course_sync.parsers.content_formatter.format_content`, since
the formatter removes the very embeds we are looking for.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

_YOUTUBE = re.compile(
    r"(?:youtube(?:-nocookie)?\.com/(?:watch\?(?:[^\"'\s<>]*?&(?:amp;)?)?v=|embed/|v/)|youtu\.be/)"
    r"([A-Za-z0-9_-]{11})",
    re.IGNORECASE,
)
_SPOTIFY = re.compile(
    r"open\.spotify\.com/(?:embed/)?(track|album|playlist|artist)/([A-Za-z0-9]+)",
    re.IGNORECASE,
)
# Instrument shortcodes are tried in this order before the bare slice URL.
_SOUNDSLICE_INSTRUMENTS = ("drum", "vocals", "bass", "guitar")
_SOUNDSLICE_URL = re.compile(r"https?://(?:www\.)?soundslice\.com/slices/[A-Za-z0-9]+", re.IGNORECASE)
_DYNTUBE_KEY = re.compile(r"data-dyntube-key=[\"']([^\"']+)[\"']", re.IGNORECASE)
_R2_VIDEO = re.compile(r"https?://pub-[a-z0-9]+\.r2\.dev/[^\s<>\"']+?\.(?:mp4|webm|mov)\b", re.IGNORECASE)


@dataclass
class MediaRefs:
    youtube_urls: List[str] = field(default_factory=list)
    spotify_urls: List[str] = field(default_factory=list)
    soundslice_url: Optional[str] = None
    hosted_video_url: Optional[str] = None


def extract_youtube_urls(content: str) -> List[str]:
    """Return canonical ``watch?v=`` URLs, one per distinct video id."""
    urls: List[str] = []
    seen = set()
    for match in _YOUTUBE.finditer(content or ""):
        video_id = match.group(1)
        if video_id in seen:
            continue
        seen.add(video_id)
        urls.append(f"https://www.youtube.com/watch?v={video_id}")
    return urls


def extract_spotify_urls(content: str) -> List[str]:
    """Return canonical ``open.spotify.com/{type}/{id}`` URLs without duplicates."""
    urls: List[str] = []
    seen = set()
    for match in _SPOTIFY.finditer(content or ""):
        key = f"{match.group(1).lower()}/{match.group(2)}"
        if key in seen:
            continue
        seen.add(key)
        urls.append(f"https://open.spotify.com/{key}")
    return urls


def extract_soundslice_url(content: str) -> Optional[str]:
    if not content:
        return None
    for instrument in _SOUNDSLICE_INSTRUMENTS:
        pattern = r"\[" + instrument + r"\s+url\s*=\s*[\"']([^\"']+)[\"']\s*\]"
        match = re.search(pattern, content, re.IGNORECASE)
        if match:
            return match.group(1)
    match = _SOUNDSLICE_URL.search(content)
    return match.group(0) if match else None


def extract_hosted_video_url(content: str) -> Optional[str]:
    """
    Find a self-hosted video reference.

    A DynTube embed key wins over an R2 bucket URL and is returned as a
    ``dyntube:<key>`` marker that the player resolves later.
    """
    if not content:
        return None
    match = _DYNTUBE_KEY.search(content)
    if match:
        return f"dyntube:{match.group(1)}"
    match = _R2_VIDEO.search(content)
    return match.group(0) if match else None


def extract_media(content: str) -> MediaRefs:
    return MediaRefs(
        youtube_urls=extract_youtube_urls(content),
        spotify_urls=extract_spotify_urls(content),
        soundslice_url=extract_soundslice_url(content),
        hosted_video_url=extract_hosted_video_url(content),
    )


def pick_primary_video(refs: MediaRefs) -> Optional[str]:
    """Soundslice, then hosted video, then the first YouTube URL."""
    if refs.soundslice_url:
        return refs.soundslice_url
    if refs.hosted_video_url:
        return refs.hosted_video_url
    return refs.youtube_urls[0] if refs.youtube_urls else None
