"""
Persistence for the live course content.
"""

from .content_store import ContentStore, open_store

__all__ = ["ContentStore", "open_store"]
