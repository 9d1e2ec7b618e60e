"""
Reconciliation of parsed export content against stored course content.

The planner only ever proposes filling empty or near-empty fields; it
never deletes and never replaces authored text.
"""

from .planner import Thresholds, plan_updates

__all__ = ["Thresholds", "plan_updates"]
