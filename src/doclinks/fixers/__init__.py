"""Fix framework for automatically repairing documentation links.

Provides the anchor matcher, one planner per fixable issue kind, the
planner registry, and the round-based fix engine.
"""

from __future__ import annotations

from doclinks.fixers.anchors import get_possible_matches
from doclinks.fixers.base import BasePlanner, FixPlan, decode_link, split_link
from doclinks.fixers.engine import (
    FixEngine,
    FixIOError,
    FixSummary,
    fix_issues,
    plan_fixes,
)
from doclinks.fixers.planners import (
    DisallowExtensionPlanner,
    EmptyAnchorPlanner,
    MissingAnchorPlanner,
    RedirectedPlanner,
    WrongExtensionPlanner,
)
from doclinks.fixers.registry import PlannerRegistry, get_global_registry, plan_fix

__all__ = [
    # Base types
    "BasePlanner",
    "FixPlan",
    "decode_link",
    "split_link",
    # Anchor matching
    "get_possible_matches",
    # Registry
    "PlannerRegistry",
    "get_global_registry",
    "plan_fix",
    # Planners
    "DisallowExtensionPlanner",
    "EmptyAnchorPlanner",
    "MissingAnchorPlanner",
    "RedirectedPlanner",
    "WrongExtensionPlanner",
    # Engine
    "FixEngine",
    "FixIOError",
    "FixSummary",
    "fix_issues",
    "plan_fixes",
]
