"""Planner registry for mapping issue kinds to planner classes.

The registry provides a central lookup mechanism for finding the planner
for a given issue kind. Planners register themselves by their issue_type.
"""

from __future__ import annotations

from doclinks.config import DoclinksConfig
from doclinks.fixers.base import BasePlanner, FixPlan
from doclinks.issues.base import (
    BaseIssue,
    UnhandledIssueTypeError,
    is_fixable,
)


class PlannerRegistry:
    """Registry that maps issue kinds to planner classes.

    Example:
        >>> registry = PlannerRegistry()
        >>> registry.register(RedirectedPlanner)
        >>> plan = registry.plan(issue, config)
        >>> if plan:
        ...     text = text.replace(plan.search, plan.replacement)
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._planners: dict[str, type[BasePlanner]] = {}

    def register(self, planner_class: type[BasePlanner]) -> None:
        """Register a planner class by its issue_type.

        Args:
            planner_class: A BasePlanner subclass to register.

        Raises:
            ValueError: If the planner has no issue_type, the kind is not
                fixable, or a planner for the kind is already registered.
        """
        issue_type = planner_class.issue_type
        if not issue_type:
            raise ValueError(
                f"Planner class {planner_class.__name__} has no issue_type defined"
            )
        if not is_fixable(issue_type):
            raise ValueError(f"Issue type '{issue_type}' is not fixable")
        if issue_type in self._planners:
            raise ValueError(
                f"Planner for issue type '{issue_type}' already registered: "
                f"{self._planners[issue_type].__name__}"
            )
        self._planners[issue_type] = planner_class

    def get_planner(
        self, issue_type: str, config: DoclinksConfig | None = None
    ) -> BasePlanner | None:
        """Get an instantiated planner for the given issue kind.

        Returns:
            An instantiated planner, or None if none is registered.
        """
        planner_class = self._planners.get(issue_type)
        if planner_class is None:
            return None
        return planner_class(config)

    def plan(self, issue: BaseIssue, config: DoclinksConfig | None = None) -> FixPlan | None:
        """Compute the fix for an issue using the matching planner.

        Args:
            issue: A fixable issue.
            config: Active configuration.

        Returns:
            The substitution, or None when no safe correction exists.

        Raises:
            UnhandledIssueTypeError: If no planner handles the issue's kind.
        """
        planner = self.get_planner(issue.type, config)
        if planner is None:
            raise UnhandledIssueTypeError(issue.type, where="fix planner")
        return planner.plan(issue)


# Global registry instance - populated on first use
_global_registry: PlannerRegistry | None = None


def get_global_registry() -> PlannerRegistry:
    """Get the global planner registry.

    Returns a singleton registry instance that is populated with all
    built-in planners.
    """
    global _global_registry
    if _global_registry is None:
        _global_registry = _create_default_registry()
    return _global_registry


def _create_default_registry() -> PlannerRegistry:
    """Create and populate the default registry with built-in planners."""
    # Import here to avoid circular imports
    from doclinks.fixers.planners import (
        DisallowExtensionPlanner,
        EmptyAnchorPlanner,
        MissingAnchorPlanner,
        RedirectedPlanner,
        WrongExtensionPlanner,
    )

    registry = PlannerRegistry()
    registry.register(RedirectedPlanner)
    registry.register(MissingAnchorPlanner)
    registry.register(EmptyAnchorPlanner)
    registry.register(WrongExtensionPlanner)
    registry.register(DisallowExtensionPlanner)
    return registry


def plan_fix(issue: BaseIssue, config: DoclinksConfig | None = None) -> FixPlan | None:
    """Plan the fix for an issue with the global registry."""
    return get_global_registry().plan(issue, config)
