"""Read-only queries over the turtle registry."""

from __future__ import annotations

import logging

from quayturtles.models.query import TurtleDetail, TurtleSummary
from quayturtles.state.registry import TurtleRegistry

_logger = logging.getLogger(__name__)


class TurtleQuery:
    """Builds list and detail views without ever mutating the registry."""

    def __init__(self, registry: TurtleRegistry) -> None:
        self._registry = registry

    def list_summaries(self, *, include_offline: bool = False) -> list[TurtleSummary]:
        """Summaries of all turtles, optionally only the online ones."""
        summaries = []
        for turtle in self._registry.list_turtles():
            snapshot = turtle.snapshot
            if include_offline or snapshot.online:
                summaries.append(TurtleSummary.from_snapshot(snapshot))
        summaries.sort(key=lambda summary: summary.id)
        _logger.debug("Listed turtles include_offline=%s count=%d", include_offline, len(summaries))
        return summaries

    def detail(self, turtle_id: str) -> TurtleDetail:
        """Detail view of one turtle.

        Raises
        ------
        TurtleNotFoundError
            If *turtle_id* is not registered.
        """
        return TurtleDetail.from_snapshot(self._registry.get(turtle_id).snapshot)
