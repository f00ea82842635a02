"""Change tracking contract between the watch layer and the reconciler."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Tuple

from gateway_events.resources import NamespacedName

from .graph import Graph


class ChangeType(IntEnum):
    """Net effect of a batch, ordered by how expensive it is to react to."""

    NO_CHANGE = 0
    ENDPOINTS_ONLY_CHANGE = 1
    FULL_CHANGE = 2


class ChangeProcessor(ABC):
    """Accumulates resource changes and builds the configuration graph.

    Classification is a function of the accumulated state, so replaying the
    content of an already processed batch yields ``NO_CHANGE``.
    """

    @abstractmethod
    def capture_upsert_change(self, resource: Any) -> None:
        """Record a created or updated resource."""

    @abstractmethod
    def capture_delete_change(
        self, resource_type: type, nsname: NamespacedName
    ) -> None:
        """Record a removed resource."""

    @abstractmethod
    def process(self) -> Tuple[ChangeType, Graph]:
        """Classify the captured changes and return the resulting graph."""

    @abstractmethod
    def get_latest_graph(self) -> Graph:
        """Return the graph built by the most recent ``process`` call."""
