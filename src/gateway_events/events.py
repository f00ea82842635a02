"""Event primitives delivered to the reconciler in batches."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .resources import NamespacedName


@dataclass(frozen=True)
class UpsertEvent:
    """A resource was created or updated.

    The watch layer publishes the full object so the change processor can
    replace whatever it had stored under the same key.
    """

    resource: Any


@dataclass(frozen=True)
class DeleteEvent:
    """A resource of ``resource_type`` was removed from the cluster."""

    resource_type: type
    namespaced_name: NamespacedName
