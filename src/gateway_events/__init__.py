"""Watch-layer primitives consumed by the nginx gateway reconciler.

The resource informers that feed the reconciler are not part of this
repository. This package only carries the event envelopes they publish and the
trimmed-down resource shapes the reconciler dispatches on, so the core can be
exercised end-to-end in tests without a cluster.
"""

from .events import DeleteEvent, UpsertEvent  # noqa: F401
from .resources import NamespacedName  # noqa: F401

__all__ = [
    "DeleteEvent",
    "NamespacedName",
    "UpsertEvent",
]
