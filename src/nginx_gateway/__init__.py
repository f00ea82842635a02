"""Reconciliation core of the NGINX gateway controller.

The controller watches Gateway API resources and turns them into a running
NGINX configuration. This package hosts everything between the watch layer
and NGINX itself:

* :class:`nginx_gateway.handler.EventHandler` consumes batches of resource
  events, decides whether they require no work, a live upstream update
  through the NGINX Plus API, or a full regenerate-and-reload cycle, and
  writes the resulting resource statuses;
* helpers that resolve the Gateway addresses, collect the NGINX Plus
  deployment context and compare upstream server lists;
* :class:`nginx_gateway.readiness.ReadinessTracker`, the state behind the
  readiness probe; and
* a renderer and file manager producing the NGINX include files.

Graph building, status persistence and the watch layer are provided by the
caller through the abstract interfaces in :mod:`nginx_gateway.interfaces`,
:mod:`nginx_gateway.state` and :mod:`nginx_gateway.status`.
"""

from .handler import EventHandler, HandlerConfig  # noqa: F401
from .state import ChangeType  # noqa: F401

__all__ = ["ChangeType", "EventHandler", "HandlerConfig"]
