"""Semantic graph handed over by the change processor.

Building and validating the graph happens outside the reconciler; these
dataclasses describe the shape the reconciler, the configuration builder and
the status builders read from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from gateway_events.resources import (
    Endpoint,
    Gateway as GatewayResource,
    GatewayClass as GatewayClassResource,
    NamespacedName,
)

from .status import Condition


@dataclass
class GatewayClass:
    source: GatewayClassResource
    valid: bool = True
    conditions: List[Condition] = field(default_factory=list)


@dataclass
class Gateway:
    source: GatewayResource
    valid: bool = True
    conditions: List[Condition] = field(default_factory=list)


@dataclass(frozen=True)
class BackendRef:
    """Reference from a route rule to a Service port."""

    service: NamespacedName
    port: int
    weight: int = 1


@dataclass
class RouteRule:
    path: str = "/"
    backend_refs: Sequence[BackendRef] = ()


@dataclass
class Route:
    """An HTTP or L4 route attached to a listener of the managed Gateway."""

    source: Any
    valid: bool = True
    hostnames: Sequence[str] = ()
    listener_port: int = 80
    rules: Sequence[RouteRule] = ()
    conditions: List[Condition] = field(default_factory=list)


@dataclass
class ReferencedService:
    """Endpoints resolved for a Service referenced by some route."""

    endpoints: Sequence[Endpoint] = ()

    def endpoints_for_port(self, port: int) -> List[Endpoint]:
        return [ep for ep in self.endpoints if ep.port == port]


@dataclass
class Policy:
    """Any attached policy (upstream settings, client settings, ...)."""

    source: Any
    valid: bool = True
    conditions: List[Condition] = field(default_factory=list)


@dataclass
class Graph:
    gateway_class: Optional[GatewayClass] = None
    ignored_gateway_classes: Dict[NamespacedName, GatewayClassResource] = field(
        default_factory=dict
    )
    gateway: Optional[Gateway] = None
    ignored_gateways: Dict[NamespacedName, GatewayResource] = field(
        default_factory=dict
    )
    routes: Dict[NamespacedName, Route] = field(default_factory=dict)
    l4_routes: Dict[NamespacedName, Route] = field(default_factory=dict)
    referenced_services: Dict[NamespacedName, ReferencedService] = field(
        default_factory=dict
    )
    policies: Dict[NamespacedName, Policy] = field(default_factory=dict)
