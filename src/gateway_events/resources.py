"""Cluster resource shapes relevant to the reconciler.

Only the fields the reconciler and its status builders read are modelled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True, order=True)
class NamespacedName:
    namespace: str = ""
    name: str = ""

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


class _Resource:
    """Mixin providing the ``namespaced_name`` key used by filters and fakes."""

    namespace: str
    name: str

    @property
    def namespaced_name(self) -> NamespacedName:
        return NamespacedName(self.namespace, self.name)


SERVICE_TYPE_CLUSTER_IP = "ClusterIP"
SERVICE_TYPE_LOAD_BALANCER = "LoadBalancer"


@dataclass(frozen=True)
class LoadBalancerIngress:
    ip: str = ""
    hostname: str = ""


@dataclass(frozen=True)
class Service(_Resource):
    name: str
    namespace: str = ""
    type: str = SERVICE_TYPE_CLUSTER_IP
    load_balancer_ingress: Sequence[LoadBalancerIngress] = ()


@dataclass(frozen=True)
class Endpoint:
    """A single ready backend address for a Service port."""

    address: str
    port: int


@dataclass(frozen=True)
class EndpointSlice(_Resource):
    name: str
    namespace: str = ""
    service_name: str = ""
    endpoints: Sequence[Endpoint] = ()


@dataclass(frozen=True)
class GatewayClass(_Resource):
    name: str
    namespace: str = ""
    controller_name: str = ""


@dataclass(frozen=True)
class Listener:
    name: str
    port: int
    protocol: str = "HTTP"
    hostname: Optional[str] = None


@dataclass(frozen=True)
class Gateway(_Resource):
    name: str
    namespace: str = ""
    gateway_class_name: str = ""
    listeners: Sequence[Listener] = ()


@dataclass(frozen=True)
class HTTPRoute(_Resource):
    name: str = ""
    namespace: str = ""
    hostnames: Sequence[str] = ()


@dataclass(frozen=True)
class TLSRoute(_Resource):
    name: str = ""
    namespace: str = ""
    hostnames: Sequence[str] = ()


@dataclass(frozen=True)
class NginxGateway(_Resource):
    """The control-plane configuration resource.

    ``logging_level`` is kept as the raw string so invalid values can be
    reported back to the user instead of being rejected at parse time.
    """

    name: str
    namespace: str = ""
    logging_level: Optional[str] = None
    generation: int = 1
