"""Status groups and the requests handed to the status updater.

Computing and persisting conditions on the API server happens in the status
updater; this module only decides *which* resources get a status write for a
batch and attaches the conditions the graph already carries, plus the ones
derived from the outcome of the NGINX reload.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional, Sequence

from gateway_events.resources import (
    Gateway as GatewayResource,
    GatewayClass as GatewayClassResource,
    NamespacedName,
    NginxGateway,
)

if TYPE_CHECKING:
    from .addresses import GatewayAddress
    from .graph import Graph

CONDITION_TRUE = "True"
CONDITION_FALSE = "False"

TYPE_ACCEPTED = "Accepted"
TYPE_PROGRAMMED = "Programmed"
TYPE_VALID = "Valid"

REASON_ACCEPTED = "Accepted"
REASON_PROGRAMMED = "Programmed"
REASON_INVALID = "Invalid"
REASON_GATEWAY_CLASS_CONFLICT = "GatewayClassConflict"
REASON_GATEWAY_CONFLICT = "GatewayConflict"
REASON_GATEWAY_NOT_PROGRAMMED = "GatewayNotProgrammed"


class StatusGroup(str, Enum):
    """Buckets of resources whose statuses are written together.

    When a batch touches both, ``ALL_EXCEPT_GATEWAYS`` is written before
    ``GATEWAYS``.
    """

    ALL_EXCEPT_GATEWAYS = "all-graphs-except-gateways"
    GATEWAYS = "gateways"
    CONTROL_PLANE = "control-plane"


@dataclass(frozen=True)
class Condition:
    type: str
    status: str
    reason: str
    message: str = ""


@dataclass(frozen=True)
class StatusRequest:
    resource_type: type
    namespaced_name: NamespacedName
    conditions: Sequence[Condition] = ()
    addresses: Sequence["GatewayAddress"] = ()


RequestFilter = Callable[[StatusRequest], bool]


class StatusUpdater(ABC):
    """Writes the statuses of a group of resources."""

    @abstractmethod
    def update_group(self, group: StatusGroup, requests: List[StatusRequest]) -> None:
        """Replace the pending requests of ``group`` and write them."""


def exclude_resource_type(resource_type: type) -> RequestFilter:
    """Return a predicate dropping requests for ``resource_type``."""

    return lambda request: request.resource_type is not resource_type


def include_all(request: StatusRequest) -> bool:
    return True


def _reload_conditions(reload_error: Optional[BaseException]) -> List[Condition]:
    if reload_error is None:
        return []
    return [
        Condition(
            type=TYPE_ACCEPTED,
            status=CONDITION_FALSE,
            reason=REASON_GATEWAY_NOT_PROGRAMMED,
            message=f"The Gateway is not programmed due to a failure to reload nginx: {reload_error}",
        )
    ]


def _gateway_class_requests(graph: "Graph") -> Iterable[StatusRequest]:
    if graph.gateway_class is not None:
        gc = graph.gateway_class
        yield StatusRequest(
            resource_type=GatewayClassResource,
            namespaced_name=gc.source.namespaced_name,
            conditions=tuple(gc.conditions),
        )

    for nsname in sorted(graph.ignored_gateway_classes):
        yield StatusRequest(
            resource_type=GatewayClassResource,
            namespaced_name=nsname,
            conditions=(
                Condition(
                    type=TYPE_ACCEPTED,
                    status=CONDITION_FALSE,
                    reason=REASON_GATEWAY_CLASS_CONFLICT,
                    message="The resource is ignored due to a conflicting GatewayClass resource",
                ),
            ),
        )


def build_all_except_gateways_requests(
    graph: "Graph",
    reload_error: Optional[BaseException] = None,
    include: RequestFilter = include_all,
) -> List[StatusRequest]:
    """Requests for every graph resource except Gateways.

    ``include`` filters individual requests; it is how GatewayClass statuses
    are left alone when another controller owns them.
    """

    requests: List[StatusRequest] = list(_gateway_class_requests(graph))

    reload_conditions = _reload_conditions(reload_error)
    for routes in (graph.routes, graph.l4_routes):
        for nsname in sorted(routes):
            route = routes[nsname]
            conditions = list(route.conditions)
            if route.valid:
                conditions.extend(reload_conditions)
            requests.append(
                StatusRequest(
                    resource_type=type(route.source),
                    namespaced_name=nsname,
                    conditions=tuple(conditions),
                )
            )

    for nsname in sorted(graph.policies):
        policy = graph.policies[nsname]
        requests.append(
            StatusRequest(
                resource_type=type(policy.source),
                namespaced_name=nsname,
                conditions=tuple(policy.conditions),
            )
        )

    return [request for request in requests if include(request)]


def build_gateway_requests(
    graph: "Graph",
    addresses: Sequence["GatewayAddress"],
    reload_error: Optional[BaseException] = None,
) -> List[StatusRequest]:
    requests: List[StatusRequest] = []

    if graph.gateway is not None:
        gw = graph.gateway
        conditions = list(gw.conditions)
        if gw.valid:
            if reload_error is None:
                conditions.append(
                    Condition(
                        type=TYPE_PROGRAMMED,
                        status=CONDITION_TRUE,
                        reason=REASON_PROGRAMMED,
                        message="The Gateway is programmed",
                    )
                )
            else:
                conditions.append(
                    Condition(
                        type=TYPE_PROGRAMMED,
                        status=CONDITION_FALSE,
                        reason=REASON_INVALID,
                        message=f"Failed to reload nginx: {reload_error}",
                    )
                )
        requests.append(
            StatusRequest(
                resource_type=GatewayResource,
                namespaced_name=gw.source.namespaced_name,
                conditions=tuple(conditions),
                addresses=tuple(addresses),
            )
        )

    for nsname in sorted(graph.ignored_gateways):
        requests.append(
            StatusRequest(
                resource_type=GatewayResource,
                namespaced_name=nsname,
                conditions=(
                    Condition(
                        type=TYPE_ACCEPTED,
                        status=CONDITION_FALSE,
                        reason=REASON_GATEWAY_CONFLICT,
                        message="The resource is ignored due to a conflicting Gateway resource",
                    ),
                ),
            )
        )

    return requests


def build_control_plane_request(
    nsname: NamespacedName, error: Optional[BaseException]
) -> StatusRequest:
    if error is None:
        condition = Condition(
            type=TYPE_VALID,
            status=CONDITION_TRUE,
            reason=REASON_ACCEPTED,
            message="NginxGateway is valid",
        )
    else:
        condition = Condition(
            type=TYPE_VALID,
            status=CONDITION_FALSE,
            reason=REASON_INVALID,
            message=f"NginxGateway is invalid: {error}",
        )
    return StatusRequest(
        resource_type=NginxGateway,
        namespaced_name=nsname,
        conditions=(condition,),
    )
