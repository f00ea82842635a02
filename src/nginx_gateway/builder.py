"""Derive a dataplane :class:`~nginx_gateway.config.Configuration` from a graph."""

from __future__ import annotations

import ipaddress
import logging
from typing import Dict, List, Sequence, Tuple

from gateway_events.resources import NamespacedName

from .config import (
    Configuration,
    DeploymentContext,
    Location,
    NginxPlus,
    StreamServer,
    Upstream,
    UpstreamEndpoint,
    VirtualServer,
)
from .graph import BackendRef, Graph, Route

LOG = logging.getLogger(__name__)

DEFAULT_PLUS_API_ALLOWED_ADDRESSES = ("127.0.0.1",)


def upstream_name(service: NamespacedName, port: int) -> str:
    return f"{service.namespace}_{service.name}_{port}"


def _is_ipv6(address: str) -> bool:
    try:
        return ipaddress.ip_address(address).version == 6
    except ValueError:
        return False


def _build_upstream(graph: Graph, ref: BackendRef) -> Upstream:
    name = upstream_name(ref.service, ref.port)
    referenced = graph.referenced_services.get(ref.service)
    if referenced is None:
        return Upstream(name=name, error_msg=f"service {ref.service} not found")

    endpoints = [
        UpstreamEndpoint(address=ep.address, port=ep.port, ipv6=_is_ipv6(ep.address))
        for ep in referenced.endpoints_for_port(ref.port)
    ]
    return Upstream(name=name, endpoints=tuple(endpoints))


def _valid_routes(routes: Dict[NamespacedName, Route]) -> List[Tuple[NamespacedName, Route]]:
    return sorted(
        ((key, route) for key, route in routes.items() if route.valid),
        key=lambda item: item[0],
    )


def _collect_upstreams(
    graph: Graph, routes: Sequence[Tuple[NamespacedName, Route]]
) -> List[Upstream]:
    upstreams: Dict[str, Upstream] = {}
    for _, route in routes:
        for rule in route.rules:
            for ref in rule.backend_refs:
                name = upstream_name(ref.service, ref.port)
                if name not in upstreams:
                    upstreams[name] = _build_upstream(graph, ref)
    return [upstreams[name] for name in sorted(upstreams)]


def _build_http_servers(
    routes: Sequence[Tuple[NamespacedName, Route]]
) -> List[VirtualServer]:
    locations: Dict[Tuple[int, str], List[Location]] = {}
    for _, route in routes:
        hostnames = route.hostnames or ("*",)
        for hostname in hostnames:
            key = (route.listener_port, hostname)
            bucket = locations.setdefault(key, [])
            for rule in route.rules:
                if not rule.backend_refs:
                    continue
                # Backend weights are not rendered; the first ref owns the location.
                ref = rule.backend_refs[0]
                bucket.append(Location(path=rule.path, upstream=upstream_name(ref.service, ref.port)))

    servers: List[VirtualServer] = []
    ports = sorted({port for port, _ in locations})
    for port in ports:
        servers.append(VirtualServer(hostname="", port=port, is_default=True))
        for (server_port, hostname) in sorted(locations):
            if server_port != port:
                continue
            servers.append(
                VirtualServer(
                    hostname=hostname,
                    port=port,
                    locations=tuple(locations[(server_port, hostname)]),
                )
            )
    return servers


def _build_stream_servers(
    routes: Sequence[Tuple[NamespacedName, Route]]
) -> List[StreamServer]:
    servers: List[StreamServer] = []
    for _, route in routes:
        refs = [ref for rule in route.rules for ref in rule.backend_refs]
        if not refs:
            continue
        for hostname in route.hostnames:
            servers.append(
                StreamServer(
                    hostname=hostname,
                    port=route.listener_port,
                    upstream=upstream_name(refs[0].service, refs[0].port),
                )
            )
    return servers


def build_configuration(
    graph: Graph,
    version: int,
    *,
    plus: bool = False,
    deployment_context: DeploymentContext | None = None,
    plus_allowed_addresses: Sequence[str] = DEFAULT_PLUS_API_ALLOWED_ADDRESSES,
) -> Configuration:
    """Build the dataplane configuration for ``graph``.

    Without a valid GatewayClass and Gateway nothing is routable, so the
    result only carries the version and the variant-specific settings.
    """

    nginx_plus = NginxPlus(allowed_addresses=tuple(plus_allowed_addresses)) if plus else NginxPlus()
    context = deployment_context or DeploymentContext()

    if graph.gateway_class is None or not graph.gateway_class.valid:
        return Configuration(version=version, deployment_context=context, nginx_plus=nginx_plus)
    if graph.gateway is None or not graph.gateway.valid:
        return Configuration(version=version, deployment_context=context, nginx_plus=nginx_plus)

    http_routes = _valid_routes(graph.routes)
    l4_routes = _valid_routes(graph.l4_routes)

    configuration = Configuration(
        version=version,
        http_servers=tuple(_build_http_servers(http_routes)),
        stream_servers=tuple(_build_stream_servers(l4_routes)),
        upstreams=tuple(_collect_upstreams(graph, http_routes)),
        stream_upstreams=tuple(_collect_upstreams(graph, l4_routes)),
        deployment_context=context,
        nginx_plus=nginx_plus,
    )
    LOG.debug(
        "Built configuration version %d: %d servers, %d upstreams, %d stream upstreams",
        version,
        len(configuration.http_servers),
        len(configuration.upstreams),
        len(configuration.stream_upstreams),
    )
    return configuration
