"""Dataplane configuration data structures.

A :class:`Configuration` is the immutable snapshot the reconciler derives from
the graph on every full reconfiguration. The renderer turns it into files and
the live-update path reads its upstreams; nothing mutates it after it is
built, so it can be handed to concurrent readers without copying.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence


@dataclass(frozen=True)
class UpstreamEndpoint:
    address: str
    port: int
    ipv6: bool = False

    def server(self) -> str:
        """Render the endpoint the way NGINX expects it in a server line."""

        if self.ipv6:
            return f"[{self.address}]:{self.port}"
        return f"{self.address}:{self.port}"


@dataclass(frozen=True)
class Upstream:
    """A named group of backend endpoints."""

    name: str
    endpoints: Sequence[UpstreamEndpoint] = ()
    error_msg: str = ""

    def servers(self) -> List[str]:
        return [ep.server() for ep in self.endpoints]


@dataclass(frozen=True)
class Location:
    path: str
    upstream: str


@dataclass(frozen=True)
class VirtualServer:
    hostname: str
    port: int
    locations: Sequence[Location] = ()
    is_default: bool = False


@dataclass(frozen=True)
class StreamServer:
    """An L4 (TLS passthrough) server keyed by SNI hostname."""

    hostname: str
    port: int
    upstream: str


@dataclass(frozen=True)
class DeploymentContext:
    """Usage reporting metadata, only populated for NGINX Plus."""

    integration: str = ""
    cluster_id: Optional[str] = None
    installation_id: Optional[str] = None
    cluster_node_count: Optional[int] = None

    def as_dict(self) -> dict:
        data = {"integration": self.integration}
        if self.cluster_id is not None:
            data["cluster_id"] = self.cluster_id
        if self.installation_id is not None:
            data["installation_id"] = self.installation_id
        if self.cluster_node_count is not None:
            data["cluster_node_count"] = self.cluster_node_count
        return data


@dataclass(frozen=True)
class NginxPlus:
    allowed_addresses: Sequence[str] = ()


@dataclass(frozen=True)
class Configuration:
    version: int
    http_servers: Sequence[VirtualServer] = ()
    stream_servers: Sequence[StreamServer] = ()
    upstreams: Sequence[Upstream] = ()
    stream_upstreams: Sequence[Upstream] = ()
    deployment_context: DeploymentContext = field(default_factory=DeploymentContext)
    nginx_plus: NginxPlus = field(default_factory=NginxPlus)
