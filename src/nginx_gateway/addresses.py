"""Resolve the addresses reported in Gateway status."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from gateway_events.resources import (
    SERVICE_TYPE_LOAD_BALANCER,
    NamespacedName,
    Service,
)

from .errors import ServiceNotFoundError
from .interfaces import ClusterClient

LOG = logging.getLogger(__name__)

ADDRESS_TYPE_IP = "IPAddress"
ADDRESS_TYPE_HOSTNAME = "Hostname"


@dataclass(frozen=True)
class GatewayPodConfig:
    """Identity of the Pod running the controller and NGINX."""

    pod_ip: str = ""
    service_name: str = ""
    namespace: str = ""

    @property
    def service_nsname(self) -> NamespacedName:
        return NamespacedName(self.namespace, self.service_name)


@dataclass(frozen=True)
class GatewayAddress:
    value: str
    type: str = ADDRESS_TYPE_IP


def resolve_gateway_addresses(
    client: Optional[ClusterClient],
    service: Optional[Service],
    pod_config: GatewayPodConfig,
) -> Tuple[List[GatewayAddress], Optional[Exception]]:
    """Return the Gateway addresses and an optional informational error.

    When ``service`` is not given it is looked up through ``client``. If it
    cannot be found the Pod IP is returned together with a
    :class:`ServiceNotFoundError`; callers should log the error and still use
    the address.
    """

    if service is None:
        key = pod_config.service_nsname
        try:
            service = client.get_service(key) if client is not None else None
        except Exception as exc:
            LOG.debug("Lookup of Service %s failed: %s", key, exc)
            error = ServiceNotFoundError(f"error finding Service {key} for Gateway: {exc}")
            return [GatewayAddress(value=pod_config.pod_ip)], error
        if service is None:
            error = ServiceNotFoundError(f"Service {key} for Gateway not found")
            return [GatewayAddress(value=pod_config.pod_ip)], error

    addresses: List[GatewayAddress] = []
    if service.type == SERVICE_TYPE_LOAD_BALANCER:
        for ingress in service.load_balancer_ingress:
            if ingress.ip:
                addresses.append(GatewayAddress(value=ingress.ip, type=ADDRESS_TYPE_IP))
            elif ingress.hostname:
                addresses.append(
                    GatewayAddress(value=ingress.hostname, type=ADDRESS_TYPE_HOSTNAME)
                )

    return addresses, None
