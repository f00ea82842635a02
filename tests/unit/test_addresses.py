from gateway_events.resources import (
    SERVICE_TYPE_LOAD_BALANCER,
    LoadBalancerIngress,
    NamespacedName,
    Service,
)
from nginx_gateway.addresses import (
    ADDRESS_TYPE_HOSTNAME,
    ADDRESS_TYPE_IP,
    GatewayPodConfig,
    resolve_gateway_addresses,
)
from nginx_gateway.errors import ServiceNotFoundError
from nginx_gateway.interfaces import ClusterClient


class DictClient(ClusterClient):
    def __init__(self):
        self.services = {}

    def get_service(self, nsname: NamespacedName):
        return self.services.get(nsname)


POD_CONFIG = GatewayPodConfig(
    pod_ip="1.2.3.4",
    service_name="my-service",
    namespace="nginx-gateway",
)


def load_balancer_service() -> Service:
    return Service(
        name="my-service",
        namespace="nginx-gateway",
        type=SERVICE_TYPE_LOAD_BALANCER,
        load_balancer_ingress=(
            LoadBalancerIngress(ip="34.35.36.37"),
            LoadBalancerIngress(hostname="myhost"),
        ),
    )


def test_missing_service_falls_back_to_pod_ip():
    client = DictClient()

    addresses, error = resolve_gateway_addresses(client, None, POD_CONFIG)

    assert isinstance(error, ServiceNotFoundError)
    assert [a.value for a in addresses] == ["1.2.3.4"]
    assert addresses[0].type == ADDRESS_TYPE_IP


def test_load_balancer_service_addresses():
    client = DictClient()
    svc = load_balancer_service()
    client.services[svc.namespaced_name] = svc

    addresses, error = resolve_gateway_addresses(client, svc, POD_CONFIG)

    assert error is None
    assert [a.value for a in addresses] == ["34.35.36.37", "myhost"]
    assert [a.type for a in addresses] == [ADDRESS_TYPE_IP, ADDRESS_TYPE_HOSTNAME]


def test_service_is_looked_up_when_not_given():
    client = DictClient()
    svc = load_balancer_service()
    client.services[svc.namespaced_name] = svc

    addresses, error = resolve_gateway_addresses(client, None, POD_CONFIG)

    assert error is None
    assert [a.value for a in addresses] == ["34.35.36.37", "myhost"]


def test_ingress_order_is_preserved_and_empty_entries_skipped():
    svc = Service(
        name="my-service",
        namespace="nginx-gateway",
        type=SERVICE_TYPE_LOAD_BALANCER,
        load_balancer_ingress=(
            LoadBalancerIngress(hostname="first.example.com"),
            LoadBalancerIngress(),
            LoadBalancerIngress(ip="10.0.0.1", hostname="ignored.example.com"),
        ),
    )

    addresses, error = resolve_gateway_addresses(None, svc, POD_CONFIG)

    assert error is None
    assert [a.value for a in addresses] == ["first.example.com", "10.0.0.1"]


def test_cluster_ip_service_has_no_addresses():
    addresses, error = resolve_gateway_addresses(
        None, Service(name="my-service", namespace="nginx-gateway"), POD_CONFIG
    )

    assert error is None
    assert addresses == []


def test_lookup_failure_falls_back_to_pod_ip():
    class FailingClient(ClusterClient):
        def get_service(self, nsname):
            raise TimeoutError("api server unavailable")

    addresses, error = resolve_gateway_addresses(FailingClient(), None, POD_CONFIG)

    assert isinstance(error, ServiceNotFoundError)
    assert "api server unavailable" in str(error)
    assert [a.value for a in addresses] == ["1.2.3.4"]
