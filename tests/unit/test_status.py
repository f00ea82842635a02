from gateway_events.resources import (
    Gateway as GatewayResource,
    GatewayClass as GatewayClassResource,
    HTTPRoute,
    NamespacedName,
    NginxGateway,
)
from nginx_gateway.addresses import GatewayAddress
from nginx_gateway.graph import Gateway, GatewayClass, Graph, Policy, Route
from nginx_gateway.status import (
    CONDITION_FALSE,
    CONDITION_TRUE,
    REASON_GATEWAY_CONFLICT,
    REASON_GATEWAY_NOT_PROGRAMMED,
    StatusRequest,
    build_all_except_gateways_requests,
    build_control_plane_request,
    build_gateway_requests,
    exclude_resource_type,
)


class UpstreamSettingsPolicy:
    pass


def build_graph() -> Graph:
    gw = GatewayResource(name="gateway", namespace="default")
    ignored_gw = GatewayResource(name="other", namespace="default")
    return Graph(
        gateway_class=GatewayClass(source=GatewayClassResource(name="nginx")),
        gateway=Gateway(source=gw),
        ignored_gateways={ignored_gw.namespaced_name: ignored_gw},
        routes={
            NamespacedName("default", "cafe"): Route(source=HTTPRoute(name="cafe", namespace="default")),
            NamespacedName("default", "broken"): Route(
                source=HTTPRoute(name="broken", namespace="default"), valid=False
            ),
        },
        policies={
            NamespacedName("default", "usp"): Policy(source=UpstreamSettingsPolicy(), valid=False),
        },
    )


def test_all_except_gateways_requests():
    requests = build_all_except_gateways_requests(build_graph())

    assert [(r.resource_type, r.namespaced_name) for r in requests] == [
        (GatewayClassResource, NamespacedName("", "nginx")),
        (HTTPRoute, NamespacedName("default", "broken")),
        (HTTPRoute, NamespacedName("default", "cafe")),
        (UpstreamSettingsPolicy, NamespacedName("default", "usp")),
    ]
    assert all(r.conditions == () for r in requests)


def test_reload_error_marks_valid_routes():
    requests = build_all_except_gateways_requests(build_graph(), RuntimeError("boom"))

    by_name = {r.namespaced_name.name: r for r in requests}
    (condition,) = by_name["cafe"].conditions
    assert condition.reason == REASON_GATEWAY_NOT_PROGRAMMED
    assert "boom" in condition.message
    assert by_name["broken"].conditions == ()


def test_request_filter_drops_gateway_classes_only():
    requests = build_all_except_gateways_requests(
        build_graph(), include=exclude_resource_type(GatewayClassResource)
    )

    assert GatewayClassResource not in {r.resource_type for r in requests}
    assert len(requests) == 3


def test_gateway_requests_carry_addresses_and_programmed_condition():
    addresses = [GatewayAddress(value="10.0.0.1")]

    requests = build_gateway_requests(build_graph(), addresses)

    gateway, ignored = requests
    assert gateway.addresses == tuple(addresses)
    assert gateway.conditions[-1].status == CONDITION_TRUE
    assert ignored.namespaced_name == NamespacedName("default", "other")
    assert ignored.conditions[0].reason == REASON_GATEWAY_CONFLICT
    assert ignored.addresses == ()


def test_gateway_requests_report_reload_failure():
    requests = build_gateway_requests(build_graph(), [], RuntimeError("reload error"))

    condition = requests[0].conditions[-1]
    assert condition.status == CONDITION_FALSE
    assert "reload error" in condition.message


def test_control_plane_request():
    nsname = NamespacedName("nginx-gateway", "config")

    valid = build_control_plane_request(nsname, None)
    invalid = build_control_plane_request(nsname, ValueError("bad level"))

    assert isinstance(valid, StatusRequest)
    assert valid.resource_type is NginxGateway
    assert valid.conditions[0].status == CONDITION_TRUE
    assert invalid.conditions[0].status == CONDITION_FALSE
    assert "bad level" in invalid.conditions[0].message
