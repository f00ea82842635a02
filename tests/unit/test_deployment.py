import pytest

from nginx_gateway.config import DeploymentContext
from nginx_gateway.deployment import DeploymentContextProvider
from nginx_gateway.interfaces import DeploymentContextCollector


class StubCollector(DeploymentContextCollector):
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = 0

    def collect(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.result


def test_oss_returns_empty_context_without_collecting():
    collector = StubCollector(result=DeploymentContext(integration="ngf"))
    provider = DeploymentContextProvider(plus=False, collector=collector)

    assert provider.collect() == DeploymentContext()
    assert collector.calls == 0


def test_plus_returns_collected_context():
    expected = DeploymentContext(
        integration="ngf",
        cluster_id="cluster-id",
        installation_id="installation-id",
        cluster_node_count=1,
    )
    provider = DeploymentContextProvider(plus=True, collector=StubCollector(result=expected))

    assert provider.collect() == expected


def test_plus_propagates_collector_error():
    error = RuntimeError("collect error")
    provider = DeploymentContextProvider(plus=True, collector=StubCollector(error=error))

    with pytest.raises(RuntimeError) as excinfo:
        provider.collect()

    assert excinfo.value is error


def test_plus_requires_collector():
    with pytest.raises(ValueError):
        DeploymentContextProvider(plus=True)
