import sys

import pytest

from gateway_agent.runtime import CommandRuntimeManager
from nginx_gateway.errors import RuntimeAPIUnavailableError


def test_reload_runs_command():
    manager = CommandRuntimeManager([sys.executable, "-c", "pass"])

    manager.reload()


def test_reload_reports_failure():
    manager = CommandRuntimeManager(
        [sys.executable, "-c", "import sys; sys.stderr.write('bad config'); sys.exit(1)"]
    )

    with pytest.raises(RuntimeError) as excinfo:
        manager.reload()

    assert "bad config" in str(excinfo.value)


def test_reload_times_out():
    manager = CommandRuntimeManager(
        [sys.executable, "-c", "import time; time.sleep(5)"], timeout=0.2
    )

    with pytest.raises(RuntimeError) as excinfo:
        manager.reload()

    assert "timed out" in str(excinfo.value)


def test_reload_missing_binary():
    manager = CommandRuntimeManager(["/nonexistent/nginx", "-s", "reload"])

    with pytest.raises(RuntimeError):
        manager.reload()


def test_upstream_api_is_unavailable():
    manager = CommandRuntimeManager(["nginx", "-s", "reload"])

    with pytest.raises(RuntimeAPIUnavailableError):
        manager.get_upstreams()
    with pytest.raises(RuntimeAPIUnavailableError):
        manager.update_http_servers("one", ["10.0.0.1:80"])


def test_empty_command_is_rejected():
    with pytest.raises(ValueError):
        CommandRuntimeManager([])
