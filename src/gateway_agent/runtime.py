"""Runtime manager reloading NGINX through a command."""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence, Tuple

from nginx_gateway.errors import RuntimeAPIUnavailableError
from nginx_gateway.interfaces import RuntimeManager, UpstreamPeers

LOG = logging.getLogger(__name__)


class CommandRuntimeManager(RuntimeManager):
    """Reload NGINX OSS by running ``command`` (``nginx -s reload`` by default).

    NGINX OSS has no upstream API; the upstream methods raise
    :class:`RuntimeAPIUnavailableError`.
    """

    def __init__(self, command: Sequence[str], timeout: float = 10.0) -> None:
        if not command:
            raise ValueError("reload command must not be empty")
        self._command = list(command)
        self._timeout = timeout

    def reload(self) -> None:
        LOG.debug("Reloading nginx with %s", " ".join(self._command))
        try:
            result = subprocess.run(
                self._command,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise RuntimeError(
                f"nginx reload timed out after {self._timeout}s"
            ) from exc
        except OSError as exc:
            raise RuntimeError(f"failed to run nginx reload command: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.strip()
            raise RuntimeError(
                f"nginx reload exited with status {result.returncode}: {stderr}"
            )
        LOG.info("nginx reloaded")

    def get_upstreams(self) -> Tuple[UpstreamPeers, UpstreamPeers]:
        raise RuntimeAPIUnavailableError("NGINX OSS does not expose upstreams")

    def update_http_servers(self, upstream: str, servers: Sequence[str]) -> None:
        raise RuntimeAPIUnavailableError("NGINX OSS does not support live upstream updates")

    def update_stream_servers(self, upstream: str, servers: Sequence[str]) -> None:
        raise RuntimeAPIUnavailableError("NGINX OSS does not support live upstream updates")
