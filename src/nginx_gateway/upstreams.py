"""Live upstream updates through the NGINX Plus API."""

from __future__ import annotations

import logging
from typing import List, Sequence, Tuple

from .config import Configuration, Upstream
from .errors import UpstreamSyncError
from .interfaces import Peer, RuntimeManager, UpstreamPeers

LOG = logging.getLogger(__name__)

HTTP = "http"
STREAM = "stream"


def servers_equal(desired: Sequence[str], live: Sequence[Peer]) -> bool:
    """Compare server lists position by position.

    The renderer and the runtime API both list servers in endpoint order, so
    a reordering counts as a difference.
    """

    if len(desired) != len(live):
        return False
    return all(server == peer.server for server, peer in zip(desired, live))


def _pending_updates(
    upstreams: Sequence[Upstream], live: UpstreamPeers
) -> List[Tuple[str, List[str]]]:
    updates: List[Tuple[str, List[str]]] = []
    for upstream in upstreams:
        peers = live.get(upstream.name)
        if peers is None:
            # A zone that does not exist yet can only be created by a reload.
            LOG.debug("Upstream %s not present in nginx, skipping", upstream.name)
            continue
        servers = upstream.servers()
        if not servers_equal(servers, peers):
            updates.append((upstream.name, servers))
    return updates


def sync_upstreams(runtime: RuntimeManager, configuration: Configuration) -> int:
    """Push the servers of ``configuration`` into the running NGINX.

    The live peers are fetched once for both protocol classes; only upstreams
    whose server list differs are updated, each with its full desired list.
    The first failure aborts the sync. Returns the number of updated upstreams.
    """

    try:
        http_peers, stream_peers = runtime.get_upstreams()
    except Exception as exc:
        raise UpstreamSyncError(f"failed to get upstreams from nginx: {exc}") from exc

    updated = 0
    for name, servers in _pending_updates(configuration.upstreams, http_peers):
        try:
            runtime.update_http_servers(name, servers)
        except Exception as exc:
            raise UpstreamSyncError(
                f"failed to update servers of {HTTP} upstream {name}: {exc}", upstream=name
            ) from exc
        LOG.debug("Updated %s upstream %s with servers %s", HTTP, name, servers)
        updated += 1

    for name, servers in _pending_updates(configuration.stream_upstreams, stream_peers):
        try:
            runtime.update_stream_servers(name, servers)
        except Exception as exc:
            raise UpstreamSyncError(
                f"failed to update servers of {STREAM} upstream {name}: {exc}", upstream=name
            ) from exc
        LOG.debug("Updated %s upstream %s with servers %s", STREAM, name, servers)
        updated += 1

    return updated
