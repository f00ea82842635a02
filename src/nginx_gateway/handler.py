"""Event batch handler driving NGINX reconfiguration.

The handler is the single consumer of the batches published by the watch
layer. For every batch it feeds the events to the change processor, asks it
once for the net effect, and then does the cheapest thing that brings NGINX in
line with the graph:

* nothing, when the batch did not change the configuration;
* a live update of upstream servers through the NGINX Plus API, when only
  endpoints changed and NGINX Plus is in use;
* a full regenerate/write/reload cycle otherwise, followed by status updates.

Batches are expected one at a time. The latest configuration and the readiness
state are shared with health probes and are only ever changed together, under
one lock.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field, replace
from threading import Lock
from typing import Any, Callable, Dict, Iterable, Optional, Sequence, Tuple

from gateway_events.events import DeleteEvent, UpsertEvent
from gateway_events.resources import GatewayClass as GatewayClassResource
from gateway_events.resources import NamespacedName, NginxGateway, Service

from .addresses import GatewayPodConfig, resolve_gateway_addresses
from .builder import DEFAULT_PLUS_API_ALLOWED_ADDRESSES, build_configuration
from .config import Configuration, DeploymentContext
from .deployment import DeploymentContextProvider
from .graph import Graph
from .interfaces import (
    ClusterClient,
    ConfigFileManager,
    ConfigGenerator,
    EventRecorder,
    LevelSetter,
    RuntimeManager,
    describe,
)
from .loglevel import DEFAULT_LEVEL, validate_control_config
from .readiness import ReadinessTracker
from .state import ChangeProcessor, ChangeType
from .status import (
    StatusGroup,
    StatusUpdater,
    build_all_except_gateways_requests,
    build_control_plane_request,
    build_gateway_requests,
    exclude_resource_type,
    include_all,
)
from .upstreams import sync_upstreams

LOG = logging.getLogger(__name__)

REASON_UPDATE_FAILED = "UpdateFailed"
REASON_RESOURCE_DELETED = "ResourceDeleted"


@dataclass
class HandlerConfig:
    """Collaborators and settings of an :class:`EventHandler`."""

    processor: ChangeProcessor
    generator: ConfigGenerator
    file_manager: ConfigFileManager
    runtime_manager: RuntimeManager
    status_updater: StatusUpdater
    event_recorder: EventRecorder
    level_setter: LevelSetter
    cluster_client: Optional[ClusterClient] = None
    deployment_context: DeploymentContextProvider = field(
        default_factory=DeploymentContextProvider
    )
    readiness: ReadinessTracker = field(default_factory=ReadinessTracker)
    control_config_nsname: NamespacedName = NamespacedName()
    gateway_pod: GatewayPodConfig = GatewayPodConfig()
    plus: bool = False
    update_gateway_class_status: bool = True
    plus_allowed_addresses: Sequence[str] = DEFAULT_PLUS_API_ALLOWED_ADDRESSES


@dataclass(frozen=True)
class _ObjectFilter:
    """Handles events for one specific object instead of the change processor."""

    upsert: Callable[[Any], None]
    delete: Callable[[NamespacedName], None]


def _fatal(message: str) -> None:
    LOG.critical(message)
    os.abort()


class EventHandler:
    """Reconcile NGINX with the cluster state, one event batch at a time."""

    def __init__(self, cfg: HandlerConfig) -> None:
        self._cfg = cfg
        self._lock = Lock()
        self._latest_configuration: Optional[Configuration] = None
        self._version = 0

        if cfg.update_gateway_class_status:
            self._status_filter = include_all
        else:
            self._status_filter = exclude_resource_type(GatewayClassResource)

        self._object_filters: Dict[Tuple[type, NamespacedName], _ObjectFilter] = {}
        if cfg.control_config_nsname.name:
            self._object_filters[(NginxGateway, cfg.control_config_nsname)] = _ObjectFilter(
                upsert=self._upsert_control_config,
                delete=self._delete_control_config,
            )
        if cfg.gateway_pod.service_name:
            self._object_filters[(Service, cfg.gateway_pod.service_nsname)] = _ObjectFilter(
                upsert=self._update_gateway_addresses,
                delete=lambda _nsname: self._update_gateway_addresses(None),
            )

    @property
    def config(self) -> HandlerConfig:
        return self._cfg

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    def handle_event_batch(self, batch: Iterable[Any]) -> None:
        start = time.monotonic()
        events = list(batch)
        LOG.debug("Handling events from the batch: total=%d", len(events))

        for event in events:
            self._handle_event(event)

        change_type, graph = self._cfg.processor.process()

        if change_type is ChangeType.NO_CHANGE:
            LOG.info("Handling events didn't result into NGINX configuration changes")
            self._commit()
        elif change_type is ChangeType.ENDPOINTS_ONLY_CHANGE and self._cfg.plus:
            self._apply_endpoints_change(graph)
        else:
            # NGINX OSS has no API for upstream servers, so endpoint changes
            # need a reload as well.
            self._apply_full_change(graph)

        LOG.debug(
            "Handled batch of %d events in %.3fs (change=%s)",
            len(events),
            time.monotonic() - start,
            change_type.name,
        )

    def get_latest_configuration(self) -> Optional[Configuration]:
        with self._lock:
            return self._latest_configuration

    def check_ready(self) -> None:
        """Raise unless NGINX has been configured and the last reload succeeded."""

        with self._lock:
            self._cfg.readiness.check_ready()

    def update_upstream_servers(self, configuration: Configuration) -> None:
        """Sync upstream servers of ``configuration`` through the NGINX Plus API.

        Does nothing for NGINX OSS. Errors are raised to the caller and do
        not affect readiness.
        """

        if not self._cfg.plus:
            return
        updated = sync_upstreams(self._cfg.runtime_manager, configuration)
        LOG.debug("Updated %d upstreams through the NGINX Plus API", updated)

    # ------------------------------------------------------------------
    # Event dispatch
    # ------------------------------------------------------------------
    def _handle_event(self, event: Any) -> None:
        if isinstance(event, UpsertEvent):
            resource = event.resource
            key = (type(resource), getattr(resource, "namespaced_name", None))
            obj_filter = self._object_filters.get(key)
            if obj_filter is not None:
                obj_filter.upsert(resource)
                return
            LOG.debug("Capturing upsert of %s", describe(resource))
            self._cfg.processor.capture_upsert_change(resource)
        elif isinstance(event, DeleteEvent):
            key = (event.resource_type, event.namespaced_name)
            obj_filter = self._object_filters.get(key)
            if obj_filter is not None:
                obj_filter.delete(event.namespaced_name)
                return
            LOG.debug(
                "Capturing delete of %s %s",
                event.resource_type.__name__,
                event.namespaced_name,
            )
            self._cfg.processor.capture_delete_change(
                event.resource_type, event.namespaced_name
            )
        else:
            # The watch layer only ever publishes the two event kinds above.
            _fatal(f"unknown event type {type(event)!r}")

    def _upsert_control_config(self, resource: NginxGateway) -> None:
        error = validate_control_config(resource)
        if error is not None:
            message = f"Failed to update control plane configuration: {error}"
            LOG.error(message)
            self._cfg.event_recorder.record(
                EventRecorder.WARNING, REASON_UPDATE_FAILED, message
            )
        elif resource.logging_level is not None:
            self._cfg.level_setter.set_level(resource.logging_level)
            LOG.info("Control plane log level set to %s", resource.logging_level)

        self._cfg.status_updater.update_group(
            StatusGroup.CONTROL_PLANE,
            [build_control_plane_request(resource.namespaced_name, error)],
        )

    def _delete_control_config(self, nsname: NamespacedName) -> None:
        self._cfg.level_setter.set_level(DEFAULT_LEVEL)
        LOG.info("Control plane configuration %s deleted, using defaults", nsname)
        self._cfg.event_recorder.record(
            EventRecorder.WARNING,
            REASON_RESOURCE_DELETED,
            "NginxGateway configuration was deleted; using defaults",
        )
        self._cfg.status_updater.update_group(StatusGroup.CONTROL_PLANE, [])

    def _update_gateway_addresses(self, service: Optional[Service]) -> None:
        addresses, error = resolve_gateway_addresses(
            self._cfg.cluster_client, service, self._cfg.gateway_pod
        )
        if error is not None:
            LOG.info("Falling back to Pod IP for Gateway addresses: %s", error)

        graph = self._cfg.processor.get_latest_graph() or Graph()
        requests = build_gateway_requests(
            graph, addresses, self._cfg.readiness.reload_error
        )
        self._cfg.status_updater.update_group(StatusGroup.GATEWAYS, requests)

    # ------------------------------------------------------------------
    # Reconfiguration
    # ------------------------------------------------------------------
    def _build_configuration(
        self, graph: Graph, context: Optional[DeploymentContext] = None
    ) -> Configuration:
        return build_configuration(
            graph,
            self._version,
            plus=self._cfg.plus,
            deployment_context=context,
            plus_allowed_addresses=self._cfg.plus_allowed_addresses,
        )

    def _apply_endpoints_change(self, graph: Graph) -> None:
        self._version += 1
        built = self._build_configuration(graph)
        previous = self.get_latest_configuration()
        if previous is None:
            configuration = built
        else:
            configuration = replace(
                previous,
                version=built.version,
                upstreams=built.upstreams,
                stream_upstreams=built.stream_upstreams,
            )

        try:
            self.update_upstream_servers(configuration)
        except Exception:
            LOG.exception("Failed to update upstream servers through the NGINX Plus API")
            self._commit()
            return

        LOG.info("NGINX upstream servers were successfully updated")
        self._commit(configuration=configuration)

    def _apply_full_change(self, graph: Graph) -> None:
        self._version += 1
        configuration: Optional[Configuration] = None
        reload_error: Optional[Exception] = None
        try:
            context = self._cfg.deployment_context.collect()
            configuration = self._build_configuration(graph, context)
            files = self._cfg.generator.generate(configuration)
            self._cfg.file_manager.replace_files(files)
            self._cfg.runtime_manager.reload()
        except Exception as exc:
            LOG.exception("Failed to update NGINX configuration")
            reload_error = exc
        else:
            LOG.info("NGINX configuration was successfully updated")

        try:
            self._update_statuses(graph, reload_error)
        finally:
            if reload_error is None:
                self._commit(configuration=configuration, reloaded=True)
            else:
                self._commit(reload_error=reload_error, reloaded=True)

    def _update_statuses(self, graph: Graph, reload_error: Optional[Exception]) -> None:
        self._cfg.status_updater.update_group(
            StatusGroup.ALL_EXCEPT_GATEWAYS,
            build_all_except_gateways_requests(graph, reload_error, self._status_filter),
        )

        addresses, error = resolve_gateway_addresses(
            self._cfg.cluster_client, None, self._cfg.gateway_pod
        )
        if error is not None:
            LOG.info("Falling back to Pod IP for Gateway addresses: %s", error)
        self._cfg.status_updater.update_group(
            StatusGroup.GATEWAYS,
            build_gateway_requests(graph, addresses, reload_error),
        )

    def _commit(
        self,
        configuration: Optional[Configuration] = None,
        reload_error: Optional[Exception] = None,
        reloaded: bool = False,
    ) -> None:
        with self._lock:
            if configuration is not None:
                self._latest_configuration = configuration
            if reloaded:
                if reload_error is None:
                    self._cfg.readiness.clear_reload_error()
                else:
                    self._cfg.readiness.set_reload_error(reload_error)
            self._cfg.readiness.mark_configured()
