"""Wiring and entry point for the gateway agent."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

import yaml

from nginx_gateway.deployment import DeploymentContextProvider
from nginx_gateway.files import FileManager
from nginx_gateway.handler import EventHandler, HandlerConfig
from nginx_gateway.interfaces import (
    ClusterClient,
    DeploymentContextCollector,
    EventRecorder,
    RuntimeManager,
)
from nginx_gateway.loglevel import LogLevelSetter
from nginx_gateway.nginx import NginxConfigGenerator
from nginx_gateway.state import ChangeProcessor
from nginx_gateway.status import StatusUpdater

from .config import AgentConfig, load_config
from .runtime import CommandRuntimeManager

LOG = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(level: str = "info") -> LogLevelSetter:
    """Configure the root logger and return the setter controlling its level."""

    logging.basicConfig(format=LOG_FORMAT)
    return LogLevelSetter(logging.getLogger(), level)


def build_event_handler(
    config: AgentConfig,
    *,
    processor: ChangeProcessor,
    status_updater: StatusUpdater,
    event_recorder: EventRecorder,
    cluster_client: Optional[ClusterClient] = None,
    runtime_manager: Optional[RuntimeManager] = None,
    deployment_collector: Optional[DeploymentContextCollector] = None,
    level_setter: Optional[LogLevelSetter] = None,
) -> EventHandler:
    """Assemble an :class:`EventHandler` from ``config`` and the watch-layer collaborators.

    NGINX Plus needs a runtime manager exposing the Plus API and a deployment
    context collector; NGINX OSS defaults to reloading through the configured
    command.
    """

    controller = config.controller
    if runtime_manager is None:
        if controller.plus:
            raise ValueError("NGINX Plus requires a runtime manager with API access")
        runtime_manager = CommandRuntimeManager(
            config.nginx.reload_command, timeout=config.nginx.reload_timeout
        )

    handler_config = HandlerConfig(
        processor=processor,
        generator=NginxConfigGenerator(),
        file_manager=FileManager(config.nginx.config_dir),
        runtime_manager=runtime_manager,
        status_updater=status_updater,
        event_recorder=event_recorder,
        level_setter=level_setter or LogLevelSetter(level=config.log_level),
        cluster_client=cluster_client,
        deployment_context=DeploymentContextProvider(
            plus=controller.plus, collector=deployment_collector
        ),
        control_config_nsname=controller.control_config,
        gateway_pod=controller.gateway_pod,
        plus=controller.plus,
        update_gateway_class_status=controller.update_gatewayclass_status,
        plus_allowed_addresses=config.nginx.plus_api_allowed_addresses,
    )
    LOG.info(
        "Event handler configured (plus=%s, config_dir=%s)",
        controller.plus,
        config.nginx.config_dir,
    )
    return EventHandler(handler_config)


def main(argv: list[str] | None = None) -> int:
    """Validate an agent configuration file and print the effective settings."""

    parser = argparse.ArgumentParser(description="Check the gateway agent configuration")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("/etc/nginx-gateway/agent.yaml"),
        help="Path to the agent configuration file",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args(argv)
    setup_logging("debug" if args.verbose else "info")

    try:
        config = load_config(args.config)
    except (OSError, ValueError, yaml.YAMLError) as exc:
        LOG.error("invalid configuration %s: %s", args.config, exc)
        return 1

    controller = config.controller
    print(f"nginx variant: {'plus' if controller.plus else 'oss'}")
    print(f"config dir: {config.nginx.config_dir}")
    print(f"reload command: {' '.join(config.nginx.reload_command)}")
    print(f"control plane config: {controller.control_config}")
    print(f"gateway service: {controller.gateway_pod.service_nsname}")
    print(f"log level: {config.log_level}")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
