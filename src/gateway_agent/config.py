"""YAML configuration loader for the gateway agent."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Sequence

import yaml

from gateway_events.resources import NamespacedName
from nginx_gateway.addresses import GatewayPodConfig
from nginx_gateway.builder import DEFAULT_PLUS_API_ALLOWED_ADDRESSES
from nginx_gateway.loglevel import DEFAULT_LEVEL, SUPPORTED_LEVELS

DEFAULT_RELOAD_COMMAND = ("nginx", "-s", "reload")


@dataclass
class ControllerConfig:
    plus: bool = False
    update_gatewayclass_status: bool = True
    control_config: NamespacedName = NamespacedName()
    gateway_pod: GatewayPodConfig = GatewayPodConfig()


@dataclass
class NginxConfig:
    config_dir: Path = Path("/etc/nginx/conf.d")
    reload_command: Sequence[str] = DEFAULT_RELOAD_COMMAND
    reload_timeout: float = 10.0
    plus_api_allowed_addresses: Sequence[str] = DEFAULT_PLUS_API_ALLOWED_ADDRESSES


@dataclass
class AgentConfig:
    controller: ControllerConfig = field(default_factory=ControllerConfig)
    nginx: NginxConfig = field(default_factory=NginxConfig)
    log_level: str = DEFAULT_LEVEL


def _mapping(data: dict, key: str) -> dict:
    section = data.get(key, {})
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"'{key}' section must be a mapping")
    return section


def _string_list(value, key: str) -> List[str]:
    if not isinstance(value, list) or not value:
        raise ValueError(f"'{key}' must be a non-empty list")
    return [str(v) for v in value]


def _parse_controller(section: dict) -> ControllerConfig:
    control = _mapping(section, "control_config")
    pod = _mapping(section, "gateway_pod")

    return ControllerConfig(
        plus=bool(section.get("plus", False)),
        update_gatewayclass_status=bool(section.get("update_gatewayclass_status", True)),
        control_config=NamespacedName(
            namespace=str(control.get("namespace", "")),
            name=str(control.get("name", "")),
        ),
        gateway_pod=GatewayPodConfig(
            pod_ip=str(pod.get("pod_ip", "")),
            service_name=str(pod.get("service_name", "")),
            namespace=str(pod.get("namespace", "")),
        ),
    )


def _parse_nginx(section: dict) -> NginxConfig:
    reload_command = section.get("reload_command", list(DEFAULT_RELOAD_COMMAND))
    allowed = section.get(
        "plus_api_allowed_addresses", list(DEFAULT_PLUS_API_ALLOWED_ADDRESSES)
    )
    timeout = float(section.get("reload_timeout", 10.0))
    if timeout <= 0:
        raise ValueError("'reload_timeout' must be positive")

    return NginxConfig(
        config_dir=Path(section.get("config_dir", "/etc/nginx/conf.d")),
        reload_command=tuple(_string_list(reload_command, "reload_command")),
        reload_timeout=timeout,
        plus_api_allowed_addresses=tuple(
            _string_list(allowed, "plus_api_allowed_addresses")
        ),
    )


def _parse_log_level(section: dict) -> str:
    level = str(section.get("level", DEFAULT_LEVEL)).lower()
    if level not in SUPPORTED_LEVELS:
        raise ValueError(
            f"Unsupported log level '{level}', expected one of {', '.join(SUPPORTED_LEVELS)}"
        )
    return level


def load_config(path: Path) -> AgentConfig:
    data = yaml.safe_load(Path(path).read_text())
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("Agent configuration must be a mapping")

    return AgentConfig(
        controller=_parse_controller(_mapping(data, "controller")),
        nginx=_parse_nginx(_mapping(data, "nginx")),
        log_level=_parse_log_level(_mapping(data, "logging")),
    )
