"""NGINX configuration rendering."""

from __future__ import annotations

import json
from typing import Iterable, List, Sequence

from .config import Configuration, StreamServer, Upstream, VirtualServer
from .interfaces import ConfigFile, ConfigGenerator

HTTP_CONFIG_FILE = "http.conf"
STREAM_CONFIG_FILE = "stream.conf"
PLUS_API_CONFIG_FILE = "plus-api.conf"
DEPLOYMENT_CONTEXT_FILE = "deployment_ctx.json"

# Upstreams without endpoints proxy to a local socket answering 502.
EMPTY_UPSTREAM_SERVER = "unix:/var/run/nginx/nginx-502-server.sock"
PLUS_API_SOCKET = "unix:/var/run/nginx/nginx-plus-api.sock"

HEADER = "# Generated by nginx-gateway-reconciler. Do not edit.\n"


class NginxConfigGenerator(ConfigGenerator):
    """Render a :class:`Configuration` into NGINX include files."""

    def __init__(self, *, zone_size: str = "512k") -> None:
        self._zone_size = zone_size

    def generate(self, configuration: Configuration) -> List[ConfigFile]:
        files = [
            ConfigFile(path=HTTP_CONFIG_FILE, content=self._render_http(configuration).encode()),
            ConfigFile(path=STREAM_CONFIG_FILE, content=self._render_stream(configuration).encode()),
            ConfigFile(
                path=DEPLOYMENT_CONTEXT_FILE,
                content=json.dumps(configuration.deployment_context.as_dict()).encode(),
            ),
        ]
        if configuration.nginx_plus.allowed_addresses:
            files.append(
                ConfigFile(
                    path=PLUS_API_CONFIG_FILE,
                    content=self._render_plus_api(configuration).encode(),
                )
            )
        return files

    def _render_http(self, configuration: Configuration) -> str:
        sections: list[str] = [HEADER, f"# configuration version {configuration.version}"]
        sections.extend(self._render_upstream(u) for u in configuration.upstreams)
        sections.extend(self._render_server(s) for s in configuration.http_servers)
        return "\n".join(sections) + "\n"

    def _render_stream(self, configuration: Configuration) -> str:
        sections: list[str] = [HEADER]
        sections.extend(self._render_upstream(u) for u in configuration.stream_upstreams)
        if configuration.stream_servers:
            sections.append(self._render_sni_map(configuration.stream_servers))
            sections.extend(self._render_stream_listeners(configuration.stream_servers))
        return "\n".join(sections) + "\n"

    def _render_upstream(self, upstream: Upstream) -> str:
        lines = [f"upstream {upstream.name} {{", "    random two least_conn;"]
        lines.append(f"    zone {upstream.name} {self._zone_size};")
        servers = upstream.servers() or [EMPTY_UPSTREAM_SERVER]
        for server in servers:
            lines.append(f"    server {server};")
        lines.append("}")
        return "\n".join(lines)

    def _render_server(self, server: VirtualServer) -> str:
        if server.is_default:
            return "\n".join(
                [
                    "server {",
                    f"    listen {server.port} default_server;",
                    "    default_type text/html;",
                    "    return 404;",
                    "}",
                ]
            )

        lines = [
            "server {",
            f"    listen {server.port};",
            f"    server_name {server.hostname};",
        ]
        for location in server.locations:
            lines.append(f"    location {location.path} {{")
            lines.append(f"        proxy_pass http://{location.upstream};")
            lines.append("    }")
        lines.append("}")
        return "\n".join(lines)

    def _render_sni_map(self, servers: Sequence[StreamServer]) -> str:
        lines = ["map $ssl_preread_server_name $stream_upstream {"]
        for server in servers:
            lines.append(f"    {server.hostname} {server.upstream};")
        lines.append("}")
        return "\n".join(lines)

    def _render_stream_listeners(self, servers: Sequence[StreamServer]) -> Iterable[str]:
        for port in sorted({s.port for s in servers}):
            yield "\n".join(
                [
                    "server {",
                    f"    listen {port};",
                    "    ssl_preread on;",
                    "    proxy_pass $stream_upstream;",
                    "}",
                ]
            )

    def _render_plus_api(self, configuration: Configuration) -> str:
        lines = [
            HEADER,
            "server {",
            f"    listen {PLUS_API_SOCKET};",
            "    location /api {",
            "        api write=on;",
        ]
        for address in configuration.nginx_plus.allowed_addresses:
            lines.append(f"        allow {address};")
        lines.extend(["        deny all;", "    }", "}"])
        return "\n".join(lines) + "\n"
