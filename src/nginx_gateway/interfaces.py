"""Abstract interfaces for the collaborators driven by the event handler."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from gateway_events.resources import NamespacedName, Service

from .config import Configuration, DeploymentContext


class FileType(Enum):
    REGULAR = "regular"
    SECRET = "secret"


@dataclass(frozen=True)
class ConfigFile:
    """A rendered artifact, ``path`` relative to the config directory."""

    path: str
    content: bytes
    type: FileType = FileType.REGULAR


@dataclass(frozen=True)
class Peer:
    """A server of an upstream as reported by the runtime API."""

    server: str
    id: Optional[int] = None


UpstreamPeers = Mapping[str, Sequence[Peer]]


class ConfigGenerator(ABC):
    @abstractmethod
    def generate(self, configuration: Configuration) -> List[ConfigFile]:
        """Render ``configuration`` into the full set of config files."""


class ConfigFileManager(ABC):
    @abstractmethod
    def replace_files(self, files: Sequence[ConfigFile]) -> None:
        """Swap the on-disk artifact set for ``files``."""


class RuntimeManager(ABC):
    """Controls the running NGINX process."""

    @abstractmethod
    def reload(self) -> None:
        """Reload NGINX so it picks up the replaced files."""

    @abstractmethod
    def get_upstreams(self) -> Tuple[UpstreamPeers, UpstreamPeers]:
        """Return the live HTTP and stream upstream peers in one call."""

    @abstractmethod
    def update_http_servers(self, upstream: str, servers: Sequence[str]) -> None:
        """Replace the servers of an HTTP upstream."""

    @abstractmethod
    def update_stream_servers(self, upstream: str, servers: Sequence[str]) -> None:
        """Replace the servers of a stream upstream."""


class EventRecorder(ABC):
    """Emits user-visible Kubernetes events."""

    WARNING = "Warning"
    NORMAL = "Normal"

    @abstractmethod
    def record(self, severity: str, reason: str, message: str) -> None:
        """Record an event of ``severity`` with ``reason`` and ``message``."""


class ClusterClient(ABC):
    """Read-only access to cluster objects."""

    @abstractmethod
    def get_service(self, nsname: NamespacedName) -> Optional[Service]:
        """Return the Service or ``None`` when it does not exist."""


class DeploymentContextCollector(ABC):
    @abstractmethod
    def collect(self) -> DeploymentContext:
        """Gather usage reporting metadata, raising on failure."""


class LevelSetter(ABC):
    @abstractmethod
    def set_level(self, level: str) -> None:
        """Apply ``level`` to the process logging."""

    @abstractmethod
    def enabled(self, level: str) -> bool:
        """Report whether records at ``level`` are emitted."""


def describe(resource: Any) -> str:
    """Short ``Kind ns/name`` label used in log lines."""

    nsname = getattr(resource, "namespaced_name", None)
    kind = type(resource).__name__
    if nsname is None:
        return kind
    return f"{kind} {nsname}"
