"""Exceptions raised by the reconciler and its helpers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence


class ReconcilerError(Exception):
    """Base class for reconciler errors."""


class NotReadyError(ReconcilerError):
    """NGINX has not been configured by a processed batch yet."""

    def __init__(self) -> None:
        super().__init__("nginx has not yet become ready to accept traffic")


class ReloadFailedError(ReconcilerError):
    """The most recent full reconfiguration did not succeed."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"last nginx reload failed: {cause}")
        self.cause = cause


class ServiceNotFoundError(ReconcilerError):
    """The Service fronting the gateway Pod could not be fetched."""


class RuntimeAPIUnavailableError(ReconcilerError):
    """The runtime manager exposes no dynamic upstream API."""


class UpstreamSyncError(ReconcilerError):
    """A live upstream update could not be applied."""

    def __init__(self, message: str, upstream: Optional[str] = None) -> None:
        super().__init__(message)
        self.upstream = upstream


@dataclass(frozen=True)
class FieldError:
    """A single invalid field of a resource, rendered like API server errors."""

    path: str
    value: str
    supported: Sequence[str] = ()

    def __str__(self) -> str:
        supported = ", ".join(f'"{v}"' for v in self.supported)
        return (
            f'{self.path}: Unsupported value: "{self.value}": '
            f"supported values: {supported}"
        )


class ConfigValidationError(ReconcilerError):
    """The control-plane configuration resource failed validation."""

    def __init__(self, errors: Sequence[FieldError]) -> None:
        self.errors = list(errors)
        if len(self.errors) == 1:
            message = str(self.errors[0])
        else:
            message = "[" + ", ".join(str(e) for e in self.errors) + "]"
        super().__init__(message)
