"""Control-plane logging level handling."""

from __future__ import annotations

import logging
from threading import Lock
from typing import Dict, Optional

from gateway_events.resources import NginxGateway

from .errors import ConfigValidationError, FieldError
from .interfaces import LevelSetter

LOG = logging.getLogger(__name__)

LEVEL_INFO = "info"
LEVEL_DEBUG = "debug"
LEVEL_ERROR = "error"

DEFAULT_LEVEL = LEVEL_INFO

# Ordered as reported to users.
SUPPORTED_LEVELS: Dict[str, int] = {
    LEVEL_INFO: logging.INFO,
    LEVEL_DEBUG: logging.DEBUG,
    LEVEL_ERROR: logging.ERROR,
}


def validate_control_config(resource: NginxGateway) -> Optional[ConfigValidationError]:
    level = resource.logging_level
    if level is None or level in SUPPORTED_LEVELS:
        return None
    return ConfigValidationError(
        [FieldError(path="logging.level", value=level, supported=tuple(SUPPORTED_LEVELS))]
    )


class LogLevelSetter(LevelSetter):
    """Set the level of ``logger`` (the root logger by default).

    The level is a single shared value; changes are serialized so concurrent
    readers never see a half-applied update.
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: str = DEFAULT_LEVEL) -> None:
        self._logger = logger if logger is not None else logging.getLogger()
        self._lock = Lock()
        self._level = DEFAULT_LEVEL
        self.set_level(level)

    @property
    def level(self) -> str:
        with self._lock:
            return self._level

    def set_level(self, level: str) -> None:
        try:
            numeric = SUPPORTED_LEVELS[level]
        except KeyError:
            raise ValueError(f"unsupported log level '{level}'") from None
        with self._lock:
            self._level = level
            self._logger.setLevel(numeric)

    def enabled(self, level: str) -> bool:
        return self._logger.isEnabledFor(SUPPORTED_LEVELS[level])
