"""Deployment context collection for NGINX Plus usage reporting."""

from __future__ import annotations

import logging
from typing import Optional

from .config import DeploymentContext
from .interfaces import DeploymentContextCollector

LOG = logging.getLogger(__name__)


class DeploymentContextProvider:
    """Return licensing metadata when running NGINX Plus.

    NGINX OSS has no use for it, so the provider answers with an empty
    context and never touches the collector.
    """

    def __init__(
        self,
        plus: bool = False,
        collector: Optional[DeploymentContextCollector] = None,
    ) -> None:
        if plus and collector is None:
            raise ValueError("a deployment context collector is required for NGINX Plus")
        self._plus = plus
        self._collector = collector

    def collect(self) -> DeploymentContext:
        if not self._plus:
            return DeploymentContext()

        context = self._collector.collect()
        LOG.debug("Collected deployment context: %s", context)
        return context
