"""Image registry operator instruments."""

import logging
from enum import IntEnum

from registry_exporter.services.metrics_registry import MetricsRegistry

logger = logging.getLogger(__name__)

STORAGE_RECONFIGURED_TOTAL = "image_registry_operator_storage_reconfigured_total"
IMAGE_PRUNER_INSTALL_STATUS = "image_registry_operator_image_pruner_install_status"


class PrunerInstallStatus(IntEnum):
    NOT_INSTALLED = 0
    SUSPENDED = 1
    ENABLED = 2

    @classmethod
    def from_state(cls, installed: bool, enabled: bool) -> "PrunerInstallStatus":
        if not installed:
            return cls.NOT_INSTALLED
        if not enabled:
            return cls.SUSPENDED
        return cls.ENABLED


class OperatorMetrics:
    """Owns the operator's metrics and records domain events on them.

    The instruments are declared on the given registry at construction time,
    so a duplicate declaration fails at startup rather than on first use.
    """

    def __init__(self, registry: MetricsRegistry):
        self.registry = registry

        self.registry.register_counter(
            STORAGE_RECONFIGURED_TOTAL,
            "Number of times the registry storage was reconfigured",
        )
        self.registry.register_gauge(
            IMAGE_PRUNER_INSTALL_STATUS,
            "Installation status code related to the automatic image pruning "
            "feature. 0 = not installed, 1 = suspended, 2 = enabled",
        )

    def storage_reconfigured(self) -> None:
        """Record one registry storage reconfiguration."""
        self.registry.increment_counter(STORAGE_RECONFIGURED_TOTAL)
        logger.debug("Storage reconfiguration recorded")

    def image_pruner_install_status(self, installed: bool, enabled: bool) -> None:
        """Publish the image pruner install state.

        Args:
            installed: Whether the pruner resources exist.
            enabled: Whether pruning is active (not suspended).
        """
        status = PrunerInstallStatus.from_state(installed, enabled)
        self.registry.set_gauge(IMAGE_PRUNER_INSTALL_STATUS, None, int(status))
        logger.debug(
            "Image pruner install status updated",
            extra={"status": status.name.lower()},
        )
