"""Dependency injection container for the exporter."""

from dependency_injector import containers, providers

from registry_exporter.config import Settings
from registry_exporter.services.metrics_registry import MetricsRegistry
from registry_exporter.services.operator_metrics import OperatorMetrics


class ServiceContainer(containers.DeclarativeContainer):
    """Container for service dependency injection."""

    # Configuration - must be overridden by create_app()
    config = providers.Dependency(instance_of=Settings)

    # One registry per container; never the global prometheus REGISTRY
    metrics_registry = providers.Singleton(MetricsRegistry)

    # Operator instruments, declared on the registry when first resolved
    operator_metrics = providers.Singleton(
        OperatorMetrics,
        registry=metrics_registry,
    )
