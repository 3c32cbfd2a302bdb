"""Flask application factory."""

import logging

from registry_exporter.app import App
from registry_exporter.config import Settings
from registry_exporter.container import ServiceContainer

logger = logging.getLogger(__name__)


def create_app(
    settings: "Settings | None" = None,
    container: "ServiceContainer | None" = None,
) -> App:
    """Create and configure the exporter's Flask application.

    Args:
        settings: Optional settings instance (loaded from the environment if
            not provided)
        container: Optional pre-built container; a fresh one (with its own
            metrics registry) is created otherwise

    Returns:
        Configured Flask application instance
    """
    app = App(__name__)

    # Load configuration
    if settings is None:
        settings = Settings.load()

    # Validate configuration before proceeding
    settings.validate_config()

    app.config["TESTING"] = settings.is_testing

    if container is None:
        container = ServiceContainer()
    container.config.override(settings)

    # Declare the operator instruments now so duplicates fail at startup
    container.operator_metrics()

    app.container = container

    from registry_exporter.api.metrics import metrics_bp

    app.register_blueprint(metrics_bp)

    logger.info("Metrics exporter application created")

    return app
