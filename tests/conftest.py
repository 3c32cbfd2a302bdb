"""Pytest configuration and fixtures."""

from collections.abc import Generator

import pytest
from flask import Flask

from registry_exporter import create_app
from registry_exporter.config import Settings
from registry_exporter.container import ServiceContainer
from registry_exporter.server import MetricsServer
from registry_exporter.services.metrics_registry import MetricsRegistry
from registry_exporter.utils.tls import write_self_signed_pair


@pytest.fixture(scope="session")
def tls_pair(tmp_path_factory: pytest.TempPathFactory) -> tuple[str, str]:
    """Self-signed certificate and key shared by the whole session."""
    directory = tmp_path_factory.mktemp("tls")
    cert_file = directory / "tls.crt"
    key_file = directory / "tls.key"
    write_self_signed_pair(cert_file, key_file, hostname="localhost", days=1)
    return str(cert_file), str(key_file)


def _build_test_settings(tls_pair: tuple[str, str]) -> Settings:
    """Construct base Settings object for tests."""
    cert_file, key_file = tls_pair
    return Settings(
        flask_env="testing",
        log_level="DEBUG",
        host="127.0.0.1",
        port=0,
        tls_cert_file=cert_file,
        tls_key_file=key_file,
        tls_generate_ephemeral=False,
    )


@pytest.fixture
def test_settings(tls_pair: tuple[str, str]) -> Settings:
    """Create test settings."""
    return _build_test_settings(tls_pair)


@pytest.fixture
def registry() -> MetricsRegistry:
    """A fresh, empty metrics registry."""
    return MetricsRegistry()


@pytest.fixture
def app(test_settings: Settings) -> Flask:
    """Create a Flask app with its own container and registry."""
    return create_app(test_settings)


@pytest.fixture
def client(app: Flask):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def container(app: Flask) -> ServiceContainer:
    """Access to the DI container for testing."""
    return app.container  # type: ignore[attr-defined, no-any-return]


@pytest.fixture(scope="session")
def metrics_server(tls_pair: tuple[str, str]) -> Generator[MetricsServer, None, None]:
    """HTTPS server on an ephemeral port, serving for the whole session.

    Like the production server it has no stop state; its daemon thread ends
    with the test process.
    """
    settings = _build_test_settings(tls_pair)
    server = MetricsServer(create_app(settings), settings)
    server.start()
    yield server


@pytest.fixture(scope="session")
def base_url(metrics_server: MetricsServer) -> str:
    return f"https://127.0.0.1:{metrics_server.port}"


@pytest.fixture
def served_container(metrics_server: MetricsServer) -> ServiceContainer:
    """The container behind the session HTTPS server."""
    return metrics_server.app.container
