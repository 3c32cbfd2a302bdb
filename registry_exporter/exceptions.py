"""Exporter exceptions."""


class ConfigurationError(Exception):
    """Raised when exporter configuration is invalid."""

    pass


class StartupFailure(Exception):
    """Base class for fatal errors raised while the server is starting.

    The process must not continue serving after one of these.
    """

    def __init__(self, message: str, error_code: str) -> None:
        self.message = message
        self.error_code = error_code
        super().__init__(message)


class CertificateError(StartupFailure):
    """Raised when the TLS certificate/key pair cannot be loaded or generated."""

    def __init__(self, cert_file: str, key_file: str, cause: str) -> None:
        self.cert_file = cert_file
        self.key_file = key_file
        message = f"Cannot load TLS certificate {cert_file} with key {key_file}: {cause}"
        super().__init__(message, error_code="CERTIFICATE_ERROR")


class ServerBindError(StartupFailure):
    """Raised when the metrics server cannot bind its listen address."""

    def __init__(self, host: str, port: int, cause: str) -> None:
        self.host = host
        self.port = port
        message = f"Cannot bind metrics server to {host}:{port}: {cause}"
        super().__init__(message, error_code="BIND_FAILED")


class DuplicateMetricError(Exception):
    """Raised when an instrument name is registered twice."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Metric {name} is already registered")
