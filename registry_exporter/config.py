"""Configuration management using Pydantic settings.

Two-layer configuration system:
1. Environment: Loads raw values from environment variables (UPPER_CASE)
2. Settings: Clean exporter settings with lowercase fields and derived values
"""

import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_DEFAULT_TLS_CERT_FILE = "/etc/secrets/tls.crt"
_DEFAULT_TLS_KEY_FILE = "/etc/secrets/tls.key"

METRICS_PATH = "/metrics"


class Environment(BaseSettings):
    """Raw environment variable loading."""

    model_config = SettingsConfigDict(
        env_file=_PROJECT_ROOT / ".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    FLASK_ENV: str = Field(default="production")
    LOG_LEVEL: str = Field(default="INFO")

    # ── Listener ───────────────────────────────────────────────────────

    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=5000)

    # ── TLS ────────────────────────────────────────────────────────────

    TLS_CERT_FILE: str = Field(default=_DEFAULT_TLS_CERT_FILE)
    TLS_KEY_FILE: str = Field(default=_DEFAULT_TLS_KEY_FILE)
    TLS_GENERATE_EPHEMERAL: bool = Field(default=False)
    TLS_EPHEMERAL_HOSTNAME: str = Field(default="localhost")
    TLS_HANDSHAKE_TIMEOUT: float = Field(default=10.0)


class Settings(BaseModel):
    """Exporter settings with lowercase fields and derived values."""

    model_config = ConfigDict(from_attributes=True)

    flask_env: str = "production"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 5000

    tls_cert_file: str = _DEFAULT_TLS_CERT_FILE
    tls_key_file: str = _DEFAULT_TLS_KEY_FILE
    tls_generate_ephemeral: bool = False
    tls_ephemeral_hostname: str = "localhost"
    tls_handshake_timeout: float = 10.0

    @property
    def is_testing(self) -> bool:
        return self.flask_env == "testing"

    @property
    def is_production(self) -> bool:
        return self.flask_env == "production"

    @property
    def log_level_value(self) -> int:
        level = logging.getLevelName(self.log_level)
        # Unknown names are reported by validate_config()
        return level if isinstance(level, int) else logging.INFO

    def validate_config(self) -> None:
        from registry_exporter.exceptions import ConfigurationError

        errors: list[str] = []

        if not 0 <= self.port <= 65535:
            errors.append(f"PORT must be between 0 and 65535, got {self.port}")

        if not isinstance(logging.getLevelName(self.log_level), int):
            errors.append(f"LOG_LEVEL {self.log_level!r} is not a known log level")

        if self.tls_handshake_timeout <= 0:
            errors.append("TLS_HANDSHAKE_TIMEOUT must be positive")

        if not self.tls_generate_ephemeral:
            if not self.tls_cert_file:
                errors.append(
                    "TLS_CERT_FILE is required when TLS_GENERATE_EPHEMERAL=False"
                )
            if not self.tls_key_file:
                errors.append(
                    "TLS_KEY_FILE is required when TLS_GENERATE_EPHEMERAL=False"
                )

        if errors:
            raise ConfigurationError(
                "Configuration validation failed:\n  - " + "\n  - ".join(errors)
            )

    @classmethod
    def load(cls, env: "Environment | None" = None) -> "Settings":
        if env is None:
            env = Environment()

        return cls(
            flask_env=env.FLASK_ENV,
            log_level=env.LOG_LEVEL.upper(),

            # Listener
            host=env.HOST,
            port=env.PORT,

            # TLS
            tls_cert_file=env.TLS_CERT_FILE,
            tls_key_file=env.TLS_KEY_FILE,
            tls_generate_ephemeral=env.TLS_GENERATE_EPHEMERAL,
            tls_ephemeral_hostname=env.TLS_EPHEMERAL_HOSTNAME,
            tls_handshake_timeout=env.TLS_HANDSHAKE_TIMEOUT,
        )
