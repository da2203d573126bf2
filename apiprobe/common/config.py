"""Central environment-driven settings shared by the dispatcher and console.

Each process loads this once at startup. Behavior is controlled by environment
variables (see `.env.example`).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CommonSettings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "dispatcher"
    log_level: str = "INFO"
    live_base_url: str = "https://api-m.example.com"
    sandbox_base_url: str = "https://api-m.sandbox.example.com"
    http_timeout_seconds: float = 30.0
    tracing_enabled: bool = True
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    history_limit: int = 50
    dispatcher_url: str = "http://localhost:8000"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = CommonSettings()
