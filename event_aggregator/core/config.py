from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # HTTP server
    server_host: str = "0.0.0.0"
    server_port: int = 8080
    shutdown_timeout_seconds: int = 30

    # Redis (empty url selects the in-memory backend)
    redis_url: str = ""
    redis_event_ttl_seconds: int = 86_400  # rolling 24h per group key
    redis_connect_retries: int = 6

    # Ingestion queue
    queue_capacity: int = 1000
    enqueue_timeout_seconds: float = 5.0

    # Logging
    app_log_level: str = "INFO"
    app_log_redaction_patterns: list[str] = [
        "password",
        "token",
        "secret",
        "authorization",
        "cookie",
    ]

    otel_service_name: str = "event-aggregator"
    app_environment: str = "production"


settings = Settings()
