import uvicorn

from event_aggregator.core.config import settings


def main() -> None:
    uvicorn.run(
        "event_aggregator.main:app",
        host=settings.server_host,
        port=settings.server_port,
        timeout_graceful_shutdown=settings.shutdown_timeout_seconds,
        log_config=None,
    )


if __name__ == "__main__":
    main()
