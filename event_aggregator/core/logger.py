import logging


def get_logger(name: str) -> logging.Logger:
    """Get a structured logger under the service namespace."""
    logger = logging.getLogger(f"event_aggregator.{name}")
    logger.propagate = True
    return logger
