import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure root logging for the API process."""
    logging.basicConfig(
        format="[%(asctime)s] %(levelname)s in %(name)s:%(lineno)d: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        level=level.upper(),
    )

    # Suppress noise from common libraries
    for noisy_logger in ["httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)
