import logging
import sys

DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(
    level: int = logging.INFO,
    log_format: str = DEFAULT_LOG_FORMAT,
) -> None:
    """Configure basic logging for nbscript. Records go to stderr so stdout can carry a script."""
    logging.basicConfig(level=level, format=log_format, stream=sys.stderr)
