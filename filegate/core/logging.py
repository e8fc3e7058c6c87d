import logging
import sys


def configure_logging(level: str = "INFO") -> None:
    """
    Configure logging for the gateway process.
    Call this once at application startup.
    """
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
