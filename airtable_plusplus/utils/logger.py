import logging

logger = logging.getLogger("airtable_plusplus")


def configure_logging(level: int = logging.INFO):
    """Installs the console format used across our services."""
    logging.basicConfig(
        level=level,
        format='%(asctime)s | %(levelname)-8s | %(message)s',
        datefmt='%H:%M:%S'
    )


def _format(message: str, details: str = "") -> str:
    return f"{message}" + (f" → {details}" if details else "")


def log_debug(message: str, details: str = ""):
    logger.debug(_format(message, details))


def log_info(message: str, details: str = ""):
    logger.info(_format(message, details))


def log_error(message: str, details: str = ""):
    logger.error(_format(f"❌ {message}", details))
