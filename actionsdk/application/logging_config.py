import logging
import sys

from actionsdk.application.config_loader import runtime_settings

DEFAULT_LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(levelname)s %(name)s - %(message)s"

# stdout carries the action result, so SDK logs always go to stderr.
_HANDLER_NAME = "actionsdk-stderr"


def configure_logging(level: str | None = None) -> logging.Logger:
    """Attach a stderr handler to the ``actionsdk`` logger.

    Level precedence: argument > ACTIONSDK_LOG_LEVEL > WARNING. Safe to
    call more than once; the handler is installed a single time.
    """
    name = (level or runtime_settings().log_level or DEFAULT_LOG_LEVEL).upper()
    numeric = logging.getLevelName(name)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {name}")

    logger = logging.getLogger("actionsdk")
    if not any(h.get_name() == _HANDLER_NAME for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(numeric)
    return logger
