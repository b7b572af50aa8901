"""Console logging for the CLI."""

import logging
import sys

HANDLER_NAME = "api_spec_sync.console"


def setup_logging(verbose: bool = False, name: str = "api_spec_sync") -> logging.Logger:
    """Attach a stderr handler to the package logger and return it.

    Calling it again replaces the handler, so it always writes to the
    current sys.stderr.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(name)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if handler.get_name() == HANDLER_NAME:
            logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    logger.addHandler(handler)
    return logger
