import logging
import os

from rich.logging import RichHandler


class PaddedNameFormatter(logging.Formatter):
    """Pads logger names to the widest one seen so far so messages line up."""

    width = 16

    def format(self, record):
        short_name = record.name.removeprefix("wandermart.")
        PaddedNameFormatter.width = max(PaddedNameFormatter.width, len(short_name))
        record.shortname = short_name.ljust(PaddedNameFormatter.width)
        return super().format(record)


def log_level() -> int:
    return logging.DEBUG if os.getenv("DEBUG") else logging.INFO


def get_logger(name=None) -> logging.Logger:
    """
    Return a logger that prints through a RichHandler.
    Handlers are attached once per logger name.
    """
    name = name or "wandermart"
    logger = logging.getLogger(name)
    level = log_level()
    logger.setLevel(level)

    if not logger.handlers:
        handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        handler.setFormatter(PaddedNameFormatter("[%(shortname)s]  %(message)s"))
        handler.setLevel(level)
        logger.addHandler(handler)

        logger.propagate = False
        logger.debug(f"Logger '{name}' ready.")

    return logger
