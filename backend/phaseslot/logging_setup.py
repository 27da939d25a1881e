"""Logging configuration for the service and scripts."""
import logging
import sys


class PlainFormatter(logging.Formatter):
    """timestamp | LEVEL | logger | message"""

    def format(self, record):
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")
        message = f"{timestamp} | {record.levelname:<8} | {record.name} | {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


def configure_logging(level: str | int = "INFO") -> logging.Logger:
    """
    Install a single stdout handler on the phaseslot logger.

    Safe to call more than once; existing handlers are replaced.
    """
    root = logging.getLogger("phaseslot")
    root.setLevel(level if isinstance(level, int) else level.upper())

    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(PlainFormatter())
    root.addHandler(handler)
    root.propagate = False
    return root
