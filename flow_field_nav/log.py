"""Logging setup for the command-line runner."""

import logging
import sys


def configure_logging(level: int = logging.WARNING) -> None:
    """
    Configure root logging if no handlers are attached yet.

    Model modules log through ``logging.getLogger(__name__)``; nothing is
    shown until this is called. Output goes to stderr so it never mixes
    with the report printed on stdout.
    """
    root = logging.getLogger()

    # Don't duplicate handlers if someone already configured logging.
    if root.handlers:
        return

    handler = logging.StreamHandler(stream=sys.stderr)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(level)
