"""
hubrepo logging.

Two channels: module loggers (``logging.getLogger(__name__)``) for
diagnostics that only show up with ``--debug``, and the ``Logger`` callable
that prints the messages the user is meant to read.
"""

import sys
import logging
import traceback
from typing import Optional, TextIO

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(debug: bool = False) -> None:
    """Configure the root logger for a CLI run."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )
    # PyGithub and urllib3 are chatty at DEBUG
    if debug:
        for name in ("github", "urllib3"):
            logging.getLogger(name).setLevel(logging.INFO)


class Logger:
    """User-facing log callable.

    Strings go to stdout. Exceptions go to stderr as ``Error: <message>``,
    followed by the traceback when debugging.
    """

    def __init__(self, debug: bool = False, out: Optional[TextIO] = None, err: Optional[TextIO] = None):
        self.debug = debug
        self.out = out
        self.err = err

    def __call__(self, message) -> None:
        if isinstance(message, BaseException):
            err = self.err or sys.stderr
            print(f"Error: {message}", file=err)
            if self.debug:
                traceback.print_exception(type(message), message, message.__traceback__, file=err)
            return

        print(message, file=self.out or sys.stdout)
