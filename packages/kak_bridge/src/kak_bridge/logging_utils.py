"""Logging setup for a process whose stdout belongs to Kakoune."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from kak_bridge.config import Settings
    from kak_bridge.dispatch import Request

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(kak_command)s#%(kak_block)s] %(message)s"
PACKAGE_LOGGER = "kak_bridge"


class InvocationContextFilter(logging.Filter):
    """Attach the invoked command and block index to log records."""

    def __init__(self, command: str = "", block_index: int | None = None) -> None:
        super().__init__()
        self.command = command or "define"
        self.block_index = "-" if block_index is None else str(block_index)

    def filter(self, record: logging.LogRecord) -> bool:
        """Inject kak_command and kak_block into the log record."""
        record.kak_command = self.command
        record.kak_block = self.block_index
        return True


def install_context_filter(
    request: Request, handlers: Iterable[logging.Handler] | None = None
) -> None:
    """Tag records with the current request, replacing any earlier tag.

    Filters sit on handlers so records from every module logger get tagged.

    Args:
        request: The parsed invocation.
        handlers: Handlers to attach the filter to. Defaults to the package logger's handlers.
    """
    targets = list(handlers) if handlers is not None else logging.getLogger(PACKAGE_LOGGER).handlers
    for handler in targets:
        for flt in [flt for flt in handler.filters if isinstance(flt, InvocationContextFilter)]:
            handler.removeFilter(flt)
        handler.addFilter(InvocationContextFilter(request.command, request.block_index))


def configure_logging(settings: Settings) -> logging.Logger:
    """Send package logs to stderr or ``settings.log_file``, never stdout.

    Calling it again replaces the handler installed by the previous call.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(settings.log_level)
    logger.propagate = False
    for handler in [h for h in logger.handlers if getattr(h, "_kak_bridge", False)]:
        logger.removeHandler(handler)
        handler.close()
    if settings.log_file:
        handler: logging.Handler = logging.FileHandler(settings.log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler._kak_bridge = True  # type: ignore[attr-defined]
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(InvocationContextFilter())
    logger.addHandler(handler)
    return logger
