"""Runtime settings loaded from environment variables."""

from __future__ import annotations

import logging
import os
import shlex
import sys
from pathlib import Path
from typing import get_args

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from kak_bridge.dispatch import DEFAULT_FAIL_PREFIX
from kak_bridge.quoting import DEFAULT_QUOTE_STYLE, QuoteStyle

DEFAULT_LOG_LEVEL = "WARNING"


class Settings(BaseModel, frozen=True):
    """Bridge configuration.

    ``host_command`` is the argv prefix the generated script uses to re-invoke
    this program.
    """

    host_command: tuple[str, ...] = Field(min_length=1)
    log_level: str = DEFAULT_LOG_LEVEL
    log_file: str | None = None
    quote_style: QuoteStyle = DEFAULT_QUOTE_STYLE
    fail_prefix: str = DEFAULT_FAIL_PREFIX


def default_host_command(argv0: str | None = None) -> tuple[str, ...]:
    """Derive the command that re-runs the current program.

    Python scripts are re-run through the current interpreter; anything else
    (an installed console script, a frozen binary) is run directly.
    """
    program = argv0 if argv0 is not None else (sys.argv[0] if sys.argv else "")
    if not program:
        msg = "Cannot derive host command: program name is empty"
        raise ValueError(msg)
    path = Path(program)
    if path.suffix == ".py":
        return (sys.executable, str(path.resolve()))
    if path.exists():
        return (str(path.resolve()),)
    return (program,)


def _parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        msg = f"KAK_BRIDGE_LOG_LEVEL must be a logging level name, got {value!r}"
        raise ValueError(msg)
    return level


def _parse_quote_style(value: str) -> QuoteStyle:
    style = value.strip().lower()
    allowed = get_args(QuoteStyle)
    if style not in allowed:
        msg = f"KAK_BRIDGE_QUOTE_STYLE must be one of {', '.join(allowed)}, got {value!r}"
        raise ValueError(msg)
    return style  # type: ignore[return-value]


def load_settings(argv0: str | None = None) -> Settings:
    """Load settings from environment variables with defaults."""
    load_dotenv()

    raw_host = os.getenv("KAK_BRIDGE_HOST_COMMAND", "").strip()
    host_command = tuple(shlex.split(raw_host)) if raw_host else default_host_command(argv0)

    return Settings(
        host_command=host_command,
        log_level=_parse_log_level(os.getenv("KAK_BRIDGE_LOG_LEVEL", DEFAULT_LOG_LEVEL)),
        log_file=os.getenv("KAK_BRIDGE_LOG_FILE") or None,
        quote_style=_parse_quote_style(os.getenv("KAK_BRIDGE_QUOTE_STYLE", DEFAULT_QUOTE_STYLE)),
        fail_prefix=os.getenv("KAK_BRIDGE_FAIL_PREFIX", DEFAULT_FAIL_PREFIX),
    )
