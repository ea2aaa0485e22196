"""Decide what this process run is for and act on it.

A run is either a definition pass (no command in argv: print the
``define-command`` scripts) or an execution pass (Kakoune ran a generated
script, which re-invoked us as ``<host> <command> <index> [params...]``).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, TextIO

from kak_bridge.context import Kak
from kak_bridge.errors import ProtocolError
from kak_bridge.quoting import DEFAULT_QUOTE_STYLE, QuoteStyle
from kak_bridge.script import render_definition

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from kak_bridge.models import Command

logger = logging.getLogger(__name__)

DEFAULT_FAIL_PREFIX = "kak-bridge"
_BLOCK_INDEX_PATTERN = re.compile(r"-?[0-9]+")


class Mode(StrEnum):
    """Which pass the current process is running."""

    DEFINITION = "definition"
    EXECUTION = "execution"


@dataclass(frozen=True)
class Request:
    """Parsed invocation: argv and environment, nothing else."""

    command: str = ""
    block_index: int | None = None
    params: tuple[str, ...] = ()
    environ: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "environ", MappingProxyType(dict(self.environ)))
        object.__setattr__(self, "params", tuple(self.params))

    @property
    def mode(self) -> Mode:
        return Mode.EXECUTION if self.command else Mode.DEFINITION

    @classmethod
    def parse(cls, argv: Sequence[str], environ: Mapping[str, str]) -> Request:
        """Build a request from process arguments.

        Args:
            argv: Full argv, program name first.
            environ: Process environment.

        Returns:
            A definition request when no command name was given, otherwise an
            execution request.

        Raises:
            ProtocolError: A command name was given without a valid block index.
        """
        args = list(argv[1:])
        if not args or not args[0]:
            return cls(environ=environ)
        command = args[0]
        if len(args) < 2:  # noqa: PLR2004
            msg = f"{command}: block index missing from invocation"
            raise ProtocolError(msg)
        raw_index = args[1]
        if not _BLOCK_INDEX_PATTERN.fullmatch(raw_index):
            msg = f"{command}: block index is not an integer: {raw_index!r}"
            raise ProtocolError(msg)
        block_index = int(raw_index)
        return cls(
            command=command,
            block_index=block_index,
            params=tuple(args[2:]),
            environ=environ,
        )


class Dispatcher:
    """Emit definitions or run the selected block for one request."""

    def __init__(
        self,
        request: Request,
        stdout: TextIO,
        host_command: Sequence[str],
        *,
        quote_style: QuoteStyle = DEFAULT_QUOTE_STYLE,
        fail_prefix: str = DEFAULT_FAIL_PREFIX,
    ) -> None:
        self._request = request
        self._stdout = stdout
        self._host_command = tuple(host_command)
        self._quote_style = quote_style
        self._fail_prefix = fail_prefix

    @property
    def request(self) -> Request:
        return self._request

    def define_command(self, command: Command) -> bool:
        """Handle ``command`` for this run.

        On a definition pass the script is written and no block runs. On an
        execution pass the selected block runs if the request names this
        command.

        Returns:
            True if the command was defined or executed, False if this run is
            for a different command.
        """
        if self._request.mode is Mode.DEFINITION:
            self._stdout.write(render_definition(command, self._host_command, self._quote_style))
            logger.debug("Emitted definition for %s", command.name)
            return True
        if self._request.command != command.name:
            return False
        self.execute(command)
        return True

    def execute(self, command: Command) -> None:
        """Run the requested block of ``command``.

        Raises:
            BlockIndexError: The requested index is outside the command's blocks.
        """
        index = self._request.block_index
        if index is None:
            msg = f"{command.name}: execution requested without a block index"
            raise ProtocolError(msg)
        block = command.block_at(index)
        logger.debug("Running %s block %d", command.name, index)
        with Kak(self._request, self._stdout, self._quote_style) as kak:
            try:
                block.func(kak)
            except Exception as exc:  # noqa: BLE001 - surfaced to the editor instead
                logger.warning("%s block %d failed: %s", command.name, index, exc, exc_info=True)
                kak.fail(self.failure_message(command.name, exc))

    def failure_message(self, command_name: str, exc: Exception) -> str:
        detail = str(exc) or type(exc).__name__
        return f"{self._fail_prefix}: {command_name}: {detail}"
