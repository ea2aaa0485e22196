"""Invocation context handed to a running block."""

from __future__ import annotations

import logging
import re
import shlex
from typing import TYPE_CHECKING, Literal, TextIO

from kak_bridge import variables
from kak_bridge.errors import ContextClosedError
from kak_bridge.quoting import DEFAULT_QUOTE_STYLE, QuoteStyle, encode
from kak_bridge.variables import VarScope

if TYPE_CHECKING:
    from collections.abc import Iterable
    from types import TracebackType

    from kak_bridge.dispatch import Request

logger = logging.getLogger(__name__)

OptionScope = Literal["global", "buffer", "window", "current"]

_SWITCH_PATTERN = re.compile(r"-[a-z][a-z-]*")


class Kak:
    """Read Kakoune state and write commands back for one block execution.

    Each process handles exactly one invocation, so a context belongs to the
    single block being run. It is closed once that block returns; any use
    after that raises ContextClosedError.
    """

    def __init__(
        self,
        request: Request,
        stdout: TextIO,
        quote_style: QuoteStyle = DEFAULT_QUOTE_STYLE,
    ) -> None:
        self._request = request
        self._stdout = stdout
        self._quote_style = quote_style
        self._closed = False

    def __enter__(self) -> Kak:
        self._check_open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Flush output and end the context."""
        if self._closed:
            return
        self._stdout.flush()
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            msg = f"Context for {self._request.command} was used after its block returned"
            raise ContextClosedError(msg)

    # Request data

    @property
    def command_name(self) -> str:
        return self._request.command

    @property
    def block_index(self) -> int | None:
        return self._request.block_index

    @property
    def params(self) -> tuple[str, ...]:
        """Positional parameters the command was called with."""
        self._check_open()
        return self._request.params

    def var(self, name: str) -> str | None:
        """Read an exported ``%val{name}``; None if it was not exported."""
        self._check_open()
        return variables.read(self._request.environ, name, VarScope.VALUE)

    def opt(self, name: str) -> str | None:
        """Read an exported ``%opt{name}``; None if it was not exported."""
        self._check_open()
        return variables.read(self._request.environ, name, VarScope.OPTION)

    def opt_list(self, name: str) -> list[str] | None:
        """Read a list option, which Kakoune exports shell-quoted."""
        raw = self.opt(name)
        if raw is None:
            return None
        return shlex.split(raw)

    def reg(self, name: str) -> str | None:
        """Read an exported ``%reg{name}``; None if it was not exported."""
        self._check_open()
        return variables.read(self._request.environ, name, VarScope.REGISTER)

    # Output

    def printf(self, text: str) -> None:
        """Write raw kakscript to Kakoune."""
        self._check_open()
        self._stdout.write(text)

    def command(self, name: str, *args: str, switches: Iterable[str] = ()) -> None:
        """Run a Kakoune command with quoted arguments.

        Writes ``name [switches] "arg1" "arg2" ...`` as one command.
        """
        self._check_open()
        tokens = [name]
        for switch in switches:
            if not _SWITCH_PATTERN.fullmatch(switch):
                msg = f"Invalid switch for {name}: {switch!r}"
                raise ValueError(msg)
            tokens.append(switch)
        tokens.extend(encode(str(arg), self._quote_style) for arg in args)
        self._write_line(tokens)

    def echo(self, message: str, *, debug: bool = False, markup: bool = False) -> None:
        """Show ``message`` in the status line, or the debug buffer."""
        switches = []
        if debug:
            switches.append("-debug")
        if markup:
            switches.append("-markup")
        self.command("echo", message, switches=switches)

    def fail(self, message: str) -> None:
        """Report ``message`` to the user as a command failure."""
        self.command("fail", message)

    def set_option(
        self, scope: OptionScope, name: str, value: str, *, add: bool = False
    ) -> None:
        """Set (or append to, with ``add``) a Kakoune option."""
        problem = variables.name_problem(name)
        if problem is not None:
            raise ValueError(problem)
        self.command("set-option", scope, name, value, switches=["-add"] if add else [])

    def evaluate(self, commands: str, *, client: str | None = None) -> None:
        """Evaluate a kakscript snippet, optionally in another client."""
        self._check_open()
        tokens = ["evaluate-commands"]
        if client:
            tokens.extend(["-client", encode(client, self._quote_style)])
        tokens.append(encode(commands, self._quote_style))
        self._write_line(tokens)

    def _write_line(self, tokens: list[str]) -> None:
        line = " ".join(tokens)
        logger.debug("-> %s", line)
        self._stdout.write(line + "\n")
