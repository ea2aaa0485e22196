"""Registry of the commands a host program defines, plus process entrypoints."""

from __future__ import annotations

import logging
import os
import sys
from typing import TYPE_CHECKING, TextIO

from kak_bridge.config import load_settings
from kak_bridge.dispatch import Dispatcher, Mode, Request
from kak_bridge.errors import DefinitionError, ProtocolError, UnknownCommandError
from kak_bridge.logging_utils import configure_logging, install_context_filter
from kak_bridge.models import Block, BlockFunc, Command
from kak_bridge.variables import Variable, normalize_exports

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator, Mapping, Sequence

    from kak_bridge.config import Settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_PROTOCOL_ERROR = 2


class CommandRegistry:
    """Ordered collection of commands, each defined once and never modified."""

    def __init__(self) -> None:
        self._commands: dict[str, Command] = {}

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def register(self, command: Command) -> Command:
        """Add a fully built command."""
        if command.name in self._commands:
            message = f"Command already registered: {command.name}"
            raise DefinitionError(message)
        self._commands[command.name] = command
        return command

    def get(self, name: str) -> Command | None:
        """Get a registered command by name."""
        return self._commands.get(name)

    def command(
        self,
        name: str | None = None,
        *,
        params: int = 0,
        exports: Iterable[Variable | str] | None = None,
        docstring: str | None = None,
        override: bool = False,
    ) -> Callable[[BlockFunc], BlockFunc]:
        """Decorator that registers a single-block command.

        The command name defaults to the function name with ``_`` replaced by
        ``-`` and the docstring to the function's docstring.
        """

        def decorator(func: BlockFunc) -> BlockFunc:
            command_name = name or getattr(func, "__name__", "").replace("_", "-")
            command_doc = docstring or (getattr(func, "__doc__", "") or "").strip() or None
            self.register(
                Command(
                    name=command_name,
                    blocks=(Block(func, normalize_exports(exports)),),
                    params=params,
                    docstring=command_doc,
                    override=override,
                )
            )
            return func

        return decorator

    def run(
        self,
        argv: Sequence[str] | None = None,
        environ: Mapping[str, str] | None = None,
        stdout: TextIO | None = None,
        settings: Settings | None = None,
    ) -> int:
        """Handle one process invocation.

        Raises:
            ProtocolError: The invocation does not match what this program
                defines (stale generated script).
        """
        argv = list(sys.argv if argv is None else argv)
        environ = os.environ if environ is None else environ
        stdout = sys.stdout if stdout is None else stdout
        settings = settings or load_settings(argv[0] if argv else None)

        request = Request.parse(argv, environ)
        install_context_filter(request)
        dispatcher = Dispatcher(
            request,
            stdout,
            settings.host_command,
            quote_style=settings.quote_style,
            fail_prefix=settings.fail_prefix,
        )

        if request.mode is Mode.DEFINITION:
            for command in self:
                dispatcher.define_command(command)
            logger.info("Defined %d command(s)", len(self))
            stdout.flush()
            return EXIT_OK

        command = self.get(request.command)
        if command is None:
            raise UnknownCommandError(request.command)
        dispatcher.execute(command)
        return EXIT_OK


def main(registry: CommandRegistry, argv: Sequence[str] | None = None) -> int:
    """Process entrypoint for a host program.

    Typical use at the bottom of a plugin script::

        if __name__ == "__main__":
            sys.exit(main(registry))
    """
    argv = list(sys.argv if argv is None else argv)
    try:
        settings = load_settings(argv[0] if argv else None)
    except ValueError as exc:
        sys.stderr.write(f"kak-bridge: invalid configuration: {exc}\n")
        return EXIT_CONFIG_ERROR
    configure_logging(settings)
    try:
        return registry.run(argv, settings=settings)
    except ProtocolError as exc:
        logger.debug("Protocol error", exc_info=True)
        sys.stderr.write(f"{settings.fail_prefix}: {exc}\n")
        return EXIT_PROTOCOL_ERROR
