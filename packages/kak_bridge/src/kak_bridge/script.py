"""Render the kakscript that declares a command to Kakoune.

Layout of the generated text for a command with two blocks and ``params=1``::

    define-command -params 1 save %{
      evaluate-commands %sh{
        # kak-bridge exports: $kak_buffile
        /usr/bin/python3 /path/plugin.py "save" 0 "${1}"
      }
      evaluate-commands %sh{
        # kak-bridge exports: (none)
        /usr/bin/python3 /path/plugin.py "save" 1 "${1}"
      }
    }

Kakoune decides which ``kak_*`` variables to export to a shell expansion by
scanning its raw text, so the comment line is what makes the variables reach
the re-invoked process even though the shell never executes it.
"""

from __future__ import annotations

import logging
import shlex
from typing import TYPE_CHECKING

from kak_bridge.errors import DefinitionError
from kak_bridge.quoting import DEFAULT_QUOTE_STYLE, QuoteStyle, encode

if TYPE_CHECKING:
    from collections.abc import Sequence

    from kak_bridge.models import Command
    from kak_bridge.variables import Variable

logger = logging.getLogger(__name__)

EXPORTS_COMMENT = "# kak-bridge exports:"
INDENT = "  "


def positional_args(params: int) -> str:
    """Shell references to the command's positional parameters.

    Every reference carries its own leading space.
    """
    return "".join(f' "${{{i}}}"' for i in range(1, params + 1))


def render_host_command(parts: Sequence[str]) -> str:
    """Shell-quote the argv prefix that re-invokes the host program."""
    if isinstance(parts, str):
        parts = (parts,)
    if not parts:
        msg = "Host command must have at least one part"
        raise DefinitionError(msg)
    for part in parts:
        if "{" in part or "}" in part:
            msg = f"Host command part {part!r} contains a brace, which breaks %{{}} blocks"
            raise DefinitionError(msg)
    return shlex.join(parts)


def render_exports_comment(exports: Sequence[Variable]) -> str:
    refs = " ".join(variable.export_key for variable in exports)
    return f"{EXPORTS_COMMENT} {refs or '(none)'}"


def render_block(
    host: str,
    command: str,
    index: int,
    params: int,
    exports: Sequence[Variable],
) -> str:
    """Render one ``evaluate-commands %sh{}`` sub-block.

    Args:
        host: Already shell-quoted host command prefix.
        command: Command name passed back as the first argument.
        index: Position of the block, passed back as the second argument.
        params: Number of positional parameters to forward.
        exports: Variables referenced in the comment line.

    Returns:
        The sub-block text, indented for the enclosing command body.
    """
    inner = INDENT * 2
    return "\n".join(
        [
            f"{INDENT}evaluate-commands %sh{{",
            f"{inner}{render_exports_comment(exports)}",
            f'{inner}{host} "{command}" {index}{positional_args(params)}',
            f"{INDENT}}}",
        ]
    )


def render_definition(
    command: Command,
    host_command: Sequence[str],
    style: QuoteStyle = DEFAULT_QUOTE_STYLE,
) -> str:
    """Render the full ``define-command`` text for ``command``.

    The result depends only on the arguments, so rendering the same command
    twice gives byte-identical text.
    """
    host = render_host_command(host_command)
    blocks = [
        render_block(host, command.name, index, command.params, block.exports)
        for index, block in enumerate(command.blocks)
    ]
    switches = []
    if command.override:
        switches.append("-override")
    if command.docstring:
        switches.append(f"-docstring {encode(command.docstring, style)}")
    switches.append(f"-params {command.params}")
    header = " ".join(["define-command", *switches, command.name])
    logger.debug(
        "Rendered definition for %s with %d block(s), params=%d",
        command.name,
        len(blocks),
        command.params,
    )
    return f"{header} %{{\n" + "\n".join(blocks) + "\n}\n"
