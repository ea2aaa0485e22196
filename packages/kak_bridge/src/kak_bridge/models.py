"""Command and block models."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from kak_bridge.errors import BlockIndexError, DefinitionError
from kak_bridge.variables import Variable, normalize_exports

if TYPE_CHECKING:
    from kak_bridge.context import Kak

BlockFunc = Callable[["Kak"], Any]

_COMMAND_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_:-]*")


@dataclass(frozen=True)
class Block:
    """One command body and the variables it needs exported.

    A block is identified only by its position inside its command; that index
    is what the generated script passes back on execution.
    """

    func: BlockFunc
    exports: tuple[Variable, ...] = ()

    def __post_init__(self) -> None:
        if not callable(self.func):
            msg = f"Block body must be callable, got {type(self.func).__name__}"
            raise DefinitionError(msg)
        object.__setattr__(self, "exports", normalize_exports(self.exports))


@dataclass(frozen=True)
class Command:
    """A Kakoune command backed by an ordered, fixed sequence of blocks."""

    name: str
    blocks: tuple[Block, ...]
    params: int = 0
    docstring: str | None = None
    override: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not _COMMAND_NAME_PATTERN.fullmatch(self.name):
            msg = f"Invalid command name: {self.name!r}"
            raise DefinitionError(msg)
        if isinstance(self.params, bool) or not isinstance(self.params, int) or self.params < 0:
            msg = f"{self.name}: params must be a non-negative integer, got {self.params!r}"
            raise DefinitionError(msg)
        if isinstance(self.blocks, Block):
            msg = f"{self.name}: blocks must be a sequence of Block, not a single Block"
            raise DefinitionError(msg)
        blocks = tuple(self.blocks)
        if not blocks:
            msg = f"{self.name}: at least one block is required"
            raise DefinitionError(msg)
        for position, block in enumerate(blocks):
            if not isinstance(block, Block):
                msg = f"{self.name}: block {position} is {type(block).__name__}, expected Block"
                raise DefinitionError(msg)
        object.__setattr__(self, "blocks", blocks)

    def block_at(self, index: int) -> Block:
        """Return the block at ``index`` or raise BlockIndexError."""
        if not 0 <= index < len(self.blocks):
            raise BlockIndexError(self.name, index, len(self.blocks))
        return self.blocks[index]


def define(
    name: str,
    *funcs: BlockFunc | Block,
    params: int = 0,
    exports: Iterable[Variable | str] | None = None,
    docstring: str | None = None,
    override: bool = False,
) -> Command:
    """Build a Command from block bodies in one step.

    Bare callables become blocks exporting ``exports``; Block instances keep
    their own exports.
    """
    blocks = tuple(
        item if isinstance(item, Block) else Block(item, normalize_exports(exports))
        for item in funcs
    )
    return Command(name=name, blocks=blocks, params=params, docstring=docstring, override=override)
