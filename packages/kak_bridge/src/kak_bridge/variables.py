"""Mapping between logical variable names and Kakoune environment keys.

Kakoune exports ``%val{x}`` as ``kak_x``, ``%opt{x}`` as ``kak_opt_x`` and
``%reg{x}`` as ``kak_reg_x`` to shell expansions, but only for names it finds
referenced in the expansion text. Callers always pass bare names; prefixes
are added and stripped here and nowhere else.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from kak_bridge.errors import DefinitionError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

ENV_PREFIX = "kak_"
_NAME_PATTERN = re.compile(r"[A-Za-z0-9_]+")

# Commonly exported %val{} names.
BUFFILE = "buffile"
BUFNAME = "bufname"
BUF_LINE_COUNT = "buf_line_count"
CLIENT = "client"
CLIENT_PID = "client_pid"
CONFIG = "config"
CURSOR_BYTE_OFFSET = "cursor_byte_offset"
CURSOR_COLUMN = "cursor_column"
CURSOR_LINE = "cursor_line"
RUNTIME = "runtime"
SELECTION = "selection"
SELECTIONS = "selections"
SELECTION_DESC = "selection_desc"
SELECTIONS_DESC = "selections_desc"
SESSION = "session"
TIMESTAMP = "timestamp"
WINDOW_HEIGHT = "window_height"
WINDOW_WIDTH = "window_width"


class VarScope(StrEnum):
    """Namespace a variable lives in, named by its env key segment."""

    VALUE = ""
    OPTION = "opt_"
    REGISTER = "reg_"

    @property
    def prefix(self) -> str:
        """Full environment key prefix for this scope."""
        return ENV_PREFIX + self.value


@dataclass(frozen=True)
class Variable:
    """A Kakoune variable a block asks to have exported."""

    name: str
    scope: VarScope = VarScope.VALUE

    def __post_init__(self) -> None:
        validate_name(self.name)

    @property
    def env_key(self) -> str:
        return env_key(self.name, self.scope)

    @property
    def export_key(self) -> str:
        return export_key(self.name, self.scope)


def value(name: str) -> Variable:
    """Shorthand for a ``%val{}`` variable."""
    return Variable(name, VarScope.VALUE)


def option(name: str) -> Variable:
    """Shorthand for an ``%opt{}`` variable."""
    return Variable(name, VarScope.OPTION)


def register(name: str) -> Variable:
    """Shorthand for a ``%reg{}`` variable."""
    return Variable(name, VarScope.REGISTER)


def name_problem(name: str) -> str | None:
    """Describe why ``name`` would render a broken or double-prefixed key."""
    if not isinstance(name, str) or not _NAME_PATTERN.fullmatch(name):
        return f"Invalid variable name {name!r}: expected letters, digits and '_'"
    if name.startswith(ENV_PREFIX):
        return f"Variable name {name!r} must not include the '{ENV_PREFIX}' prefix"
    return None


def validate_name(name: str) -> None:
    """Reject, at definition time, names that would render a broken key."""
    msg = name_problem(name)
    if msg is not None:
        raise DefinitionError(msg)


def env_key(name: str, scope: VarScope = VarScope.VALUE) -> str:
    """Environment key Kakoune exports ``name`` under."""
    return scope.prefix + name


def export_key(name: str, scope: VarScope = VarScope.VALUE) -> str:
    """Shell reference to ``name``, as written into generated scripts."""
    return "$" + env_key(name, scope)


def import_name(key: str, scope: VarScope = VarScope.VALUE) -> str:
    """Strip ``$`` and the scope prefix from an env key or export key."""
    bare = key.removeprefix("$")
    prefix = scope.prefix
    if not bare.startswith(prefix):
        msg = f"Key {key!r} does not start with {prefix!r}"
        raise ValueError(msg)
    return bare[len(prefix) :]


def read(environ: Mapping[str, str], name: str, scope: VarScope = VarScope.VALUE) -> str | None:
    """Read an exported variable, returning None when it was not exported."""
    return environ.get(env_key(name, scope))


def normalize_exports(items: Iterable[Variable | str] | Variable | str | None) -> tuple[Variable, ...]:
    """Coerce declared exports to ordered, unique Variables.

    Plain strings name ``%val{}`` variables.
    """
    if items is None:
        return ()
    if isinstance(items, (str, Variable)):
        items = (items,)
    normalized: list[Variable] = []
    for item in items:
        variable = item if isinstance(item, Variable) else Variable(item)
        if variable not in normalized:
            normalized.append(variable)
    return tuple(normalized)
