"""Define Kakoune commands whose bodies run as Python."""

from kak_bridge.config import Settings, load_settings
from kak_bridge.context import Kak
from kak_bridge.dispatch import Dispatcher, Mode, Request
from kak_bridge.errors import (
    BlockIndexError,
    BridgeError,
    ContextClosedError,
    DefinitionError,
    ProtocolError,
    UnknownCommandError,
)
from kak_bridge.models import Block, Command, define
from kak_bridge.quoting import decode, encode
from kak_bridge.registry import CommandRegistry, main
from kak_bridge.variables import Variable, VarScope, option, value

__all__ = [
    "Block",
    "BlockIndexError",
    "BridgeError",
    "Command",
    "CommandRegistry",
    "ContextClosedError",
    "DefinitionError",
    "Dispatcher",
    "Kak",
    "Mode",
    "ProtocolError",
    "Request",
    "Settings",
    "UnknownCommandError",
    "VarScope",
    "Variable",
    "decode",
    "define",
    "encode",
    "load_settings",
    "main",
    "option",
    "value",
]
