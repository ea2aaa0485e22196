"""Exception taxonomy for the Kakoune bridge."""

from __future__ import annotations


class BridgeError(Exception):
    """Base class for bridge errors."""


class DefinitionError(BridgeError, ValueError):
    """A command was declared with invalid input.

    Raised while building commands or rendering script text, never from a
    running block.
    """


class ProtocolError(BridgeError):
    """The generated script and the running program disagree."""


class BlockIndexError(ProtocolError, IndexError):
    """Requested block index does not exist for the command."""

    def __init__(self, command: str, index: int, available: int) -> None:
        self.command = command
        self.index = index
        self.available = available
        message = (
            f"{command} block unavailable: {index} "
            f"(command defines {available} block{'s' if available != 1 else ''})"
        )
        super().__init__(message)


class UnknownCommandError(ProtocolError, LookupError):
    """Invocation named a command this program does not define."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Unknown command: {command}")


class ContextClosedError(BridgeError, RuntimeError):
    """The invocation context was used after its block returned."""
