"""Chat command parsing and dispatch."""
from .commands import (
    Command,
    CommandError,
    ConfigCommand,
    PingCommand,
    RaiseCommand,
    SimpleCommand,
    parse_command,
)
from .handlers import CommandHandler

__all__ = [
    "Command",
    "CommandError",
    "ConfigCommand",
    "PingCommand",
    "RaiseCommand",
    "SimpleCommand",
    "parse_command",
    "CommandHandler",
]
