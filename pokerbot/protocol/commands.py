"""Pydantic schemas for chat commands."""
import re
from typing import Literal, Optional, Union, get_args

from pydantic import BaseModel, Field, ValidationError

SPACES = re.compile(r"\s+")

# Commands that take no arguments
SimpleName = Literal[
    "join", "unjoin", "buyin", "pot", "current", "players", "activity",
    "stats", "clear", "start", "stop", "call", "check", "allin", "fold",
    "cashout", "help",
]

ALIASES = {
    "c": "check",
    "czech": "check",
    "r": "raise",
    "f": "fold",
}


class CommandError(ValueError):
    """A command was recognised but its arguments are invalid."""
    pass


class SimpleCommand(BaseModel):
    name: SimpleName


class PingCommand(BaseModel):
    """Echo the line back to the sender."""
    name: Literal["ping"] = "ping"
    text: str


class RaiseCommand(BaseModel):
    """Raise by ``amount`` on top of the call."""
    name: Literal["raise"] = "raise"
    amount: int = Field(gt=0)


class ConfigCommand(BaseModel):
    """Review (no value) or change a table option."""
    name: Literal["config"] = "config"
    option: Optional[str] = None
    value: Optional[str] = None


Command = Union[SimpleCommand, PingCommand, RaiseCommand, ConfigCommand]

COMMAND_NAMES = frozenset(get_args(SimpleName)) | {"ping", "raise", "config"}


def parse_command(text: str, prefix: str = "!") -> Optional[Command]:
    """Parse a chat line into a command.

    Args:
        text: The raw chat line.
        prefix: Command prefix, e.g. ``!``.

    Returns:
        Parsed command, or None if the line isn't a known command.

    Raises:
        CommandError: If a known command has invalid arguments.
    """
    text = text.strip()
    if not text.startswith(prefix):
        return None

    words = SPACES.split(text[len(prefix):])
    name = words[0].lower()
    name = ALIASES.get(name, name)
    args = words[1:]

    if name not in COMMAND_NAMES:
        return None

    if name == "ping":
        return PingCommand(text=text)

    if name == "raise":
        if not args:
            raise CommandError("Specify an amount to raise by.")
        try:
            amount = int(args[0])
        except ValueError:
            raise CommandError(f"Malformed number: {args[0]}.") from None
        try:
            return RaiseCommand(amount=amount)
        except ValidationError:
            raise CommandError("Can only raise by a positive amount.") from None

    if name == "config":
        return ConfigCommand(
            option=args[0] if args else None,
            value=args[1] if len(args) > 1 else None,
        )

    return SimpleCommand(name=name)
