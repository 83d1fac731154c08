"""Parsing of prefix text commands such as ``!summarize 100 openai --lang=spanish``."""

from __future__ import annotations

import re
from collections.abc import Collection
from dataclasses import dataclass
from enum import Enum

from discord_summarize.constants import SUPPORTED_LANGUAGES


class CommandKind(Enum):
    """What a command asks the bot to do."""

    SUMMARIZE = "summarize"
    PROMPT = "prompt"
    HELP = "help"


@dataclass(frozen=True)
class CommandAlias:
    kind: CommandKind
    formatted: bool = False
    dm: bool = False


COMMAND_ALIASES: dict[str, CommandAlias] = {
    "summarize": CommandAlias(CommandKind.SUMMARIZE),
    "tldr": CommandAlias(CommandKind.SUMMARIZE),
    "s": CommandAlias(CommandKind.SUMMARIZE),
    "summarizeg": CommandAlias(CommandKind.SUMMARIZE, formatted=True),
    "tldrg": CommandAlias(CommandKind.SUMMARIZE, formatted=True),
    "sg": CommandAlias(CommandKind.SUMMARIZE, formatted=True),
    "sdm": CommandAlias(CommandKind.SUMMARIZE, dm=True),
    "sgdm": CommandAlias(CommandKind.SUMMARIZE, formatted=True, dm=True),
    "p": CommandAlias(CommandKind.PROMPT),
    "help": CommandAlias(CommandKind.HELP),
}

DM_FLAG = "--dm"
LANG_FLAG = "--lang="

_INTEGER = re.compile(r"^[+-]?\d+$")


@dataclass(frozen=True)
class ParsedCommand:
    """A text command broken into its arguments."""

    kind: CommandKind
    formatted: bool = False
    dm: bool = False
    count: int | None = None
    model: str | None = None
    language: str = "english"
    prompt: str | None = None


def parse_command(
    content: str,
    prefix: str = "!",
    known_models: Collection[str] = (),
) -> ParsedCommand | None:
    """Parse a chat message into a command.

    Summary commands take ``[count] [model] [--lang=english|spanish] [--dm]
    [custom prompt]``. Flags may appear anywhere. The first positional
    argument is the count when it is an integer, the next one is the model
    when it names a registered model, and whatever is left is the custom
    prompt. ``!p [model] <prompt>`` keeps the prompt text verbatim.

    Args:
        content: Raw message content.
        prefix: Command prefix.
        known_models: Registered model names (lowercase).

    Returns:
        The parsed command, or None if ``content`` is not a known command.
    """
    if not prefix or not content.startswith(prefix):
        return None

    parts = content[len(prefix) :].split(maxsplit=1)
    if not parts:
        return None

    alias = COMMAND_ALIASES.get(parts[0].lower())
    if alias is None:
        return None
    rest = parts[1] if len(parts) > 1 else ""

    if alias.kind is CommandKind.HELP:
        dm = alias.dm or DM_FLAG in (arg.lower() for arg in rest.split())
        return ParsedCommand(kind=CommandKind.HELP, dm=dm)

    if alias.kind is CommandKind.PROMPT:
        return _parse_prompt(rest, known_models)

    return _parse_summarize(alias, rest.split(), known_models)


def _parse_prompt(rest: str, known_models: Collection[str]) -> ParsedCommand:
    model = None
    words = rest.split(maxsplit=1)
    if words and words[0].lower() in known_models:
        model = words[0].lower()
        rest = words[1] if len(words) > 1 else ""

    prompt = rest.strip()
    return ParsedCommand(kind=CommandKind.PROMPT, model=model, prompt=prompt or None)


def _parse_summarize(
    alias: CommandAlias,
    args: list[str],
    known_models: Collection[str],
) -> ParsedCommand:
    dm = alias.dm
    language = "english"
    positional: list[str] = []

    for arg in args:
        lowered = arg.lower()
        if lowered == DM_FLAG:
            dm = True
        elif lowered.startswith(LANG_FLAG):
            value = lowered[len(LANG_FLAG) :]
            if value in SUPPORTED_LANGUAGES:
                language = value
        else:
            positional.append(arg)

    count = None
    if positional and _INTEGER.match(positional[0]):
        count = int(positional.pop(0))

    model = None
    if positional and positional[0].lower() in known_models:
        model = positional.pop(0).lower()

    return ParsedCommand(
        kind=CommandKind.SUMMARIZE,
        formatted=alias.formatted,
        dm=dm,
        count=count,
        model=model,
        language=language,
        prompt=" ".join(positional) or None,
    )
