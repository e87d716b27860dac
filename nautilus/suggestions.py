"""
Nautilus suggestion engine.

suggest() is a pure function from (line, registry, word, args) to an ordered
list of Suggestion(text, descr) pairs. Ranking against the typed word is left
to the line editor (see nautilus.shell.ScopeCompleter).

Modes
- command mode: the first token of the line is not a registered name or alias.
  Every key is offered in sorted order; aliases read "Alias for `<use>`. <short>".
- argument mode: the first token is a registered name or alias (as a whole
  token, so "st" selects `st` while "sta" stays in command mode).
  - when the word contains "=", only the "suggestions" annotation values of
    the flag it names (--<flag>=...), or nothing for unknown flags;
  - otherwise provider values (when a word is being typed or the command is
    eager) followed by every visible flag as --<name> with its usage.
"""
import re
from collections import namedtuple

from .flags import SUGGESTIONS

Suggestion = namedtuple("Suggestion", ["text", "descr"])
Suggestion.__doc__ = "One completion candidate: the text to insert and a description."

_FLAG_VALUE = re.compile(r"-+([^=\s]+)=[^=\s]*")


def describe(name, command, /):
    """
    Description of a registry key: the short text, or the alias notice.
    """
    if command.use != name:
        return f"Alias for `{command.use}`. {command.short}".rstrip()
    return command.short


def suggest(session, line, commands, word, args, /):
    """
    Compute the suggestions for `line`.

    Parameters
    - session: passed through to suggestion providers.
    - line: text before the cursor.
    - commands: {name-or-alias: Command} of the current scope.
    - word: the word under the cursor ("" after whitespace).
    - args: completed positionals after the command name (the word being typed excluded).

    Returns
    - list[Suggestion]
    """
    names = sorted(commands)
    head = line.split(maxsplit=1)
    target = commands.get(head[0]) if head else None

    if target is None:
        return [Suggestion(name, describe(name, commands[name])) for name in names]

    if "=" in word:
        if (match := _FLAG_VALUE.fullmatch(word)) and (flag := target.flags.lookup(match[1])) is not None:
            return [Suggestion(value, flag.usage) for value in flag.annotations.get(SUGGESTIONS, ())]
        return []

    suggestions = []
    if word or target.eager:
        suggestions += [Suggestion(value, "") for value in target.suggest(session, args)]

    for flag in target.flags:
        if not flag.hidden:
            suggestions.append(Suggestion(f"--{flag.name}", flag.usage))

    return suggestions


__all__ = (
    "Suggestion",
    "describe",
    "suggest",
)
