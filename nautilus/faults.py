"""
Nautilus faults (errors, warnings and termination) and their rendering.

Scope
- FaultCode: stable numeric identifiers for every user-facing issue, grouped by
  domain (dispatch, parsing, validation, configuration, delegated, warnings).
- ShellFault / ShellWarning: base types carrying a message plus options, able to
  render themselves through rich in a short, lowercased, actionable form.
- ParseError, ValidationError, UnknownCommandError, UnknownScopeError,
  ConfigurationError, DelegatedCommandError: the error taxonomy of the shell.
- TokenizationWarning: an input line whose quoting could not be split.
- TerminationRequested: the "leave the process" outcome of `quit` and of popping
  the root scope; raised up to the run loop, which performs the actual exit.
- trigger(): the single entry point that renders a fault on the stderr console.

Contract
- Faults are raised where they are detected and caught once, in the session's
  dispatch step; none of them stop the interactive loop.
- Only TerminationRequested ends a session. It derives from SystemExit, so code
  that does not catch it still exits cleanly.

Customization
- The host application may define __styles__ (palette overrides) and __codes__
  (FaultCode -> label) in __main__, as well as __prog__ for the header name.
"""
import copy
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes (stable identifiers, searchable in logs and docs).

    grouping
    - dispatch (2110x): UNKNOWN_COMMAND, UNKNOWN_SCOPE
    - parsing (2111x): MALFORMED_FLAG, UNKNOWN_FLAG, MISSING_FLAG_VALUE, INVALID_FLAG_VALUE
    - validation (2112x): MISSING_REQUIRED_FLAG, INVALID_ARGUMENTS
    - configuration (2113x): MISSING_RUN_FUNCTION, MISCONFIGURED_COMMAND
    - delegated (2114x): DELEGATED_ERROR
    - evaluation (2115x): INVALID_EXPRESSION
    - warnings (22xxx): UNBALANCED_QUOTES
    """
    # --- dispatch errors ---
    UNKNOWN_COMMAND       = 21101
    UNKNOWN_SCOPE         = 21102

    # --- flag parsing errors ---
    MALFORMED_FLAG        = 21111
    UNKNOWN_FLAG          = 21112
    MISSING_FLAG_VALUE    = 21113
    INVALID_FLAG_VALUE    = 21114

    # --- validation errors ---
    MISSING_REQUIRED_FLAG = 21121
    INVALID_ARGUMENTS     = 21122

    # --- configuration errors ---
    MISSING_RUN_FUNCTION  = 21131
    MISCONFIGURED_COMMAND = 21132

    # --- delegated errors ---
    DELEGATED_ERROR       = 21141

    # --- evaluation errors ---
    INVALID_EXPRESSION    = 21151

    # --- warnings ---
    UNBALANCED_QUOTES     = 22111

    def normalize(self):
        """
        return the host label for this code (from __main__.__codes__) or its number.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


def _render(fault, palette, accent):
    """
    Build the rich renderable shared by faults and warnings.

    Layout
    - header: "[ prog — code | title ]"
    - message line
    - "→ hint" line (omitted when the fault has no hint)
    """
    main = __import__("__main__")
    styles = defaultdict(str, palette | getattr(main, "__styles__", {}))
    colorful = fault.options.get("colorful", True)

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style] if colorful else "")

    prog = fault.options.get("prog", getattr(main, "__prog__", "nautilus"))
    header = Text.assemble(
        "[ ",
        text(prog, "prog-name"),
        " — ",
        text(fault.code.normalize(), "code"),
        " | ",
        text(fault.title.title(), accent),
        " ]"
    )
    parts = [text(fault.message, "message")]
    if fault.hint:
        parts.append(Text.assemble(text(" → ", "hint-arrow"), text(fault.hint, "hint")))

    if fault.options.get("fancy", False):
        return Panel(Group(*parts), title=header, title_align="left")
    return Group(header, *parts)


class ShellFault(Exception):
    """
    Base class of every error the shell reports to the user.

    Class attributes (defaults, overridable per instance through options)
    - code: FaultCode
    - title: short lowercased title
    - hint: one actionable sentence, or None
    """
    code = FaultCode.DELEGATED_ERROR
    title = "command failed"
    hint = None

    def __init__(self, message, /, **options):
        if not isinstance(message, str):
            raise TypeError(f"{type(self).__name__} message must be a string")
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)
        for name in ("code", "title", "hint"):
            if name in options:
                setattr(self, name, options[name])

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #00E5FF",
            "error-title": "bold #FF4DA6",
            "message": "#C8C8D0",
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        }, "error-title")

    def __trigger__(self):
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        replica = type(self)(self.message, **{**self.options, **overrides})
        replica.__cause__ = self.__cause__
        return replica


class ParseError(ShellFault):
    code = FaultCode.MALFORMED_FLAG
    title = "malformed input"
    hint = "run the command with --help to see its flags"


class ValidationError(ShellFault):
    code = FaultCode.INVALID_ARGUMENTS
    title = "invalid arguments"
    hint = "run the command with --help to see its usage"


class UnknownCommandError(ShellFault):
    code = FaultCode.UNKNOWN_COMMAND
    title = "unknown command"
    hint = "type 'help' to list the commands of this scope"


class UnknownScopeError(ShellFault):
    code = FaultCode.UNKNOWN_SCOPE
    title = "unknown scope"
    hint = "type 'help' to list the sub-scopes of this scope"


class ConfigurationError(ShellFault):
    code = FaultCode.MISSING_RUN_FUNCTION
    title = "misconfigured command"


class DelegatedCommandError(ShellFault):
    """
    A run function failed with an exception that is not a ShellFault.

    The original exception is chained as __cause__.
    """
    code = FaultCode.DELEGATED_ERROR
    title = "command failed"


class ShellWarning(Warning):
    """
    Base class of non-fatal notices (rendered in amber, never raised by the loop).
    """
    code = FaultCode.UNBALANCED_QUOTES
    title = "warning"
    hint = None

    def __init__(self, message, /, **options):
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)
        for name in ("code", "title", "hint"):
            if name in options:
                setattr(self, name, options[name])

    def __rich__(self):
        return _render(self, {
            "prog-name": "bold #E6E6F0",
            "code": "bold #FFB400",
            "warning-title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "hint-arrow": "#B8EFAF dim",
            "hint": "italic #B8EFAF",
        }, "warning-title")

    def __trigger__(self):
        self.options.get("console", console).print(self)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class TokenizationWarning(ShellWarning):
    code = FaultCode.UNBALANCED_QUOTES
    title = "unbalanced quotes"
    hint = "close the open quote or escape it with a backslash"


class TerminationRequested(SystemExit):
    """
    Request to end the interactive session (quit, or pop at the root scope).

    Raised up to the run loop, which exits the process with `status`.
    """

    def __init__(self, status=0, /):
        super().__init__(status)
        self.status = status


def trigger(fault, /, **options):
    """
    render a fault with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ (see ShellFault/ShellWarning).
    - options are merged into the fault via copy.replace() before rendering.

    typical options
    - console: the rich Console to print on (defaults to the stderr console).
    - prog, colorful, fancy, and per-fault overrides of code/title/hint.
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    copy.replace(fault, **options).__trigger__()


__all__ = (
    "FaultCode",
    "ShellFault",
    "ParseError",
    "ValidationError",
    "UnknownCommandError",
    "UnknownScopeError",
    "ConfigurationError",
    "DelegatedCommandError",
    "ShellWarning",
    "TokenizationWarning",
    "TerminationRequested",
    "trigger",
)
