"""
Nautilus session: the scope stack plus the dispatch and completion entry points.

A Session drives one read-eval loop
- push()/pop() move along the scope tree; the root (first element) is never
  removed: popping it raises TerminationRequested instead.
- prompt() renders "<root>:<child>:...<prefix>" from the live stack.
- execute(line) tokenizes with shell quoting rules and dispatches to the
  current scope. Faults are rendered on the error console; the loop goes on.
- complete(text) feeds the suggestion engine and never raises.
"""
import shlex

from rich.console import Console

from . import faults
from .configuration import Configuration
from .faults import *
from .suggestions import suggest
from .utils import *


class Session(metaclass=ReflectiveType):
    """
    Live stack of scopes for one interactive run.

    Properties (read-only)
    - prefix: base prompt suffix ("> ")
    - separator: joins scope names in the prompt (":")
    - configuration: the store behind env/get/set
    - console / errors: rich consoles for command output and for faults
    """
    __introspectable__ = (
        "prefix",
        "separator",
        "configuration",
        "console",
        "errors",
    )

    __displayable__ = (
        "prefix",
        "separator",
        "scopes",
    )

    def __init__(self, prefix="> ", /, configuration=Unset, *, console=Unset, errors=Unset, separator=":"):
        cls = type(self)
        if not isinstance(prefix, str):
            raise TypeError(f"{cls.__typename__} 'prefix' must be a string")
        if not isinstance(separator, str):
            raise TypeError(f"{cls.__typename__} 'separator' must be a string")
        if not isinstance(configuration, Configuration | Unset):
            raise TypeError(f"{cls.__typename__} 'configuration' must be a configuration store")
        for name, object in (("console", console), ("errors", errors)):
            if not isinstance(object, Console | Unset):
                raise TypeError(f"{cls.__typename__} {name!r} must be a rich console")

        self._prefix = prefix
        self._separator = separator
        self._configuration = coalesce(configuration, Configuration())
        self._console = coalesce(console, Console())
        self._errors = coalesce(errors, faults.console)
        self._stack = []
        self._initializing = False

    def __len__(self):
        return len(self._stack)

    @property
    def scopes(self):
        """
        The active path, root first.
        """
        return tuple(self._stack)

    @property
    def current(self):
        """
        Top of the stack (None before the root is pushed).
        """
        return self._stack[-1] if self._stack else None

    def _guard(self, action, /):
        if self._initializing:
            raise ConfigurationError(
                f"cannot {action} a scope from an initialize hook",
                code=FaultCode.MISCONFIGURED_COMMAND,
            )

    def push(self, scope, /):
        """
        Run the scope's initialize hook (if any) with this session, then make it current.
        """
        self._guard("push")
        if scope.initialize is not None:
            self._initializing = True
            try:
                scope.initialize(self)
            finally:
                self._initializing = False
        self._stack.append(scope)
        return scope

    def pop(self):
        """
        Remove and return the current scope.

        Raises
        - TerminationRequested when only the root is left.
        """
        self._guard("pop")
        if len(self._stack) <= 1:
            raise TerminationRequested(0)
        return self._stack.pop()

    def prompt(self):
        """
        Live prompt label: every scope name on the stack, joined, plus the prefix.
        """
        return self._separator.join(scope.name for scope in self._stack) + self._prefix

    def echo(self, *objects, **options):
        """
        Print command output exactly as given (rich rendering off, long lines unwrapped).
        """
        defaults = {"markup": False, "emoji": False, "highlight": False, "soft_wrap": True}
        self._console.print(*objects, **defaults | options)

    def report(self, fault, /):
        """
        Render a fault or warning on the error console.
        """
        trigger(fault, console=self._errors)

    def execute(self, line, /):
        """
        Tokenize `line` and dispatch it to the current scope.

        Returns
        - the command Outcome, or None when the line was empty, dropped or failed.
        """
        if not self._stack:
            raise RuntimeError("session has no scope; push a root scope first")
        try:
            tokens = shlex.split(line)
        except ValueError as exception:
            self.report(TokenizationWarning(f"line dropped: {exception}"))
            return None
        if not tokens:
            return None
        try:
            return self.current.execute(self, tokens)
        except ShellFault as fault:
            self.report(fault)
            return None

    def complete(self, text, /, word=Unset):
        """
        Suggestions for `text` (the line up to the cursor).

        Never raises: unbalanced quotes and failing suggestion providers yield [].

        Parameters
        - word: the word under the cursor; derived from `text` when Unset.
        """
        if not self._stack:
            return []
        word = coalesce(word, lastword(text))
        try:
            tokens = shlex.split(text)
        except ValueError:
            return []
        if word and tokens:
            tokens = tokens[:-1]
        try:
            return suggest(self, text, self.current.commands, word, tokens[1:])
        except Exception:
            return []


__all__ = (
    "Session",
)
