"""
Nautilus shell: the prompt_toolkit front end of a Session.

What this module provides
- ColorScheme / DEFAULT_COLORS: the twelve colour slots of the prompt and the
  completion menu, turned into a prompt_toolkit Style.
- ScopeCompleter: adapts Session.complete() to prompt_toolkit and fuzzy-ranks
  the suggestions against the word under the cursor.
- bindings(): meta-backspace deletes a word, meta-b / meta-f move by word.
- Shell: owns the root scope (with the root built-ins installed), the session
  and the run loop.
- print_info(label, message): one green-labelled line.

Loop contract
- Ctrl-C discards the current line, Ctrl-D (EOF) leaves the loop.
- `quit`, or `exit` at the root, raise TerminationRequested; run() turns it
  into sys.exit(status).
"""
import sys
from dataclasses import dataclass

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion, FuzzyCompleter
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.bindings.named_commands import get_by_name
from prompt_toolkit.shortcuts import set_title
from prompt_toolkit.styles import Style
from rich.console import Console
from rich.text import Text

from .faults import TerminationRequested
from .intrinsics import install
from .scopes import Scope
from .sessions import Session
from .utils import *


@dataclass(frozen=True)
class ColorScheme:
    """
    Colours of the prompt and completion menu (prompt_toolkit colour names or #rrggbb).
    """
    scrollbar_thumb: str = "ansired"
    scrollbar_background: str = "ansiwhite"
    prefix: str = "ansired"
    input: str = "ansiwhite"
    description_background: str = "ansiwhite"
    description_text: str = "ansibrightblack"
    suggestion_background: str = "ansibrightblack"
    suggestion_text: str = "ansiwhite"
    selected_suggestion_background: str = "ansiwhite"
    selected_suggestion_text: str = "ansibrightblack"
    selected_description_background: str = "ansibrightblack"
    selected_description_text: str = "ansiwhite"

    def style(self):
        """
        Build the prompt_toolkit Style for this scheme.
        """
        return Style.from_dict({
            "": self.input,
            "prompt": self.prefix,
            "scrollbar.button": f"bg:{self.scrollbar_thumb}",
            "scrollbar.background": f"bg:{self.scrollbar_background}",
            "completion-menu.completion": f"bg:{self.suggestion_background} {self.suggestion_text}",
            "completion-menu.completion.current": (
                f"bg:{self.selected_suggestion_background} {self.selected_suggestion_text}"
            ),
            "completion-menu.meta.completion": f"bg:{self.description_background} {self.description_text}",
            "completion-menu.meta.completion.current": (
                f"bg:{self.selected_description_background} {self.selected_description_text}"
            ),
        })


DEFAULT_COLORS = ColorScheme()


class _Computed(Completer):
    """
    Yields completions computed beforehand, whatever document it is given.
    """

    def __init__(self, completions):
        self.completions = completions

    def get_completions(self, document, complete_event):
        return iter(self.completions)


class ScopeCompleter(Completer):
    """
    prompt_toolkit completer backed by Session.complete().

    Suggestions are computed from the full text before the cursor, then ranked by
    FuzzyCompleter against the trailing run of characters after the last blank
    or "=" (so flag values complete after "--flag=").
    """

    def __init__(self, session):
        self.session = session

    def get_completions(self, document, complete_event):
        completions = [
            Completion(suggestion.text, 0, display_meta=suggestion.descr or None)
            for suggestion in self.session.complete(document.text_before_cursor)
        ]
        ranker = FuzzyCompleter(_Computed(completions), pattern=r"^[^\s=]*")
        yield from ranker.get_completions(document, complete_event)


def bindings():
    """
    Word navigation bindings shared by the shell and its sub-shells.
    """
    keys = KeyBindings()
    keys.add("escape", "backspace")(get_by_name("backward-kill-word"))
    keys.add("escape", "c-h")(get_by_name("backward-kill-word"))
    keys.add("escape", "b")(get_by_name("backward-word"))
    keys.add("escape", "f")(get_by_name("forward-word"))
    return keys


def print_info(label, message, /, console=Unset):
    """
    Print "label: message" with the label in green.
    """
    coalesce(console, Console()).print(Text.assemble((label, "bold green"), ": ", str(message)))


class Shell(metaclass=ReflectiveType):
    """
    Interactive shell over a tree of scopes.

    Properties (read-only)
    - title: terminal window title
    - suggestions: completion menu height
    - colors: ColorScheme
    - root: the root Scope (named after the shell)
    - session: the Session driving the loop
    """
    __introspectable__ = (
        "title",
        "suggestions",
        "colors",
        "root",
        "session",
    )

    __displayable__ = (
        "title",
        "root",
    )

    def __init__(
            self,
            name,
            /,
            *,
            title="console",
            prefix="> ",
            suggestions=8,
            colors=Unset,
            greeter=Unset,
            configuration=Unset,
            console=Unset,
            errors=Unset
    ):
        """
        Parameters
        - name: root scope name (first element of every prompt).
        - title: terminal title set when the loop starts.
        - prefix: prompt suffix after the scope path.
        - suggestions: number of rows reserved for the completion menu.
        - colors: ColorScheme (DEFAULT_COLORS when Unset).
        - greeter: callable run once before the first prompt (title screen).
        - configuration, console, errors: forwarded to the Session.
        """
        cls = type(self)
        if not isinstance(title, str):
            raise TypeError(f"{cls.__typename__} 'title' must be a string")
        if not isinstance(suggestions, int) or isinstance(suggestions, bool):
            raise TypeError(f"{cls.__typename__} 'suggestions' must be an integer")
        elif suggestions < 0:
            raise ValueError(f"{cls.__typename__} 'suggestions' cannot be negative")
        if not isinstance(colors, ColorScheme | Unset):
            raise TypeError(f"{cls.__typename__} 'colors' must be a color scheme")
        if greeter is not Unset and not callable(greeter):
            raise TypeError(f"{cls.__typename__} 'greeter' must be callable")

        self._title = title
        self._suggestions = suggestions
        self._colors = coalesce(colors, DEFAULT_COLORS)
        self._greeter = coalesce(greeter)
        self._root = install(Scope(name))
        self._session = Session(prefix, configuration, console=console, errors=errors)
        self._session.push(self._root)
        self._prompt = None

    def add_scope(self, scope, /):
        return self._root.add_scope(scope)

    def add_command(self, command, /):
        return self._root.add_command(command)

    def command(self, source=Unset, /, **kwargs):
        """
        Register a root-level command (direct call or decorator, see Scope.command).
        """
        return self._root.command(source, **kwargs)

    def scope(self, name, /, descr=Unset, *, initialize=Unset):
        return self._root.scope(name, descr, initialize=initialize)

    def _build(self):
        return PromptSession(
            lambda: [("class:prompt", self._session.prompt())],
            completer=ScopeCompleter(self._session),
            complete_while_typing=True,
            reserve_space_for_menu=self._suggestions,
            key_bindings=bindings(),
            style=self._colors.style(),
        )

    def run(self):
        """
        Read and execute lines until EOF; exit the process on TerminationRequested.
        """
        set_title(self._title)
        if self._greeter is not None:
            self._greeter()
        if self._prompt is None:
            self._prompt = self._build()

        while True:
            try:
                line = self._prompt.prompt()
            except KeyboardInterrupt:
                continue
            except EOFError:
                return
            try:
                self._session.execute(line)
            except TerminationRequested as termination:
                sys.exit(termination.status)


__all__ = (
    "ColorScheme",
    "DEFAULT_COLORS",
    "ScopeCompleter",
    "Shell",
    "bindings",
    "print_info",
)
