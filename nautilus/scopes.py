"""
Nautilus scope tree and command registry.

A Scope is a named namespace node. It owns
- a command registry mapping every name and alias to a Command (shared by
  identity, never copied), and
- a map of child scopes (a tree: every child has exactly one parent).

Propagation
- A command with `propagate=True` reaches every current and future child:
  add_command() pushes it into the existing children, add_scope() pushes the
  parent's propagating commands into the new child before linking it. Both go
  through the same injection routine, so the order of the two calls never
  matters.
- Propagation is a one-time copy of the reference. There is no removal.

Every scope is created with the scope-local built-ins `use` and `help`.
"""
import difflib
from collections.abc import Iterable

from .commands import Command, command
from .faults import *
from .intrinsics import help_command, use_command
from .utils import *


class Scope(metaclass=ReflectiveType):
    """
    Namespace node holding commands and child scopes.

    Properties (read-only)
    - name, descr, initialize
    - commands: {name-or-alias: Command} (copy; the commands are the shared objects)
    - scopes: {name: Scope} (copy)
    - parent: the scope this one was added to, or None
    """
    __introspectable__ = (
        "name",
        "descr",
        "initialize",
        "commands",
        "scopes",
        "parent",
    )

    __displayable__ = (
        "name",
        "descr",
    )

    def __init__(self, name, /, descr=Unset, *, initialize=Unset):
        """
        Parameters
        - name: non-empty word, used in the prompt and by `use`.
        - descr: one-line description shown in usage text.
        - initialize: optional hook called with the session when the scope is pushed.
        """
        cls = type(self)
        if not isinstance(name, str):
            raise TypeError(f"{cls.__typename__} 'name' must be a string")
        elif not (name := name.strip()) or any(character.isspace() for character in name):
            raise ValueError(f"{cls.__typename__} 'name' must be a non-empty word")
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{cls.__typename__} 'descr' must be a string")
        if initialize is not Unset and not callable(initialize):
            raise TypeError(f"{cls.__typename__} 'initialize' must be callable")

        self._name = name
        self._descr = coalesce(descr, "").strip()
        self._initialize = coalesce(initialize)
        self._commands = {}
        self._scopes = {}
        self._parent = None

        self.add_command(use_command(self))
        self.add_command(help_command(self))

    def _propagating(self):
        unique = {}
        for object in self._commands.values():
            if object.propagate:
                unique.setdefault(id(object), object)
        return list(unique.values())

    @staticmethod
    def _inject(commands, children, /):
        """
        Add every command in `commands` to every scope in `children`.

        Idempotent: re-adding a command only rewrites the same registry keys.
        """
        for child in list(children):
            for object in commands:
                child.add_command(object)

    def add_command(self, command, /):
        """
        Register `command` under its name and aliases (last registration of a key wins).

        A propagating command is also added to every existing child, recursively.
        """
        if not isinstance(command, Command):
            raise TypeError(f"{type(self).__typename__} can only register commands")
        command.prepare()
        for name in command.names:
            self._commands[name] = command
        if command.propagate:
            self._inject([command], self._scopes.values())
        return command

    def add_scope(self, child, /):
        """
        Link `child` under its name after injecting this scope's propagating commands into it.
        """
        if not isinstance(child, Scope):
            raise TypeError(f"{type(self).__typename__} can only hold scopes")
        if child is self or child._parent is not None:
            raise ValueError(f"{type(self).__typename__} {child.name!r} already has a parent")
        if child.name in self._scopes:
            raise ValueError(f"{type(self).__typename__} {child.name!r} is already a sub-scope of {self._name!r}")
        self._inject(self._propagating(), [child])
        child._parent = self
        self._scopes[child.name] = child
        return child

    def lookup(self, name, /):
        """
        Command registered under `name` (canonical or alias), or None.
        """
        return self._commands.get(name)

    def child(self, name, /):
        """
        Child scope registered under `name`, or None.
        """
        return self._scopes.get(name)

    def available_commands(self):
        return sorted(self._commands)

    def available_scopes(self):
        return sorted(self._scopes)

    def execute(self, session, tokens, /):
        """
        Resolve tokens[0] in this scope's own registry and execute the command with the rest.

        Ancestors are not searched: a parent command is visible here only if it
        was propagated or added explicitly.

        Raises
        - UnknownCommandError when no token is given or the name is not registered.
        - whatever Command.execute raises.
        """
        if not tokens:
            raise UnknownCommandError("no command given")
        name, *args = tokens
        if (object := self._commands.get(name)) is None:
            options = {}
            if matches := difflib.get_close_matches(name, self._commands, n=1):
                options["hint"] = f"did you mean '{matches[0]}'?"
            raise UnknownCommandError(f"unknown command {name!r} in scope '{self._name}'", **options)
        return object.execute(session, args)

    def usage(self):
        """
        Render the scope usage text.

        Sections
        - description
        - "User Commands:" and "Built-in Commands:" (always present, possibly empty)
        - "Sub-scopes:" only when the scope has children
        Names are padded to the widest name of their listing.
        """
        names = self.available_commands()
        width = widest(names)

        def row(name):
            object = self._commands[name]
            if object.use != name:
                return f"  {pad(name, width)}    Alias for '{object.use}' command"
            return f"  {pad(name, width)}    {object.short}".rstrip()

        lines = [self._descr, "", "User Commands:"]
        lines += [row(name) for name in names if not self._commands[name].builtin]
        lines += ["", "Built-in Commands:"]
        lines += [row(name) for name in names if self._commands[name].builtin]

        if self._scopes:
            scopes = self.available_scopes()
            width = widest(scopes)
            lines += ["", "Sub-scopes:"]
            lines += [f"  {pad(name, width)}    {self._scopes[name].descr}".rstrip() for name in scopes]

        return "\n".join(lines) + "\n"

    def command(self, source=Unset, /, **kwargs):
        """
        Build a Command with the command() factory and register it here.

        Forms
        - scope.command(run, use="status")
        - @scope.command(aliases=["st"])
        """
        @rename("command")
        def wrapper(source, /):
            return self.add_command(command(source, **kwargs))

        return wrapper(source) if source is not Unset else wrapper

    def scope(self, name, /, descr=Unset, *, initialize=Unset):
        """
        Create a child scope, link it with add_scope() and return it.
        """
        return self.add_scope(Scope(name, descr, initialize=initialize))

    def walk(self):
        """
        Yield this scope and every descendant, depth first, children in name order.
        """
        yield self
        for name in sorted(self._scopes):
            yield from self._scopes[name].walk()


__all__ = (
    "Scope",
)
