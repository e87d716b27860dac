"""
Nautilus built-in commands.

Scope-local (seeded into every Scope)
- use <scope>    push a child scope
- help [name]    scope usage, or the usage of a command or child scope

Root-level (installed by install(root); all propagate to every descendant)
- exit (alias pop)   pop the current scope; at the root, end the session
- quit               end the session from any depth
- env                list every configuration key with its value
- get <key>          print one configuration value
- set <key> <value>  store one configuration value

Suggestion providers receive the completed positionals after the command name
(the word being typed is not included).
"""
from .commands import Command
from .faults import *
from .utils import *
from .validation import exact_args, maximum_args, no_args


def use_command(scope, /):
    """
    `use <scope>` bound to `scope`'s own children.
    """
    def run(session, command, args, /):
        if not args:
            raise ValidationError("use requires an argument")
        elif len(args) > 1:
            raise ValidationError("use requires only 1 argument")
        if (child := scope.child(args[0])) is None:
            raise UnknownScopeError(f"unknown scope {args[0]!r} in '{scope.name}'")
        session.push(child)

    def suggestions(session, args, /):
        return [] if args else scope.available_scopes()

    return Command(
        "use",
        rename(run, "use"),
        short="Use pushes a new scope onto the environment",
        suggestions=suggestions,
        eager=True,
        builtin=True,
    )


def help_command(scope, /):
    """
    `help [name]` bound to `scope`.
    """
    def run(session, command, args, /):
        if not args:
            session.echo(scope.usage())
            return
        name, = args
        if (object := scope.lookup(name)) is not None:
            session.echo(object.usage())
        elif (child := scope.child(name)) is not None:
            session.echo(child.usage())
        else:
            raise ValidationError(f"unknown argument {name!r}", hint="type 'help' to list what this scope offers")

    def suggestions(session, args, /):
        return [] if args else sorted({*scope.available_commands(), *scope.available_scopes()})

    return Command(
        "help",
        rename(run, "help"),
        short="Prints help info",
        validate=maximum_args(1),
        suggestions=suggestions,
        eager=True,
        builtin=True,
    )


def exit_command():
    @rename("exit")
    def run(session, command, args, /):
        session.pop()

    return Command(
        "exit",
        run,
        aliases=["pop"],
        short="Exit pops a scope from the environment. Exits console if at the root scope.",
        validate=no_args,
        builtin=True,
        propagate=True,
    )


def quit_command():
    @rename("quit")
    def run(session, command, args, /):
        raise TerminationRequested(0)

    return Command(
        "quit",
        run,
        short="Exits the console regardless of scope",
        builtin=True,
        propagate=True,
    )


def env_command():
    @rename("env")
    def run(session, command, args, /):
        keys = sorted(session.configuration.all_keys())
        width = widest(keys)
        for key in keys:
            session.echo(f"{pad(key, width)}   {session.configuration.get(key)}")

    return Command(
        "env",
        run,
        short="env lists all the environment variables for the commands",
        validate=no_args,
        builtin=True,
        propagate=True,
    )


def _keys(session, args, /):
    return [] if args else sorted(session.configuration.all_keys())


def get_command():
    @rename("get")
    def run(session, command, args, /):
        key, = args
        session.echo(f"{key}   {session.configuration.get(key)}")

    return Command(
        "get",
        run,
        short="Gets a current env var",
        validate=exact_args(1),
        suggestions=_keys,
        eager=True,
        builtin=True,
        propagate=True,
    )


def set_command():
    @rename("set")
    def run(session, command, args, /):
        key, value = args
        session.configuration.set(key, value)

    return Command(
        "set",
        run,
        short="Sets an env var",
        validate=exact_args(2),
        suggestions=_keys,
        eager=True,
        builtin=True,
        propagate=True,
    )


def install(root, /):
    """
    Add the root-level built-ins to `root` (they propagate to every descendant).
    """
    for factory in (exit_command, quit_command, env_command, get_command, set_command):
        root.add_command(factory())
    return root


__all__ = (
    "use_command",
    "help_command",
    "exit_command",
    "quit_command",
    "env_command",
    "get_command",
    "set_command",
    "install",
)
