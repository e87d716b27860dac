"""
Nautilus command layer: named units of behaviour and their execution state machine.

What this module provides
- Command: a named, long-lived unit of behaviour with
  • identity (use name, aliases) and help text (short, long);
  • an owned FlagSet, a set of required flag names and an argument validator;
  • a run function `(session, command, args)` and a suggestion provider
    `(session, args) -> Iterable[str]`;
  • registry markers: eager (suggest arguments before anything is typed),
    builtin (listed under "Built-in Commands") and propagate (copied into every
    current and future child of the scope it is added to).
- Outcome: the non-error results of Command.execute (OK, HELP).
- command(...): create a Command directly or as a decorator.

Execution (Command.execute)
    idle → parsing flags → (help short-circuit | validating) → running → idle
1. every flag is reset (changed marker and value), since the same Command object
   serves every invocation in every scope it is registered in;
2. flags are parsed (ParseError stops everything);
3. --help/-h prints usage() and returns Outcome.HELP without running;
4. required flags must have been supplied (ValidationError otherwise);
5. the validator checks the positionals left after flag removal; anything it
   raises surfaces as a ValidationError;
6. the run function receives those positionals. ShellFaults propagate as-is,
   any other exception is wrapped in DelegatedCommandError.

Quick start
    from nautilus import command, exact_args

    @command(aliases=["st"], validate=exact_args(0))
    def status(session, command, args):
        \"\"\"Print the connection status.\"\"\"
        session.echo("connected")
"""
import inspect
from collections.abc import Iterable
from enum import Enum

from .faults import *
from .flags import Flag, FlagSet
from .utils import *
from .validation import combine

HELP = "help"
"""Name of the hidden help flag injected into every registered command."""


class Outcome(Enum):
    """
    Successful results of Command.execute (failures are raised as faults).
    """
    OK = "ok"
    HELP = "help"


@rename("nothing")
def _nothing(session, args, /):
    return ()


class Command(metaclass=ReflectiveType):
    """
    Named unit of behaviour shared by identity across every registry entry.

    Notes
    - A Command is never copied: registering it under aliases or propagating it
      into child scopes stores the same object, so later changes to it are seen
      everywhere.
    - Collections (aliases, required) are exposed as read-only copies.
    """
    __introspectable__ = (
        "use",
        "aliases",
        "short",
        "long",
        "required",
        "validate",
        "run",
        "suggestions",
        "eager",
        "builtin",
        "propagate",
        "flags",
    )

    __displayable__ = (
        "use",
        "aliases",
        "short",
        "eager",
        "builtin",
        "propagate",
    )

    def __init__(
            self,
            use,
            /,
            run=Unset,
            *,
            aliases=(),
            short=Unset,
            long=Unset,
            required=(),
            validate=Unset,
            suggestions=Unset,
            eager=False,
            builtin=False,
            propagate=False,
            flags=Unset
    ):
        """
        Validate and store a command definition.

        Parameters
        - use: canonical name (non-empty, no whitespace).
        - run: callable (session, command, args) or Unset; executing a command
          without one is a ConfigurationError.
        - aliases: iterable of alternative names.
        - short, long: one-line and detailed descriptions.
        - required: names of flags that must be supplied on every invocation.
        - validate: a validator, or an iterable of validators combined in order.
        - suggestions: provider (session, args) -> Iterable[str], or Unset.
        - eager, builtin, propagate: registry markers (see module docstring).
        - flags: FlagSet, iterable of Flag, or Unset for an empty set.

        Raises
        - TypeError / ValueError on malformed definitions.
        """
        cls = type(self)

        if not isinstance(use, str):
            raise TypeError(f"{cls.__typename__} 'use' must be a string")
        elif not (use := use.strip()) or any(character.isspace() for character in use):
            raise ValueError(f"{cls.__typename__} 'use' must be a non-empty word")

        if not callable(run) and run is not Unset:
            raise TypeError(f"{cls.__typename__} 'run' must be callable")

        if not isinstance(aliases, Iterable) or isinstance(aliases, str):
            raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of strings")
        seen = {use}
        for alias in (aliases := tuple(aliases)):
            if not isinstance(alias, str) or not alias or any(character.isspace() for character in alias):
                raise TypeError(f"{cls.__typename__} 'aliases' must be an iterable of non-empty words")
            elif alias in seen:
                raise ValueError(f"{cls.__typename__} 'aliases' cannot repeat {alias!r}")
            seen.add(alias)

        for name, object in (("short", short), ("long", long)):
            if not isinstance(object, str | Unset):
                raise TypeError(f"{cls.__typename__} {name!r} must be a string")

        if not isinstance(required, Iterable) or isinstance(required, str):
            raise TypeError(f"{cls.__typename__} 'required' must be an iterable of flag names")
        required = frozenset(required)
        if not all(isinstance(name, str) for name in required):
            raise TypeError(f"{cls.__typename__} 'required' must be an iterable of flag names")

        if validate is not Unset and not callable(validate):
            if not isinstance(validate, Iterable):
                raise TypeError(f"{cls.__typename__} 'validate' must be callable or an iterable of callables")
            validate = combine(*validate)

        if suggestions is not Unset and not callable(suggestions):
            raise TypeError(f"{cls.__typename__} 'suggestions' must be callable")

        match flags:
            case FlagSet():
                pass
            case UnsetType():
                flags = FlagSet(use)
            case Iterable():
                specs, flags = flags, FlagSet(use)
                for flag in specs:
                    flags.add(flag)
            case _:
                raise TypeError(f"{cls.__typename__} 'flags' must be a flag set or an iterable of flags")

        self._use = use
        self._aliases = aliases
        self._short = coalesce(short, "").strip()
        self._long = coalesce(long, "").strip()
        self._required = required
        self._validate = coalesce(validate)
        self._run = coalesce(run)
        self._suggestions = coalesce(suggestions)
        self._eager = bool(eager)
        self._builtin = bool(builtin)
        self._propagate = bool(propagate)
        self._flags = flags

    @property
    def names(self):
        """
        Canonical name followed by every alias.
        """
        return (self._use, *self._aliases)

    def prepare(self):
        """
        Make the command ready for a registry (idempotent).

        - installs a no-op suggestion provider when none is set;
        - adds the hidden --help flag unless a "help" flag already exists; it
          takes the -h shorthand only while no other flag owns it.
        """
        if self._suggestions is None:
            self._suggestions = _nothing
        if self._flags.lookup(HELP) is None:
            shorthand = "h" if self._flags.shorthand("h") is None else Unset
            self._flags.add(Flag(HELP, shorthand, bool, usage="Prints this help", hidden=True))
        return self

    def suggest(self, session, args, /):
        """
        Values offered by the suggestion provider, as strings (empty without one).
        """
        if self._suggestions is None:
            return []
        return [str(value) for value in self._suggestions(session, list(args)) or ()]

    def execute(self, session, args, /):
        """
        Run the execution state machine over `args` (tokens after the command name).

        Returns
        - Outcome.HELP when --help was given (usage printed on the session).
        - Outcome.OK after a successful run.

        Raises
        - ParseError, ValidationError, ConfigurationError, DelegatedCommandError,
          or any ShellFault raised by the run function itself.
        """
        self._flags.reset()
        self._flags.parse(args)

        if (helper := self._flags.lookup(HELP)) is not None and helper.changed and helper.value:
            session.echo(self.usage())
            return Outcome.HELP

        for name in sorted(self._required):
            if (flag := self._flags.lookup(name)) is None:
                raise ConfigurationError(
                    f"'{self._use}' command requires the undeclared flag '--{name}'",
                    code=FaultCode.MISCONFIGURED_COMMAND,
                )
            if not flag.changed:
                raise ValidationError(
                    f"required flag '--{name}' was not set",
                    code=FaultCode.MISSING_REQUIRED_FLAG,
                    title="missing required flag",
                )

        args = self._flags.args

        if self._validate is not None:
            try:
                self._validate(args)
            except ShellFault:
                raise
            except Exception as exception:
                raise ValidationError(str(exception) or type(exception).__name__) from exception

        if self._run is None:
            raise ConfigurationError(
                f"'{self._use}' command has no run function",
                code=FaultCode.MISSING_RUN_FUNCTION,
                hint=f"pass run= when creating '{self._use}'",
            )

        try:
            self._run(session, self, args)
        except ShellFault:
            raise
        except Exception as exception:
            raise DelegatedCommandError(f"'{self._use}' failed: {exception}") from exception
        return Outcome.OK

    def usage(self):
        """
        Render the plain-text usage block.

        Layout
        - short (and long) description
        - "Usage:" synopsis line
        - "Flags:" block (visible flags only)
        - "Aliases:" line, when the command has any
        """
        lines = ["", self._short]
        if self._long:
            lines.append(self._long)
        lines += ["", "Usage:", f"  {self._use} [flags] [args...]", "", "Flags:"]
        text = "\n".join(lines) + "\n" + self._flags.defaults()
        if self._aliases:
            text += f"\nAliases:\n  {', '.join(self._aliases)}\n"
        return text


def command(source=Unset, /, **kwargs):
    """
    Create a Command or return a decorator building one from a run function.

    Invocation modes
    - Direct:     cmd = command(run, use="status", aliases=["st"])
    - Decorator:  @command(aliases=["st"])
                  def status(session, command, args): ...

    Defaults derived from the run function
    - use: the function name with underscores turned into hyphens.
    - short / long: first line / remaining lines of the docstring.

    Returns
    - Command | Callable[[Callable], Command]
    """
    @rename("command")
    def wrapper(source, /):
        if not callable(source):
            raise TypeError("@command() must be applied to a callable")
        options = dict(kwargs)
        use = options.pop("use", getattr(source, "__name__", Unset))
        if isinstance(use, str):
            use = use.strip("_").replace("_", "-")
        short, _, long = (inspect.getdoc(source) or "").partition("\n")
        options.setdefault("short", short)
        options.setdefault("long", long)
        return Command(use, source, **options)

    return wrapper(source) if source is not Unset else wrapper


__all__ = (
    "HELP",
    "Outcome",
    "Command",
    "command",
)
