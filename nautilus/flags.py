r"""
Nautilus flag specifications and the flag parser.

Overview
- Flag: one named, typed option of a command (e.g. --author/-a). Carries its
  default, usage text, hidden marker, repeatability and free-form string-list
  annotations. The "suggestions" annotation lists values offered by the
  completer after `--name=`.
- FlagSet: the flags owned by one command, plus the parser turning raw tokens
  into flag values and leftover positional arguments.

Accepted token forms
- long:      --name=value | --name value | --name (bool flags only)
- short:     -n value | -nvalue | -n=value | -abc (bool shorthands, last may take a value)
- "--" ends flag parsing; every later token is positional.
- a lone "-" is positional; flags and positionals may be interleaved.

Runtime state
- Every flag keeps a current value and a `changed` marker. reset() puts both
  back (value to default, changed to False). Commands call it before each parse
  because the same Flag objects serve every invocation.

Quick example
    >>> flags = FlagSet("risk")
    >>> flags.register("author", "a", default="YOUR NAME", usage="author name")
    >>> flags.register("viper", type=bool, default=True, usage="use viper")
    >>> flags.parse(["-a", "ada", "book.txt"])
    >>> flags.value("author"), flags.args
    ('ada', ['book.txt'])
"""
import re
from collections import deque
from collections.abc import Iterable, Mapping

from .faults import FaultCode, ParseError
from .utils import *

SUGGESTIONS = "suggestions"
"""Annotation key whose values are offered as completions for the flag value."""

_TRUTHY = frozenset({"1", "t", "true", "y", "yes", "on"})
_FALSY = frozenset({"0", "f", "false", "n", "no", "off"})

_TYPENAMES = {str: "string", int: "int", float: "float"}
_ZEROS = {bool: False, str: "", int: 0, float: 0.0}


def _boolean(raw, /):
    if (lowered := raw.strip().lower()) in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    raise ValueError(f"invalid boolean {raw!r}")


class Flag(metaclass=ReflectiveType):
    """
    Named, typed flag of a command.

    Properties (read-only)
    - name, shorthand, type, default, usage, hidden, multiple, annotations
    - value: current value (default until assigned during a parse)
    - changed: whether the last parse assigned this flag
    """
    __introspectable__ = (
        "name",
        "shorthand",
        "type",
        "default",
        "usage",
        "hidden",
        "multiple",
        "annotations",
    )

    __displayable__ = (
        "name",
        "shorthand",
        "default",
        "hidden",
    )

    def __init__(
            self,
            name,
            /,
            shorthand=Unset,
            type=str,
            default=Unset,
            usage="",
            *,
            hidden=False,
            multiple=False,
            annotations=Unset
    ):
        """
        Validate and store a flag specification.

        Parameters
        - name: str, letters/digits/hyphens, no leading dashes ("author", "dry-run").
        - shorthand: single letter or digit, or Unset.
        - type: bool, str, int, float, or any callable converting one raw string.
        - default: value before any assignment; derived from type when Unset
          ([] for multiple flags, None for custom converters).
        - usage: help text.
        - hidden: suppressed from help and completion.
        - multiple: repeatable; every occurrence appends a converted value.
        - annotations: Mapping[str, Iterable[str]].

        Raises
        - TypeError / ValueError on malformed metadata.
        """
        if not isinstance(name, str):
            raise TypeError(f"{self.__class__.__typename__} 'name' must be a string")
        elif not re.fullmatch(r"[^\W_][\w-]*", name := name.strip()):
            raise ValueError(f"{self.__class__.__typename__} 'name' must be a valid flag name (got {name!r})")

        if not isinstance(shorthand, str | Unset):
            raise TypeError(f"{self.__class__.__typename__} 'shorthand' must be a string")
        elif isinstance(shorthand, str) and not re.fullmatch(r"[^\W_]", shorthand):
            raise ValueError(f"{self.__class__.__typename__} 'shorthand' must be a single letter or digit")

        if not callable(type):
            raise TypeError(f"{self.__class__.__typename__} 'type' must be callable")
        if multiple and type is bool:
            raise ValueError(f"{self.__class__.__typename__} boolean flags cannot be multiple")

        if not isinstance(usage, str):
            raise TypeError(f"{self.__class__.__typename__} 'usage' must be a string")

        if default is Unset:
            default = [] if multiple else _ZEROS.get(type)

        sanitized = {}
        for key, values in coalesce(annotations, {}).items():
            if not isinstance(key, str) or not isinstance(values, Iterable) or isinstance(values, str):
                raise TypeError(f"{self.__class__.__typename__} 'annotations' must map strings to string lists")
            sanitized[key] = [str(value) for value in values]

        self._name = name
        self._shorthand = coalesce(shorthand)
        self._type = type
        self._default = default
        self._usage = usage.strip()
        self._hidden = bool(hidden)
        self._multiple = bool(multiple)
        self._annotations = sanitized
        self._value = Unset
        self._changed = False
        self.reset()

    @property
    def value(self):
        return self._value

    @property
    def changed(self):
        return self._changed

    @property
    def boolean(self):
        return self._type is bool

    @property
    def typename(self):
        """
        Type label used in the flags block ("" for booleans, "strings" for repeatable strings).
        """
        if self._type is bool:
            return ""
        typename = _TYPENAMES.get(self._type, getattr(self._type, "__name__", "value"))
        return typename + "s" if self._multiple else typename

    def reset(self):
        """
        Restore the default value and clear the changed marker.
        """
        self._value = list(self._default) if self._multiple else self._default
        self._changed = False

    def assign(self, raw, /):
        """
        Convert `raw` and store it (appending for multiple flags); mark as changed.

        Raises
        - ParseError (INVALID_FLAG_VALUE) when the converter rejects the value.
        """
        try:
            value = _boolean(raw) if self._type is bool else self._type(raw)
        except (TypeError, ValueError) as exception:
            raise ParseError(
                f"invalid argument {raw!r} for '--{self._name}' flag: {exception}",
                code=FaultCode.INVALID_FLAG_VALUE,
                title="invalid flag value",
            ) from exception
        if self._multiple:
            self._value.append(value)
        else:
            self._value = value
        self._changed = True

    def annotate(self, key, values, /):
        """
        Attach a string-list annotation (replaces an existing one under `key`).
        """
        if not isinstance(key, str):
            raise TypeError(f"{type(self).__typename__} annotation key must be a string")
        self._annotations[key] = [str(value) for value in values]

    def hide(self):
        self._hidden = True

    def render(self):
        """
        Render the default as shown in the flags block ('"text"', 'true', '[a,b]').
        """
        default = self._default
        if isinstance(default, str):
            return f'"{default}"'
        if isinstance(default, bool):
            return str(default).lower()
        if isinstance(default, list):
            return "[" + ",".join(map(str, default)) + "]"
        return str(default)


class FlagSet(metaclass=ReflectiveType):
    """
    Ordered-by-name collection of flags plus the parser.

    Not a Mapping on purpose: flags are reached through lookup()/value(), and a
    FlagSet is never copied when the command owning it is shared across scopes.
    """
    __introspectable__ = (
        "name",
    )

    def __init__(self, name=Unset, /):
        if not isinstance(name, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        self._name = coalesce(name, "")
        self._flags = {}
        self._shorthands = {}
        self._args = []

    def __contains__(self, name):
        return name in self._flags

    def __iter__(self):
        return iter([self._flags[name] for name in sorted(self._flags)])

    def __len__(self):
        return len(self._flags)

    def __repr__(self):
        return f"{type(self).__typename__}(name={self._name!r}, flags={sorted(self._flags)!r})"

    def add(self, flag, /):
        """
        Register an existing Flag; names and shorthands must be unique in the set.
        """
        if not isinstance(flag, Flag):
            raise TypeError(f"{type(self).__typename__} can only hold flags")
        if flag.name in self._flags:
            raise ValueError(f"{type(self).__typename__} flag name {flag.name!r} is already in use")
        if flag.shorthand and flag.shorthand in self._shorthands:
            raise ValueError(f"{type(self).__typename__} shorthand {flag.shorthand!r} is already in use")
        self._flags[flag.name] = flag
        if flag.shorthand:
            self._shorthands[flag.shorthand] = flag
        return flag

    def register(self, name, /, *args, **kwargs):
        """
        Build a Flag from the given metadata and add it (see Flag for parameters).
        """
        return self.add(Flag(name, *args, **kwargs))

    def lookup(self, name, /):
        """
        Return the flag registered under `name`, or None.
        """
        return self._flags.get(name)

    def shorthand(self, letter, /):
        """
        Return the flag registered under the one-letter `letter`, or None.
        """
        return self._shorthands.get(letter)

    def value(self, name, /):
        """
        Current value of flag `name` (KeyError for unknown flags).
        """
        return self._flags[name].value

    def hide(self, name, /):
        self._flags[name].hide()

    def annotate(self, name, key, values, /):
        self._flags[name].annotate(key, values)

    def reset(self):
        for flag in self._flags.values():
            flag.reset()

    def changed(self):
        """
        Flags assigned by the last parse, sorted by name.
        """
        return [flag for flag in self if flag.changed]

    @property
    def args(self):
        """
        Positional arguments left over by the last parse.
        """
        return list(self._args)

    def parse(self, args, /):
        """
        Assign flags from `args` and keep the remaining positional arguments.

        Raises
        - ParseError for malformed or unknown flags, missing values and values the
          flag's converter rejects. Nothing is rolled back on failure; the next
          reset() restores the defaults.
        """
        tokens = deque(args)
        positionals = []
        self._args = positionals

        while tokens:
            token = tokens.popleft()

            if token == "--":
                positionals.extend(tokens)
                break

            if token.startswith("--"):
                self._parse_long(token, tokens)
            elif token.startswith("-") and len(token) > 1:
                self._parse_short(token, tokens)
            else:
                positionals.append(token)

    def _parse_long(self, token, tokens):
        name, separator, value = token[2:].partition("=")
        if not name or name.startswith("-"):
            raise ParseError(
                f"bad flag syntax: {token}",
                code=FaultCode.MALFORMED_FLAG,
                title="malformed flag",
            )

        if (flag := self._flags.get(name)) is None:
            raise ParseError(
                f"unknown flag: --{name}",
                code=FaultCode.UNKNOWN_FLAG,
                title="unknown flag",
            )

        if separator:
            flag.assign(value)
        elif flag.boolean:
            flag.assign("true")
        elif tokens:
            flag.assign(tokens.popleft())
        else:
            raise ParseError(
                f"flag needs an argument: --{name}",
                code=FaultCode.MISSING_FLAG_VALUE,
                title="missing flag value",
            )

    def _parse_short(self, token, tokens):
        letters = token[1:]
        index = 0
        while index < len(letters):
            letter = letters[index]
            if (flag := self._shorthands.get(letter)) is None:
                raise ParseError(
                    f"unknown shorthand flag: {letter!r} in {token}",
                    code=FaultCode.UNKNOWN_FLAG,
                    title="unknown flag",
                )

            rest = letters[index + 1:]
            if rest.startswith("="):
                flag.assign(rest[1:])
                return
            if flag.boolean:
                flag.assign("true")
                index += 1
                continue
            if rest:
                flag.assign(rest)
            elif tokens:
                flag.assign(tokens.popleft())
            else:
                raise ParseError(
                    f"flag needs an argument: {letter!r} in {token}",
                    code=FaultCode.MISSING_FLAG_VALUE,
                    title="missing flag value",
                )
            return

    def defaults(self):
        """
        Render the visible flags, one per line, in aligned columns.

            -a, --author string   author name for copyright attribution (default "YOUR NAME")
                --viper           use Viper for configuration (default true)
        """
        rows = []
        for flag in self:
            if flag.hidden:
                continue
            left = f"  -{flag.shorthand}, --{flag.name}" if flag.shorthand else f"      --{flag.name}"
            if flag.typename:
                left += " " + flag.typename
            right = flag.usage
            if flag.default:
                right += f" (default {flag.render()})"
            rows.append((left, right.strip()))

        width = widest(left for left, _ in rows)
        return "".join(f"{pad(left, width)}   {right}\n" for left, right in rows)


__all__ = (
    "SUGGESTIONS",
    "Flag",
    "FlagSet",
)
