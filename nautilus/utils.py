"""
Nautilus utilities (small helpers shared by every layer).

Overview
- UnsetType / Unset
  • Singleton sentinel for “not provided”, kept apart from None so that None can
    stay a legitimate user value (flag defaults, hooks, descriptions).

- coalesce(value, default=None)
  • Materialize Unset into a concrete default; every other value passes through.

- rename(callable, name) / @rename("name")
  • Give generated callables (no-op providers, built-in run functions) stable
    names so reprs and tracebacks stay readable.

- mirror("attr")
  • Read-only property over a private backing field (self._attr). Containers are
    handed out as fresh copies; the objects inside them are not copied, so a
    Command reached through two scopes is still the same object.

- ReflectiveType
  • Metaclass for the registry records (Flag, Command, Scope): derives a
    hyphenated __typename__, wires mirror() for every name in __introspectable__,
    and provides __repr__/__rich_repr__.

- widest(names) / pad(name, width) / lastword(text)
  • Column helpers for usage text and the word-under-cursor rule of the completer.
"""
import builtins
import functools
import operator
import re
from collections.abc import Sequence, Mapping, Set
from typing import final


@final
class UnsetType:
    """
    Sentinel type for values that were not provided.

    Characteristics
    - Falsey, but distinct from None, 0 and empty containers.
    - repr() is "Unset".
    - Singleton: UnsetType() always returns the same instance.
    - Sealed: subclassing raises TypeError.
    """

    def __or__(self, other, /):
        """
        Allow `str | Unset` in isinstance checks and annotations.
        """
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return `default` when `object` is Unset; otherwise return `object` unchanged.

    None and other falsey values are preserved:
    - coalesce(Unset, "x") -> "x"
    - coalesce(None, "x")  -> None
    """
    return object if object is not Unset else default


def rename(*parameters):
    """
    Set __name__/__qualname__ on a callable, or return a decorator doing so.

    Forms
    - rename(callable, name) -> callable
    - @rename(name)
    """
    match len(parameters):
        case 2:
            callable, name = parameters
            if not builtins.callable(callable):
                raise TypeError("rename() first argument must be callable")
            if not isinstance(name, str):
                raise TypeError("rename() second argument must be a string")
            try:
                callable.__qualname__ = name
                callable.__name__ = name
            except (AttributeError, TypeError):
                raise TypeError("rename() first argument must be a updatable callable") from None
            return callable
        case 1:
            name, = parameters
            if not isinstance(name, str):
                raise TypeError("@rename() argument must be a string")

            def wrapper(callable):
                return rename(callable, name)

            return rename(wrapper, "rename")
        case _:
            raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))


def _snapshot(object):
    """
    Copy containers one level at a time; leave everything else untouched.

    Commands, scopes and flags are never containers here, so their identity
    survives a snapshot of the registries holding them.
    """
    if isinstance(object, Sequence) and not isinstance(object, str):
        return list(map(_snapshot, object))
    elif isinstance(object, Mapping):
        return dict(zip(object.keys(), map(_snapshot, object.values())))
    elif isinstance(object, Set):
        return set(map(_snapshot, object))
    return object


def mirror(name, /):
    """
    Build a read-only property exposing `self._<name>` through _snapshot().
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _snapshot(getattr(self, "_" + name))

    return property(getter)


def _repr(self):
    return f"{type(self).__typename__}({', '.join(map(functools.partial(operator.mod, '%s=%r'), self.__rich_repr__()))})"


def _rich_repr(self):
    for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
        yield name, getattr(self, name)


class ReflectiveType(type):
    """
    Metaclass for introspectable records.

    Responsibilities
    - __typename__: class name split on capitals and hyphenated (FlagSet -> flag-set),
      used in construction error messages.
    - Every name in __introspectable__ becomes a mirror() property.
    - __repr__/__rich_repr__ list __displayable__ (or __introspectable__) fields,
      unless the class defines its own.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, /, **options):
        namespace = namespace | {
            "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
        } | {
            field: mirror(field) for field in namespace.get("__introspectable__", ())
        }
        namespace.setdefault("__repr__", _repr)
        namespace.setdefault("__rich_repr__", _rich_repr)
        return super().__new__(cls, name, bases, namespace, **options)


def widest(names, /):
    """
    Length of the longest name (0 for an empty iterable).
    """
    return max(map(len, names), default=0)


def pad(name, width, /):
    """
    Left-align `name` in a column of `width` characters (never truncates).
    """
    return name.ljust(width)


def lastword(text, /):
    """
    The word under the cursor: the trailing run of non-blank characters.

    - lastword("use acc")  -> "acc"
    - lastword("use ")     -> ""
    - lastword("")         -> ""
    """
    if not text or text[-1].isspace():
        return ""
    return text.split()[-1]


__all__ = (
    # Functions
    "coalesce",
    "rename",
    "mirror",
    "widest",
    "pad",
    "lastword",

    # Types
    "UnsetType",
    "ReflectiveType",

    # Constants
    "Unset",
)
