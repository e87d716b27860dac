"""
Nautilus argument validators.

A validator is any callable taking the positional arguments left after flag
parsing (a list of strings) and raising ValidationError when they do not fit.
Return values are ignored.

Factories
- exact_args(n), minimum_args(n), maximum_args(n), range_args(low, high), no_args
- combine(*validators): run validators in order; the first failure propagates and
  later validators are not evaluated.

    >>> validate = combine(exact_args(2), minimum_args(1))
    >>> validate(["a", "b"])    # passes
    >>> validate([])            # ValidationError: requires 2 args
"""
from .faults import FaultCode, ValidationError
from .utils import rename


def _count(n, /, label):
    if not isinstance(n, int) or isinstance(n, bool):
        raise TypeError(f"{label}() argument must be an integer")
    if n < 0:
        raise ValueError(f"{label}() argument cannot be negative")
    return n


def _fail(message, /):
    raise ValidationError(message, code=FaultCode.INVALID_ARGUMENTS)


def exact_args(n, /):
    """
    Require exactly `n` positional arguments.
    """
    n = _count(n, "exact_args")

    @rename(f"exact_args({n})")
    def validate(args, /):
        if len(args) != n:
            _fail(f"requires {n} args")

    return validate


def minimum_args(n, /):
    """
    Require at least `n` positional arguments.
    """
    n = _count(n, "minimum_args")

    @rename(f"minimum_args({n})")
    def validate(args, /):
        if len(args) < n:
            _fail(f"requires at least {n} args")

    return validate


def maximum_args(n, /):
    """
    Require no more than `n` positional arguments.
    """
    n = _count(n, "maximum_args")

    @rename(f"maximum_args({n})")
    def validate(args, /):
        if len(args) > n:
            _fail(f"requires no more than {n} args")

    return validate


def range_args(low, high, /):
    """
    Require between `low` and `high` positional arguments (inclusive).
    """
    low, high = _count(low, "range_args"), _count(high, "range_args")
    if low > high:
        raise ValueError("range_args() lower bound cannot exceed the upper bound")
    return combine(minimum_args(low), maximum_args(high))


@rename("no_args")
def no_args(args, /):
    if args:
        _fail(f"accepts no args (got {len(args)})")


def combine(*validators):
    """
    Compose validators; the first one raising stops the chain.
    """
    for validator in validators:
        if not callable(validator):
            raise TypeError("combine() arguments must be callable")

    @rename("combine")
    def validate(args, /):
        for validator in validators:
            validator(args)

    return validate


__all__ = (
    "exact_args",
    "minimum_args",
    "maximum_args",
    "range_args",
    "no_args",
    "combine",
)
