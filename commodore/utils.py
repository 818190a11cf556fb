"""
Commodore helpers shared by the declaration and parsing layers.

Contents
- Unset: "argument omitted" marker for getter-or-setter accessors and optional
  parameters, kept apart from None because None is a legitimate stored value.
- coalesce(): swap Unset for a default.
- rename(): give generated listeners readable names in tracebacks and reprs.
- mirror(): read-only property over a "_name" attribute; containers come back
  as copies so a command's declared state cannot be edited from outside.
"""
import builtins
import functools
from collections.abc import Mapping, Sequence, Set
from typing import final


@final
class UnsetType:
    """
    Type of the Unset marker.

    Only one instance ever exists; it is falsy, prints as "Unset" and may be
    combined with types in isinstance() unions (str | Unset).
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    __ror__ = __or__

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("type 'UnsetType' is not an acceptable base type")


Unset = UnsetType()


def coalesce(object, default=None, /):
    """
    Return `default` when `object` is Unset, otherwise `object` itself.

    None, 0, "" and other falsy values are kept:
        >>> coalesce(Unset, "[options]"), coalesce(None, "[options]")
        ('[options]', None)
    """
    return default if object is Unset else object


def rename(*parameters):
    """
    rename(callable, name) renames in place and returns the callable;
    rename(name) returns a decorator doing the same.
    """
    if len(parameters) == 1:
        name, = parameters
        if not isinstance(name, str):
            raise TypeError("@rename() argument must be a string")
        return lambda callable: rename(callable, name)
    if len(parameters) != 2:
        raise TypeError("rename takes 1 to 2 arguments but %d were given" % len(parameters))

    callable, name = parameters
    if not builtins.callable(callable):
        raise TypeError("rename() first argument must be callable")
    if not isinstance(name, str):
        raise TypeError("rename() second argument must be a string")
    try:
        callable.__name__ = callable.__qualname__ = name
    except (AttributeError, TypeError):
        raise TypeError("rename() cannot rename %r" % (callable,)) from None
    return callable


def _copy(object):
    if isinstance(object, str):
        return object
    if isinstance(object, Mapping):
        return dict(object)
    if isinstance(object, Set):
        return set(object)
    if isinstance(object, Sequence):
        return list(object)
    return object


def mirror(name, /):
    """
    Build a read-only property returning (a copy of) `self._<name>`.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        return _copy(getattr(self, "_" + name))

    return property(getter)


__all__ = (
    "UnsetType",
    "Unset",
    "coalesce",
    "rename",
    "mirror",
)
