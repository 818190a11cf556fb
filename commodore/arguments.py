r"""
Commodore argument specifications.

Overview
- Option: a declared flag parsed from a mini-language spec such as
  "-p, --port <number>", "-c, --cheese [type]" or "--no-sauce".
  • short/long spellings, value arity, negation, canonical name.
- Cardinal: a declared positional slot of a command ("<target>" or "[env]").
- Arity: how many values an option takes (none, optional one, required one).

Option flag grammar
- pieces are separated by any run of spaces, commas or pipes: r"[ ,|]+"
- "<...>" anywhere      → Arity.REQUIRED
- "[...]" (and no "<")  → Arity.OPTIONAL
- neither               → Arity.BOOLEAN
- "-no-" anywhere       → negated; a value-less activation stores False

Canonical name
- the long spelling with the first "--" removed, then the first "no-" removed:
  "--no-color" → "color", "--dry-run" → "dry-run".
- it keys both event routing and value storage on the owning command.

Specs are parsed once, at construction, and are immutable afterwards: every
field is published through a read-only property (see mirror()).

Quick example:
    >>> port = Option("-p, --port <number>", "port to listen on")
    >>> port.short, port.long, port.name, port.arity
    ('-p', '--port', 'port', <Arity.REQUIRED: 2>)
    >>> Option("--no-sauce").default
    False
"""
import functools
import operator
import re
from enum import IntEnum

from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns specs into read-only, introspectable descriptors.

    Responsibilities
    - Expose every name listed in __introspectable__ as a read-only property
      backed by the matching "_name" attribute (see mirror()).
    - Provide stable __repr__/__rich_repr__ implementations for diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__()))
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Arity(IntEnum):
    """
    value arity of an option.
    """
    BOOLEAN  = 0
    OPTIONAL = 1
    REQUIRED = 2


def _sanitize_descr(cls, metadata, /):
    """
    Internal: validate the optional description shared by all specs.

    - Unset becomes None.
    - A provided description must be a string; it is trimmed.
    """
    if not isinstance(descr := metadata["descr"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    metadata["descr"] = coalesce(descr if descr is Unset else descr.strip())


def _parse_flags(cls, metadata, /):
    r"""
    Internal: split a raw flag spec into its structured fields.

    Fields produced (metadata is mutated in place)
    - short: the short spelling ("-p") or None.
    - long: the long spelling ("--port"), always present.
    - arity: derived from "<" / "[" presence anywhere in the spec.
    - negated: whether "-no-" appears anywhere in the spec.
    - default: the value stored by a value-less activation (not negated).
    - name: canonical name (long minus the first "--" and the first "no-").

    Splitting
    - pieces come from re.split(r"[ ,|]+", flags); empty pieces are dropped.
    - a leading single-dash piece is the short form only when a "--" piece
      follows it; the first "--" piece is the long form; everything else
      (value placeholders, stray words) is ignored.

    Raises
    - TypeError: flags is not a string.
    - ValueError: flags is blank or has no "--" long spelling.
    """
    if not isinstance(flags := metadata["flags"], str):
        raise TypeError(f"{cls.__typename__} 'flags' must be a string")
    elif not (flags := flags.strip()):
        raise ValueError(f"{cls.__typename__} 'flags' cannot be empty")

    pieces = [piece for piece in re.split(r"[ ,|]+", flags) if piece]
    longs = [piece for piece in pieces if piece.startswith("--")]
    if not longs:
        raise ValueError(f"{cls.__typename__} 'flags' must contain a long spelling (e.g. --name)")

    short = pieces[0] if pieces[0].startswith("-") and not pieces[0].startswith("--") else None

    if "<" in flags:
        arity = Arity.REQUIRED
    elif "[" in flags:
        arity = Arity.OPTIONAL
    else:
        arity = Arity.BOOLEAN

    metadata["flags"] = flags
    metadata["short"] = short
    metadata["long"] = longs[0]
    metadata["arity"] = arity
    metadata["negated"] = "-no-" in flags
    metadata["default"] = not metadata["negated"]
    metadata["name"] = longs[0].replace("--", "", 1).replace("no-", "", 1)


class Option(metaclass=ArgumentType):
    """
    Declared flag with short/long spelling and value arity.

    Construction parses the flag spec once (see _parse_flags); the instance is
    immutable afterwards.

    Matching
    - matches(token) is exact equality against the short or long spelling.
      No prefix/abbreviation matching and no inline "--name=value" form.
    """

    __introspectable__ = (
        "flags",
        "short",
        "long",
        "name",
        "arity",
        "negated",
        "default",
        "descr",
    )

    def __init__(self, flags, /, descr=Unset):
        metadata = {"flags": flags, "descr": descr}
        _parse_flags(type(self), metadata)
        _sanitize_descr(type(self), metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    @property
    def required(self):
        return self._arity is Arity.REQUIRED

    @property
    def optional(self):
        return self._arity is Arity.OPTIONAL

    def matches(self, token, /):
        return token == self._short or token == self._long


class Cardinal(metaclass=ArgumentType):
    """
    Declared positional slot of a command.

    - name: label shown in help and reported by MissingArgumentError.
    - required: "<name>" slots are required, "[name]" slots are optional.
    - index: declaration order; slot i binds to the i-th trailing token.
    """

    __introspectable__ = (
        "name",
        "required",
        "index",
    )

    def __init__(self, name, /, required=True, index=0):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' cannot be empty")
        if not isinstance(index, int) or index < 0:
            raise ValueError(f"{type(self).__typename__} 'index' must be a non-negative integer")
        self._name = name
        self._required = bool(required)
        self._index = index

    @classmethod
    def parse(cls, token, /, index=0):
        """
        Build a slot from "<name>" (required) or "[name]" (optional).

        Returns None for tokens in neither form; they are ignored by callers.
        """
        match token[:1]:
            case "<":
                return cls(token[1:-1], required=True, index=index)
            case "[":
                return cls(token[1:-1], required=False, index=index)
        return None

    def __str__(self):
        return ("<%s>" if self._required else "[%s]") % self._name


__all__ = (
    "Arity",
    "Option",
    "Cardinal",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ArgumentType
