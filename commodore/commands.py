"""
Commodore command layer: declare, tokenize, dispatch.

What this module provides
- Command: a node of the command tree. It owns
  • its declared options (Option) and positional slots (Cardinal),
  • its children (sub-commands, in registration order),
  • the values assigned by option activation (keyed by canonical name),
  • an EventBus through which options and sub-commands trigger behavior.
- Result: terminal outcome of Command.parse() (ok | help | version | fault).
- command(...): root Command factory.
- invoke(command, argv): embedding runner that prints/raises/exits from a Result.

Control flow
    argv ─► parse_options (root) ─► parse_args (root)
                                        │ publishes "*" and the first token
                                        ▼
                          bound action on the root bus (child.action)
                                        │ required slot checks
                                        ▼
                                  user callback(*tokens)

Quick start
    from commodore import command, invoke

    program = command("pizza").version("0.0.1")
    program.option("-p, --peppers", "add peppers")
    program.option("-s, --size <size>", "pizza size", str.upper)
    program.option("--no-sauce", "remove sauce")

    program.command("deliver <address> [floor]").action(
        lambda address, floor="ground": print(address, floor)
    )

    if __name__ == "__main__":
        result = invoke(program)
        print(program.values)

Design notes
- Faults are raised internally and stop the parse at once; parse() turns them
  into a Result so the embedding layer decides how to surface them.
- Dispatch is depth-one: root → matched child → child's bound action.
- An unmatched leading positional token is ignored (no unknown-command fault).
- Declaring two options with the same canonical name keeps both listeners.
"""
import functools
import logging
import operator
import os.path
import re
import sys
import weakref
from collections import defaultdict, namedtuple

from rich.text import Text

from .arguments import Arity, Option, Cardinal
from .events import EventBus, WILDCARD
from .faults import *
from .utils import *

logger = logging.getLogger(__name__)


class CommandType(type):
    """
    Metaclass providing read-only properties and stable reprs for Command.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all names
      listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ for diagnostics and rich UI.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens).
    - __displayable__ (if set) narrows which properties are shown by __rich_repr__;
      otherwise __introspectable__ is used.
    """
    __introspectable__ = ()
    __displayable__ = Unset

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
            for name in coalesce(type(self).__displayable__, type(self).__introspectable__):
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


class Result(namedtuple("Result", ("status", "arguments", "fault", "output"), defaults=((), None, None))):
    """
    Terminal outcome of Command.parse().

    Fields
    - status: Status.OK | Status.HELP | Status.VERSION | Status.FAULT
    - arguments: positional tokens left by the root tokenizer (OK only)
    - fault: the CommandException that stopped the parse (FAULT only)
    - output: help text or version string (HELP/VERSION only)
    """
    __slots__ = ()

    @property
    def ok(self):
        return self.status is Status.OK

    @property
    def code(self):
        return self.status.code


def _route(command):
    return " ".join(str(step.name) for step in command.path if step.name)


class Command(metaclass=CommandType):
    """
    Node of the command tree.

    Lifecycle
    - Created by command(...) (root) or by Command.command(spec) (child).
    - Mutated while declaring (options, slots, actions) and while parsing
      (values); there is no teardown.

    Ownership
    - A node owns its children. The parent link is a weak, non-owning reference
      used to find the bus an action must be bound on.

    Runtime flags
    - shell: faults print to stderr and exit instead of raising (see invoke()).
    - fancy: wrap rendered output in a panel.
    - colorful: apply the style palette (overridable via __main__.__styles__).
      Unset flags inherit from the parent and default to False.
    """

    __introspectable__ = (
        "name",
        "children",
        "options",
        "cardinals",
        "values",
        "raw",
        "shell",
        "fancy",
        "colorful",
    )

    __displayable__ = (
        "name",
        "cardinals",
        "options",
        "children",
    )

    def __init__(self, name=Unset, /, parent=Unset, *, shell=Unset, fancy=Unset, colorful=Unset):
        if not isinstance(name, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif isinstance(name, str) and not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' cannot be empty")
        if not isinstance(parent, Command | Unset):
            raise TypeError(f"{type(self).__typename__} 'parent' must be a command")

        self._name = coalesce(name)
        self._parent = weakref.ref(parent) if parent is not Unset else None
        self._children = []
        self._options = []
        self._cardinals = []
        self._values = {}
        self._raw = ()
        self._events = EventBus()
        self._description = None
        self._usage = None
        self._version = None
        # Runtime flags inherit from the parent when Unset.
        self._shell = bool(coalesce(shell, getattr(parent, "shell", False)))
        self._fancy = bool(coalesce(fancy, getattr(parent, "fancy", False)))
        self._colorful = bool(coalesce(colorful, getattr(parent, "colorful", False)))

    @property
    def parent(self):
        return self._parent() if self._parent is not None else None

    @property
    def events(self):
        return self._events

    @property
    def root(self):
        """
        Return the topmost command in the current command hierarchy.
        """
        child, parent = self, self.parent
        while parent:
            child, parent = parent, parent.parent
        return child

    @property
    def path(self):
        """
        Return the full ancestry from root to this command as a tuple.
        """
        path = [command := self]
        while command.parent:
            path.append(command := command.parent)
        return tuple(reversed(path))

    # ── Declaration ─────────────────────────────────────────────────────────

    def command(self, spec, /):
        """
        Declare a sub-command from "name <required> [optional] ...".

        The first whitespace-separated token is the child's name; "<x>" tokens
        declare required slots and "[x]" tokens optional ones, in order. Other
        tokens are ignored. Returns the new child.
        """
        if not isinstance(spec, str):
            raise TypeError(f"{type(self).__typename__} 'spec' must be a string")
        try:
            name, *tokens = spec.split()
        except ValueError:
            raise ValueError(f"{type(self).__typename__} 'spec' must start with a command name") from None

        child = type(self)(name, self)
        for token in tokens:
            if (cardinal := Cardinal.parse(token, index=len(child._cardinals))) is not None:
                child._cardinals.append(cardinal)
        self._children.append(child)
        return child

    def option(self, flags, /, descr=Unset, coercer=Unset):
        """
        Declare an option and subscribe its value assignment.

        On activation the listener
        - passes a supplied value through `coercer` (when given),
        - stores the option's boolean default when no value was supplied,
          otherwise the (coerced) value, under the option's canonical name.

        Options sharing a canonical name keep separate listeners and all of
        them run. Returns self.
        """
        if coercer is not Unset and not callable(coercer):
            raise TypeError(f"{type(self).__typename__} option 'coercer' must be callable")

        option = Option(flags, descr)
        self._options.append(option)

        @rename(option.name)
        def assign(value):
            if value is not None and coercer is not Unset:
                try:
                    value = coercer(value)
                except Exception as exception:
                    raise OptionCoercionError(
                        "option `%s' cannot accept %r" % (option.flags, value),
                        title="invalid option value",
                        code=FaultCode.COERCION_FAILURE,
                        hint="check the value given to %s" % option.long,
                        option=option,
                        value=value,
                        exception=exception,
                    ) from exception
            self._values[option.name] = option.default if value is None else value

        self._events.subscribe(option.name, assign)
        return self

    def action(self, callback, /):
        """
        Bind `callback` to this sub-command.

        The listener lives on the parent's bus under this command's name. When
        fired with the remaining tokens it
        - checks every required slot, in order, for a token
          (the first gap raises MissingArgumentError before the callback runs),
        - calls callback(*tokens).

        Returns self.
        """
        if not callable(callback):
            raise TypeError(f"{type(self).__typename__} action must be callable")
        if (parent := self.parent) is None:
            raise TypeError(f"{type(self).__typename__} {self.name!r} has no parent to bind an action on")

        @rename(self.name)
        def listener(tokens):
            tokens = tuple(tokens or ())
            for cardinal in self._cardinals:
                if cardinal.required and cardinal.index >= len(tokens):
                    raise MissingArgumentError(
                        "missing required argument `%s'" % cardinal.name,
                        title="missing argument",
                        code=FaultCode.MISSING_ARGUMENT,
                        hint="run '%s --help' to see the expected arguments" % _route(self.root),
                        argument=cardinal.name,
                        command=self,
                    )
            callback(*tokens)

        parent.events.subscribe(self.name, listener)
        return self

    def description(self, text=Unset, /):
        if text is Unset:
            return self._description
        if not isinstance(text, str):
            raise TypeError(f"{type(self).__typename__} 'description' must be a string")
        self._description = text
        return self

    def usage(self, text=Unset, /):
        if text is Unset:
            return self._usage or "[options]"
        if not isinstance(text, str):
            raise TypeError(f"{type(self).__typename__} 'usage' must be a string")
        self._usage = text
        return self

    def version(self, text=Unset, /):
        """
        Get the version string, or set it and register -v/--version once.
        """
        if text is Unset:
            return self._version
        if not isinstance(text, str):
            raise TypeError(f"{type(self).__typename__} 'version' must be a string")
        if self._version is None:
            self.option("-v, --version", "output the version number")
            self._events.subscribe("version", self._versioner)
        self._version = text
        return self

    # ── Built-in terminations ───────────────────────────────────────────────

    def _helper(self, value=None):
        help = self._render_help()
        raise CommandExit(help.plain, status=Status.HELP, renderable=help)

    def _versioner(self, value=None):
        raise CommandExit(self._version, status=Status.VERSION)

    def _render_help(self):
        """
        Build the help text as a rich Text.

        Palette keys
        - usage-label, program-name, usage-section, description-section
        - group-label, command-name, command-description, option-name, option-description

        Styles apply only when colorful is True; __main__.__styles__ overrides entries.
        """
        styles = defaultdict(str, {
            "usage-label": "bold #00E6FF",
            "program-name": "bold #FF4D94",
            "usage-section": "bold #36C5F0",
            "description-section": "italic #A3A3A3",
            "group-label": "bold #FFFFFF",
            "command-name": "bold #36C5F0",
            "command-description": "#9CA3AF",
            "option-name": "bold #00E6FF",
            "option-description": "#9CA3AF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        def section(label, rows):
            width = max(len(name) for name, _ in rows)
            text = Text("\n").append(label, styler("group-label")).append(":\n")
            for name, descr in rows:
                if descr:
                    text.append("  ").append(name.ljust(width), styler(label[:-1] + "-name"))
                    text.append("  ").append(descr, styler(label[:-1] + "-description"))
                else:
                    text.append("  ").append(name, styler(label[:-1] + "-name"))
                text.append("\n")
            return text

        help = Text()
        help.append("usage", styler("usage-label")).append(": ")
        help.append(self.name or os.path.basename(sys.argv[0]), styler("program-name"))
        help.append(" ").append(self.usage(), styler("usage-section")).append("\n")

        if self._description:
            help.append("\n").append(self._description, styler("description-section")).append("\n")

        if self._children:
            help.append(section("commands", [
                (" ".join([child.name, *map(str, child._cardinals)]), child._description)
                for child in self._children
            ]))

        if self._options:
            help.append(section("options", [(option.flags, option.descr) for option in self._options]))

        help.rstrip()
        return help

    def help_information(self):
        """
        Return the generated help as plain text.
        """
        return self._render_help().plain

    # ── Parsing ─────────────────────────────────────────────────────────────

    def option_for(self, token, /):
        """
        Return the first declared option spelled exactly `token`, or None.
        """
        for option in self._options:
            if option.matches(token):
                return option
        return None

    def parse_options(self, argv, /, *, offset=2):
        """
        Split `argv` into option activations and positional tokens.

        The first `offset` entries (runtime path and script path by convention)
        are skipped. Scanning left to right:
        - a declared option publishes its canonical name:
          • REQUIRED takes the next token; a missing next token or one starting
            with "-" raises OptionMissingArgumentError.
          • OPTIONAL takes the next token unless it is missing or starts with "-",
            in which case it publishes None.
          • BOOLEAN publishes None.
        - any other token longer than one character starting with "-" raises
          UnknownOptionError.
        - everything else is positional.

        Returns the positional tokens in order. Activations run synchronously as
        they are met, so a fault leaves earlier assignments in place and stops
        everything after it.
        """
        tokens = list(argv)[offset:]
        arguments = []
        index = 0

        while index < len(tokens):
            token = tokens[index]

            if (option := self.option_for(token)) is not None:
                following = tokens[index + 1] if index + 1 < len(tokens) else None
                match option.arity:
                    case Arity.REQUIRED:
                        if following is None or following.startswith("-"):
                            raise self._missing_value(option, following)
                        self._events.publish(option.name, following)
                        index += 2
                    case Arity.OPTIONAL if following is None or following.startswith("-"):
                        self._events.publish(option.name, None)
                        index += 1
                    case Arity.OPTIONAL:
                        self._events.publish(option.name, following)
                        index += 2
                    case _:
                        self._events.publish(option.name, None)
                        index += 1
                continue

            if len(token) > 1 and token.startswith("-"):
                raise UnknownOptionError(
                    "unknown option `%s'" % token,
                    title="unknown option",
                    code=FaultCode.UNKNOWN_OPTION,
                    hint="run '%s --help' to see all available options" % _route(self.root),
                    token=token,
                )

            arguments.append(token)
            index += 1

        return arguments

    def _missing_value(self, option, token):
        if token is None:
            message = "option `%s' argument missing" % option.flags
        else:
            message = "option `%s' argument missing, got `%s'" % (option.flags, token)
        return OptionMissingArgumentError(
            message,
            title="option argument missing",
            code=FaultCode.OPTION_MISSING_ARGUMENT,
            hint="pass a value right after %s (for example: %s <value>)" % (option.long, option.long),
            option=option,
            token=token,
        )

    def parse_args(self, tokens, /):
        """
        Dispatch positional tokens.

        A non-empty list is published whole to "*", then the first token is
        published by name with the remaining tokens. A name with no subscriber
        is ignored. Returns self.
        """
        tokens = list(tokens)
        if tokens:
            self._events.publish(WILDCARD, tuple(tokens))
            name, *remaining = tokens
            if not self._events.publish(name, remaining):
                logger.debug("no command subscribed to %r on %r; ignored", name, self.name)
        return self

    def parse(self, argv=Unset, /):
        """
        Parse a full argument vector and return a terminal Result.

        Parameters
        - argv: Iterable[str] | Unset
          The process argument vector; the first two entries (runtime path,
          script path) are skipped. Unset reads sys.argv.

        Behavior
        - Remembers the raw vector and guesses the name from argv[1] when unnamed.
        - Installs -h/--help unless an option named "help" already exists.
        - Tokenizes, then dispatches. The first fault, or a help/version
          activation, ends the parse; nothing after it is processed.
        """
        argv = list(coalesce(argv, sys.argv))
        if not all(isinstance(token, str) for token in argv):
            raise TypeError("parse() argument must be an iterable of strings")

        self._raw = tuple(argv)
        if self._name is None and len(argv) > 1:
            self._name = os.path.basename(argv[1])

        if all(option.name != "help" for option in self._options):
            self.option("-h, --help", "output usage information")
            self._events.subscribe("help", self._helper)

        try:
            arguments = self.parse_options(argv)
            self.parse_args(arguments)
        except CommandExit as exit:
            logger.debug("parse of %r ended early with %s", self.name, exit.status.name)
            return Result(exit.status, output=exit.output)
        except CommandException as fault:
            logger.debug("parse of %r failed: %s", self.name, fault)
            return Result(Status.FAULT, fault=fault)

        return Result(Status.OK, tuple(arguments))


def command(name=Unset, /, **options):
    """
    Create a root Command.

    Parameters
    - name: str | Unset
      Program name; when Unset it is guessed from argv[1] on the first parse.
    - **options: forwarded to Command (parent, shell, fancy, colorful).
    """
    return Command(name, **options)


def invoke(command, argv=Unset, /):
    """
    Parse `argv` with `command` and surface the outcome.

    Behavior
    - FAULT: trigger the fault with the command's runtime flags; it is raised
      outside shell mode, printed to stderr with exit status 1 in shell mode.
    - HELP/VERSION: print the output to stdout; in shell mode exit with status 0.
    - Otherwise (and for HELP/VERSION outside shell mode) return the Result.
    """
    if not isinstance(command, Command):
        raise TypeError("invoke() first argument must be a command")

    result = command.parse(argv)
    options = {
        "tool": command,
        "shell": command.shell,
        "fancy": command.fancy,
        "colorful": command.colorful,
    }

    match result.status:
        case Status.FAULT:
            trigger(result.fault, **options)
        case Status.HELP:
            trigger(CommandExit(result.output, renderable=command._render_help()), status=result.status, **options)
        case Status.VERSION:
            trigger(CommandExit(result.output), status=result.status, **options)

    return result


__all__ = (
    "Command",
    "Result",
    "command",
    "invoke",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del CommandType
