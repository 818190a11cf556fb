"""
Commodore faults (fatal parse conditions, early exits) and rendering.

Scope
- FaultCode: canonical, stable numeric identifiers for user-facing faults.
- Status: terminal outcome of a parse (ok, help, version, fault).
- CommandException: base type for every fatal condition. Carries a message plus
  read-only options and knows how to render itself through rich.
- CommandExit: successful early termination (help/version output).
- trigger(): central entry point to surface a fault or an exit.

Taxonomy (all fatal, the parse stops at the first one)
- MissingArgumentError: a bound action's required positional slot had no token.
- OptionMissingArgumentError: an option that needs a value ran out of tokens or
  hit a token that looks like another option.
- UnknownOptionError: an option-shaped token matched no declared option.
- OptionCoercionError: the coercer attached to an option rejected its value.

Integration
- The parser raises these internally; Command.parse() turns them into a Result.
- invoke() hands them to trigger(): outside shell mode they are raised, in
  shell mode they are printed to stderr and the process exits with status 1.
"""
import sys
from collections import defaultdict
from enum import IntEnum
from types import MappingProxyType

from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from .utils import Unset

console = Console(stderr=True)


class FaultCode(IntEnum):
    """
    canonical fault codes used across the cli (stable identifiers).

    grouping
    - options (1111x): UNKNOWN_OPTION, OPTION_MISSING_ARGUMENT
    - positionals (1112x): MISSING_ARGUMENT
    - delegated (1113x): COERCION_FAILURE
    """
    # --- option errors (11xxx) ---
    UNKNOWN_OPTION              = 11112
    OPTION_MISSING_ARGUMENT     = 11117

    # --- positional errors (11xxx) ---
    MISSING_ARGUMENT            = 11125

    # --- delegated errors (11xxx) ---
    COERCION_FAILURE            = 11131

    def normalize(self):
        """
        return a host-normalized string for this code.

        the host application can provide a __codes__ mapping in __main__
        to override numeric ids with friendlier labels.
        """
        return str(getattr(__import__("__main__"), "__codes__", {}).get(self, self.value))


class Status(IntEnum):
    """
    terminal outcome of a parse; `code` is the matching process exit status.
    """
    OK      = 0
    FAULT   = 1
    HELP    = 2
    VERSION = 3

    @property
    def code(self):
        return 1 if self is Status.FAULT else 0


def _styles(defaults):
    return defaultdict(str, defaults | getattr(__import__("__main__"), "__styles__", {}))


def _program(options):
    tool = options.get("tool")
    return getattr(__import__("__main__"), "__prog__", getattr(tool, "name", None) or "commodore")


class CommandException(Exception):
    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def code(self):
        return self.options.get("code")

    def __str__(self):
        return self.message or ""

    def __rich__(self):
        styles = _styles({
            "prog-name": "bold #E6E6F0",  # near-white program name
            "code": "bold #00E5FF",  # neon cyan fault code
            "error-title": "bold #FF4DA6",  # friendly pinky title
            "error-message": "#C8C8D0",  # soft light gray message
            "hint-arrow": "#9CE19C dim",
            "hint": "italic #9CE19C",
        })
        colorful = self.options.get("colorful", False)

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            return Text(str(fragment), styles[style] if colorful else "")

        header = Text.assemble(
            "[ ",
            text(_program(self.options), "prog-name"),
            " — ",
            text(self.code.normalize() if self.code else "", "code"),
            " | ",
            text(self.options.get("title", "error").title(), "error-title"),
            " ]"
        )
        body = [text(self.message, "error-message")]
        if hint := self.options.get("hint"):
            body.append(Text.assemble(text(" → ", "hint-arrow"), text(hint, "hint")))

        if self.options.get("fancy"):
            return Panel(Group(*body), title=header, title_align="left")
        return Group(header, *body)

    def __trigger__(self):
        if not self.options.get("shell"):
            raise self from None
        console.print(self)
        sys.exit(Status.FAULT.code)

    def __replace__(self, *unused, **overrides):
        assert not unused, "unused arguments are not allowed"
        return type(self)(self.message, **{**self.options, **overrides})


class MissingArgumentError(CommandException):
    @property
    def argument(self):
        return self.options.get("argument")


class OptionMissingArgumentError(CommandException):
    @property
    def option(self):
        return self.options.get("option")

    @property
    def token(self):
        return self.options.get("token")


class UnknownOptionError(CommandException):
    @property
    def token(self):
        return self.options.get("token")


class OptionCoercionError(CommandException):
    @property
    def option(self):
        return self.options.get("option")

    @property
    def value(self):
        return self.options.get("value")


class CommandExit(Exception):
    """
    successful early termination carrying the text to show (help or version).
    """

    def __init__(self, output, /, **options):
        assert isinstance(output, str)
        super().__init__(output)
        self.output = output
        self.options = MappingProxyType(options)

    @property
    def status(self):
        return self.options.get("status", Status.OK)

    def __rich__(self):
        renderable = self.options.get("renderable") or Text(self.output)
        if self.options.get("fancy"):
            styles = _styles({"panel-title": "bold #FF4D94"})
            title = Text.assemble(
                "[ ", "%s %s" % (_program(self.options), self.status.name), " ]",
                style=styles["panel-title"] if self.options.get("colorful") else "",
            )
            return Panel(renderable, title=title, title_align="left")
        return renderable

    def __trigger__(self):
        Console().print(self)
        if self.options.get("shell"):
            sys.exit(self.status.code)

    def __replace__(self, *unused, **overrides):
        assert not unused, "positional arguments are not allowed"
        return type(self)(self.output, **{**self.options, **overrides})


def trigger(fault, /, **options):
    """
    surface a fault (or an exit) with the given runtime options.

    contract
    - fault must provide __trigger__ and __replace__ methods (see base classes).
    - options are merged into the fault via __replace__(**options) before triggering.
    - in shell mode, rendering happens via rich console; otherwise, exceptions are raised.

    typical options
    - tool, shell, fancy, colorful, title, code, hint, and any other context the
      reporter may want to show (e.g., token/option/argument).
    """
    if (
        not hasattr(fault, "__trigger__") or
        not callable(fault.__trigger__) or
        not hasattr(fault, "__replace__") or
        not callable(fault.__replace__)
    ):
        raise TypeError("trigger() argument must have a __trigger__ and __replace__ methods")
    fault.__replace__(**options).__trigger__()


__all__ = (
    "FaultCode",
    "Status",
    "CommandException",
    "MissingArgumentError",
    "OptionMissingArgumentError",
    "UnknownOptionError",
    "OptionCoercionError",
    "CommandExit",
    "trigger",
)
