"""
Everything incanti reports to a user: fault codes, errors, warnings.

Families
- RegistrationError: raised while arguments are declared (duplicate names).
- ParseError: raised while tokens are resolved; one subclass per failure kind.
- ParserWarning: recoverable oddities noticed during resolution.

Every fault carries a short lowercase message that starts from the token
position ("unknown option '--x' at third position") and a read-only `options`
mapping with its structured context (code, title, hint, name, value, index).
Parser.run() merges its rendering options (prog, shell, colorful, fancy) into
the fault and calls trigger(): outside shell mode errors are raised and
warnings go through the warnings module, in shell mode both are printed to
stderr with rich.

Host hooks, looked up on __main__
- __codes__: FaultCode -> label shown instead of the numeric code.
- __docs__: FaultCode -> documentation string attached as options["docs"].
- __styles__: palette overrides.
- __prog__: program name override for fault headers.
"""
import inspect
import sys
import warnings
from abc import ABC
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
    Stable numeric identifiers of every fault.

    101xx registration, 111xx token resolution, 112xx validation, 121xx warnings.
    """
    DUPLICATE_NAME = 10101
    DUPLICATE_SHORT_NAME = 10102

    UNKNOWN_ARGUMENT = 11111
    MISSING_VALUE = 11112
    CONVERSION_FAILED = 11113
    FLAG_ASSIGNMENT = 11114

    REQUIRED_ARGUMENT_MISSING = 11211

    EMPTY_INLINE_VALUE = 12111

    def normalize(self):
        """
        Label of this code as displayed: the host's __codes__ entry or the number.
        """
        labels = getattr(__import__("__main__"), "__codes__", {})
        return str(labels.get(self, self.value))


def _render(fault, palette, /):
    main = __import__("__main__")
    options = fault.options
    colorful = options.get("colorful", False)
    styles = defaultdict(str, {"prog": "bold #E6E6F0"} | palette | getattr(main, "__styles__", {}))

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), styles[style])

    header = Text.assemble(
        "[ ",
        text(getattr(main, "__prog__", options.get("prog", "incanti")), "prog"),
        " — ",
        text(fault.kind.normalize(), "code"),
        " | ",
        text(options.get("title", type(fault).__name__).title(), "title"),
        " ]",
    )
    body = [text(fault.message, "message")]
    if hint := options.get("hint"):
        body.append(Text.assemble(text(" → ", "arrow"), text(hint, "hint")))

    if options.get("fancy", False):
        return Panel(Group(*body), title=header, title_align="left")
    return Group(header, *body)


class ParserException(Exception):
    """
    Base class of incanti errors.

    `options` is read-only; use __replace__(**options) to get an enriched copy.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def kind(self):
        return self.options["code"]

    @property
    def name(self):
        """
        Canonical name of the offending argument, or the name as typed when unknown.
        """
        return self.options.get("name")

    @property
    def value(self):
        return self.options.get("value")

    @property
    def index(self):
        """
        1-based position of the offending token, if any.
        """
        return self.options.get("index")

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "code": "bold #00E5FF",
            "title": "bold #FF4DA6",
            "message": "#C8C8D0",
            "arrow": "dim #9CE19C",
            "hint": "italic #9CE19C",
        })

    def __trigger__(self):
        if not self.options.get("shell", False):
            raise self from self.__cause__
        console.print(self)
        sys.exit(1)

    def __replace__(self, /, **options):
        replica = type(self)(self.message, **(dict(self.options) | options))
        replica.__cause__ = self.__cause__
        return replica


class RegistrationError(ParserException): ...
class DuplicateNameError(RegistrationError): ...
class DuplicateShortNameError(RegistrationError): ...


class ParseError(ParserException): ...
class UnknownArgumentError(ParseError): ...
class MissingValueError(ParseError): ...
class ConversionFailedError(ParseError): ...
class FlagAssignmentError(ParseError): ...
class RequiredArgumentMissingError(ParseError): ...


class ParserWarning(ABC, Warning):
    """
    Base class of incanti warnings; same shape as ParserException.
    """

    def __init__(self, message=Unset, /, **options):
        assert isinstance(message, str | Unset)
        super().__init__(message)
        self.message = message
        self.options = MappingProxyType(options)

    @property
    def kind(self):
        return self.options["code"]

    def __str__(self):
        return str(self.message)

    def __rich__(self):
        return _render(self, {
            "code": "bold #FFB400",
            "title": "bold #FFC2E0",
            "message": "#D6D6DE",
            "arrow": "dim #B8EFAF",
            "hint": "italic #B8EFAF",
        })

    def __trigger__(self):
        if self.options.get("shell", False):
            console.print(self)
        else:
            # point at the outermost caller
            warnings.warn(self, stacklevel=len(inspect.stack()))

    def __replace__(self, /, **options):
        return type(self)(self.message, **(dict(self.options) | options))


class EmptyInlineValueWarning(ParserWarning): ...


def trigger(fault, /, **options):
    """
    Surface `fault` after merging `options` into it.

    Errors are raised, or printed followed by exit status 1 when
    options["shell"] is true. Warnings are emitted or printed the same way.
    """
    for method in ("__replace__", "__trigger__"):
        if not callable(getattr(fault, method, None)):
            raise TypeError("trigger() argument must define %s()" % method)
    fault.__replace__(**options).__trigger__()


def getdoc(code, /):
    """
    Host documentation for `code` from __main__.__docs__, or None.
    """
    if not isinstance(code, FaultCode):
        raise TypeError("getdoc() argument must be a FaultCode")
    return getattr(__import__("__main__"), "__docs__", {}).get(code)


__all__ = (
    "FaultCode",
    "ParserException",
    "RegistrationError",
    "DuplicateNameError",
    "DuplicateShortNameError",
    "ParseError",
    "UnknownArgumentError",
    "MissingValueError",
    "ConversionFailedError",
    "FlagAssignmentError",
    "RequiredArgumentMissingError",
    "ParserWarning",
    "EmptyInlineValueWarning",
    "trigger",
    "getdoc",
)
