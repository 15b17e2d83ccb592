"""
Incanti token resolver: classify raw tokens, bind values, validate required-ness.

Processing is strictly left to right, one token at a time, with a cursor that
may consume one additional token when an option needs a value:

1. help short-circuit: a token exactly '-h' or '--help' (at any position) stops
   resolution and yields Outcome(help=True); required arguments are not validated.
2. long option: '--name' or '--name=value' (split on the first '=').
   • Flag   → bound True; an inline value is rejected when strict, ignored otherwise.
   • Valued → inline value, else the next token; none left is a MissingValueError.
     An empty inline value ('--name=') counts as absent and warns.
3. short option: '-x…' (length > 1, second character not '-').
   • an exact short-name match behaves like the long form.
   • otherwise the token is a cluster: flags are bound left to right and the first
     Valued option takes the rest of the cluster as its value ('-ofile.txt'),
     or the next token when it is the last character.
4. positional: anything else (the empty string and a lone '-' included).

After the scan, validate() reports the first required argument with no value.

Faults
- Every failure is raised immediately (no partial success): UnknownArgumentError,
  MissingValueError, ConversionFailedError, FlagAssignmentError,
  RequiredArgumentMissingError. Messages lead with the token ordinal.
"""
import warnings
from collections import deque, namedtuple
from types import MappingProxyType

from .arguments import Flag, Valued
from .faults import *
from .utils import *

HELP = frozenset({"-h", "--help"})

Outcome = namedtuple("Outcome", (
    "positionals",
    "namespace",
    "help",
), defaults=((), MappingProxyType({}), False))
Outcome.__doc__ = """
Result of a resolution run.

- positionals: tuple of unmatched tokens, in input order.
- namespace: read-only mapping canonical name → bound value, for every
  definition holding a value (bound this run or defaulted; flags always).
- help: True when the help short-circuit stopped resolution.
"""


def namespace(registry, /):
    """
    Snapshot the values of every definition that currently has one.
    """
    return MappingProxyType({
        name: argument.value for name, argument in registry.items() if argument.has_value
    })


def validate(registry, /):
    """
    Raise RequiredArgumentMissingError for the first required argument without a value.

    Definitions are checked in registration order.
    """
    for name, argument in registry.items():
        if argument.required and not argument.has_value:
            spelling = "--%s" % name
            if argument.short is not None:
                hint = "pass it as '%s <value>' or '-%s <value>'" % (spelling, argument.short)
            else:
                hint = "pass it as '%s <value>'" % spelling
            raise RequiredArgumentMissingError(
                "required argument %r is missing" % spelling,
                title="required argument missing",
                code=FaultCode.REQUIRED_ARGUMENT_MISSING,
                name=name,
                hint=hint,
                docs=getdoc(FaultCode.REQUIRED_ARGUMENT_MISSING),
            )


class Resolver:
    """
    Walk a token stream against a registry, binding values as a side effect.

    parameters
    - registry: Registry
      definitions to resolve against (read-only except for their slots/resolved state).
    - strict: bool (keyword-only)
      reject inline values on flags ('--verbose=yes') with FlagAssignmentError;
      when False the value is silently discarded.
    """

    def __init__(self, registry, /, *, strict=True):
        self._registry = registry
        self._strict = bool(strict)
        self._tokens = deque()
        self._positionals = []
        self._index = 0

    def __call__(self, tokens, /):
        """
        Resolve `tokens` (program name excluded) and return an Outcome.
        """
        self._tokens = deque(tokens)
        self._positionals = []
        self._index = 0

        while self._tokens:
            token = self._tokens.popleft()
            self._index += 1

            if not isinstance(token, str):
                raise TypeError("tokens must be strings")

            if token in HELP:
                return Outcome(tuple(self._positionals), namespace(self._registry), True)

            if token.startswith("--"):
                self._resolve_long(token)
            elif token.startswith("-") and len(token) > 1:
                self._resolve_short(token)
            else:
                self._positionals.append(token)

        validate(self._registry)
        return Outcome(tuple(self._positionals), namespace(self._registry), False)

    def _resolve_long(self, token):
        name, separator, value = token[2:].partition("=")
        try:
            argument = self._registry[name]
        except KeyError:
            raise self._unknown("--" + name, name, ["--" + known for known in self._registry]) from None
        self._dispatch(argument, "--" + name, value if separator else Unset)

    def _resolve_short(self, token):
        name = token[1:]

        # exact match: '-o' alone (the attached form '-ofile' goes through the cluster scan)
        if name in self._registry.shorts:
            self._dispatch(self._registry.short(name), token, Unset)
            return

        for offset, char in enumerate(name):
            try:
                argument = self._registry.short(char)
            except KeyError:
                raise self._unknown("-" + char, char, ["-" + known for known in self._registry.shorts]) from None

            match argument:
                case Flag():
                    argument.bind()
                case Valued():
                    if remainder := name[offset + 1:]:
                        self._bind(argument, "-" + char, remainder, self._index)
                    else:
                        self._bind(argument, "-" + char, self._take(argument, "-" + char), self._index)
                    break
                case _:
                    raise RuntimeError("unexpected argument")

    def _dispatch(self, argument, spelling, inline):
        match argument:
            case Flag():
                if inline is not Unset and self._strict:
                    raise FlagAssignmentError(
                        "flag %r at %s position cannot have an inline value" % (spelling, ordinal(self._index)),
                        title="flag cannot take a value",
                        code=FaultCode.FLAG_ASSIGNMENT,
                        name=argument.name,
                        value=inline,
                        index=self._index,
                        hint="remove everything from '=' (for example: %s)" % spelling,
                        docs=getdoc(FaultCode.FLAG_ASSIGNMENT),
                    )
                argument.bind()
            case Valued():
                if inline == "":
                    warnings.warn(EmptyInlineValueWarning(
                        "empty inline value for option %r at %s position, taking the next token" % (
                            spelling, ordinal(self._index)
                        ),
                        title="empty inline value",
                        code=FaultCode.EMPTY_INLINE_VALUE,
                        name=argument.name,
                        index=self._index,
                        hint="write %s=<value> or %s <value>" % (spelling, spelling),
                        docs=getdoc(FaultCode.EMPTY_INLINE_VALUE),
                    ), stacklevel=2)
                    inline = Unset
                if inline is Unset:
                    self._bind(argument, spelling, self._take(argument, spelling), self._index)
                else:
                    self._bind(argument, spelling, inline, self._index)
            case _:
                raise RuntimeError("unexpected argument")

    def _take(self, argument, spelling):
        """
        consume the next token as the value of `argument`.
        """
        try:
            token = self._tokens.popleft()
        except IndexError:
            raise MissingValueError(
                "option %r at %s position requires a value" % (spelling, ordinal(self._index)),
                title="missing value",
                code=FaultCode.MISSING_VALUE,
                name=argument.name,
                index=self._index,
                hint="pass a value after it (for example: %s <value>)" % spelling,
                docs=getdoc(FaultCode.MISSING_VALUE),
            ) from None
        self._index += 1
        return token

    def _bind(self, argument, spelling, text, index):
        try:
            value = argument.convert(text)
        except Exception as exception:
            raise ConversionFailedError(
                "invalid value %r for option %r at %s position" % (text, spelling, ordinal(index)),
                title="conversion failed",
                code=FaultCode.CONVERSION_FAILED,
                name=argument.name,
                value=text,
                index=index,
                exception=exception,
                hint=str(exception) or "run '--help' to see the expected values",
                docs=getdoc(FaultCode.CONVERSION_FAILED),
            ) from exception
        argument.bind(value)

    def _unknown(self, spelling, name, known):
        if suggestions := suggest(spelling, known):
            hint = "did you mean %r? you can also run '--help' to see all options" % suggestions[0]
        else:
            hint = "run '--help' to see all available options"
        return UnknownArgumentError(
            "unknown option %r at %s position" % (spelling, ordinal(self._index)),
            title="unknown option",
            code=FaultCode.UNKNOWN_ARGUMENT,
            name=name,
            index=self._index,
            suggestions=suggestions,
            hint=hint,
            docs=getdoc(FaultCode.UNKNOWN_ARGUMENT),
        )


def resolve(tokens, registry, /, *, strict=True):
    """
    Resolve `tokens` against `registry`; shortcut for Resolver(registry, strict=strict)(tokens).
    """
    return Resolver(registry, strict=strict)(tokens)


__all__ = (
    "HELP",
    "Outcome",
    "Resolver",
    "resolve",
    "validate",
    "namespace",
)
