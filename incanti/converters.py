"""
Incanti value converters.

A converter is any callable `str -> T` that raises on bad input. This module
provides the built-in converters and the lookup used at registration time.

Built-ins
- str   → identity.
- int   → standard Python integer parsing (e.g., "42", "-7", "1_000").
- float → standard Python float parsing (e.g., "3.5", "1e-3", "inf").
- bool  → case-insensitive; truthy {"true", "1", "yes"}, falsy {"false", "0", "no"};
          anything else is rejected (no implicit truthiness of non-empty text).

Custom converters
- resolve(type, converter) returns the custom converter as-is: it fully replaces
  the built-in behavior, including its own validation (range checks, choices…).
- Any exception a converter raises is reported by the resolver as a
  ConversionFailedError naming the option and the raw text.

Round-trip guarantee
- For every built-in type, convert(str(value)) == value.
"""
from .utils import Unset

TRUTHY = frozenset({"true", "1", "yes"})
FALSY = frozenset({"false", "0", "no"})


class ConversionError(ValueError):
    """
    Raised by built-in converters on malformed input.

    Custom converters may raise it too, although any exception is accepted.
    """


def identity(text, /):
    return text


def integer(text, /):
    try:
        return int(text)
    except ValueError:
        raise ConversionError("invalid integer value: %r" % text) from None


def real(text, /):
    try:
        return float(text)
    except ValueError:
        raise ConversionError("invalid float value: %r" % text) from None


def boolean(text, /):
    """
    Convert yes/no, true/false, 1/0 (any casing) to a bool.
    """
    if (lower := text.lower()) in TRUTHY:
        return True
    if lower in FALSY:
        return False
    raise ConversionError("invalid boolean value: %r" % text)


BUILTINS = {
    str: identity,
    int: integer,
    float: real,
    bool: boolean,
}


def resolve(type, converter=Unset, /):
    """
    Pick the converter for a value-bearing argument.

    Parameters
    - type: the declared payload type (type tag used by help and lookup).
    - converter: optional custom callable; when given it wins unconditionally.

    Raises
    - TypeError: when the converter is not callable, or when `type` has no
      built-in converter and no custom one was supplied.
    """
    if converter is not Unset:
        if not callable(converter):
            raise TypeError("converter must be callable")
        return converter
    try:
        return BUILTINS[type]
    except (KeyError, TypeError):
        name = getattr(type, "__name__", repr(type))
        raise TypeError(
            "no default converter for type %r; please provide a custom converter" % name
        ) from None


def convert(type, text, /):
    """
    Convert `text` with the built-in converter for `type`.
    """
    return resolve(type)(text)


__all__ = (
    "ConversionError",
    "TRUTHY",
    "FALSY",
    "identity",
    "integer",
    "real",
    "boolean",
    "BUILTINS",
    "resolve",
    "convert",
)
