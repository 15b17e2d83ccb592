"""
Small helpers shared by every incanti module.

Contents
- Unset: the "nothing was passed" marker. Unlike None it never collides with a
  real user value, so `default=None` still means "defaults to None".
- coalesce(): swap Unset for a fallback.
- rename(): decorator pinning __name__/__qualname__ on generated functions.
- mirror(): read-only property over a "_name" attribute.
- ordinal(), suggest(): wording helpers for fault messages and hints.

Only names listed in __all__ are meant to be imported from here.
"""
import difflib
import functools
from collections.abc import Sequence, Mapping, Set
from types import MappingProxyType
from typing import final


@final
class UnsetType:
    """
    Type of the `Unset` marker.

    There is exactly one instance. It is falsy, prints as "Unset", survives
    copy/deepcopy/pickle as itself, and can be used on either side of `|`
    to build isinstance() unions such as `str | Unset`.
    """

    @functools.cache
    def __new__(cls):
        return super().__new__(cls)

    def __or__(self, other, /):
        try:
            return type(self) | other
        except TypeError:
            return NotImplemented

    def __ror__(self, other, /):
        try:
            return other | type(self)
        except TypeError:
            return NotImplemented

    def __bool__(self):
        return False

    def __repr__(self):
        return "Unset"

    def __copy__(self):
        return self

    def __deepcopy__(self, memo, /):
        return self

    def __reduce__(self):
        return "Unset"

    def __init_subclass__(cls, **options):
        raise TypeError("UnsetType cannot be subclassed")


def coalesce(object, default=None, /):
    """
    Return `object`, or `default` when `object` is Unset.

    >>> coalesce(Unset, 3), coalesce(None, 3), coalesce(0, 3)
    (3, None, 0)
    """
    return default if object is Unset else object


def rename(name, /):
    """
    Decorator setting both __name__ and __qualname__ of a callable to `name`.
    """
    if not isinstance(name, str):
        raise TypeError("rename() argument must be a string, not %s" % type(name).__name__)

    def decorator(function):
        if not callable(function):
            raise TypeError("rename() can only decorate callables")
        function.__name__ = function.__qualname__ = name
        return function

    return decorator


def mirror(name, /):
    """
    Property returning `self._<name>`.

    Mutable containers come back as read-only views: sequences as tuples,
    mappings as MappingProxyType, sets as frozensets. Tuples (named tuples
    included) and strings are returned untouched.
    """
    if not isinstance(name, str):
        raise TypeError("mirror() argument must be a string")

    @rename(name)
    def getter(self):
        object = getattr(self, "_" + name)
        match object:
            case tuple() | str():
                return object
            case Sequence():
                return tuple(object)
            case Mapping():
                return MappingProxyType(object)
            case Set():
                return frozenset(object)
        return object

    return property(getter)


_WORDS = (
    "first", "second", "third", "fourth", "fifth",
    "sixth", "seventh", "eighth", "ninth", "tenth",
)


def ordinal(number, /):
    """
    Spell a 1-based token position: "first" up to "tenth", then "11th", "21st", ...
    """
    if 1 <= number <= len(_WORDS):
        return _WORDS[number - 1]
    if number % 100 in (11, 12, 13):
        return "%dth" % number
    return "%d%s" % (number, {1: "st", 2: "nd", 3: "rd"}.get(number % 10, "th"))


def suggest(word, possibilities, /, limit=3):
    """
    Up to `limit` entries of `possibilities` that look like `word`, best first.
    """
    return difflib.get_close_matches(word, list(possibilities), limit)


Unset = UnsetType()


__all__ = (
    "coalesce",
    "rename",
    "mirror",
    "ordinal",
    "suggest",
    "UnsetType",
    "Unset",
)
