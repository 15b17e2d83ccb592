r"""
Incanti argument definitions.

Overview
- Definitions (a closed variant: Argument = Flag | Valued)
  • Flag: named, presence-only switch (no payload), e.g., -v/--verbose.
  • Valued: named, value-bearing option with a converter, e.g., -c/--count 3.
  Both are sealed; the resolver matches on them exhaustively.

- Settings
  • Immutable registration record {required, default, descr, converter}
    for Valued definitions.

- Slot
  • Caller-owned storage a definition writes its bound value into. A slot either
    owns its value (Slot(initial)) or forwards to an attribute of any object
    (Slot.attribute(config, "threads")).

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes
    selected fields via read-only properties declared in __introspectable__.

Naming rules (sanitized on construction)
- name: canonical long name, non-empty, no leading '-', no whitespace, no '='.
- short: Unset or exactly one character that is not '-', '=' or whitespace.
- descr: Unset | str | Text, non-empty after trimming when provided.

Quick example:
    >>> from incanti.arguments import Flag, Valued, Settings, Slot
    >>> verbose = Flag("verbose", "v")
    >>> count = Valued("count", "c", int, Settings(default=1))
    >>> count.value
    1
"""
import functools
import operator
import re
from types import SimpleNamespace

from rich.text import Text

from .converters import resolve
from .utils import *


class ArgumentType(type):
    """
    Metaclass of argument definitions.

    Every name in the class's __introspectable__ becomes a read-only property
    over "_<name>". Instances get a repr such as
    `valued(name='count', short='c', type=<class 'int'>, ...)` built from
    __displayable__ (falling back to __introspectable__), and the same pairs
    are yielded to rich pretty printing. Passing sealed=True forbids subclasses.
    """
    __introspectable__ = ()
    __displayable__ = Unset

    def __new__(cls, name, bases, namespace, **options):
        attributes = dict(namespace)
        attributes["__typename__"] = re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower()
        for field in namespace.get("__introspectable__", ()):
            attributes[field] = mirror(field)
        self = super().__new__(cls, name, bases, attributes)

        @rename("__rich_repr__")
        def __rich_repr__(self):
            fields = coalesce(type(self).__displayable__, type(self).__introspectable__)
            return ((field, getattr(self, field)) for field in fields)
        self.__rich_repr__ = __rich_repr__

        @rename("__repr__")
        def __repr__(self):
            pairs = map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())
            return "%s(%s)" % (type(self).__typename__, ", ".join(pairs))
        self.__repr__ = __repr__

        if options.get("sealed", False):
            @rename("__init_subclass__")
            def __init_subclass__(subclass, **options):  # NOQA: F-841
                raise TypeError(f"{self.__name__} is sealed and cannot be subclassed")
            self.__init_subclass__ = classmethod(__init_subclass__)

        return self


class Slot:
    """
    Caller-owned storage cell for a bound value.

    - Slot(value) keeps the value itself (value defaults to None).
    - Slot.attribute(target, name) reads and writes target.<name>, so parsing can
      fill a config object in place.
    """
    __slots__ = ("_target", "_attribute")

    def __init__(self, value=None, /):
        self._target = SimpleNamespace(value=value)
        self._attribute = "value"

    @classmethod
    def attribute(cls, target, name, /):
        if not isinstance(name, str) or not name.isidentifier():
            raise TypeError("slot attribute name must be an identifier string")
        self = cls.__new__(cls)
        self._target = target
        self._attribute = name
        return self

    @property
    def value(self):
        return getattr(self._target, self._attribute, None)

    @value.setter
    def value(self, value):
        setattr(self._target, self._attribute, value)

    def __repr__(self):
        return f"slot({self.value!r})"


Settings = __import__("collections").namedtuple("Settings", (
    "required",
    "default",
    "descr",
    "converter",
), defaults=(False, Unset, Unset, Unset))
Settings.__doc__ = """
Immutable registration options of a Valued definition.

- required: bool, validation fails when no value was bound and no default exists.
- default: any value (None included) or Unset; written into the slot at registration.
- descr: help text or Unset.
- converter: custom `str -> T` callable or Unset for the built-in converter.
"""


def _sanitize_names(cls, metadata, /):
    """
    Internal: validate canonical and short names.

    Raises
    - TypeError: when a name is not a string.
    - ValueError: when a name breaks the naming rules.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not name:
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif name.startswith("-") or re.search(r"[\s=]", name):
        raise ValueError(
            f"{cls.__typename__} 'name' must not start with '-' nor contain whitespace or '=' (got {name!r})"
        )

    if not isinstance(short := metadata["short"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'short' must be a string")
    elif isinstance(short, str):
        if len(short) != 1:
            raise ValueError(f"{cls.__typename__} 'short' must be exactly one character (got {short!r})")
        elif short in "-=" or short.isspace():
            raise ValueError(f"{cls.__typename__} 'short' cannot be {short!r}")


def _sanitize_descr(cls, metadata, /):
    if not isinstance(descr := metadata["descr"], str | Text | Unset):
        raise TypeError(f"{cls.__typename__} 'descr' must be a string")
    elif isinstance(descr, str) and not (descr := descr.strip()):
        raise ValueError(f"{cls.__typename__} 'descr' cannot be empty")
    metadata["descr"] = coalesce(descr)


def _sanitize_slot(cls, metadata, /):
    if not isinstance(slot := metadata["slot"], Slot | Unset):
        raise TypeError(f"{cls.__typename__} 'into' must be a slot")
    metadata["slot"] = coalesce(slot, Slot())


class Flag(metaclass=ArgumentType, sealed=True):
    """
    Named, presence-only switch.

    A flag's slot is set to False at registration and to True whenever the flag
    appears in the token stream. Flags are never required and always have a
    value; any explicit value is not part of their grammar.
    """

    __introspectable__ = (
        "name",
        "short",
        "descr",
        "resolved",
        "slot",
    )

    __displayable__ = (
        "name",
        "short",
        "descr",
        "resolved",
    )

    __match_args__ = ("name", "short")

    required = False
    has_default = False

    def __init__(self, name, short=Unset, /, *, descr=Unset, into=Unset):
        metadata = {
            "name": name,
            "short": short,
            "descr": descr,
            "slot": into,
        }
        _sanitize_names(type(self), metadata)
        _sanitize_descr(type(self), metadata)
        _sanitize_slot(type(self), metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        self._resolved = False
        self._slot.value = False

    @property
    def has_value(self):
        return True

    @property
    def value(self):
        return self._slot.value

    def bind(self):
        """
        Record the flag's presence.
        """
        self._slot.value = True
        self._resolved = True

    def reset(self):
        self._slot.value = False
        self._resolved = False


class Valued(metaclass=ArgumentType, sealed=True):
    """
    Named, value-bearing option.

    The `type` is the payload's type tag (used to pick a built-in converter and
    to label the value in help); `settings` carries required/default/descr/converter.
    Conversion failures are raised unchanged by convert(); the resolver wraps
    them into ConversionFailedError with the option and token context.
    """

    __introspectable__ = (
        "name",
        "short",
        "type",
        "settings",
        "descr",
        "converter",
        "resolved",
        "slot",
    )

    __displayable__ = (
        "name",
        "short",
        "type",
        "required",
        "default",
        "descr",
        "resolved",
    )

    __match_args__ = ("name", "short", "type")

    def __init__(self, name, short=Unset, /, type=str, settings=Settings(), *, into=Unset):
        if not isinstance(settings, Settings):
            raise TypeError(f"{Valued.__typename__} 'settings' must be a Settings record")

        metadata = {
            "name": name,
            "short": short,
            "type": type,
            "settings": settings,
            "descr": settings.descr,
            "converter": resolve(type, settings.converter),
            "slot": into,
        }
        _sanitize_names(Valued, metadata)
        _sanitize_descr(Valued, metadata)
        _sanitize_slot(Valued, metadata)

        for name, object in metadata.items():
            setattr(self, "_" + name, coalesce(object))
        self._settings = settings._replace(required=bool(settings.required), descr=self._descr)
        self._resolved = False
        if self.has_default:
            self._slot.value = settings.default

    @property
    def required(self):
        return self._settings.required

    @property
    def default(self):
        return coalesce(self._settings.default)

    @property
    def has_default(self):
        return self._settings.default is not Unset

    @property
    def has_value(self):
        return self._resolved or self.has_default

    @property
    def value(self):
        return self._slot.value

    def convert(self, text, /):
        """
        Run the converter over raw text; exceptions propagate to the caller.
        """
        return self._converter(text)

    def bind(self, value, /):
        """
        Store an already converted value; a later bind overwrites it.
        """
        self._slot.value = value
        self._resolved = True

    def reset(self):
        self._resolved = False
        if self.has_default:
            self._slot.value = self._settings.default


Argument = Flag | Valued
"""
The closed variant of argument definitions.
"""


__all__ = (
    "Argument",
    "Flag",
    "Valued",
    "Settings",
    "Slot",
)

# internal
del ArgumentType
