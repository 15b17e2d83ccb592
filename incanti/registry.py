"""
Incanti argument registry.

A Registry maps canonical names to definitions (registration order is kept, help
renders in that order) and short names to canonical names. It is filled before
parsing and only read during resolution.

Rules enforced by register()
- canonical names are unique across the registry (DuplicateNameError).
- a short name may be bound to a single canonical name (DuplicateShortNameError).
"""
from collections.abc import Mapping
from types import MappingProxyType

from .arguments import Argument
from .faults import DuplicateNameError, DuplicateShortNameError, FaultCode, getdoc


class Registry(Mapping):
    """
    Read-mostly mapping of canonical name → Flag | Valued.
    """

    def __init__(self):
        self._arguments = {}
        self._shorts = {}

    def register(self, argument, /):
        """
        Add a definition, rejecting duplicated canonical or short names.

        Returns the registered definition so callers can keep a handle on it.
        """
        if not isinstance(argument, Argument):
            raise TypeError("register() argument must be a flag or a valued definition")

        if argument.name in self._arguments:
            raise DuplicateNameError(
                "duplicate argument name '--%s'" % argument.name,
                title="duplicate argument name",
                code=FaultCode.DUPLICATE_NAME,
                name=argument.name,
                hint="pick another name; '--%s' is already registered" % argument.name,
                docs=getdoc(FaultCode.DUPLICATE_NAME),
            )

        if argument.short is not None and argument.short in self._shorts:
            raise DuplicateShortNameError(
                "duplicate short option name '-%s' (already used by '--%s')" % (
                    argument.short, self._shorts[argument.short]
                ),
                title="duplicate short option name",
                code=FaultCode.DUPLICATE_SHORT_NAME,
                name=argument.name,
                short=argument.short,
                owner=self._shorts[argument.short],
                hint="pick another short name or leave it out",
                docs=getdoc(FaultCode.DUPLICATE_SHORT_NAME),
            )

        self._arguments[argument.name] = argument
        if argument.short is not None:
            self._shorts[argument.short] = argument.name
        return argument

    def short(self, char, /):
        """
        Return the definition bound to a short name; KeyError when there is none.
        """
        return self._arguments[self._shorts[char]]

    @property
    def shorts(self):
        return MappingProxyType(self._shorts)

    def __getitem__(self, name, /):
        return self._arguments[name]

    def __iter__(self):
        return iter(self._arguments)

    def __len__(self):
        return len(self._arguments)

    def __repr__(self):
        return "registry(%s)" % ", ".join(map(repr, self._arguments))


__all__ = (
    "Registry",
)
