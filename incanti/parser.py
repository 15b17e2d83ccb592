"""
Incanti parser: declare arguments, resolve a token stream, render help.

Contents
- Parser: owns a Registry (with a built-in -h/--help flag), exposes the
  registration surface (option/flag/register), runs the resolver (parse) and
  glues it to the process (run: print help or faults, exit).

Core ideas
- The resolver never prints or exits: help is a distinguished Outcome and
  faults are exceptions. Only run() turns them into console output and exit codes.
- Values land in caller-owned slots; the Outcome also carries a read-only
  namespace snapshot and the positionals.
- Styling adapts: color and panel chrome are configurable per parser, and the
  palette can be overridden by a __styles__ mapping in __main__.

Quick start
    from incanti import Parser

    parser = Parser("tool", "copy files around")
    verbose = parser.flag("verbose", "v", descr="talk more")
    count = parser.option("count", "c", int, default=1, descr="how many times")
    output = parser.option("output", "o", required=True)

    if __name__ == "__main__":
        outcome = parser.run()
        print(count.value, output.value, verbose.value, outcome.positionals)
"""
import os.path
import shlex
import sys
import warnings
from collections import defaultdict, deque
from collections.abc import Iterable
from warnings import catch_warnings

from rich.console import Console, Group
from rich.containers import Lines
from rich.panel import Panel
from rich.text import Text

from .arguments import Flag, Valued, Settings
from .faults import ParserException, ParserWarning, trigger
from .registry import Registry
from .resolver import Resolver
from .utils import *


class Parser:
    """
    Command-line parser for one program.

    Parameters
    - name: str | Unset
      Program name shown in usage and fault headers. When Unset it is taken
      from argv[0] on the first parse that sees one (falls back to "incanti").
    - descr: str | Unset
      One paragraph shown under the usage line.
    - epilog: str | Unset (keyword-only)
      Footer paragraph.
    - strict: bool (keyword-only)
      Reject inline values on flags ('--verbose=yes'); when False they are ignored.
    - shell: bool (keyword-only)
      run() prints faults and exits instead of raising.
    - colorful, fancy: bool (keyword-only)
      Rendering options for help and faults.
    """

    __introspectable__ = (
        "name",
        "descr",
        "epilog",
        "strict",
        "shell",
        "colorful",
        "fancy",
    )

    name = mirror("name")
    descr = mirror("descr")
    epilog = mirror("epilog")
    strict = mirror("strict")
    shell = mirror("shell")
    colorful = mirror("colorful")
    fancy = mirror("fancy")
    positionals = mirror("positionals")

    @property
    def definitions(self):
        """
        The registry of declared arguments (help included), in registration order.
        """
        return self._registry

    def __init__(
            self,
            name=Unset,
            descr=Unset,
            /,
            *,
            epilog=Unset,
            strict=True,
            shell=False,
            colorful=False,
            fancy=False
    ):
        for field, object in (("name", name), ("descr", descr), ("epilog", epilog)):
            if not isinstance(object, str | Text | Unset):
                raise TypeError(f"parser '{field}' must be a string")
            elif isinstance(object, str) and not object.strip():
                raise ValueError(f"parser '{field}' cannot be empty")

        self._name = name
        self._descr = coalesce(descr)
        self._epilog = coalesce(epilog)
        self._strict = bool(strict)
        self._shell = bool(shell)
        self._colorful = bool(colorful)
        self._fancy = bool(fancy)
        self._positionals = []
        self._stderr = False
        self._registry = Registry()
        self._registry.register(Flag("help", "h", descr="show this help message and exit"))

    def __repr__(self):
        return "parser(%s)" % ", ".join("%s=%r" % (name, getattr(self, name)) for name in self.__introspectable__)

    def __getitem__(self, name, /):
        """
        Return the value currently bound to the argument `name`.
        """
        return self._registry[name].value

    def register(self, argument, /):
        """
        Register a prebuilt Flag or Valued definition and return it.
        """
        return self._registry.register(argument)

    def option(
            self,
            name,
            short=Unset,
            /,
            type=str,
            *,
            required=False,
            default=Unset,
            descr=Unset,
            converter=Unset,
            into=Unset
    ):
        """
        Declare a value-bearing option.

        Parameters
        - name: canonical long name ('count' → --count).
        - short: optional one-character short name ('c' → -c).
        - type: payload type; picks the built-in converter (str, int, float, bool).
        - required: parsing fails when the option is neither given nor defaulted.
        - default: initial value written into the slot at registration.
        - descr: help text.
        - converter: custom `str -> T` callable replacing the built-in one.
        - into: Slot receiving the bound value (a private slot when Unset).

        Returns
        - Valued: the registered definition (its .value reads the slot).
        """
        settings = Settings(
            required=required,
            default=default,
            descr=descr,
            converter=converter,
        )
        return self._registry.register(Valued(name, short, type, settings, into=into))

    def flag(self, name, short=Unset, /, *, descr=Unset, into=Unset):
        """
        Declare a presence-only flag; its slot starts as False.
        """
        return self._registry.register(Flag(name, short, descr=descr, into=into))

    def parse(self, prompt=Unset, /):
        """
        Resolve a token stream and return an Outcome.

        Parameters
        - prompt:
          • Unset: read sys.argv (argv[0] names the program when no name was configured).
          • str: shell-like string; split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, program name excluded; used as-is.

        Raises
        - ParseError subclasses on the first fault; TypeError for bad prompts.
          A failed parse leaves every slot as it was before the parse (defaults re-applied).
        """
        if prompt is Unset:
            return self.parse_argv(sys.argv)
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
            if not all(isinstance(token, str) for token in tokens):
                raise TypeError("parse() argument must be a string or an iterable of strings")
        else:
            raise TypeError("parse() argument must be a string or an iterable of strings")

        self._reset()
        snapshot = [(argument.slot, argument.value) for argument in self._registry.values()]
        try:
            outcome = Resolver(self._registry, strict=self.strict)(tokens)
        except ParserException:
            # no partial bindings survive a failed parse
            self._reset()
            for slot, value in snapshot:
                slot.value = value
            raise
        self._positionals = list(outcome.positionals)
        return outcome

    def _reset(self):
        self._positionals = []
        for argument in self._registry.values():
            argument.reset()

    def parse_argv(self, argv, /):
        """
        Parse an argv-style list whose first item is the program name.
        """
        argv = list(argv)
        if argv and self._name is Unset:
            self._name = os.path.basename(argv[0]) or Unset
        return self.parse(argv[1:])

    def run(self, prompt=Unset, /):
        """
        Parse and act like a command-line program.

        Behavior
        - help requested: print help to stdout; exit 0 in shell mode, otherwise
          return the Outcome.
        - fault: in shell mode print help and the fault to stderr and exit 1;
          otherwise raise it (enriched with rendering options).
        - parser warnings are printed in shell mode and re-emitted otherwise.
        """
        options = {
            "prog": coalesce(self.name, "incanti"),
            "shell": self.shell,
            "colorful": self.colorful,
            "fancy": self.fancy,
        }
        try:
            with catch_warnings(record=True) as caught:
                warnings.simplefilter("always")
                outcome = self.parse(prompt)
        except ParserException as fault:
            self._surface(caught, options)
            if self.shell:
                self._stderr = True
                self.help()
                self._stderr = False
            trigger(fault, **options)

        self._surface(caught, options)

        if outcome.help:
            self.help()
            if self.shell:
                sys.exit(0)
        return outcome

    def _surface(self, caught, options):
        for warning in caught:
            if isinstance(warning.message, ParserWarning):
                trigger(warning.message, **options)
            else:
                warnings.warn_explicit(warning.message, warning.category, warning.filename, warning.lineno)

    def help(self, console=Unset, /):
        """
        Print the help text (stdout, or stderr while reporting a fault).
        """
        console = coalesce(console, Console(stderr=self._stderr))
        console.print(self)

    def __rich__(self):
        """
        Build the help renderable.

        Palette keys
        - usage-label, program-name, description-section, epilog-section
        - group-label, argument-description, option-name, flag-name, metavar
        - default, required, panel-title

        A __styles__ mapping on __main__ overrides palette entries; nothing is
        styled unless the parser is colorful.
        """
        styles = defaultdict(str, {
            "usage-label": "bold #5FD7FF",
            "program-name": "bold #FF5FAF",
            "description-section": "italic #B2B2B2",
            "epilog-section": "#808080",
            "group-label": "bold underline #EEEEEE",
            "argument-description": "#A8A8A8",
            "option-name": "bold #5FD7FF",
            "flag-name": "bold #5FD75F",
            "metavar": "#FFD75F",
            "default": "italic #808080",
            "required": "bold #FF5F5F",
            "panel-title": "bold #FF5FAF",
        } | getattr(__import__("__main__"), "__styles__", {}))

        def styler(style):
            return styles[style] if self.colorful else ""

        def text(fragment, style=""):
            if not fragment:
                return Text("")
            if not self.colorful:
                return Text(str(fragment))
            if isinstance(fragment, Text):
                return fragment.copy()
            return Text(str(fragment), style)

        def names(argument, separator):
            style = "flag-name" if isinstance(argument, Flag) else "option-name"
            spellings = ["--" + argument.name]
            if argument.short is not None:
                spellings.insert(0, "-" + argument.short)
            return Text(separator).join(text(spelling, styler(style)) for spelling in spellings)

        def metavar(argument):
            label = getattr(argument.type, "__name__", "value") if argument.settings.converter is Unset else "value"
            return text("<%s>" % label, styler("metavar"))

        console = Console()
        width = console.width - 4 * self.fancy
        prog = coalesce(self.name, "incanti")
        renders = []

        usage = Text()
        usage.append(text("usage", styler("usage-label"))).append(":")
        usage.append(" ")
        usage.append(text(prog, styler("program-name")))
        usage.append(" ")

        offset = len(usage)  # Hanging-indent column for wrapped usage items
        inputs = deque()
        for argument in self._registry.values():
            match argument:
                case Flag():
                    inputs.append(Text.assemble("[", names(argument, " | "), "]"))
                case Valued():
                    item = Text.assemble(names(argument, " | "), " ", metavar(argument))
                    inputs.append(item if argument.required else Text.assemble("[", item, "]"))
        inputs.append(Text("[args ...]"))

        lines = Lines([inputs.popleft()])
        while inputs:
            if len(lines[-1]) + 1 + len(input := inputs.popleft()) > width - offset:
                lines.append(input)
            else:
                lines[-1].append(Text(" ") + input)

        usage.append(lines.pop(0))
        for line in lines:
            usage.append("\n").append(" " * offset).append(line)
        renders.append(usage.append("\n"))

        if self.descr:
            renders.append(text(self.descr, styler("description-section")).append("\n"))

        section = Text()
        section.append(text("options", styler("group-label"))).append(":")
        padding = 2  # Leading spaces before the names column
        indent = 6  # Description column under the names

        for argument in self._registry.values():
            section.append("\n").append(" " * padding).append(names(argument, ", "))
            if isinstance(argument, Valued):
                section.append(" ").append(metavar(argument))

            details = Text()
            if argument.descr:
                details.append(text(argument.descr, styler("argument-description")))
            if isinstance(argument, Valued):
                if argument.has_default and not argument.required:
                    details.append(" " if details else "")
                    details.append(text("(default: %s)" % argument.default, styler("default")))
                if argument.required:
                    details.append(" " if details else "")
                    details.append(text("[required]", styler("required")))

            if details:
                for line in details.wrap(console, width - indent):
                    section.append("\n").append(" " * indent).append(line)

        renders.append(section)

        if self.epilog:
            renders.append(Text("\n").append(text(self.epilog, styler("epilog-section"))))

        renderable = Group(*renders)

        if self.fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[", " ", f"{prog} HELP".upper(), " ", "]", style=styler("panel-title")),
                title_align="left",
            )

        return renderable


__all__ = (
    "Parser",
)
