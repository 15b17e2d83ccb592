from rich.pretty import pprint

from incanti import *

parser = Parser("incanti-test", "program to test incanti", shell=True, colorful=True)
debug = parser.flag("debug", "d", descr="print the parsed definitions")
level = parser.option("level", "l", int, default=1, descr="verbosity level")


if __name__ == '__main__':
    outcome = parser.run()
    if debug.value:
        pprint(parser.definitions)
    pprint(outcome)
