## stacklang — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from .types import Value, Number, Symbol, Operator, Block, Native, NativeOp, Snapshot, StateEvent, OutputEvent, StackPopEvent
from .errors import *
from .parser import tokenize, read_token, parse_values, parse_block
from .formatting import format_value
from .runtime import StackLang, RunResult, execute


def run(source: str):
    """Lazy event sequence for `source`; iterating it to the end runs the program."""
    return StackLang(source).run()
