## stacklang — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from enum import Enum
from typing import Literal
from dataclasses import dataclass, field


class NativeOp(Enum):
    """Built-in operations, identified by the name they are bound to in the base scope."""
    ADD = '+'
    SUB = '-'
    MUL = '*'
    DIV = '/'
    LT = '<'
    IF = 'if'
    DEF = 'def'
    EXCH = 'exch'
    PUTS = 'puts'

    def __repr__(self):
        return f"<NativeOp {self.value}>"


# The value model is a closed set of variants; consumers `match` on the class.
@dataclass(frozen=True)
class Number:
    num: float
    kind: Literal["Num"] = field(default="Num", init=False, repr=False)

@dataclass(frozen=True)
class Symbol:
    sym: str
    kind: Literal["Symbol"] = field(default="Symbol", init=False, repr=False)

@dataclass(frozen=True)
class Operator:
    op: str
    kind: Literal["Operator"] = field(default="Operator", init=False, repr=False)

@dataclass(frozen=True)
class Block:
    values: tuple                 # tuple[Value, ...], captured and not evaluated
    kind: Literal["Block"] = field(default="Block", init=False, repr=False)

    def __post_init__(self):
        if not isinstance(self.values, tuple):
            object.__setattr__(self, 'values', tuple(self.values))

@dataclass(frozen=True)
class Native:
    fn: NativeOp
    kind: Literal["Native"] = field(default="Native", init=False, repr=False)


Value = Number | Symbol | Operator | Block | Native


@dataclass(frozen=True)
class Snapshot:
    """Immutable copy of the machine: operand stack bottom to top, scope chain base to
    innermost, and block bodies under construction from oldest to newest.
    """
    stack: tuple = ()
    scopes: tuple = ()
    blocks: tuple = ()

    @property
    def top(self) -> Value | None:
        return self.stack[-1] if self.stack else None


EventKind = Literal["state", "output", "stack-pop"]

@dataclass(frozen=True)
class StateEvent:
    state: Snapshot
    kind: EventKind = field(default="state", init=False)

@dataclass(frozen=True)
class OutputEvent:
    value: Value
    kind: EventKind = field(default="output", init=False)

@dataclass(frozen=True)
class StackPopEvent:
    state: Snapshot
    value: Value
    kind: EventKind = field(default="stack-pop", init=False)


Event = StateEvent | OutputEvent | StackPopEvent
