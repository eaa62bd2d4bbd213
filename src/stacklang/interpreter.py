## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from types import MappingProxyType
from typing import Iterator, NamedTuple, Callable
from collections import deque

from .types import Value, Number, Symbol, Operator, Block, Native, NativeOp, Snapshot, Event, StateEvent, OutputEvent, StackPopEvent
from .errors import StackUnderflowError, BlockStackUnderflowError, UndefinedOperatorError, TypeMismatchError
from .parser import read_token, BLOCK_OPEN, BLOCK_CLOSE
from .builtins import BINARY_OPS, load_builtins_scope
from .formatting import format_value


class Resume(NamedTuple):
    """Queued continuation of a native or block invocation, run once the values queued
    before it have been evaluated."""
    fn: Callable
    args: tuple = ()


class Vm:
    """Operand stack, scope chain and block-construction stack of a single program run.

    Every method that mutates state is a generator of events, so that a consumer
    iterating `step()` observes each intermediate mutation in order.  Nested evaluation
    (block bodies, `if` branches, `def` and `exch` operands) is scheduled on a queue
    instead of recursing, so program depth is not limited by the Python stack.
    """

    def __init__(self):
        self.stack: list[Value] = []
        self.vars: list[dict[str, Value]] = [load_builtins_scope()]
        self.blocks: list[list[Value]] = []
        # Read-only copy of each scope, refreshed only when that scope changes.
        self._views = [MappingProxyType(dict(s)) for s in self.vars]

    def snapshot(self) -> Snapshot:
        return Snapshot(stack=tuple(self.stack), scopes=tuple(self._views),
                        blocks=tuple(tuple(b) for b in self.blocks))

    def _state(self) -> StateEvent:
        return StateEvent(self.snapshot())

    # Dispatch ────────────────────────────────────────────────────────────────────────────────
    def step(self, token: str) -> Iterator[Event]:
        if token == '':
            yield self._state()
        elif token == BLOCK_OPEN:
            self.blocks.append([])
            yield self._state()
        elif token == BLOCK_CLOSE:
            if not self.blocks:
                raise BlockStackUnderflowError("Block stack underflow: `}` without matching `{`.", token=token)
            values = self.blocks.pop()
            yield self._state()
            yield from self.eval(Block(tuple(values)))
        else:
            yield from self.eval(read_token(token))

    def eval(self, code: Value) -> Iterator[Event]:
        """Evaluate one value, including everything its evaluation schedules."""
        queue = deque([code])
        while queue:
            match queue.popleft():
                case Resume(fn=fn, args=args):
                    yield from fn(queue, *args)
                case value:
                    yield from self._eval_one(value, queue)

    def _eval_one(self, code: Value, queue: deque) -> Iterator[Event]:
        # Inside an open block everything is captured as-is, for evaluation when invoked.
        if self.blocks:
            self.blocks[-1].append(code)
            yield self._state()
            return
        if not isinstance(code, Operator):
            self.stack.append(code)
            yield self._state()
            return

        match self.find_var(code.op):
            case None:
                raise UndefinedOperatorError(f"`{code.op}` is not a defined operation.", token=code.op)
            case Block(values=values):
                self.vars.append({})
                self._views.append(MappingProxyType({}))
                yield self._state()
                queue.extendleft(reversed((*values, Resume(self._end_scope))))
            case Native(fn=fn):
                yield from self._call_native(fn, queue)
            case value:
                self.stack.append(value)
                yield self._state()

    def _end_scope(self, queue: deque) -> Iterator[Event]:
        self.vars.pop()
        self._views.pop()
        yield self._state()

    def find_var(self, name: str) -> Value | None:
        for scope in reversed(self.vars):
            if (value := scope.get(name)) is not None:
                return value
        return None

    # Stack access ────────────────────────────────────────────────────────────────────────────
    def _pop(self) -> Iterator[Event]:
        if not self.stack:
            raise StackUnderflowError("Stack underflow: popped a value from an empty stack.")
        value = self.stack.pop()
        yield StackPopEvent(self.snapshot(), value)
        return value

    def _pop_block(self, name: str) -> Iterator[Event]:
        value = yield from self._pop()
        if not isinstance(value, Block):
            raise TypeMismatchError(f"`{name}` expects a block, got {format_value(value)}.", token=name, values=(value,))
        return value

    # Natives ─────────────────────────────────────────────────────────────────────────────────
    def _call_native(self, fn: NativeOp, queue: deque) -> Iterator[Event]:
        match fn:
            case NativeOp.IF: yield from self._op_if(queue)
            case NativeOp.DEF: yield from self._op_def(queue)
            case NativeOp.EXCH: yield from self._op_exch(queue)
            case NativeOp.PUTS: yield from self._op_puts()
            case _: yield from self._op_binary(fn)

    def _op_binary(self, fn: NativeOp) -> Iterator[Event]:
        right = yield from self._pop()
        left = yield from self._pop()
        if not isinstance(left, Number) or not isinstance(right, Number):
            raise TypeMismatchError(f"Expect Num Num {fn.value}, got ({format_value(left)} {format_value(right)} {fn.value}).",
                                    token=fn.value, values=(left, right))
        self.stack.append(Number(BINARY_OPS[fn](float(left.num), float(right.num))))
        yield self._state()

    def _op_if(self, queue: deque) -> Iterator[Event]:
        """Pops `cond then else` and evaluates one branch in place, without a new scope.  The
        condition is either a block evaluated in place to produce a number, or a number.
        """
        false_branch = yield from self._pop_block('if')
        true_branch = yield from self._pop_block('if')
        cond = yield from self._pop()
        match cond:
            case Block(values=values):
                queue.extendleft(reversed((*values, Resume(self._if_result, (true_branch, false_branch)))))
            case Number():
                self._choose_branch(cond, true_branch, false_branch, queue)
            case _:
                raise TypeMismatchError(f"`if` expects a block or number as condition, got {format_value(cond)}.",
                                        token='if', values=(cond,))

    def _if_result(self, queue: deque, true_branch: Block, false_branch: Block) -> Iterator[Event]:
        result = yield from self._pop()
        self._choose_branch(result, true_branch, false_branch, queue)

    def _choose_branch(self, result: Value, true_branch: Block, false_branch: Block, queue: deque) -> None:
        if not isinstance(result, Number):
            raise TypeMismatchError(f"`if` condition must produce a number, got {format_value(result)}.",
                                    token='if', values=(result,))
        branch = true_branch if result.num != 0 else false_branch
        queue.extendleft(reversed(branch.values))

    def _op_def(self, queue: deque) -> Iterator[Event]:
        value = yield from self._pop()
        queue.extendleft((Resume(self._def_bind), value))

    def _def_bind(self, queue: deque) -> Iterator[Event]:
        result = yield from self._pop()
        symbol = yield from self._pop()
        if not isinstance(symbol, Symbol):
            raise TypeMismatchError(f"`def` expects a symbol as name, got {format_value(symbol)}.",
                                    token='def', values=(symbol,))
        # Write-once per scope: an existing binding in the same scope wins.
        if symbol.sym not in self.vars[-1]:
            self.vars[-1][symbol.sym] = result
            self._views[-1] = MappingProxyType(dict(self.vars[-1]))
        yield self._state()

    def _op_exch(self, queue: deque) -> Iterator[Event]:
        """Swaps the two top values after evaluating the second one.  For data values that
        evaluation pushes it again, so a copy stays below the swapped pair.
        """
        last = yield from self._pop()
        second = yield from self._pop()
        queue.extendleft((Resume(self._exch_push, (last, second)), second))

    def _exch_push(self, queue: deque, last: Value, second: Value) -> Iterator[Event]:
        self.stack.append(last)
        yield self._state()
        self.stack.append(second)
        yield self._state()

    def _op_puts(self) -> Iterator[Event]:
        value = yield from self._pop()
        yield OutputEvent(value)
