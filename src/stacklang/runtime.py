## stacklang — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Iterator
from dataclasses import dataclass, field

from .types import Value, Snapshot, Event, OutputEvent
from .errors import StackLangError, StackLangRuntimeError
from .parser import iter_tokens
from .interpreter import Vm


class StackLang:
    """Feeds the tokens of one program to a fresh machine and forwards its events lazily."""

    def __init__(self, program: str):
        self.program = program
        self.vm = Vm()
        self._started = False

    def run(self) -> Iterator[Event]:
        if self._started:
            raise StackLangRuntimeError("A StackLang program can only be run once; create a new instance.")
        self._started = True
        return self._run()

    def _run(self) -> Iterator[Event]:
        for lineno, token in iter_tokens(self.program):
            try:
                yield from self.vm.step(token)
            except StackLangError as exc:
                exc.token = token if exc.token is None else exc.token
                exc.line = lineno
                exc.state = self.vm.snapshot()
                raise


@dataclass
class RunResult:
    state: Snapshot
    outputs: list[Value] = field(default_factory=list)
    steps: int = 0

    @property
    def top(self) -> Value | None:
        return self.state.top


def execute(source: str, observer=None) -> RunResult:
    """Run a program to completion, collecting `puts` output.  The optional `observer` is
    called with every event in order, e.g. to trace or pace the execution.
    """
    program = StackLang(source)
    result = RunResult(state=program.vm.snapshot())
    for event in program.run():
        result.steps += 1
        if isinstance(event, OutputEvent):
            result.outputs.append(event.value)
        if observer is not None:
            observer(event)
    result.state = program.vm.snapshot()
    return result
