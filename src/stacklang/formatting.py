## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re
import math

from .types import Value, Number, Symbol, Operator, Block, Native, Snapshot, StateEvent, OutputEvent, StackPopEvent


def write_without_ansi(write_fn):
    """Wrapper function that strips ANSI codes before calling the original writer."""
    ansi_re = re.compile(r'\033\[[0-9;]*m')
    return lambda text: write_fn(ansi_re.sub('', text))


def format_number(num: float) -> str:
    if math.isnan(num): return 'NaN'
    if math.isinf(num): return 'Infinity' if num > 0 else '-Infinity'
    if num.is_integer() and abs(num) < 1e16: return str(int(num))
    return repr(num)

def format_value(value: Value) -> str:
    """Display text for a value; `parser.parse_values` reads it back for finite numbers."""
    match value:
        case Number(num=num): return format_number(float(num))
        case Symbol(sym=sym): return '/' + sym
        case Operator(op=op): return op
        case Block(values=values):
            return '{ ' + ''.join(format_value(v) + ' ' for v in values) + '}'
        case Native(fn=fn): return f'<native:{fn.value}>'
    raise TypeError(f"Not a stacklang value: {value!r}")


def format_stack(values, width=None) -> str:
    text = ' '.join(format_value(v) for v in values) if values else '∅'
    if width is not None and len(text) > width:
        text = '… ' + text[-width+2:]
    return text

def format_scopes(scopes, skip_base=True) -> str:
    # The base scope only holds natives, which are noise in step traces.
    lines = []
    for depth, scope in enumerate(scopes):
        if skip_base and depth == 0: continue
        bindings = ', '.join(f'{k} = {format_value(v)}' for k, v in scope.items())
        lines.append(f'[{depth}] {bindings or "∅"}')
    return '\n'.join(lines)

def format_snapshot(state: Snapshot, width=72) -> str:
    text = format_stack(state.stack, width=width)
    result = f'{text:>{width}}' if width else text
    if state.blocks:
        result += '\033[36m  { \033[0m' + ' | '.join(format_stack(b) for b in state.blocks)
    return result


def format_event(event, width=72) -> str:
    match event:
        case StateEvent(state=state):
            return f'\033[90mstate \033[0m {format_snapshot(state, width)}'
        case StackPopEvent(state=state, value=value):
            return f'\033[33mpop   \033[0m {format_snapshot(state, width)}  \033[33m→ {format_value(value)}\033[0m'
        case OutputEvent(value=value):
            return f'\033[97mputs   {format_value(value)}\033[0m'
    raise TypeError(f"Not a stacklang event: {event!r}")


def show_event(event, step=None, width=72, file=None) -> None:
    prefix = f"\033[90m{step:>4} :\033[0m  " if step is not None else ''
    print(prefix + format_event(event, width=width), file=file)
