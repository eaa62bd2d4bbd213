## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import math

from .types import NativeOp, Native, Value


BINARY_OPS = {
    NativeOp.ADD: lambda b, a: b + a,
    NativeOp.SUB: lambda b, a: b - a,
    NativeOp.MUL: lambda b, a: b * a,
    NativeOp.DIV: lambda b, a: _float_div(b, a),
    NativeOp.LT: lambda b, a: 1.0 if b < a else 0.0,
}


def _float_div(b: float, a: float) -> float:
    # Matches IEEE float division instead of raising ZeroDivisionError.
    if a != 0: return b / a
    if b == 0 or math.isnan(b): return math.nan
    return math.copysign(math.inf, b) * math.copysign(1.0, a)


def load_builtins_scope() -> dict[str, Value]:
    """Fresh base scope with every native operator bound under its own name."""
    return {op.value: Native(op) for op in NativeOp}
