## stacklang — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import dataclasses

from stacklang.types import Number, Symbol, Operator, Block, Native, NativeOp, Snapshot, StateEvent, OutputEvent, StackPopEvent
from stacklang.builtins import load_builtins_scope
from stacklang.interpreter import Vm

import pytest


def test_value_kind_tags():
    assert Number(1).kind == "Num"
    assert Symbol('a').kind == "Symbol"
    assert Operator('a').kind == "Operator"
    assert Block(()).kind == "Block"
    assert Native(NativeOp.ADD).kind == "Native"


def test_values_are_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        Number(1).num = 2
    with pytest.raises(dataclasses.FrozenInstanceError):
        Block(()).values = (Number(1),)


def test_block_values_are_stored_as_tuple():
    block = Block([Number(1), Number(2)])
    assert block.values == (Number(1), Number(2))
    assert hash(block) == hash(Block((Number(1), Number(2))))


def test_symbol_and_operator_are_distinct():
    assert Symbol('x') != Operator('x')


def test_native_ops_cover_base_scope():
    scope = load_builtins_scope()
    assert set(scope) == {'+', '-', '*', '/', '<', 'if', 'def', 'exch', 'puts'}
    assert all(isinstance(v, Native) for v in scope.values())
    # Each call returns a fresh, independent scope.
    assert scope is not load_builtins_scope()


def test_vm_snapshot_copies_containers():
    vm = Vm()
    for token in '/x 2 def 1 { 3'.split(' '):
        list(vm.step(token))
    snap = vm.snapshot()
    for token in '9 } /y 9 def'.split(' '):
        list(vm.step(token))
    assert snap.stack == (Number(1),)
    assert snap.scopes[0]['x'] == Number(2) and 'y' not in snap.scopes[0]
    assert snap.blocks == ((Number(3),),)
    assert snap.top == Number(1)


def test_snapshot_top_of_empty_stack():
    assert Snapshot().top is None


def test_event_kinds():
    snap = Snapshot()
    assert StateEvent(snap).kind == "state"
    assert OutputEvent(Number(1)).kind == "output"
    assert StackPopEvent(snap, Number(1)).kind == "stack-pop"
