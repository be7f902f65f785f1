"""
Optimizer: run fusion, loop elision and fixpoint iteration.
"""

import logging
import sys

import pytest

import bfrun.optimizer as optimizer_module

from bfrun.ir import Add, Input, Loop, Move, Output, count_instructions, emit, same_program
from bfrun.optimizer import OptimizerConfig, optimize, optimize_once
from bfrun.parser import parse

CLAMP_BOTH = OptimizerConfig(wrap_tape=False, wrap_cells=False)


def test_optimize_once_no_optimization():
    program = (Input(), Output(), Move(1), Add(1), Move(-1), Loop((Add(1),)))
    assert optimize_once(program) == program


def test_optimize_once_adds():
    assert optimize_once((Add(1), Add(2), Add(3), Add(4))) == (Add(10),)


def test_optimize_once_adds_overflow():
    assert optimize_once((Add(3), Add(254), Add(4), Add(250))) == (Add(255),)


def test_optimize_once_adds_no_add():
    assert optimize_once((Add(3), Add(255), Add(4), Add(250))) == ()


def test_optimize_once_moves_right():
    assert optimize_once((Move(3), Move(4), Move(5), Move(6))) == (Move(18),)


def test_optimize_once_moves_left_and_right():
    assert optimize_once((Move(-3), Move(-4), Move(5), Move(6))) == (Move(4),)


def test_optimize_once_moves_left_and_right_no_shift():
    assert optimize_once((Move(3), Move(-4), Move(-5), Move(6))) == ()


def test_optimize_once_adds_and_moves():
    program = (Move(3), Move(-4), Add(3), Add(4), Move(-5), Move(6))
    assert optimize_once(program) == (Move(-1), Add(7), Move(1))


def test_io_is_a_fusion_barrier():
    program = (Add(1), Output(), Add(1), Input(), Add(1))
    assert optimize_once(program) == program


def test_optimize_once_recurses_into_loops():
    program = (Loop((Add(1), Add(1), Loop((Move(2), Move(-2))))),)
    assert optimize_once(program) == (Loop((Add(2),)),)


def test_mixed_source_cancels_in_one_pass():
    assert optimize_once(parse("++++----<<<<>>>>")) == ()


def test_dropped_loop_needs_another_pass():
    program = (Add(1), Loop((Move(1), Move(-1))), Add(1))
    assert optimize_once(program) == (Add(1), Add(1))
    assert optimize(program, max_iterations=1) == (Add(1), Add(1))
    assert optimize(program, max_iterations=2) == (Add(2),)
    assert optimize(program) == (Add(2),)


def test_fixpoint_is_stable():
    program = parse("++[->+<]>>><<.[-]+-<>,[>+<[]]")
    once = optimize(program)
    assert optimize(once) == once
    assert optimize_once(once) == once


def test_optimize_does_not_mutate_input():
    program = parse("++>>")
    optimize(program)
    assert program == parse("++>>")


def test_negative_budget_rejected():
    with pytest.raises(ValueError):
        OptimizerConfig(max_iterations=-1)


def test_wrapping_adds_fuse_past_127():
    assert optimize_once((Add(1),) * 200) == (Add(200),)


def test_clamp_keeps_opposite_moves_apart():
    program = (Move(-1), Move(1))
    assert optimize_once(program, CLAMP_BOTH) == program


def test_clamp_keeps_opposite_adds_apart():
    program = (Add(255), Add(1))
    assert optimize_once(program, CLAMP_BOTH) == program


def test_clamp_fuses_same_direction_runs():
    program = (Move(1), Move(2), Move(-1), Move(-1), Add(1), Add(1), Add(255), Add(255))
    assert optimize_once(program, CLAMP_BOTH) == (Move(3), Move(-2), Add(2), Add(254))


def test_clamp_adds_stay_in_signed_byte_range():
    assert optimize_once((Add(1),) * 200, CLAMP_BOTH) == (Add(127), Add(73))


def test_deeply_nested_program_optimizes():
    depth = sys.getrecursionlimit() + 100
    code = "+" + "[" * depth + "-" + "]" * depth
    program = parse(code)
    result = optimize(program)
    assert same_program(result, program)
    assert count_instructions(result) == depth + 2
    assert emit(result) == code


def test_deeply_nested_empty_loops_collapse():
    depth = sys.getrecursionlimit() + 100
    program = (Loop((Move(1), Move(-1))),) * 3
    for _ in range(depth):
        program = (Loop(program),)
    assert optimize(program) == ()


def test_same_program():
    assert same_program(parse("+[>-]."), parse("+[>-]."))
    assert not same_program(parse("+[>-]."), parse("+[>+]."))
    assert not same_program(parse("+[>-]."), parse("+[>-]"))
    assert not same_program((Loop((Add(1),)),), (Add(1),))


def test_pass_counts_skipped_without_debug_logging(monkeypatch, caplog):
    calls = []

    def counting(nodes):
        calls.append(nodes)
        return 0

    monkeypatch.setattr(optimizer_module, "count_instructions", counting)
    caplog.set_level(logging.WARNING, logger="bfrun.optimizer")
    optimize(parse("++>>[-]"))
    assert calls == []

    caplog.set_level(logging.DEBUG, logger="bfrun.optimizer")
    optimize(parse("++>>[-]"))
    assert calls
