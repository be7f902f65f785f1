"""Peephole optimizer over the nested instruction form.

A pass scans left to right and fuses maximal runs of ``Move`` and of ``Add``
into one instruction carrying the net effect. ``Output``, ``Input`` and
``Loop`` are barriers. Loop bodies are optimized by the same pass, and a loop
whose body comes out empty is dropped. Dropping things can make two runs
adjacent that were not before, so ``optimize`` repeats passes until nothing
changes or the pass budget is spent.

With wrapping tape and cells (the default) any run can be summed. When the
machine saturates instead, ``<`` at cell 0 followed by ``>`` is not a no-op,
so only deltas pointing the same way are fused in that mode.
"""
from __future__ import annotations

import logging

from dataclasses import dataclass
from typing import List, Optional

from .ir import CELL_MODULUS, Add, Instruction, Loop, Move, Program, count_instructions, same_program, to_signed

logger = logging.getLogger(__name__)

_MAX_SIGNED_ADD = CELL_MODULUS // 2 - 1
_MIN_SIGNED_ADD = -(CELL_MODULUS // 2)


@dataclass(frozen=True)
class OptimizerConfig:
    max_iterations: int = 0  # 0 = run to a fixpoint
    wrap_tape: bool = True
    wrap_cells: bool = True

    def __post_init__(self) -> None:
        if self.max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {self.max_iterations}")


def _fuse_saturating(deltas: List[int], lo: Optional[int], hi: Optional[int]) -> List[int]:
    """Fuse same-sign neighbours only, keeping each result within [lo, hi]."""
    out: List[int] = []
    for d in deltas:
        if d == 0:
            continue
        if out and (out[-1] > 0) == (d > 0):
            s = out[-1] + d
            if (lo is None or s >= lo) and (hi is None or s <= hi):
                out[-1] = s
                continue
        out.append(d)
    return out


def _fuse_moves(run: List[Move], wrap: bool) -> List[Instruction]:
    if wrap:
        s = sum(m.n for m in run)
        return [Move(s)] if s != 0 else []
    return [Move(d) for d in _fuse_saturating([m.n for m in run], None, None)]


def _fuse_adds(run: List[Add], wrap: bool) -> List[Instruction]:
    if wrap:
        s = sum(a.n for a in run) % CELL_MODULUS
        return [Add(s)] if s != 0 else []
    deltas = _fuse_saturating([to_signed(a.n) for a in run], _MIN_SIGNED_ADD, _MAX_SIGNED_ADD)
    return [Add.of(d) for d in deltas]


def optimize_once(nodes: Program, config: OptimizerConfig = OptimizerConfig()) -> Program:
    """Run a single fusion pass."""
    # One frame per loop being rewritten: [input body, scan index, output body].
    root: List = [nodes, 0, []]
    stack = [root]
    while stack:
        frame = stack[-1]
        body, i, out = frame
        if i >= len(body):
            stack.pop()
            if stack and out:
                stack[-1][2].append(Loop(tuple(out)))
            continue
        n = body[i]
        if isinstance(n, Move):
            run: List = []
            while i < len(body) and isinstance(body[i], Move):
                run.append(body[i])
                i += 1
            out.extend(_fuse_moves(run, config.wrap_tape))
        elif isinstance(n, Add):
            run = []
            while i < len(body) and isinstance(body[i], Add):
                run.append(body[i])
                i += 1
            out.extend(_fuse_adds(run, config.wrap_cells))
        elif isinstance(n, Loop):
            i += 1
            stack.append([n.body, 0, []])
        else:
            out.append(n)
            i += 1
        frame[1] = i
    return tuple(root[2])


def optimize(
    nodes: Program,
    max_iterations: int = 0,
    *,
    wrap_tape: bool = True,
    wrap_cells: bool = True,
) -> Program:
    config = OptimizerConfig(max_iterations=max_iterations, wrap_tape=wrap_tape, wrap_cells=wrap_cells)
    return run_passes(nodes, config)


def run_passes(nodes: Program, config: OptimizerConfig) -> Program:
    """Repeat ``optimize_once`` until a fixpoint or ``config.max_iterations`` passes."""
    current = tuple(nodes)
    passes = 0
    while True:
        passes += 1
        optimized = optimize_once(current, config)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "pass %d: %d -> %d instructions",
                passes, count_instructions(current), count_instructions(optimized),
            )
        if same_program(optimized, current):
            break
        current = optimized
        if config.max_iterations and passes >= config.max_iterations:
            break
    return current
