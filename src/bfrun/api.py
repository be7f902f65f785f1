from __future__ import annotations

import logging
import sys
import time

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .executor import CharIO, Executor, StreamIO
from .ir import Program, count_instructions
from .machine import DEFAULT_TAPE_SIZE, OverflowPolicy, TapeMachine
from .optimizer import OptimizerConfig, run_passes
from .parser import Parser, parse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunOptions:
    tape_size: int = DEFAULT_TAPE_SIZE
    tape_policy: OverflowPolicy = OverflowPolicy.WRAP
    cell_policy: OverflowPolicy = OverflowPolicy.WRAP
    optimize: Optional[int] = None  # None = off, 0 = until fixpoint, N = at most N passes

    def __post_init__(self) -> None:
        if self.tape_size <= 0:
            raise ValueError(f"tape_size must be positive, got {self.tape_size}")
        if self.optimize is not None and self.optimize < 0:
            raise ValueError(f"optimize must be None or >= 0, got {self.optimize}")

    def optimizer_config(self) -> Optional[OptimizerConfig]:
        if self.optimize is None:
            return None
        return OptimizerConfig(
            max_iterations=self.optimize,
            wrap_tape=self.tape_policy is OverflowPolicy.WRAP,
            wrap_cells=self.cell_policy is OverflowPolicy.WRAP,
        )

    def new_machine(self) -> TapeMachine:
        return TapeMachine(self.tape_size, self.tape_policy, self.cell_policy)


@dataclass(frozen=True)
class RunResult:
    program: Program
    machine: TapeMachine
    steps: int


def _finish_compile(program: Program, options: Optional[RunOptions]) -> Program:
    config = None if options is None else options.optimizer_config()
    if config is None:
        return program
    optimized = run_passes(program, config)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "optimized %d -> %d instructions", count_instructions(program), count_instructions(optimized)
        )
    return optimized


def compile_string(source: Union[str, bytes], *, options: Optional[RunOptions] = None) -> Program:
    return _finish_compile(parse(source), options)


def compile_file(path: Union[str, Path], *, options: Optional[RunOptions] = None) -> Program:
    with open(path, 'rb') as f:
        program = Parser.from_reader(f).parse()
    return _finish_compile(program, options)


def run_program(
    program: Program,
    io: Optional[CharIO] = None,
    *,
    options: Optional[RunOptions] = None,
) -> RunResult:
    options = options or RunOptions()
    io = io or StreamIO(sys.stdin, sys.stdout)
    machine = options.new_machine()
    executor = Executor(machine, io)

    start = time.perf_counter()
    executor.run(program)
    elapsed = time.perf_counter() - start
    logger.debug("executed %d instructions in %.2f ms", executor.steps, elapsed * 1000)
    return RunResult(program=program, machine=machine, steps=executor.steps)


def run_string(
    source: Union[str, bytes],
    io: Optional[CharIO] = None,
    *,
    options: Optional[RunOptions] = None,
) -> RunResult:
    return run_program(compile_string(source, options=options), io, options=options)


def run_file(
    path: Union[str, Path],
    io: Optional[CharIO] = None,
    *,
    options: Optional[RunOptions] = None,
) -> RunResult:
    return run_program(compile_file(path, options=options), io, options=options)
