from .api import RunOptions, RunResult, compile_file, compile_string, run_file, run_program, run_string
from .errors import (
    BFError,
    BFIOError,
    BFParseError,
    CharInputError,
    CharOutputError,
    LexerIOError,
    UnmatchedLoopEnd,
    UnmatchedLoopStart,
    format_error,
)
from .executor import BufferIO, CharIO, Executor, StreamIO
from .ir import Add, Input, Loop, Move, Output, Program
from .lexer import Lexer, Symbol
from .machine import OverflowPolicy, TapeMachine
from .optimizer import OptimizerConfig, optimize, optimize_once
from .parser import Parser, parse

__all__ = [
    'Add',
    'BFError',
    'BFIOError',
    'BFParseError',
    'BufferIO',
    'CharInputError',
    'CharIO',
    'CharOutputError',
    'Executor',
    'Input',
    'Lexer',
    'LexerIOError',
    'Loop',
    'Move',
    'OptimizerConfig',
    'Output',
    'OverflowPolicy',
    'Parser',
    'Program',
    'RunOptions',
    'RunResult',
    'StreamIO',
    'Symbol',
    'TapeMachine',
    'UnmatchedLoopEnd',
    'UnmatchedLoopStart',
    'compile_file',
    'compile_string',
    'format_error',
    'optimize',
    'optimize_once',
    'parse',
    'run_file',
    'run_program',
    'run_string',
]
