from __future__ import annotations

import logging

from typing import BinaryIO, List, Tuple, Union

from .errors import UNMATCHED_LOOP_END, UNMATCHED_LOOP_START, UnmatchedLoopEnd, UnmatchedLoopStart
from .ir import Add, Input, Instruction, Loop, Move, Output, Program, emit
from .lexer import Lexer, Symbol

logger = logging.getLogger(__name__)

_SIMPLE = {
    Symbol.INCREMENT: Add(1),
    Symbol.DECREMENT: Add(255),
    Symbol.SHIFT_LEFT: Move(-1),
    Symbol.SHIFT_RIGHT: Move(1),
    Symbol.OUTPUT: Output(),
    Symbol.INPUT: Input(),
}


# Brainfuck grammar:
# code := (stmt_block)*
# stmt_block := stmt | loop
# loop := '[' stmt_block* ']'
# stmt := '+' | '-' | '<' | '>' | ',' | '.'
class Parser:
    def __init__(self, lexer: Lexer):
        self.lexer = lexer

    @classmethod
    def from_reader(cls, reader: BinaryIO) -> Parser:
        return cls(Lexer(reader))

    @classmethod
    def from_string(cls, code: str) -> Parser:
        return cls(Lexer.from_string(code))

    def parse(self) -> Program:
        # Each open loop keeps its body and the position of its '['.
        root: List[Instruction] = []
        stack: List[Tuple[List[Instruction], Tuple[int, int, int]]] = []
        current = root

        for symbol in self.lexer:
            if symbol is None:
                continue
            if symbol is Symbol.LOOP_START:
                stack.append((current, self.lexer.position))
                current = []
            elif symbol is Symbol.LOOP_END:
                if not stack:
                    offset, line, column = self.lexer.position
                    raise UnmatchedLoopEnd(
                        message=UNMATCHED_LOOP_END, symbol=symbol, offset=offset, line=line, column=column
                    )
                body = current
                current, _ = stack.pop()
                if body:
                    current.append(Loop(tuple(body)))
            else:
                current.append(_SIMPLE[symbol])

        if stack:
            _, (offset, line, column) = stack[-1]
            raise UnmatchedLoopStart(
                message=UNMATCHED_LOOP_START, symbol=Symbol.LOOP_START, offset=offset, line=line, column=column
            )

        program = tuple(root)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("parsed %d top-level instructions: %s", len(program), emit(program))
        return program


def parse(source: Union[str, bytes]) -> Program:
    if isinstance(source, bytes):
        return Parser(Lexer.from_bytes(source)).parse()
    return Parser.from_string(source).parse()
