from __future__ import annotations

import io

from enum import Enum
from typing import BinaryIO, Iterator, Optional, Tuple

from .errors import LexerIOError


class Symbol(Enum):
    INCREMENT = '+'
    DECREMENT = '-'
    SHIFT_LEFT = '<'
    SHIFT_RIGHT = '>'
    LOOP_START = '['
    LOOP_END = ']'
    OUTPUT = '.'
    INPUT = ','


_BYTE_TO_SYMBOL = {ord(s.value): s for s in Symbol}


def tokenize(byte: int) -> Optional[Symbol]:
    return _BYTE_TO_SYMBOL.get(byte)


class Lexer:
    """Turns a byte stream into ``Optional[Symbol]`` values, one per byte.

    Unrecognized bytes come out as ``None`` rather than being skipped, so the
    caller decides what to do with comments. The stream is consumed exactly
    once; iterating a second time picks up where the first iteration stopped.
    """

    def __init__(self, reader: BinaryIO):
        self.reader = reader
        self._lookahead: Optional[bytes] = None
        self.offset = -1
        self.line = 1
        self.column = 0
        self._after_newline = False

    @classmethod
    def from_bytes(cls, data: bytes) -> Lexer:
        return cls(io.BytesIO(data))

    @classmethod
    def from_string(cls, code: str, encoding: str = 'utf-8') -> Lexer:
        return cls.from_bytes(code.encode(encoding))

    @property
    def position(self) -> Tuple[int, int, int]:
        """(offset, line, column) of the last consumed byte."""
        return self.offset, self.line, self.column

    def _read_byte(self) -> bytes:
        try:
            data = self.reader.read(1)
        except OSError as e:
            raise LexerIOError(message=f"Error when reading a token: {e}") from e
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError(f"Lexer needs a binary reader, read() returned {type(data).__name__}")
        return data

    def eof(self) -> bool:
        if self._lookahead is None:
            self._lookahead = self._read_byte()
        return not self._lookahead

    def next_symbol(self) -> Optional[Symbol]:
        if self.eof():
            return None
        byte = self._lookahead[0]
        self._lookahead = None

        self.offset += 1
        if self._after_newline:
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self._after_newline = byte == 0x0A
        return tokenize(byte)

    def __iter__(self) -> Iterator[Optional[Symbol]]:
        while not self.eof():
            yield self.next_symbol()
