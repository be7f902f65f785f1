from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from .lexer import Symbol


UNMATCHED_LOOP_END = "Error: ']' found with no matching '['."
UNMATCHED_LOOP_START = "Error: '[' found with no matching ']'."


def _build_context(lines: List[str], line_no_1: int, *, context: int = 2) -> str:
    idx = max(1, line_no_1)
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
    return "\n".join(out)


def _hint_for(err: BFError) -> Optional[str]:
    if isinstance(err, UnmatchedLoopEnd):
        return 'Remove the extra "]" or add the "[" that should open this loop.'
    if isinstance(err, UnmatchedLoopStart):
        return 'Add the "]" that closes this loop. The marked "[" is the innermost one left open.'
    if isinstance(err, CharInputError):
        return 'The program reads more characters than were supplied on stdin.'
    return None


@dataclass
class BFError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class BFParseError(BFError):
    symbol: Optional[Symbol] = None
    offset: int = 0
    line: int = 1
    column: int = 1


class UnmatchedLoopEnd(BFParseError):
    pass


class UnmatchedLoopStart(BFParseError):
    pass


@dataclass
class BFIOError(BFError):
    pass


class LexerIOError(BFIOError):
    pass


class CharInputError(BFIOError):
    pass


class CharOutputError(BFIOError):
    pass


def _category(err: BFError) -> str:
    if isinstance(err, BFParseError):
        return 'ParseError'
    if isinstance(err, LexerIOError):
        return 'SourceIOError'
    if isinstance(err, BFIOError):
        return 'RuntimeIOError'
    return 'Error'


def format_error(err: BFError, source: Optional[str] = None) -> str:
    """Render an error the way the command line reports it.

    Parse errors get their location and, when ``source`` is given, a few
    lines of surrounding code with the offending line marked.
    """
    head = f"{_category(err)}: {err.message}"
    if isinstance(err, BFParseError):
        head += f" (line {err.line}, column {err.column})"
        if source is not None:
            head += "\n" + _build_context(source.split('\n'), err.line)
    hint = _hint_for(err)
    hint_block = f"\nHint: {hint}" if hint else ""
    return f"{head}{hint_block}"
