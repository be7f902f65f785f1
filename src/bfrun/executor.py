from __future__ import annotations

from typing import BinaryIO, List, Optional, Protocol, TextIO

from .errors import CharInputError, CharOutputError
from .ir import Add, Input, Instruction, Loop, Move, Output, Program
from .machine import TapeMachine


class CharIO(Protocol):
    def read_char(self) -> str:
        ...

    def write_char(self, char: str) -> None:
        ...


class StreamIO:
    """Character I/O over a pair of text streams, one character per call.

    When ``instream`` exposes a binary ``buffer`` (as ``sys.stdin`` does),
    input is read one raw byte at a time, so a multi-byte character reaches
    the tape as its encoded bytes. Streams without one are read as text and
    ``TapeMachine.read_char`` keeps only the low byte of each code point.
    """

    def __init__(self, instream: TextIO, outstream: TextIO):
        self.instream = instream
        self.outstream = outstream
        self._raw_in: Optional[BinaryIO] = getattr(instream, 'buffer', None)

    def read_char(self) -> str:
        self.outstream.flush()
        try:
            if self._raw_in is not None:
                data = self._raw_in.read(1)
                char = chr(data[0]) if data else ""
            else:
                char = self.instream.read(1)
        except OSError as e:
            raise CharInputError(message=f"Failed to read a character: {e}") from e
        if not char:
            raise CharInputError(message="Input exhausted while the program was reading a character.")
        return char

    def write_char(self, char: str) -> None:
        try:
            self.outstream.write(char)
            self.outstream.flush()
        except OSError as e:
            raise CharOutputError(message=f"Failed to write a character: {e}") from e


class BufferIO:
    """In-memory character I/O, mostly for tests and embedding."""

    def __init__(self, input_text: str = ""):
        self._input = list(input_text)
        self._output: List[str] = []

    def read_char(self) -> str:
        if not self._input:
            raise CharInputError(message="Input exhausted while the program was reading a character.")
        return self._input.pop(0)

    def write_char(self, char: str) -> None:
        self._output.append(char)

    @property
    def output(self) -> str:
        return "".join(self._output)


class Executor:
    def __init__(self, machine: TapeMachine, io: CharIO):
        self.machine = machine
        self.io = io
        self.steps = 0

    def run(self, program: Program) -> None:
        machine = self.machine
        # Frames are [body, next index]; every frame above the first is a loop body.
        frames: List[list] = [[program, 0]]
        while frames:
            frame = frames[-1]
            body, i = frame
            if i >= len(body):
                if len(frames) > 1 and machine.is_nonzero():
                    frame[1] = 0
                else:
                    frames.pop()
                continue
            frame[1] = i + 1
            instruction = body[i]
            if isinstance(instruction, Loop):
                self.steps += 1
                if machine.is_nonzero():
                    frames.append([instruction.body, 0])
            else:
                self.execute(instruction)

    def execute(self, instruction: Instruction) -> None:
        machine = self.machine
        if isinstance(instruction, Loop):
            self.run((instruction,))
            return
        self.steps += 1
        if isinstance(instruction, Move):
            if instruction.n >= 0:
                machine.move_right(instruction.n)
            else:
                machine.move_left(-instruction.n)
        elif isinstance(instruction, Add):
            # 255 means "minus one"; identical to a modular add when cells wrap.
            delta = instruction.signed
            if delta >= 0:
                machine.add(delta)
            else:
                machine.subtract(-delta)
        elif isinstance(instruction, Output):
            self.io.write_char(machine.write_char())
        elif isinstance(instruction, Input):
            machine.read_char(self.io.read_char())
        else:
            raise TypeError(f"Unknown instruction: {instruction!r}")
