from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

CELL_MODULUS = 256


# ---------------- IR Nodes ----------------
@dataclass(frozen=True)
class Move:
    n: int  # net >/<, positive is right


@dataclass(frozen=True)
class Add:
    n: int  # net +/- on current cell, modulo 256

    def __post_init__(self) -> None:
        if not 0 <= self.n < CELL_MODULUS:
            raise ValueError(f"Add delta out of byte range: {self.n}")

    @classmethod
    def of(cls, delta: int) -> Add:
        return cls(delta % CELL_MODULUS)

    @property
    def signed(self) -> int:
        return to_signed(self.n)


@dataclass(frozen=True)
class Output:
    pass


@dataclass(frozen=True)
class Input:
    pass


@dataclass(frozen=True)
class Loop:
    body: Tuple["Instruction", ...]


Instruction = Union[Move, Add, Output, Input, Loop]
Program = Tuple[Instruction, ...]


def to_signed(byte: int) -> int:
    """Read a 0..255 delta as two's complement (255 -> -1)."""
    return byte - CELL_MODULUS if byte >= CELL_MODULUS // 2 else byte


# ---------------- Emit + counts ----------------
# Walkers are iterative; loop nesting may exceed the recursion limit.
def emit(nodes: Program) -> str:
    out = []
    stack = [iter(nodes)]
    while stack:
        n = next(stack[-1], None)
        if n is None:
            stack.pop()
            if stack:
                out.append("]")
            continue
        if isinstance(n, Add):
            s = n.signed
            out.append(("+" * s) if s > 0 else ("-" * (-s)))
        elif isinstance(n, Move):
            out.append((">" * n.n) if n.n > 0 else ("<" * (-n.n)))
        elif isinstance(n, Output):
            out.append(".")
        elif isinstance(n, Input):
            out.append(",")
        elif isinstance(n, Loop):
            out.append("[")
            stack.append(iter(n.body))
    return "".join(out)


def count_instructions(nodes: Program) -> int:
    """Instruction count including everything nested inside loops."""
    c = 0
    stack = [nodes]
    while stack:
        body = stack.pop()
        c += len(body)
        stack.extend(n.body for n in body if isinstance(n, Loop))
    return c


def same_program(first: Program, other: Program) -> bool:
    """Structural equality of two programs, loop bodies included."""
    stack = [(first, other)]
    while stack:
        a, b = stack.pop()
        if len(a) != len(b):
            return False
        for x, y in zip(a, b):
            if isinstance(x, Loop) and isinstance(y, Loop):
                stack.append((x.body, y.body))
            elif isinstance(x, Loop) or isinstance(y, Loop) or x != y:
                return False
    return True
