from __future__ import annotations

import argparse
import contextlib
import logging
import os
import sys

from typing import Iterator, List, Optional, TextIO

# termios only exists on unix; without it raw mode is simply not entered.
try:
    import termios

    TERMIOS_AVAILABLE = True
except ImportError:
    TERMIOS_AVAILABLE = False

from .api import RunOptions, compile_file, run_program
from .errors import BFError, format_error
from .executor import StreamIO
from .export import dump_tape
from .ir import emit
from .machine import DEFAULT_TAPE_SIZE, OverflowPolicy

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def raw_input_mode(stream: TextIO) -> Iterator[None]:
    """Turn off canonical (line buffered) input on ``stream`` for the duration.

    Does nothing when ``stream`` is not a terminal.
    """
    if not TERMIOS_AVAILABLE or not stream.isatty():
        yield
        return
    fd = stream.fileno()
    saved = termios.tcgetattr(fd)
    changed = list(saved)
    changed[3] = changed[3] & ~termios.ICANON
    termios.tcsetattr(fd, termios.TCSANOW, changed)
    try:
        yield
    finally:
        termios.tcsetattr(fd, termios.TCSANOW, saved)


def _read_source_text(path: str) -> Optional[str]:
    try:
        with open(path, 'rb') as f:
            return f.read().decode('utf-8', errors='replace')
    except OSError:
        return None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfrun",
        description="Brainfuck interpreter with a peephole optimizer.",
    )
    parser.add_argument("file", nargs="?", help="Source file to run")
    parser.add_argument("-s", "--size", type=int, default=DEFAULT_TAPE_SIZE,
                        help=f"Number of cells on the tape (default {DEFAULT_TAPE_SIZE})")
    parser.add_argument("-O", "--optimize", type=int, default=0, metavar="COUNT",
                        help="Optimizer passes to run. 0 disables the optimizer, "
                             "a negative value runs it until the code stops changing.")
    parser.add_argument("--clamp-tape", action="store_true",
                        help="Stop the cursor at the tape ends instead of wrapping around")
    parser.add_argument("--clamp-cells", action="store_true",
                        help="Saturate cell values at 0 and 255 instead of wrapping around")
    parser.add_argument("--emit", action="store_true",
                        help="Print the (optimized) program as Brainfuck and exit without running it")
    fmt = parser.add_mutually_exclusive_group()
    fmt.add_argument("--binary", dest="fmt", action="store_const", const="binary",
                     help="Write the tape as binary digits. Exclusive with --hex and --decimal.")
    fmt.add_argument("--hex", dest="fmt", action="store_const", const="hex",
                     help="Write the tape as hex. Exclusive with --binary and --decimal.")
    fmt.add_argument("--decimal", dest="fmt", action="store_const", const="decimal",
                     help="Write the tape as decimal numbers. Exclusive with --binary and --hex.")
    parser.add_argument("--output", metavar="FILE",
                        help="Write the final tape to FILE (raw bytes unless a format flag is given)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log pipeline diagnostics to stderr")
    return parser


def options_from_args(args: argparse.Namespace) -> RunOptions:
    if args.optimize == 0:
        optimize = None
    elif args.optimize < 0:
        optimize = 0
    else:
        optimize = args.optimize
    return RunOptions(
        tape_size=args.size,
        tape_policy=OverflowPolicy.CLAMP if args.clamp_tape else OverflowPolicy.WRAP,
        cell_policy=OverflowPolicy.CLAMP if args.clamp_cells else OverflowPolicy.WRAP,
        optimize=optimize,
    )


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)5s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if args.file is None:
        print("Error: No file has been specified", file=sys.stderr)
        return 1
    if os.path.isdir(args.file):
        print("Error: Source code path is a directory.", file=sys.stderr)
        return 1
    if args.size <= 0:
        print(f"Error: tape size must be positive, got {args.size}", file=sys.stderr)
        return 1

    options = options_from_args(args)
    try:
        program = compile_file(args.file, options=options)
        if args.emit:
            sys.stdout.write(emit(program) + "\n")
            return 0
        with raw_input_mode(sys.stdin):
            result = run_program(program, StreamIO(sys.stdin, sys.stdout), options=options)
    except BFError as e:
        print(format_error(e, _read_source_text(args.file)), file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.output is None and args.fmt is not None:
        sys.stdout.write("\n" + dump_tape(result.machine.cells, args.fmt).decode('ascii'))
    elif args.output is not None:
        data = dump_tape(result.machine.cells, args.fmt or 'raw')
        try:
            with open(args.output, 'wb') as f:
                f.write(data)
        except OSError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        logger.debug("wrote %d bytes of tape data to %s", len(data), args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
