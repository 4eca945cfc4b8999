from __future__ import annotations

import argparse
import sys
from typing import Callable, Dict, List, Optional, TextIO

from .config import AllocatorConfig
from .memory_manager import AddressSpace
from .report import format_snapshot, format_stats
from .results import FailureReason
from .sizes import parse_size

PROMPT = "allocator> "

HELP_TEXT = """Commands:
  RQ <name> <size[K|M]> [f|b|w] - Request (first/best/worst)
  RL <name> - Release
  CMP | COMPACT - Compact memory
  STAT - Show segments
  STATS - Show usage summary
  SIZE <size[K|M]> - Reinitialize memory size
  X | EXIT - Exit"""

_FAILURE_MESSAGES = {
    FailureReason.ZERO_SIZE: "-> Occupation cancelled for size 0",
    FailureReason.INVALID_NAME: "-> Invalid process name",
    FailureReason.DUPLICATE_NAME: "-> Process name already exists: [{name}]",
    FailureReason.INSUFFICIENT_SPACE: "-> Not enough space available for [{name}]",
}

_EXIT_COMMANDS = {"X", "EXIT", "Q", "QUIT"}


class AllocatorShell:
    """
    Line-oriented front end for an AddressSpace.

    Parses commands, converts size strings and prints results; all allocation
    logic stays in the address space.
    """

    def __init__(self, space: AddressSpace, out: Optional[TextIO] = None) -> None:
        self.space = space
        self.out = out or sys.stdout
        self._commands: Dict[str, Callable[[List[str]], None]] = {
            "HELP": self._help,
            "?": self._help,
            "SIZE": self._size,
            "RQ": self._request,
            "RL": self._release,
            "CMP": self._compact,
            "COMPACT": self._compact,
            "STAT": self._stat,
            "STATS": self._stats,
        }

    def _print(self, message: str) -> None:
        print(message, file=self.out)

    def execute(self, line: str) -> bool:
        """Run one command line. Returns False when the shell should exit."""
        tokens = line.split()
        if not tokens:
            return True
        command = tokens[0].upper()
        if command in _EXIT_COMMANDS:
            return False
        handler = self._commands.get(command)
        if handler is not None:
            handler(tokens)
            return True
        size = parse_size(tokens[0], self.space.max_size)
        if size is not None:
            self._reinitialize(size)
        else:
            self._print("Unknown command. Type HELP.")
        return True

    def run(self, stream: TextIO, *, interactive: bool = False) -> None:
        while True:
            if interactive:
                self.out.write(PROMPT)
                self.out.flush()
            line = stream.readline()
            if not line:
                break
            if not self.execute(line):
                break

    def _help(self, tokens: List[str]) -> None:
        self._print(HELP_TEXT)

    def _size(self, tokens: List[str]) -> None:
        if len(tokens) < 2:
            self._print("Usage: SIZE <size>")
            return
        size = parse_size(tokens[1], self.space.max_size)
        if size is None:
            self._print("Invalid size")
            return
        self._reinitialize(size)

    def _reinitialize(self, size: int) -> None:
        capacity = self.space.initialize(size)
        self._print(f"-> Allocated {capacity}")

    def _request(self, tokens: List[str]) -> None:
        if len(tokens) < 3:
            self._print("Usage: RQ <name> <size> [f|b|w]")
            return
        name = tokens[1]
        size = parse_size(tokens[2], self.space.max_size)
        if size is None:
            self._print("Invalid size")
            return
        strategy = tokens[3] if len(tokens) >= 4 else None
        result = self.space.request(name, size, strategy)
        if result:
            self._print(f"-> Allocated {size} for [{name}] successfully.")
        else:
            self._print(_FAILURE_MESSAGES[result.reason].format(name=name))

    def _release(self, tokens: List[str]) -> None:
        if len(tokens) < 2:
            self._print("Usage: RL <name>")
            return
        name = tokens[1]
        length = self.space.release_by_name(name)
        if length is None:
            self._print(f"-> No such process: {name}")
            return
        self._print(f"-> Released [{name}]: {length}")

    def _compact(self, tokens: List[str]) -> None:
        self.space.compact()
        self._print("-> Successfully compacted memory")

    def _stat(self, tokens: List[str]) -> None:
        for line in format_snapshot(self.space.snapshot()):
            self._print(line)

    def _stats(self, tokens: List[str]) -> None:
        self._print(format_stats(self.space.stats()))


def _size_argument(value: str) -> int:
    size = parse_size(value)
    if size is None:
        raise argparse.ArgumentTypeError(f"invalid size: {value!r}")
    return size


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Simple contiguous memory allocator shell.")
    parser.add_argument("--size", type=_size_argument, default=1 << 20, help="Initial address space size (e.g. 1M, 64K).")
    parser.add_argument("--strategy", type=str, default="f", help="Default placement strategy: f, b or w.")
    parser.add_argument("--script", type=str, default=None, help="Read commands from this file instead of stdin.")
    parser.add_argument("--no-marking", action="store_true", help="Do not stamp owner-id marker bytes.")
    parser.add_argument("--thread-safe", action="store_true", help="Guard the address space with a lock.")
    parser.add_argument("--profile-dir", type=str, default=None, help="Write allocator events as JSONL/CSV here.")
    parser.add_argument("--run-id", type=str, default=None, help="Name used for profiler output files.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = AllocatorConfig.from_args(args)
    profiler = None
    if config.profile_dir:
        from experiments.instrumentation import MemoryProfiler

        profiler = MemoryProfiler(run_id=config.run_id, output_dir=config.profile_dir)
    shell = AllocatorShell(config.build(profiler=profiler))

    if args.script:
        with open(args.script, "r", encoding="utf-8") as handle:
            shell.run(handle)
    else:
        print("Simple contiguous allocator. Type HELP for commands.")
        shell.run(sys.stdin, interactive=sys.stdin.isatty())

    if profiler:
        profiler.flush()
    return 0
