"""
Pull-based driver for MiniBlocks programs.

`build_structure` runs a program twice: once against a no-op sink to prove it
finishes without a runtime error, then again against the real sink. Placing
blocks cannot be undone, so a program that fails halfway must fail before the
first real placement.
"""

import logging
from collections import deque
from dataclasses import dataclass

from errors import MiniBlocksError
from interpreter import Interpreter
from lexer import Lexer
from parser import Parser

log = logging.getLogger(__name__)


@dataclass
class RunResult:
    emitted: int = 0
    cancelled: bool = False


def compile_program(source: str):
    """Lex and parse `source` into a Program. Raises LexError or ParseError."""
    tokens = Lexer(source).tokenize()
    return Parser(tokens).parse()


class Runner:
    """Yields SetBlockCommands one at a time, stepping the interpreter only as far as needed."""

    def __init__(self, program, max_steps: int | None = None):
        self.queue = deque()
        self.interpreter = Interpreter(program, emit=self.queue.append, max_steps=max_steps)

    def next_command(self):
        """Execute until the next setBlock is produced. Returns None once the program ends."""
        while not self.queue and not self.interpreter.done:
            self.interpreter.step()
        if self.queue:
            return self.queue.popleft()
        return None

    def __iter__(self):
        return self

    def __next__(self):
        cmd = self.next_command()
        if cmd is None:
            raise StopIteration
        return cmd


def run_program(program, on_set_block, should_stop=None, max_steps: int | None = None) -> RunResult:
    result = RunResult()
    runner = Runner(program, max_steps=max_steps)
    while True:
        if should_stop is not None and should_stop():
            result.cancelled = True
            return result
        cmd = runner.next_command()
        if cmd is None:
            return result
        on_set_block(cmd)
        result.emitted += 1


def _discard(command):
    pass


def build_structure(source: str, on_set_block, should_stop=None, max_steps: int | None = None) -> RunResult:
    program = compile_program(source)

    dry = run_program(program, _discard, should_stop=should_stop, max_steps=max_steps)
    if dry.cancelled:
        log.info("Build cancelled during validation")
        return RunResult(emitted=0, cancelled=True)
    log.info("Code validated (%d commands), running code for real now.", dry.emitted)

    def emit(cmd):
        log.debug("%s", cmd)
        on_set_block(cmd)

    result = run_program(program, emit, should_stop=should_stop, max_steps=max_steps)
    if result.cancelled:
        log.info("Build cancelled after %d of %d commands", result.emitted, dry.emitted)
    else:
        log.info("Build finished, %d commands placed", result.emitted)
    return result


def build_structure_from_code(source: str, on_set_block, on_error, on_finish,
                              should_stop=None, max_steps: int | None = None):
    """Callback form of build_structure: errors go to `on_error(message)` instead of raising."""
    try:
        result = build_structure(source, on_set_block, should_stop=should_stop, max_steps=max_steps)
    except MiniBlocksError as e:
        log.error("build structure err=%s", e)
        on_error(str(e))
        return None
    except Exception as e:
        # the sink can reject a command too (e.g. an unknown block id)
        message = str(e) or "unknown error"
        log.error("build structure err=%s", message, exc_info=True)
        on_error(message)
        return None
    on_finish()
    return result
