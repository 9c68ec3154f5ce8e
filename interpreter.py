import math
import re
from dataclasses import dataclass

from ast_nodes import (
    Literal, Variable, Assign, Unary, Binary, Conditional, Grouping,
    ExprStmt, VarDecl, Block, If, While, SetBlock,
    nesting_headroom,
)
from environment import Environment
from errors import MiniBlocksRuntimeError

MIN_COORDINATE = -(2 ** 31)
MAX_COORDINATE = 2 ** 31 - 1

_INTEGER_TEXT = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class SetBlockCommand:
    x: int
    y: int
    z: int
    block_name: str

    @property
    def resource_location(self) -> str:
        if ":" in self.block_name:
            return self.block_name
        return f"minecraft:{self.block_name}"

    def __str__(self) -> str:
        return f"setBlock({self.x}, {self.y}, {self.z}, \"{self.block_name}\")"


class Frame:
    def __init__(self, statements, on_close=None):
        self.statements = statements
        self.index = 0              # next statement to run
        self.on_close = on_close    # called once when the frame is popped

    def exhausted(self) -> bool:
        return self.index >= len(self.statements)


class LoopFrame(Frame):
    # Revisited after every body run; the condition decides whether to go again.
    def __init__(self, condition, body):
        super().__init__(())
        self.condition = condition
        self.body = body


# ---------- value helpers ----------

def is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_truthy(value) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        return value != 0
    # strings are always true, the empty string included
    return True


def is_equal(a, b) -> bool:
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    if is_number(a) and is_number(b):
        return a == b
    return stringify(a) == stringify(b)


def stringify(value) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if float(value).is_integer():
            return str(int(value))
        return repr(float(value))
    return str(value)


def divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def remainder(a: float, b: float) -> float:
    # truncated remainder, sign follows the dividend
    if b == 0 or math.isinf(a):
        return math.nan
    return math.fmod(a, b)


def to_coordinate(value, axis: str) -> int:
    n = None
    if is_number(value):
        if math.isfinite(value):
            n = math.floor(value + 0.5)
    elif isinstance(value, str) and _INTEGER_TEXT.fullmatch(value):
        n = int(value)

    if n is None or n < MIN_COORDINATE or n > MAX_COORDINATE:
        raise MiniBlocksRuntimeError(f"Expected integer-like value for {axis}, got {stringify(value)}")
    return n


def _no_op(command):
    pass


class Interpreter:
    def __init__(self, program, emit=None, max_steps: int | None = None):
        self.program = program
        self.emit = emit or _no_op
        self.max_steps = max_steps  # set to an int to guard against infinite loops

        self.env = Environment()
        self.frames = [Frame(program.statements)]
        self.steps = 0
        self.emitted = 0

    @property
    def done(self) -> bool:
        return not self.frames

    def step(self) -> bool:
        """Run one unit of work. Returns True if a SetBlockCommand was emitted."""
        if not self.frames:
            return False

        if self.max_steps is not None and self.steps >= self.max_steps:
            self.frames.clear()
            raise MiniBlocksRuntimeError("Step limit exceeded (possible infinite loop)")
        self.steps += 1

        frame = self.frames[-1]

        if isinstance(frame, LoopFrame):
            node = frame.condition
        elif frame.exhausted():
            self.frames.pop()
            if frame.on_close is not None:
                frame.on_close()
            return False
        else:
            node = frame.statements[frame.index]
            frame.index += 1

        before = self.emitted
        try:
            with nesting_headroom():
                if isinstance(frame, LoopFrame):
                    self.revisit_loop(frame)
                else:
                    self.execute(node)
        except MiniBlocksRuntimeError as e:
            # any failure aborts the run
            self.frames.clear()
            if e.line is None:
                e.line = node.line
                e.column = node.column
            raise
        except RecursionError as e:
            self.frames.clear()
            raise MiniBlocksRuntimeError("Expression nested too deeply", node.line, node.column) from e
        return self.emitted > before

    def revisit_loop(self, frame):
        if is_truthy(self.evaluate(frame.condition)):
            self.frames.append(Frame((frame.body,)))
        else:
            self.frames.pop()

    # ---------- statements ----------

    def execute(self, node):
        if isinstance(node, ExprStmt):
            self.evaluate(node.expr)
            return

        if isinstance(node, VarDecl):
            self.env.define(node.name, self.evaluate(node.initializer))
            return

        if isinstance(node, Block):
            self.enter_block(node)
            return

        if isinstance(node, If):
            if is_truthy(self.evaluate(node.condition)):
                self.frames.append(Frame((node.then_branch,)))
            elif node.else_branch is not None:
                self.frames.append(Frame((node.else_branch,)))
            return

        if isinstance(node, While):
            self.frames.append(LoopFrame(node.condition, node.body))
            return

        if isinstance(node, SetBlock):
            x = to_coordinate(self.evaluate(node.x), "x")
            y = to_coordinate(self.evaluate(node.y), "y")
            z = to_coordinate(self.evaluate(node.z), "z")
            block_name = stringify(self.evaluate(node.block))
            self.emitted += 1
            self.emit(SetBlockCommand(x, y, z, block_name))
            return

        raise MiniBlocksRuntimeError(f"Unknown statement: {type(node).__name__}")

    def enter_block(self, block):
        parent = self.env
        self.env = Environment(parent)

        def close():
            self.env = parent

        self.frames.append(Frame(block.statements, on_close=close))

    # ---------- expressions ----------

    def evaluate(self, node):
        if isinstance(node, Literal):
            return node.value

        if isinstance(node, Grouping):
            return self.evaluate(node.expr)

        if isinstance(node, Variable):
            return self.env.get(node.name)

        if isinstance(node, Assign):
            value = self.evaluate(node.value)
            self.env.assign(node.name, value)
            return value

        if isinstance(node, Conditional):
            if is_truthy(self.evaluate(node.condition)):
                return self.evaluate(node.then_expr)
            return self.evaluate(node.else_expr)

        if isinstance(node, Unary):
            value = self.evaluate(node.operand)
            if node.op == "!":
                return not is_truthy(value)
            self.require_number(node.op, value)
            return -value

        if isinstance(node, Binary):
            return self.evaluate_binary(node)

        raise MiniBlocksRuntimeError(f"Unknown expression: {type(node).__name__}")

    def evaluate_binary(self, node):
        # Left-associative chains nest down the left side; walk that spine in a
        # loop so long sums like 1+1+...+1 do not recurse once per operator.
        spine = []
        while isinstance(node, Binary):
            spine.append(node)
            node = node.left

        value = self.evaluate(node)
        for link in reversed(spine):
            value = self.apply_binary(link, value)
        return value

    def apply_binary(self, node, a):
        op = node.op

        # short-circuit
        if op == "||":
            return is_truthy(a) or is_truthy(self.evaluate(node.right))
        if op == "&&":
            return is_truthy(a) and is_truthy(self.evaluate(node.right))

        b = self.evaluate(node.right)

        if op == "+":
            if is_number(a) and is_number(b):
                return a + b
            return stringify(a) + stringify(b)
        if op == "==":
            return is_equal(a, b)
        if op == "!=":
            return not is_equal(a, b)

        self.require_number(op, a, b)
        if op == "-":
            return a - b
        if op == "*":
            return a * b
        if op == "/":
            return divide(a, b)
        if op == "%":
            return remainder(a, b)
        if op == "<":
            return a < b
        if op == "<=":
            return a <= b
        if op == ">":
            return a > b
        if op == ">=":
            return a >= b

        raise MiniBlocksRuntimeError(f"Unknown binary operator: {op}")

    def require_number(self, op, *values):
        for value in values:
            if not is_number(value):
                raise MiniBlocksRuntimeError(f"Operand must be a number at token '{op}'")
