import sys
from contextlib import contextmanager

# Recursion budget for walking deeply nested trees (parser and evaluator both recurse per level).
NESTING_RECURSION_LIMIT = 4000


@contextmanager
def nesting_headroom(limit=NESTING_RECURSION_LIMIT):
    saved = sys.getrecursionlimit()
    if saved < limit:
        sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        sys.setrecursionlimit(saved)


class ASTNode:
    # Source position (1-based) of the token that introduced the node. Parser sets these.
    line: int | None = None
    column: int | None = None


class Program(ASTNode):
    def __init__(self, statements):
        self.statements = tuple(statements)


# ---------- expressions ----------

class Literal(ASTNode):
    def __init__(self, value):
        self.value = value  # float | str | bool | None


class Variable(ASTNode):
    def __init__(self, name):
        self.name = name


class Assign(ASTNode):
    def __init__(self, name, value):
        self.name = name
        self.value = value  # expr


class Unary(ASTNode):
    def __init__(self, op, operand):
        self.op = op  # "!" or "-"
        self.operand = operand


class Binary(ASTNode):
    def __init__(self, left, op, right):
        self.left = left
        self.op = op
        self.right = right


class Conditional(ASTNode):
    def __init__(self, condition, then_expr, else_expr):
        self.condition = condition
        self.then_expr = then_expr
        self.else_expr = else_expr


class Grouping(ASTNode):
    def __init__(self, expr):
        self.expr = expr


# ---------- statements ----------

class ExprStmt(ASTNode):
    def __init__(self, expr):
        self.expr = expr


class VarDecl(ASTNode):
    def __init__(self, name, initializer):
        self.name = name
        self.initializer = initializer  # expr, Literal(None) when omitted


class Block(ASTNode):
    def __init__(self, statements):
        self.statements = tuple(statements)


class If(ASTNode):
    def __init__(self, condition, then_branch, else_branch=None):
        self.condition = condition
        self.then_branch = then_branch
        self.else_branch = else_branch


class While(ASTNode):
    def __init__(self, condition, body):
        self.condition = condition
        self.body = body


class SetBlock(ASTNode):
    def __init__(self, x, y, z, block):
        self.x = x
        self.y = y
        self.z = z
        self.block = block
