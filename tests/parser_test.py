import pytest

from ast_nodes import (
    Assign, Binary, Block, Conditional, ExprStmt, Grouping, If, Literal, SetBlock, Unary,
    VarDecl, Variable, While,
)
from errors import ParseError
from runner import compile_program


def parse_expr(source):
    program = compile_program(source + ";")
    stmt = program.statements[0]
    assert isinstance(stmt, ExprStmt)
    return stmt.expr


def test_let_without_initializer_defaults_to_nil():
    program = compile_program("let a;")
    decl = program.statements[0]
    assert isinstance(decl, VarDecl)
    assert decl.name == "a"
    assert isinstance(decl.initializer, Literal)
    assert decl.initializer.value is None


def test_program_is_immutable_sequence():
    program = compile_program("let a = 1; a = 2;")
    assert isinstance(program.statements, tuple)
    assert len(program.statements) == 2


def test_multiplication_binds_tighter_than_addition():
    node = parse_expr("1 + 2 * 3")
    assert isinstance(node, Binary) and node.op == "+"
    assert isinstance(node.right, Binary) and node.right.op == "*"


def test_binary_operators_are_left_associative():
    node = parse_expr("10 - 4 - 3")
    assert node.op == "-"
    assert isinstance(node.left, Binary) and node.left.op == "-"
    assert node.right.value == 3.0


def test_logical_precedence():
    node = parse_expr("a || b && c == d < e")
    assert node.op == "||"
    assert node.right.op == "&&"
    assert node.right.right.op == "=="
    assert node.right.right.right.op == "<"


def test_unary_nests():
    node = parse_expr("!-x")
    assert isinstance(node, Unary) and node.op == "!"
    assert isinstance(node.operand, Unary) and node.operand.op == "-"
    assert isinstance(node.operand.operand, Variable)


def test_ternary_is_right_associative():
    node = parse_expr("a ? b : c ? d : e")
    assert isinstance(node, Conditional)
    assert isinstance(node.else_expr, Conditional)
    assert node.else_expr.condition.name == "c"


def test_ternary_binds_looser_than_or():
    node = parse_expr("a || b ? 1 : 2")
    assert isinstance(node, Conditional)
    assert node.condition.op == "||"


def test_assignment_is_right_associative():
    node = parse_expr("a = b = 3")
    assert isinstance(node, Assign) and node.name == "a"
    assert isinstance(node.value, Assign) and node.value.name == "b"


def test_grouping_is_kept():
    node = parse_expr("(1 + 2) * 3")
    assert node.op == "*"
    assert isinstance(node.left, Grouping)


def test_invalid_assignment_target():
    with pytest.raises(ParseError) as info:
        compile_program("(a) = 1;")
    assert "Invalid assignment target" in info.value.message
    assert info.value.column == 5


def test_assignment_to_binary_is_rejected():
    with pytest.raises(ParseError):
        compile_program("a + b = 1;")


def test_for_desugars_to_block_and_while():
    program = compile_program("for (let i = 0; i < 3; i = i + 1) setBlock(i, 0, 0, \"stone\");")
    outer = program.statements[0]
    assert isinstance(outer, Block)
    init, loop = outer.statements
    assert isinstance(init, VarDecl) and init.name == "i"
    assert isinstance(loop, While)
    assert loop.condition.op == "<"
    assert isinstance(loop.body, Block)
    body, increment = loop.body.statements
    assert isinstance(body, SetBlock)
    assert isinstance(increment, ExprStmt)
    assert isinstance(increment.expr, Assign)


def test_for_with_empty_clauses():
    program = compile_program("for (;;) {}")
    loop = program.statements[0]
    assert isinstance(loop, While)
    assert isinstance(loop.condition, Literal) and loop.condition.value is True
    assert isinstance(loop.body, Block)
    assert loop.body.statements == ()


def test_for_with_expression_initializer():
    program = compile_program("let i; for (i = 0; i < 2;) {}")
    outer = program.statements[1]
    assert isinstance(outer, Block)
    assert isinstance(outer.statements[0], ExprStmt)
    # no increment: the body is used as-is
    assert isinstance(outer.statements[1].body, Block)
    assert outer.statements[1].body.statements == ()


def test_dangling_else_binds_to_nearest_if():
    program = compile_program("if (a) if (b) x = 1; else x = 2;")
    outer = program.statements[0]
    assert isinstance(outer, If)
    assert outer.else_branch is None
    assert isinstance(outer.then_branch, If)
    assert outer.then_branch.else_branch is not None


def test_set_block_statement():
    program = compile_program("setBlock(1, 2, 3, \"glass\");")
    stmt = program.statements[0]
    assert isinstance(stmt, SetBlock)
    assert [stmt.x.value, stmt.y.value, stmt.z.value] == [1.0, 2.0, 3.0]
    assert stmt.block.value == "glass"
    assert (stmt.line, stmt.column) == (1, 1)


def test_set_block_is_not_an_expression():
    with pytest.raises(ParseError):
        compile_program("let a = setBlock(1, 2, 3, \"x\");")


def test_set_block_requires_four_arguments():
    with pytest.raises(ParseError) as info:
        compile_program("setBlock(1, 2, 3);")
    assert info.value.message == "Expected ',' after z, found ')'"


def test_missing_semicolon_reports_found_token():
    with pytest.raises(ParseError) as info:
        compile_program("let a = 1\nlet b = 2;")
    assert info.value.message == "Expected ';' after variable declaration, found 'let'"
    assert (info.value.line, info.value.column) == (2, 1)


def test_unclosed_block_reports_end_of_input():
    with pytest.raises(ParseError) as info:
        compile_program("{ let a = 1;")
    assert "found end of input" in str(info.value)


def test_dot_is_not_valid_syntax():
    with pytest.raises(ParseError):
        compile_program("let a = 1.;")


def test_nodes_record_positions():
    program = compile_program("let a = 1;\nwhile (a) a = a - 1;")
    loop = program.statements[1]
    assert (loop.line, loop.column) == (2, 1)
    assert loop.body.expr.line == 2


def test_deeply_parenthesised_expression_parses():
    depth = 150
    program = compile_program("setBlock(" + "(" * depth + "1" + ")" * depth + ", 0, 0, \"stone\");")
    node = program.statements[0].x
    for _ in range(depth):
        assert isinstance(node, Grouping)
        node = node.expr
    assert node.value == 1.0


def test_deeply_nested_blocks_parse():
    depth = 400
    program = compile_program("{" * depth + "setBlock(0, 0, 0, \"s\");" + "}" * depth)
    node = program.statements[0]
    for _ in range(depth - 1):
        node = node.statements[0]
    assert isinstance(node.statements[0], SetBlock)


def test_runaway_nesting_is_a_parse_error():
    depth = 2000
    with pytest.raises(ParseError) as info:
        compile_program("let a = " + "(" * depth + "1" + ")" * depth + ";")
    assert info.value.message == "Expression nested too deeply"
    assert info.value.line == 1
