from ast_nodes import (
    Program, Literal, Variable, Assign, Unary, Binary, Conditional, Grouping,
    ExprStmt, VarDecl, Block, If, While, SetBlock,
    nesting_headroom,
)
from errors import ParseError


class Parser:
    def __init__(self, tokens):
        if not tokens or tokens[-1].type != "EOF":
            raise ValueError("token list must end with an EOF token")
        self.tokens = tokens
        self.pos = 0
        self.current_token = self.tokens[0]

    # move to next token, but only if it matches what we expect
    def eat(self, token_type, expected=None):
        tok = self.current_token
        if tok.type != token_type:
            self.error_here(f"Expected {expected or token_type}")
        self.advance()
        return tok

    def advance(self):
        if self.current_token.type != "EOF":
            self.pos += 1
            self.current_token = self.tokens[self.pos]

    def check(self, *token_types):
        return self.current_token.type in token_types

    def error_here(self, message):
        tok = self.current_token
        found = "end of input" if tok.type == "EOF" else f"'{tok.lexeme}'"
        raise ParseError(f"{message}, found {found}", tok.line, tok.column)

    def at(self, node, tok):
        node.line = tok.line
        node.column = tok.column
        return node

    # ---------- TOP LEVEL ----------
    def parse(self):
        statements = []
        with nesting_headroom():
            try:
                while self.current_token.type != "EOF":
                    statements.append(self.declaration())
            except RecursionError:
                tok = self.current_token
                raise ParseError("Expression nested too deeply", tok.line, tok.column) from None
        return Program(statements)

    # ---------- STATEMENTS ----------
    def declaration(self):
        if self.check("LET"):
            decl = self.var_declaration()
            self.eat("SEMICOLON", "';' after variable declaration")
            return decl
        return self.statement()

    def var_declaration(self):
        tok = self.eat("LET")
        name = self.eat("IDENT", "variable name").lexeme

        initializer = None
        if self.check("EQUAL"):
            self.eat("EQUAL")
            initializer = self.expr()
        if initializer is None:
            initializer = self.at(Literal(None), tok)
        return self.at(VarDecl(name, initializer), tok)

    def statement(self):
        if self.check("LBRACE"):
            return self.block()
        if self.check("IF"):
            return self.if_statement()
        if self.check("WHILE"):
            return self.while_statement()
        if self.check("FOR"):
            return self.for_statement()
        if self.check("SETBLOCK"):
            return self.set_block_statement()

        tok = self.current_token
        stmt = self.at(ExprStmt(self.expr()), tok)
        self.eat("SEMICOLON", "';' after expression")
        return stmt

    def block(self):
        tok = self.eat("LBRACE")
        statements = []
        while not self.check("RBRACE", "EOF"):
            statements.append(self.declaration())
        self.eat("RBRACE", "'}' after block")
        return self.at(Block(statements), tok)

    def if_statement(self):
        # Grammar:
        #   IF ( expr ) statement (ELSE statement)?
        # A dangling else binds to the nearest if.
        tok = self.eat("IF")
        self.eat("LPAREN", "'(' after if")
        condition = self.expr()
        self.eat("RPAREN", "')' after condition")
        then_branch = self.statement()

        else_branch = None
        if self.check("ELSE"):
            self.eat("ELSE")
            else_branch = self.statement()
        return self.at(If(condition, then_branch, else_branch), tok)

    def while_statement(self):
        tok = self.eat("WHILE")
        self.eat("LPAREN", "'(' after while")
        condition = self.expr()
        self.eat("RPAREN", "')' after condition")
        body = self.statement()
        return self.at(While(condition, body), tok)

    def for_statement(self):
        # for (init; cond; incr) body  ->  { init; while (cond) { body; incr; } }
        tok = self.eat("FOR")
        self.eat("LPAREN", "'(' after for")

        initializer = None
        if self.check("SEMICOLON"):
            self.eat("SEMICOLON")
        else:
            if self.check("LET"):
                initializer = self.var_declaration()
            else:
                init_tok = self.current_token
                initializer = self.at(ExprStmt(self.expr()), init_tok)
            self.eat("SEMICOLON", "';' after for initializer")

        condition = None
        if not self.check("SEMICOLON"):
            condition = self.expr()
        self.eat("SEMICOLON", "';' after loop condition")

        increment = None
        if not self.check("RPAREN"):
            incr_tok = self.current_token
            increment = self.at(ExprStmt(self.expr()), incr_tok)
        self.eat("RPAREN", "')' after for clauses")

        body = self.statement()

        if increment is not None:
            body = self.at(Block([body, increment]), tok)
        if condition is None:
            condition = self.at(Literal(True), tok)
        loop = self.at(While(condition, body), tok)
        if initializer is not None:
            loop = self.at(Block([initializer, loop]), tok)
        return loop

    def set_block_statement(self):
        tok = self.eat("SETBLOCK")
        self.eat("LPAREN", "'(' after setBlock")
        x = self.expr()
        self.eat("COMMA", "',' after x")
        y = self.expr()
        self.eat("COMMA", "',' after y")
        z = self.expr()
        self.eat("COMMA", "',' after z")
        block = self.expr()
        self.eat("RPAREN", "')' after arguments")
        self.eat("SEMICOLON", "';' after setBlock")
        return self.at(SetBlock(x, y, z, block), tok)

    # ---------- EXPRESSIONS ----------
    # expr -> assignment
    def expr(self):
        return self.assignment()

    # assignment -> conditional (= assignment)?
    def assignment(self):
        node = self.conditional()
        if self.check("EQUAL"):
            equals = self.current_token
            self.eat("EQUAL")
            value = self.assignment()
            if isinstance(node, Variable):
                return self.at(Assign(node.name, value), equals)
            raise ParseError(f"Invalid assignment target, found '{equals.lexeme}'", equals.line, equals.column)
        return node

    # conditional -> or_expr (? expr : conditional)?
    def conditional(self):
        node = self.or_expr()
        if self.check("QUESTION"):
            tok = self.current_token
            self.eat("QUESTION")
            then_expr = self.expr()
            self.eat("COLON", "':' in ternary expression")
            else_expr = self.conditional()
            node = self.at(Conditional(node, then_expr, else_expr), tok)
        return node

    # or_expr -> and_expr (|| and_expr)*
    def or_expr(self):
        return self.binary_level(self.and_expr, "OR_OR")

    # and_expr -> equality (&& equality)*
    def and_expr(self):
        return self.binary_level(self.equality, "AND_AND")

    # equality -> comparison ((==|!=) comparison)*
    def equality(self):
        return self.binary_level(self.comparison, "EQUAL_EQUAL", "BANG_EQUAL")

    # comparison -> term ((<|<=|>|>=) term)*
    def comparison(self):
        return self.binary_level(self.term, "LESS", "LESS_EQUAL", "GREATER", "GREATER_EQUAL")

    # term -> factor ((+|-) factor)*
    def term(self):
        return self.binary_level(self.factor, "PLUS", "MINUS")

    # factor -> unary ((*|/|%) unary)*
    def factor(self):
        return self.binary_level(self.unary, "STAR", "SLASH", "PERCENT")

    def binary_level(self, operand, *op_types):
        node = operand()
        while self.check(*op_types):
            op_token = self.current_token
            self.advance()
            right = operand()
            node = self.at(Binary(node, op_token.lexeme, right), op_token)
        return node

    # unary -> (! | -) unary | primary
    def unary(self):
        if self.check("BANG", "MINUS"):
            tok = self.current_token
            self.advance()
            return self.at(Unary(tok.lexeme, self.unary()), tok)
        return self.primary()

    # primary -> NUMBER | STRING | true | false | nil | IDENT | ( expr )
    def primary(self):
        tok = self.current_token

        if tok.type in ("NUMBER", "STRING"):
            self.advance()
            return self.at(Literal(tok.value), tok)

        if tok.type == "TRUE":
            self.advance()
            return self.at(Literal(True), tok)

        if tok.type == "FALSE":
            self.advance()
            return self.at(Literal(False), tok)

        if tok.type == "NIL":
            self.advance()
            return self.at(Literal(None), tok)

        if tok.type == "IDENT":
            self.advance()
            return self.at(Variable(tok.lexeme), tok)

        if tok.type == "LPAREN":
            self.advance()
            inner = self.expr()
            self.eat("RPAREN", "')' after expression")
            return self.at(Grouping(inner), tok)

        self.error_here("Expected expression")
