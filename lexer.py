from errors import LexError


class Token:
    def __init__(self, type, lexeme, value=None, line=1, column=1):
        self.type = type
        self.lexeme = lexeme
        self.value = value
        self.line = line
        self.column = column

    def __repr__(self):
        if self.value is not None:
            return f"{self.type}({self.value!r})"
        return f"{self.type}"


KEYWORDS = {
    "let": "LET",
    "if": "IF",
    "else": "ELSE",
    "while": "WHILE",
    "for": "FOR",
    "true": "TRUE",
    "false": "FALSE",
    "nil": "NIL",
    "setBlock": "SETBLOCK",
}

# single characters that never start a longer token
SINGLE_CHAR_TOKENS = {
    "(": "LPAREN",
    ")": "RPAREN",
    "{": "LBRACE",
    "}": "RBRACE",
    ",": "COMMA",
    ".": "DOT",
    ";": "SEMICOLON",
    "+": "PLUS",
    "-": "MINUS",
    "*": "STAR",
    "%": "PERCENT",
    "?": "QUESTION",
    ":": "COLON",
}

# <char> or <char>= pairs
EQUALS_PAIRS = {
    "!": ("BANG", "BANG_EQUAL"),
    "=": ("EQUAL", "EQUAL_EQUAL"),
    "<": ("LESS", "LESS_EQUAL"),
    ">": ("GREATER", "GREATER_EQUAL"),
}

ESCAPES = {
    "n": "\n",
    "t": "\t",
    "\"": "\"",
    "\\": "\\",
}


def is_alpha(ch):
    return ch is not None and (("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_")


def is_digit(ch):
    return ch is not None and "0" <= ch <= "9"


class Lexer:
    def __init__(self, text):
        self.text = text
        self.pos = 0
        self.current_char = text[0] if text else None
        self.line = 1
        self.column = 1

    def advance(self):
        # track line/column based on current_char before moving
        if self.current_char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.pos += 1
        if self.pos >= len(self.text):
            self.current_char = None
        else:
            self.current_char = self.text[self.pos]

    def peek(self):
        nxt = self.pos + 1
        if nxt >= len(self.text):
            return None
        return self.text[nxt]

    def error(self, message, line=None, column=None):
        raise LexError(
            message,
            self.line if line is None else line,
            self.column if column is None else column,
        )

    def skip_whitespace(self):
        while self.current_char is not None and self.current_char in " \t\r\n":
            self.advance()

    def skip_line_comment(self):
        while self.current_char is not None and self.current_char != "\n":
            self.advance()

    def skip_block_comment(self):
        # consume /* ; comments do not nest and may run to end of input
        self.advance()
        self.advance()
        while self.current_char is not None:
            if self.current_char == "*" and self.peek() == "/":
                self.advance()
                self.advance()
                return
            self.advance()

    def read_identifier(self):
        start_line, start_col, start = self.line, self.column, self.pos
        while is_alpha(self.current_char) or is_digit(self.current_char):
            self.advance()
        text = self.text[start:self.pos]
        return Token(KEYWORDS.get(text, "IDENT"), text, line=start_line, column=start_col)

    def read_number(self):
        start_line, start_col, start = self.line, self.column, self.pos
        while is_digit(self.current_char):
            self.advance()

        # a dot only belongs to the number when a digit follows it
        if self.current_char == "." and is_digit(self.peek()):
            self.advance()
            while is_digit(self.current_char):
                self.advance()

        text = self.text[start:self.pos]
        return Token("NUMBER", text, float(text), line=start_line, column=start_col)

    def read_string(self):
        start_line, start_col, start = self.line, self.column, self.pos
        self.advance()  # skip opening quote
        result = ""

        while self.current_char is not None and self.current_char != "\"":
            if self.current_char == "\\":
                self.advance()  # consume backslash
                if self.current_char is None:
                    break
                # unknown escape: keep the character literally
                result += ESCAPES.get(self.current_char, self.current_char)
                self.advance()
                continue

            result += self.current_char
            self.advance()

        if self.current_char != "\"":
            self.error("Unterminated string", start_line, start_col)

        self.advance()  # skip closing quote
        return Token("STRING", self.text[start:self.pos], result, line=start_line, column=start_col)

    def read_operator(self):
        start_line, start_col = self.line, self.column
        ch = self.current_char

        if ch in SINGLE_CHAR_TOKENS:
            self.advance()
            return Token(SINGLE_CHAR_TOKENS[ch], ch, line=start_line, column=start_col)

        if ch in EQUALS_PAIRS:
            single, double = EQUALS_PAIRS[ch]
            if self.peek() == "=":
                self.advance()
                self.advance()
                return Token(double, ch + "=", line=start_line, column=start_col)
            self.advance()
            return Token(single, ch, line=start_line, column=start_col)

        if ch == "/":
            self.advance()
            return Token("SLASH", ch, line=start_line, column=start_col)

        if ch in "&|":
            if self.peek() == ch:
                self.advance()
                self.advance()
                return Token("AND_AND" if ch == "&" else "OR_OR", ch * 2, line=start_line, column=start_col)
            self.error(f"Unexpected character: {ch} (did you mean {ch * 2}?)")

        self.error(f"Unexpected character: {ch}")

    def get_next_token(self):
        while self.current_char is not None:

            if self.current_char in " \t\r\n":
                self.skip_whitespace()
                continue

            # comments
            if self.current_char == "/" and self.peek() == "/":
                self.skip_line_comment()
                continue
            if self.current_char == "/" and self.peek() == "*":
                self.skip_block_comment()
                continue

            # identifiers / keywords
            if is_alpha(self.current_char):
                return self.read_identifier()

            if is_digit(self.current_char):
                return self.read_number()

            if self.current_char == "\"":
                return self.read_string()

            return self.read_operator()

        return Token("EOF", "", line=self.line, column=self.column)

    def tokenize(self):
        tokens = []
        while True:
            tok = self.get_next_token()
            tokens.append(tok)
            if tok.type == "EOF":
                return tokens
