class MiniBlocksError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SourceError(MiniBlocksError):
    # Raised before execution; always points at a position in the source.
    def __init__(self, message: str, line: int, column: int):
        super().__init__(message)
        self.line = line
        self.column = column

    def __str__(self) -> str:
        return f"{self.message} at line {self.line}, col {self.column}"


class LexError(SourceError):
    pass


class ParseError(SourceError):
    pass


class MiniBlocksRuntimeError(MiniBlocksError):
    def __init__(self, message: str, line: int | None = None, column: int | None = None):
        super().__init__(message)
        self.line = line
        self.column = column

    def format(self, indent: str = "") -> str:
        text = f"{indent}Runtime error: {self.message}"
        if self.line is not None:
            text += f" (line {self.line}, col {self.column})"
        return text

    def __str__(self) -> str:
        return self.format()
