from typing import Optional

from glossa.types import ErrorVal


class GlossaError(Exception):
    """Base exception carrying a Glossa error value."""
    def __init__(self, err: ErrorVal):
        super().__init__(err.message)
        self.err = err

    def __str__(self) -> str:
        # location may be filled in after the exception was created
        return self.err.describe()


class LexerError(GlossaError):
    """Raised by the tokenizer: unterminated string, unknown character."""
    def __init__(self, message: str, line: int, column: int):
        super().__init__(ErrorVal('LexError', message, line, column))


class ParseError(GlossaError):
    """Raised by the parser on an unexpected or missing token."""
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__(ErrorVal('SyntaxError', message, line, column))


class GlossaRuntimeError(GlossaError):
    """Raised during evaluation; aborts the remaining statements."""
    def __init__(self, name: str, message: str, line: Optional[int] = None):
        super().__init__(ErrorVal(name, message, line))
