"""Tokenizer for the Glossa language.

The tokenizer turns source text into a flat list of tokens in a single
left-to-right pass. Keywords are recognised case-insensitively from
`KEYWORDS`. An identifier may carry a trailing `[...]` subscript; its content
is not tokenized here but kept verbatim on the token so that the parser can
parse it later as a separate expression.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .errors import LexerError


class TokenKind(Enum):
    IDENTIFIER = 'IDENTIFIER'
    INTEGER = 'INTEGER'
    REAL = 'REAL'
    STRING = 'STRING'
    BOOLEAN = 'BOOLEAN'
    OPERATOR = 'OPERATOR'  # + - * /
    POWER = 'POWER'
    MOD = 'MOD'
    DIV = 'DIV'
    ASSIGN = 'ASSIGN'
    COMPARE = 'COMPARE'  # < > <= >= <>
    EQUALS = 'EQUALS'
    LPAREN = 'LPAREN'
    RPAREN = 'RPAREN'
    COMMA = 'COMMA'
    COLON = 'COLON'
    AND = 'AND'
    OR = 'OR'
    NOT = 'NOT'
    PROGRAM = 'PROGRAM'
    CONSTANTS = 'CONSTANTS'
    VARIABLES = 'VARIABLES'
    INTEGERS = 'INTEGERS'
    REALS = 'REALS'
    STRINGS = 'STRINGS'
    BOOLEANS = 'BOOLEANS'
    START = 'START'
    END_PROGRAM = 'END_PROGRAM'
    PRINT = 'PRINT'
    READ = 'READ'
    IF = 'IF'
    THEN = 'THEN'
    ELSE_IF = 'ELSE_IF'
    ELSE = 'ELSE'
    END_IF = 'END_IF'
    FOR = 'FOR'
    FROM = 'FROM'
    UNTIL = 'UNTIL'
    STEP = 'STEP'
    END_LOOP = 'END_LOOP'
    WHILE = 'WHILE'
    REPEAT = 'REPEAT'
    START_LOOP = 'START_LOOP'
    UNTIL_THAT = 'UNTIL_THAT'
    FUNCTION = 'FUNCTION'
    END_FUNCTION = 'END_FUNCTION'
    PROCEDURE = 'PROCEDURE'
    END_PROCEDURE = 'END_PROCEDURE'
    CALL = 'CALL'
    RETURN_TYPE = 'RETURN_TYPE'
    EOL = 'EOL'
    EOF = 'EOF'


KEYWORDS = {
    'ΠΡΟΓΡΑΜΜΑ': TokenKind.PROGRAM,
    'ΣΤΑΘΕΡΕΣ': TokenKind.CONSTANTS,
    'ΜΕΤΑΒΛΗΤΕΣ': TokenKind.VARIABLES,
    'ΑΚΕΡΑΙΕΣ': TokenKind.INTEGERS,
    'ΠΡΑΓΜΑΤΙΚΕΣ': TokenKind.REALS,
    'ΧΑΡΑΚΤΗΡΕΣ': TokenKind.STRINGS,
    'ΛΟΓΙΚΕΣ': TokenKind.BOOLEANS,
    'ΑΡΧΗ': TokenKind.START,
    'ΤΕΛΟΣ_ΠΡΟΓΡΑΜΜΑΤΟΣ': TokenKind.END_PROGRAM,
    'ΓΡΑΨΕ': TokenKind.PRINT,
    'ΔΙΑΒΑΣΕ': TokenKind.READ,
    'ΑΝ': TokenKind.IF,
    'ΤΟΤΕ': TokenKind.THEN,
    'ΑΛΛΙΩΣ_ΑΝ': TokenKind.ELSE_IF,
    'ΑΛΛΙΩΣ': TokenKind.ELSE,
    'ΤΕΛΟΣ_ΑΝ': TokenKind.END_IF,
    'ΓΙΑ': TokenKind.FOR,
    'ΑΠΟ': TokenKind.FROM,
    'ΜΕΧΡΙ': TokenKind.UNTIL,
    'ΜΕ_ΒΗΜΑ': TokenKind.STEP,
    'ΤΕΛΟΣ_ΕΠΑΝΑΛΗΨΗΣ': TokenKind.END_LOOP,
    'ΟΣΟ': TokenKind.WHILE,
    'ΕΠΑΝΑΛΑΒΕ': TokenKind.REPEAT,
    'ΑΡΧΗ_ΕΠΑΝΑΛΗΨΗΣ': TokenKind.START_LOOP,
    'ΜΕΧΡΙΣ_ΟΤΟΥ': TokenKind.UNTIL_THAT,
    'ΣΥΝΑΡΤΗΣΗ': TokenKind.FUNCTION,
    'ΤΕΛΟΣ_ΣΥΝΑΡΤΗΣΗΣ': TokenKind.END_FUNCTION,
    'ΔΙΑΔΙΚΑΣΙΑ': TokenKind.PROCEDURE,
    'ΤΕΛΟΣ_ΔΙΑΔΙΚΑΣΙΑΣ': TokenKind.END_PROCEDURE,
    'ΚΑΛΕΣΕ': TokenKind.CALL,
    'ΑΚΕΡΑΙΑ': TokenKind.RETURN_TYPE,
    'ΠΡΑΓΜΑΤΙΚΗ': TokenKind.RETURN_TYPE,
    'ΑΛΦΑΡΙΘΜΗΤΙΚΗ': TokenKind.RETURN_TYPE,
    'ΛΟΓΙΚΗ': TokenKind.RETURN_TYPE,
    'ΚΑΙ': TokenKind.AND,
    'Ή': TokenKind.OR,
    'ΟΧΙ': TokenKind.NOT,
    'MOD': TokenKind.MOD,
    'DIV': TokenKind.DIV,
    'ΑΛΗΘΗΣ': TokenKind.BOOLEAN,
    'ΨΕΥΔΗΣ': TokenKind.BOOLEAN,
}

SINGLE_CHAR_TOKENS = {
    '(': TokenKind.LPAREN,
    ')': TokenKind.RPAREN,
    ',': TokenKind.COMMA,
    ':': TokenKind.COLON,
    '=': TokenKind.EQUALS,
    '+': TokenKind.OPERATOR,
    '-': TokenKind.OPERATOR,
    '*': TokenKind.OPERATOR,
    '/': TokenKind.OPERATOR,
    '^': TokenKind.POWER,
}

DIGITS = '0123456789'


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int
    subscript: Optional[str] = None

    def __repr__(self) -> str:
        if self.subscript is not None:
            return f"{self.kind.value}({self.text}[{self.subscript}])"
        return f"{self.kind.value}({self.text!r})"


def is_letter(c: str) -> bool:
    """Latin or Greek letter."""
    return c.isalpha() and (c.isascii() or 'Ͱ' <= c <= 'Ͽ')


def is_word_char(c: str) -> bool:
    return is_letter(c) or c in DIGITS or c == '.' or c == '_'


def tokenize(source: str) -> List[Token]:
    """Convert source code into a list of tokens ending with EOF.

    Raises LexerError on an unterminated string or subscript, a malformed
    number or an unknown character.
    """
    tokens: List[Token] = []
    i = 0
    line = 1
    col = 1
    length = len(source)

    def advance(n: int = 1):
        nonlocal i, col, line
        for _ in range(n):
            if i < length and source[i] == '\n':
                line += 1
                col = 1
            else:
                col += 1
            i += 1

    while i < length:
        c = source[i]
        if c == '\n':
            tokens.append(Token(TokenKind.EOL, '\n', line, col))
            advance()
            continue
        if c.isspace():
            advance()
            continue
        # Comment runs to the end of the line
        if c == '!':
            while i < length and source[i] != '\n':
                advance()
            continue
        if c in SINGLE_CHAR_TOKENS:
            tokens.append(Token(SINGLE_CHAR_TOKENS[c], c, line, col))
            advance()
            continue
        if c == '<':
            nxt = source[i + 1] if i + 1 < length else ''
            if nxt == '-':
                tokens.append(Token(TokenKind.ASSIGN, '<-', line, col))
                advance(2)
            elif nxt in ('>', '='):
                tokens.append(Token(TokenKind.COMPARE, c + nxt, line, col))
                advance(2)
            else:
                tokens.append(Token(TokenKind.COMPARE, c, line, col))
                advance()
            continue
        if c == '>':
            if i + 1 < length and source[i + 1] == '=':
                tokens.append(Token(TokenKind.COMPARE, '>=', line, col))
                advance(2)
            else:
                tokens.append(Token(TokenKind.COMPARE, c, line, col))
                advance()
            continue
        if c == '\'':
            start_line, start_col = line, col
            advance()  # skip opening quote
            chars: List[str] = []
            while i < length and source[i] not in ('\'', '\n'):
                chars.append(source[i])
                advance()
            if i >= length or source[i] != '\'':
                raise LexerError('unterminated string literal', start_line, start_col)
            advance()  # skip closing quote
            tokens.append(Token(TokenKind.STRING, ''.join(chars), start_line, start_col))
            continue
        if c == '"':
            raise LexerError('strings are written between apostrophes, not double quotes', line, col)
        if is_word_char(c):
            start_line, start_col = line, col
            chars = []
            subscript: Optional[str] = None
            while i < length:
                ch = source[i]
                if is_word_char(ch):
                    chars.append(ch)
                    advance()
                    continue
                if ch == '[' and is_letter(chars[0]):
                    if subscript is not None:
                        raise LexerError('an identifier can take only one subscript', line, col)
                    bracket_line, bracket_col = line, col
                    advance()
                    depth = 1
                    captured: List[str] = []
                    while True:
                        if i >= length or source[i] == '\n':
                            raise LexerError('unterminated subscript, expected ]', bracket_line, bracket_col)
                        ch = source[i]
                        if ch == '[':
                            depth += 1
                        elif ch == ']':
                            depth -= 1
                            if depth == 0:
                                advance()
                                break
                        if not ch.isspace():
                            captured.append(ch)
                        advance()
                    subscript = ''.join(captured)
                    continue
                break
            tokens.append(classify_word(''.join(chars), subscript, start_line, start_col))
            continue
        raise LexerError(f"unknown character {c!r}", line, col)

    tokens.append(Token(TokenKind.EOF, 'EOF', line, col))
    return collapse_newlines(tokens)


def classify_word(word: str, subscript: Optional[str], line: int, column: int) -> Token:
    """Turn a raw lexeme into a keyword, number or identifier token."""
    upper = word.upper()
    if upper in KEYWORDS:
        if subscript is not None:
            raise LexerError(f"keyword {upper} cannot take a subscript", line, column)
        return Token(KEYWORDS[upper], upper, line, column)
    if all(ch in DIGITS or ch == '.' for ch in word):
        if word.count('.') > 1 or not any(ch in DIGITS for ch in word):
            raise LexerError(f"malformed number {word!r}", line, column)
        kind = TokenKind.REAL if '.' in word else TokenKind.INTEGER
        return Token(kind, word, line, column)
    if is_letter(word[0]):
        return Token(TokenKind.IDENTIFIER, word, line, column, subscript)
    raise LexerError(f"unknown character sequence {word!r}", line, column)


def collapse_newlines(tokens: List[Token]) -> List[Token]:
    """Merge runs of EOL tokens; blank lines only separate statements."""
    result: List[Token] = []
    for token in tokens:
        if token.kind == TokenKind.EOL and result and result[-1].kind == TokenKind.EOL:
            continue
        result.append(token)
    return result
