"""Recursive-descent parser for the Glossa language.

The parser works on the token list produced by `tokenize` with a single
read cursor and one token of lookahead. Expressions are parsed by one method
per precedence level, lowest first:

    or -> and -> not -> comparison -> additive -> multiplicative -> power -> primary

Statements are dispatched on the kind of the current token. Block
statements consume their opening keyword, a line end, a statement list and
the matching closing keyword.

The tokenizer keeps the content of an identifier's `[...]` subscript as raw
text. `parse_standalone_expression` tokenizes and parses such a fragment on
its own; it serves both array sizes in declarations and index expressions.

The `parse_program` function is the public entry point and returns a
`Program` AST node representing the entire source file.
"""

from __future__ import annotations

from typing import List, Optional, Set

from .ast import (
    Program, StartStmt, DeclTarget, VarDecl, ConstEntry, ConstDecl,
    IfStmt, ForStmt, WhileStmt, DoWhileStmt, FunctionDecl, ProcedureDecl,
    Assign, BinaryOp, UnaryOp, Ident, IntegerLiteral, RealLiteral,
    StringLiteral, BooleanLiteral, FunctionCall, ProcedureCall,
    PrintStmt, ReadStmt, Node,
)
from .errors import GlossaError, ParseError
from .lexer import KEYWORDS, Token, TokenKind, tokenize
from .types import INTEGER, REAL, STRING, BOOLEAN, TRUE_LITERAL


DECLARATION_TYPES = {
    TokenKind.INTEGERS: INTEGER,
    TokenKind.REALS: REAL,
    TokenKind.STRINGS: STRING,
    TokenKind.BOOLEANS: BOOLEAN,
}

LINE_END = (TokenKind.EOL, TokenKind.EOF)

BLOCK_CLOSERS = {
    kind: text for text, kind in KEYWORDS.items()
    if kind in (
        TokenKind.END_PROGRAM, TokenKind.END_IF, TokenKind.ELSE_IF,
        TokenKind.ELSE, TokenKind.END_LOOP, TokenKind.UNTIL_THAT,
        TokenKind.END_FUNCTION, TokenKind.END_PROCEDURE,
    )
}


class Parser:
    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    # Cursor helpers

    def peek(self, offset: int = 0) -> Token:
        index = min(self.pos + offset, len(self.tokens) - 1)
        return self.tokens[index]

    def advance(self) -> Token:
        token = self.peek()
        if token.kind != TokenKind.EOF:
            self.pos += 1
        return token

    def match(self, *kinds: TokenKind) -> bool:
        return self.peek().kind in kinds

    def consume(self, kind: TokenKind, expected: str) -> Token:
        token = self.peek()
        if token.kind != kind:
            raise self.error(f"expected {expected}, got {describe(token)}", token)
        return self.advance()

    def error(self, message: str, token: Optional[Token] = None) -> ParseError:
        token = token or self.peek()
        return ParseError(message, token.line, token.column)

    def expect_line_end(self):
        token = self.peek()
        if token.kind == TokenKind.EOL:
            self.advance()
        elif token.kind != TokenKind.EOF:
            raise self.error(f"expected end of line, got {describe(token)}", token)

    def skip_newlines(self):
        while self.match(TokenKind.EOL):
            self.advance()

    def located(self, node: Node, token: Token) -> Node:
        node.line = token.line
        return node

    # Program structure

    def parse_program(self) -> Program:
        self.skip_newlines()
        self.consume(TokenKind.PROGRAM, 'ΠΡΟΓΡΑΜΜΑ at the start of the program')
        name = self.consume(TokenKind.IDENTIFIER, 'the name of the program').text
        self.expect_line_end()

        body = self.parse_block({TokenKind.END_PROGRAM})
        self.consume(TokenKind.END_PROGRAM, 'ΤΕΛΟΣ_ΠΡΟΓΡΑΜΜΑΤΟΣ')
        if self.match(TokenKind.IDENTIFIER):
            self.advance()
        self.expect_line_end()

        program = Program(name=name, body=body)
        while True:
            self.skip_newlines()
            token = self.peek()
            if token.kind == TokenKind.EOF:
                break
            if token.kind == TokenKind.FUNCTION:
                decl = self.parse_function_decl()
            elif token.kind == TokenKind.PROCEDURE:
                decl = self.parse_procedure_decl()
            else:
                raise self.error(f"unexpected {describe(token)} after ΤΕΛΟΣ_ΠΡΟΓΡΑΜΜΑΤΟΣ", token)
            if decl.name in program.functions or decl.name in program.procedures:
                raise self.error(f"'{decl.name}' is already defined", token)
            if isinstance(decl, FunctionDecl):
                program.functions[decl.name] = decl
            else:
                program.procedures[decl.name] = decl
        return program

    def parse_block(self, terminators: Set[TokenKind]) -> List[Node]:
        """Parse statements up to (not including) one of `terminators`."""
        statements: List[Node] = []
        while True:
            self.skip_newlines()
            token = self.peek()
            if token.kind in terminators or token.kind == TokenKind.EOF:
                return statements
            if token.kind in BLOCK_CLOSERS:
                expected = ' or '.join(BLOCK_CLOSERS[kind] for kind in terminators if kind in BLOCK_CLOSERS)
                raise self.error(f"expected {expected}, got {describe(token)}", token)
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)

    def parse_statement(self) -> Optional[Node]:
        token = self.peek()
        kind = token.kind
        if kind == TokenKind.CONSTANTS:
            return self.parse_constants()
        if kind == TokenKind.VARIABLES:
            # section header only; the typed declarations follow as statements
            self.advance()
            self.expect_line_end()
            return None
        if kind in DECLARATION_TYPES:
            return self.parse_var_decl()
        if kind == TokenKind.IF:
            return self.parse_if_stmt()
        if kind == TokenKind.FOR:
            return self.parse_for_stmt()
        if kind == TokenKind.WHILE:
            return self.parse_while_stmt()
        if kind == TokenKind.START_LOOP:
            return self.parse_do_while_stmt()
        if kind == TokenKind.PRINT:
            return self.parse_print_stmt()
        if kind == TokenKind.READ:
            return self.parse_read_stmt()
        if kind == TokenKind.CALL:
            return self.parse_procedure_call()
        if kind == TokenKind.START:
            self.advance()
            self.expect_line_end()
            return self.located(StartStmt(), token)
        if kind in (TokenKind.FUNCTION, TokenKind.PROCEDURE):
            raise self.error('functions and procedures are declared after ΤΕΛΟΣ_ΠΡΟΓΡΑΜΜΑΤΟΣ', token)
        if kind == TokenKind.PROGRAM:
            raise self.error('ΠΡΟΓΡΑΜΜΑ may only appear once, at the start', token)
        expr = self.parse_expression()
        if not isinstance(expr, (Assign, FunctionCall)):
            raise self.error('expected a statement', token)
        self.expect_line_end()
        return self.located(expr, token)

    # Declarations

    def parse_constants(self) -> ConstDecl:
        start = self.advance()
        self.expect_line_end()
        entries: List[ConstEntry] = []
        while True:
            self.skip_newlines()
            if not (self.match(TokenKind.IDENTIFIER) and self.peek(1).kind == TokenKind.EQUALS):
                break
            name_token = self.advance()
            if name_token.subscript is not None:
                raise self.error('a constant cannot be an array', name_token)
            self.advance()  # '='
            value = self.parse_expression()
            self.expect_line_end()
            entries.append(self.located(ConstEntry(name_token.text, value), name_token))
        return self.located(ConstDecl(entries), start)

    def parse_var_decl(self) -> VarDecl:
        type_token = self.advance()
        self.consume(TokenKind.COLON, "':' after the type")
        targets: List[DeclTarget] = []
        while True:
            name_token = self.consume(TokenKind.IDENTIFIER, 'a variable name')
            length = None
            if name_token.subscript is not None:
                length = parse_standalone_expression(name_token.subscript, name_token)
                if not isinstance(length, IntegerLiteral) and not (isinstance(length, Ident) and length.index is None):
                    raise self.error('array size must be an integer or a constant', name_token)
            targets.append(self.located(DeclTarget(name_token.text, length), name_token))
            if not self.match(TokenKind.COMMA):
                break
            self.advance()
        self.expect_line_end()
        return self.located(VarDecl(DECLARATION_TYPES[type_token.kind], targets), type_token)

    # Block statements

    def parse_if_stmt(self) -> IfStmt:
        # also entered on ΑΛΛΙΩΣ_ΑΝ, which opens the nested alternate
        start = self.advance()
        condition = self.parse_expression()
        self.consume(TokenKind.THEN, 'ΤΟΤΕ')
        self.expect_line_end()
        consequent = self.parse_block({TokenKind.ELSE_IF, TokenKind.ELSE, TokenKind.END_IF})
        if self.match(TokenKind.ELSE_IF):
            alternate = self.parse_if_stmt()
            return self.located(IfStmt(condition, consequent, alternate), start)
        alternate = None
        if self.match(TokenKind.ELSE):
            self.advance()
            self.expect_line_end()
            alternate = self.parse_block({TokenKind.END_IF})
        self.consume(TokenKind.END_IF, 'ΤΕΛΟΣ_ΑΝ')
        self.expect_line_end()
        return self.located(IfStmt(condition, consequent, alternate), start)

    def parse_for_stmt(self) -> ForStmt:
        start_token = self.advance()
        var_token = self.consume(TokenKind.IDENTIFIER, 'the loop variable')
        if var_token.subscript is not None:
            raise self.error('the loop variable cannot be an array element', var_token)
        self.consume(TokenKind.FROM, 'ΑΠΟ')
        start = self.parse_expression()
        self.consume(TokenKind.UNTIL, 'ΜΕΧΡΙ')
        end = self.parse_expression()
        step: Node = IntegerLiteral(1)
        if self.match(TokenKind.STEP):
            self.advance()
            step = self.parse_expression()
        self.expect_line_end()
        body = self.parse_block({TokenKind.END_LOOP})
        self.consume(TokenKind.END_LOOP, 'ΤΕΛΟΣ_ΕΠΑΝΑΛΗΨΗΣ')
        self.expect_line_end()
        return self.located(ForStmt(Ident(var_token.text), start, end, step, body), start_token)

    def parse_while_stmt(self) -> WhileStmt:
        start = self.advance()
        condition = self.parse_expression()
        self.consume(TokenKind.REPEAT, 'ΕΠΑΝΑΛΑΒΕ')
        self.expect_line_end()
        body = self.parse_block({TokenKind.END_LOOP})
        self.consume(TokenKind.END_LOOP, 'ΤΕΛΟΣ_ΕΠΑΝΑΛΗΨΗΣ')
        self.expect_line_end()
        return self.located(WhileStmt(condition, body), start)

    def parse_do_while_stmt(self) -> DoWhileStmt:
        start = self.advance()
        self.expect_line_end()
        body = self.parse_block({TokenKind.UNTIL_THAT})
        self.consume(TokenKind.UNTIL_THAT, 'ΜΕΧΡΙΣ_ΟΤΟΥ')
        condition = self.parse_expression()
        self.expect_line_end()
        return self.located(DoWhileStmt(condition, body), start)

    def parse_params(self) -> List[str]:
        self.consume(TokenKind.LPAREN, "'('")
        params: List[str] = []
        if not self.match(TokenKind.RPAREN):
            while True:
                token = self.consume(TokenKind.IDENTIFIER, 'a parameter name')
                if token.text in params:
                    raise self.error(f"duplicate parameter '{token.text}'", token)
                params.append(token.text)
                if not self.match(TokenKind.COMMA):
                    break
                self.advance()
        self.consume(TokenKind.RPAREN, "')'")
        return params

    def parse_function_decl(self) -> FunctionDecl:
        start = self.advance()
        name = self.consume(TokenKind.IDENTIFIER, 'the function name').text
        params = self.parse_params()
        self.consume(TokenKind.COLON, "':' before the return type")
        return_type = self.consume(TokenKind.RETURN_TYPE, 'the return type').text
        self.expect_line_end()
        body = self.parse_block({TokenKind.END_FUNCTION})
        self.consume(TokenKind.END_FUNCTION, 'ΤΕΛΟΣ_ΣΥΝΑΡΤΗΣΗΣ')
        self.expect_line_end()
        return self.located(FunctionDecl(name, params, return_type, body), start)

    def parse_procedure_decl(self) -> ProcedureDecl:
        start = self.advance()
        name = self.consume(TokenKind.IDENTIFIER, 'the procedure name').text
        params = self.parse_params()
        self.expect_line_end()
        body = self.parse_block({TokenKind.END_PROCEDURE})
        self.consume(TokenKind.END_PROCEDURE, 'ΤΕΛΟΣ_ΔΙΑΔΙΚΑΣΙΑΣ')
        self.expect_line_end()
        return self.located(ProcedureDecl(name, params, body), start)

    # Simple statements

    def parse_print_stmt(self) -> PrintStmt:
        start = self.advance()
        values: List[Node] = []
        if not self.match(*LINE_END):
            values.append(self.parse_expression())
            while self.match(TokenKind.COMMA):
                self.advance()
                values.append(self.parse_expression())
        self.expect_line_end()
        return self.located(PrintStmt(values), start)

    def parse_read_stmt(self) -> ReadStmt:
        start = self.advance()
        targets = [self.parse_identifier(self.consume(TokenKind.IDENTIFIER, 'a variable to read into'))]
        while self.match(TokenKind.COMMA):
            self.advance()
            targets.append(self.parse_identifier(self.consume(TokenKind.IDENTIFIER, 'a variable to read into')))
        self.expect_line_end()
        return self.located(ReadStmt(targets), start)

    def parse_procedure_call(self) -> ProcedureCall:
        start = self.advance()
        name = self.consume(TokenKind.IDENTIFIER, 'the procedure name').text
        args = self.parse_arguments()
        self.expect_line_end()
        return self.located(ProcedureCall(name, args), start)

    # Expressions

    def parse_expression(self) -> Node:
        if self.match(TokenKind.IDENTIFIER) and self.peek(1).kind == TokenKind.ASSIGN:
            return self.parse_assignment()
        return self.parse_or()

    def parse_assignment(self) -> Assign:
        target = self.parse_identifier(self.advance())
        self.consume(TokenKind.ASSIGN, "'<-'")
        value = self.parse_expression()
        return Assign(target, value)

    def parse_or(self) -> Node:
        left = self.parse_and()
        while self.match(TokenKind.OR):
            op = self.advance().text
            left = BinaryOp(op, left, self.parse_and())
        return left

    def parse_and(self) -> Node:
        left = self.parse_not()
        while self.match(TokenKind.AND):
            op = self.advance().text
            left = BinaryOp(op, left, self.parse_not())
        return left

    def parse_not(self) -> Node:
        if self.match(TokenKind.NOT):
            op = self.advance().text
            return UnaryOp(op, self.parse_comparison())
        return self.parse_comparison()

    def parse_comparison(self) -> Node:
        left = self.parse_additive()
        while self.match(TokenKind.COMPARE, TokenKind.EQUALS):
            op = self.advance().text
            left = BinaryOp(op, left, self.parse_additive())
        return left

    def parse_additive(self) -> Node:
        left = self.parse_multiplicative()
        while self.match(TokenKind.OPERATOR) and self.peek().text in ('+', '-'):
            op = self.advance().text
            left = BinaryOp(op, left, self.parse_multiplicative())
        return left

    def parse_multiplicative(self) -> Node:
        left = self.parse_power()
        while (self.match(TokenKind.OPERATOR) and self.peek().text in ('*', '/')) or self.match(TokenKind.MOD, TokenKind.DIV):
            op = self.advance().text
            left = BinaryOp(op, left, self.parse_power())
        return left

    def parse_power(self) -> Node:
        left = self.parse_primary()
        while self.match(TokenKind.POWER):
            op = self.advance().text
            left = BinaryOp(op, left, self.parse_primary())
        return left

    def parse_primary(self) -> Node:
        token = self.peek()
        kind = token.kind
        if kind == TokenKind.OPERATOR and token.text in ('+', '-'):
            self.advance()
            return UnaryOp(token.text, self.parse_primary())
        if kind == TokenKind.IDENTIFIER:
            if self.peek(1).kind == TokenKind.LPAREN:
                self.advance()
                return FunctionCall(token.text, self.parse_arguments())
            return self.parse_identifier(self.advance())
        if kind == TokenKind.INTEGER:
            self.advance()
            return IntegerLiteral(int(token.text))
        if kind == TokenKind.REAL:
            self.advance()
            return RealLiteral(float(token.text))
        if kind == TokenKind.STRING:
            self.advance()
            return StringLiteral(token.text)
        if kind == TokenKind.BOOLEAN:
            self.advance()
            return BooleanLiteral(token.text == TRUE_LITERAL)
        if kind == TokenKind.LPAREN:
            self.advance()
            expr = self.parse_expression()
            self.consume(TokenKind.RPAREN, "')'")
            return expr
        if kind == TokenKind.NOT:
            return self.parse_not()
        raise self.error(f"unexpected {describe(token)}", token)

    def parse_arguments(self) -> List[Node]:
        self.consume(TokenKind.LPAREN, "'('")
        args: List[Node] = []
        if not self.match(TokenKind.RPAREN):
            args.append(self.parse_expression())
            while self.match(TokenKind.COMMA):
                self.advance()
                args.append(self.parse_expression())
        self.consume(TokenKind.RPAREN, "')'")
        return args

    def parse_identifier(self, token: Token) -> Ident:
        index = None
        if token.subscript is not None:
            index = parse_standalone_expression(token.subscript, token)
        return Ident(token.text, index)

    def parse_fragment(self) -> Node:
        """Parse the whole token list as a single expression."""
        self.skip_newlines()
        expr = self.parse_expression()
        self.skip_newlines()
        if not self.match(TokenKind.EOF):
            raise self.error(f"unexpected {describe(self.peek())}")
        return expr


def describe(token: Token) -> str:
    if token.kind == TokenKind.EOL:
        return 'end of line'
    if token.kind == TokenKind.EOF:
        return 'end of file'
    return f"'{token.text}'"


def parse_standalone_expression(text: str, origin: Optional[Token] = None) -> Node:
    """Tokenize and parse `text` as an independent expression.

    Used for subscript text captured by the tokenizer. Errors are reported
    at the position of `origin`, the identifier that carried the subscript.
    """
    try:
        return Parser(tokenize(text)).parse_fragment()
    except GlossaError as e:
        if origin is not None:
            e.err.message = f"in subscript of '{origin.text}': {e.err.message}"
            e.err.line, e.err.column = origin.line, origin.column
        raise


def parse_program(source: str) -> Program:
    """Parse Glossa source code into an AST Program.

    Lexical errors raise LexerError and syntax errors raise ParseError.
    """
    return Parser(tokenize(source)).parse_program()
