import pytest

from glossa.ast import (
    Assign, BinaryOp, DoWhileStmt, ForStmt, FunctionCall, Ident, IfStmt,
    IntegerLiteral, PrintStmt, ProcedureCall, ReadStmt, RealLiteral,
    StartStmt, UnaryOp, VarDecl, WhileStmt, ConstDecl, StringLiteral,
)
from glossa.ast_json import dump_ast
from glossa.errors import ParseError, LexerError
from glossa.parser import parse_program, parse_standalone_expression


def program(body: str, routines: str = '') -> str:
    return f"ΠΡΟΓΡΑΜΜΑ Δοκιμή\nΑΡΧΗ\n{body}\nΤΕΛΟΣ_ΠΡΟΓΡΑΜΜΑΤΟΣ\n{routines}"


def statements(body: str):
    # drop the leading ΑΡΧΗ marker
    return parse_program(program(body)).body[1:]


def test_program_header_and_body():
    ast = parse_program(program('ΓΡΑΨΕ 1'))
    assert ast.name == 'Δοκιμή'
    assert isinstance(ast.body[0], StartStmt)
    assert ast.body[1] == PrintStmt([IntegerLiteral(1)])


def test_precedence():
    (stmt,) = statements('x <- 2 + 3 * 4 ^ 2')
    assert stmt == Assign(
        Ident('x'),
        BinaryOp('+', IntegerLiteral(2), BinaryOp('*', IntegerLiteral(3), BinaryOp('^', IntegerLiteral(4), IntegerLiteral(2)))),
    )


def test_logical_precedence():
    (stmt,) = statements('x <- ΟΧΙ a < 1 Ή b ΚΑΙ c')
    assert stmt.value == BinaryOp(
        'Ή',
        UnaryOp('ΟΧΙ', BinaryOp('<', Ident('a'), IntegerLiteral(1))),
        BinaryOp('ΚΑΙ', Ident('b'), Ident('c')),
    )


def test_left_associative_operators():
    (stmt,) = statements('x <- 10 - 3 - 2')
    assert stmt.value == BinaryOp('-', BinaryOp('-', IntegerLiteral(10), IntegerLiteral(3)), IntegerLiteral(2))


def test_unary_minus_and_parentheses():
    (stmt,) = statements('x <- -(1 + 2.5)')
    assert stmt.value == UnaryOp('-', BinaryOp('+', IntegerLiteral(1), RealLiteral(2.5)))


def test_declarations():
    source = (
        "ΠΡΟΓΡΑΜΜΑ Δ\nΣΤΑΘΕΡΕΣ\n  Ν = 10\n  μήνυμα = 'γεια'\n"
        "ΜΕΤΑΒΛΗΤΕΣ\n  ΑΚΕΡΑΙΕΣ: α, Π[Ν], Τ[3]\n  ΛΟΓΙΚΕΣ: λ\nΑΡΧΗ\nΤΕΛΟΣ_ΠΡΟΓΡΑΜΜΑΤΟΣ\n"
    )
    body = parse_program(source).body
    consts, ints, bools = body[0], body[1], body[2]
    assert isinstance(consts, ConstDecl)
    assert [e.name for e in consts.entries] == ['Ν', 'μήνυμα']
    assert consts.entries[1].value == StringLiteral('γεια')
    assert isinstance(ints, VarDecl) and ints.var_type == 'Integer'
    assert [(t.name, t.length) for t in ints.targets] == [
        ('α', None), ('Π', Ident('Ν')), ('Τ', IntegerLiteral(3)),
    ]
    assert bools.var_type == 'Boolean'


def test_subscripts_are_parsed_as_expressions():
    (stmt,) = statements('Π[i + 1] <- Π[i]')
    assert stmt.target == Ident('Π', BinaryOp('+', Ident('i'), IntegerLiteral(1)))
    assert stmt.value == Ident('Π', Ident('i'))


def test_if_chain():
    (stmt,) = statements(
        'ΑΝ x > 1 ΤΟΤΕ\n  ΓΡΑΨΕ 1\nΑΛΛΙΩΣ_ΑΝ x > 0 ΤΟΤΕ\n  ΓΡΑΨΕ 2\nΑΛΛΙΩΣ\n  ΓΡΑΨΕ 3\nΤΕΛΟΣ_ΑΝ'
    )
    assert isinstance(stmt, IfStmt)
    assert isinstance(stmt.alternate, IfStmt)
    assert stmt.alternate.alternate == [PrintStmt([IntegerLiteral(3)])]


def test_loops():
    for_stmt, while_stmt, do_stmt = statements(
        'ΓΙΑ i ΑΠΟ 1 ΜΕΧΡΙ 5\n  ΓΡΑΨΕ i\nΤΕΛΟΣ_ΕΠΑΝΑΛΗΨΗΣ\n'
        'ΟΣΟ i > 0 ΕΠΑΝΑΛΑΒΕ\n  i <- i - 1\nΤΕΛΟΣ_ΕΠΑΝΑΛΗΨΗΣ\n'
        'ΑΡΧΗ_ΕΠΑΝΑΛΗΨΗΣ\n  i <- i + 1\nΜΕΧΡΙΣ_ΟΤΟΥ i = 3'
    )
    assert isinstance(for_stmt, ForStmt)
    assert for_stmt.step == IntegerLiteral(1)
    assert isinstance(while_stmt, WhileStmt)
    assert isinstance(do_stmt, DoWhileStmt)
    assert do_stmt.condition == BinaryOp('=', Ident('i'), IntegerLiteral(3))


def test_for_with_step():
    (stmt,) = statements('ΓΙΑ i ΑΠΟ 10 ΜΕΧΡΙ 1 ΜΕ_ΒΗΜΑ -2\nΤΕΛΟΣ_ΕΠΑΝΑΛΗΨΗΣ')
    assert stmt.step == UnaryOp('-', IntegerLiteral(2))
    assert stmt.body == []


def test_io_and_calls():
    read, call, expr = statements('ΔΙΑΒΑΣΕ α, Π[2]\nΚΑΛΕΣΕ Τύπωσε(α, 1)\nf(2)')
    assert read == ReadStmt([Ident('α'), Ident('Π', IntegerLiteral(2))])
    assert call == ProcedureCall('Τύπωσε', [Ident('α'), IntegerLiteral(1)])
    assert expr == FunctionCall('f', [IntegerLiteral(2)])


def test_routines_after_program():
    routines = (
        'ΣΥΝΑΡΤΗΣΗ Διπλό(x): ΑΚΕΡΑΙΑ\nΜΕΤΑΒΛΗΤΕΣ\n  ΑΚΕΡΑΙΕΣ: x\nΑΡΧΗ\n  Διπλό <- 2 * x\nΤΕΛΟΣ_ΣΥΝΑΡΤΗΣΗΣ\n'
        'ΔΙΑΔΙΚΑΣΙΑ Τίποτα()\nΤΕΛΟΣ_ΔΙΑΔΙΚΑΣΙΑΣ\n'
    )
    ast = parse_program(program('ΓΡΑΨΕ Διπλό(2)', routines))
    func = ast.functions['Διπλό']
    assert func.params == ['x'] and func.return_type == 'ΑΚΕΡΑΙΑ'
    assert isinstance(func.body[1], StartStmt)
    assert ast.procedures['Τίποτα'].params == []


def test_statement_lines():
    ast = parse_program(program('x <- 1\n\nΓΡΑΨΕ x'))
    assert [stmt.line for stmt in ast.body] == [2, 3, 5]


def test_standalone_expression():
    assert parse_standalone_expression('i+1') == BinaryOp('+', Ident('i'), IntegerLiteral(1))


def test_parsing_is_deterministic():
    source = program('x <- 1 + 2 * Π[i]\nΓΡΑΨΕ x')
    assert dump_ast(parse_program(source)) == dump_ast(parse_program(source))


@pytest.mark.parametrize('source, message', [
    ('ΑΡΧΗ\nΓΡΑΨΕ 1\nΤΕΛΟΣ_ΠΡΟΓΡΑΜΜΑΤΟΣ', 'ΠΡΟΓΡΑΜΜΑ'),
    ('ΠΡΟΓΡΑΜΜΑ Α\nΓΡΑΨΕ 1', 'ΤΕΛΟΣ_ΠΡΟΓΡΑΜΜΑΤΟΣ'),
    (program('ΑΝ x > 1\nΓΡΑΨΕ 1\nΤΕΛΟΣ_ΑΝ'), 'ΤΟΤΕ'),
    (program('ΓΙΑ i ΑΠΟ 1 ΜΕΧΡΙ 2\nΓΡΑΨΕ i'), 'ΤΕΛΟΣ_ΕΠΑΝΑΛΗΨΗΣ'),
    (program('1 + 2'), 'expected a statement'),
    (program('ΣΥΝΑΡΤΗΣΗ f(): ΑΚΕΡΑΙΑ\nΤΕΛΟΣ_ΣΥΝΑΡΤΗΣΗΣ'), 'declared after'),
    (program('x <- (1 + 2'), "')'"),
    (program('ΓΡΑΨΕ 1', 'ΓΡΑΨΕ 2'), 'after ΤΕΛΟΣ_ΠΡΟΓΡΑΜΜΑΤΟΣ'),
    (program('', 'ΔΙΑΔΙΚΑΣΙΑ Π(α, α)\nΤΕΛΟΣ_ΔΙΑΔΙΚΑΣΙΑΣ'), 'duplicate parameter'),
])
def test_syntax_errors(source, message):
    with pytest.raises(ParseError) as excinfo:
        parse_program(source)
    assert message in str(excinfo.value)


def test_syntax_error_location():
    with pytest.raises(ParseError) as excinfo:
        parse_program(program('x <- 1 +'))
    assert excinfo.value.err.name == 'SyntaxError'
    assert excinfo.value.err.line == 3


def test_bad_subscript_is_reported_at_identifier():
    with pytest.raises((ParseError, LexerError)) as excinfo:
        parse_program(program('x <- Π[1 +]'))
    assert "subscript of 'Π'" in str(excinfo.value)
    assert excinfo.value.err.line == 3
    assert excinfo.value.err.column == 6
