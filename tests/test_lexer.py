import pytest

from glossa.errors import LexerError
from glossa.lexer import TokenKind, tokenize


def kinds(source):
    return [t.kind for t in tokenize(source)]


def test_keywords_are_case_insensitive():
    tokens = tokenize('γραψε Γραψε ΓΡΑΨΕ')
    assert [t.kind for t in tokens[:3]] == [TokenKind.PRINT] * 3
    assert all(t.text == 'ΓΡΑΨΕ' for t in tokens[:3])


def test_operators():
    tokens = tokenize('x <- a <> b <= c >= d < e > f = g ^ 2 MOD 3 div 4')
    texts = [t.text for t in tokens if t.kind != TokenKind.IDENTIFIER]
    assert texts[:-1] == ['<-', '<>', '<=', '>=', '<', '>', '=', '^', '2', 'MOD', '3', 'DIV', '4']
    assert tokens[1].kind == TokenKind.ASSIGN


def test_numbers_and_strings():
    tokens = tokenize("12 3.5 'Γεια σου'")
    assert [(t.kind, t.text) for t in tokens[:3]] == [
        (TokenKind.INTEGER, '12'),
        (TokenKind.REAL, '3.5'),
        (TokenKind.STRING, 'Γεια σου'),
    ]


def test_subscript_is_captured_without_whitespace():
    token = tokenize('Π[ i + 1 ]')[0]
    assert token.kind == TokenKind.IDENTIFIER
    assert token.text == 'Π'
    assert token.subscript == 'i+1'


def test_nested_subscript():
    token = tokenize('Α[Β[2]]')[0]
    assert token.subscript == 'Β[2]'


def test_comments_and_blank_lines_collapse():
    assert kinds('ΓΡΑΨΕ 1 ! σχόλιο\n\n\nΓΡΑΨΕ 2') == [
        TokenKind.PRINT, TokenKind.INTEGER, TokenKind.EOL,
        TokenKind.PRINT, TokenKind.INTEGER, TokenKind.EOF,
    ]


def test_positions():
    tokens = tokenize('α <- 1\n  ΓΡΑΨΕ α')
    print_token = tokens[4]
    assert print_token.kind == TokenKind.PRINT
    assert (print_token.line, print_token.column) == (2, 3)


def test_boolean_literals():
    tokens = tokenize('ΑΛΗΘΗΣ ψευδης')
    assert [t.kind for t in tokens[:2]] == [TokenKind.BOOLEAN, TokenKind.BOOLEAN]
    assert tokens[1].text == 'ΨΕΥΔΗΣ'


@pytest.mark.parametrize('source, message', [
    ("'χωρίς τέλος", 'unterminated string'),
    ('"λάθος"', 'apostrophes'),
    ('Π[1', 'unterminated subscript'),
    ('Π[1\n]', 'unterminated subscript'),
    ('1.2.3', 'malformed number'),
    ('α # β', 'unknown character'),
    ('ΓΡΑΨΕ[1]', 'cannot take a subscript'),
])
def test_lexer_errors(source, message):
    with pytest.raises(LexerError) as excinfo:
        tokenize(source)
    assert message in str(excinfo.value)


def test_error_location():
    with pytest.raises(LexerError) as excinfo:
        tokenize("ΓΡΑΨΕ 1\nΓΡΑΨΕ 'ανοιχτό")
    assert excinfo.value.err.line == 2
    assert excinfo.value.err.column == 7
