from pathlib import Path

from glossa.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).parent.parent / 'examples'


def test_program_7_strings_and_booleans(capsys):
    with open(EXAMPLES / 'program_7.glo', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out
    assert out.splitlines() == ['ΑΛΗΘΗΣ ', 'Γεια Ελένη ', 'ΨΕΥΔΗΣ ΑΛΗΘΗΣ ']
