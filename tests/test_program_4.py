from pathlib import Path

from glossa.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).parent.parent / 'examples'


def test_program_4_routines(capsys):
    with open(EXAMPLES / 'program_4.glo', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    assert sorted(ast.functions) == ['Παραγοντικό']
    assert sorted(ast.procedures) == ['Αντιμετάθεση']
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out
    # the procedure swaps its arguments in the caller
    assert out.splitlines() == ['7 3 ', '120 ']
