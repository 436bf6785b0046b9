from pathlib import Path

from glossa.interpreter import parse_program, Interpreter

EXAMPLES = Path(__file__).parent.parent / 'examples'


def test_program_2_sums_with_for_loop(capsys):
    with open(EXAMPLES / 'program_2.glo', 'r', encoding='utf-8') as f:
        source = f.read()
    ast = parse_program(source)
    interp = Interpreter()
    interp.run(ast)
    out = capsys.readouterr().out.strip()
    assert out == 'Άθροισμα: 55'
    assert interp.global_env.look_up_variable('i').value == 11
