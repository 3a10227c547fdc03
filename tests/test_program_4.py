import os

from lumen.interpreter import run_program

EXAMPLES = os.path.join(os.path.dirname(__file__), '..', 'examples')


def test_program_4(capsys):
    with open(os.path.join(EXAMPLES, 'program_4.lum'), 'r', encoding='utf-8') as f:
        source = f.read()
    run_program(source)
    out = capsys.readouterr().out.strip()
    assert out == '0\n1\n2\n3\n2\n1\nC'
