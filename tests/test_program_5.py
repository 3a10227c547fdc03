import os

from lumen.interpreter import run_program

EXAMPLES = os.path.join(os.path.dirname(__file__), '..', 'examples')


def test_program_5(capsys):
    with open(os.path.join(EXAMPLES, 'program_5.lum'), 'r', encoding='utf-8') as f:
        source = f.read()
    run_program(source)
    out = capsys.readouterr().out.strip()
    assert out == "[1, 2, 3]\n2\nnull\n['ann', 'bob']\nh\nhello world\n3"
