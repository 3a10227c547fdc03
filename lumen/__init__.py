# Lumen language package
# Lexer, parser, semantic analyzer and tree-walking interpreter for Lumen.
from .errors import LumenError
from .interpreter import run_program, execute, compile_file, Interpreter, RunResult
from .parser import parse_program
from .analyzer import SemanticAnalyzer

__all__ = [
    'run_program',
    'execute',
    'compile_file',
    'parse_program',
    'Interpreter',
    'SemanticAnalyzer',
    'RunResult',
    'LumenError',
]
