"""CLI entry point for the Lumen interpreter.

Usage:
    python -m lumen [-v|-vv|-vvv] [-m] [-s] <program_file>
    python -m lumen [-v...] --emit-ast <program_file>
    python -m lumen [-v...] [-m] [-s] --ast <ast_json_file>

Options:
  -v            Increase debug verbosity (can be repeated)
  -m, --memory  Print the final global memory after the run
  -s, --scope   Print the global symbol table after semantic analysis
  --emit-ast    Parse the given .lum file and emit an AST JSON file
  --ast         Analyze and execute a previously emitted AST JSON file

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .analyzer import SemanticAnalyzer
from .ast_json import ast_to_obj, ast_from_obj
from .errors import LumenError
from .interpreter import Interpreter
from .parser import parse_program


def _read(path: Path) -> str:
    if not path.exists():
        print(f"Error: file {path} not found", file=sys.stderr)
        sys.exit(1)
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def _report(error: LumenError):
    print(f"{error.phase.capitalize()} error: {error}", file=sys.stderr)
    sys.exit(1)


def _run(tree, args):
    analyzer = SemanticAnalyzer(debug_level=args.v)
    scope = analyzer.analyze(tree)
    if args.scope:
        print(scope)
    interpreter = Interpreter(tree, debug_level=args.v)
    memory = interpreter.interpret()
    if args.memory:
        print(memory)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Lumen language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('-m', '--memory', action='store_true', help='print the final global memory')
    parser.add_argument('-s', '--scope', action='store_true', help='print the global symbol table')
    group = parser.add_mutually_exclusive_group()
    group.add_argument('--emit-ast', metavar='LUMEN_FILE', help='emit AST JSON for the given .lum file')
    group.add_argument('--ast', metavar='AST_JSON_FILE', help='execute AST from a JSON file')
    parser.add_argument('program', nargs='?', help='Lumen program file (.lum) to execute')
    args = parser.parse_args(argv)

    try:
        # Emit AST mode
        if args.emit_ast:
            program_file = Path(args.emit_ast)
            tree = parse_program(_read(program_file))
            out_path = program_file.with_name(program_file.name + '.ast.json')
            with open(out_path, 'w', encoding='utf-8') as out:
                json.dump(ast_to_obj(tree), out, ensure_ascii=False, indent=2)
            print(str(out_path))
            return

        # Execute from AST JSON
        if args.ast:
            data = json.loads(_read(Path(args.ast)))
            _run(ast_from_obj(data), args)
            return

        # Default: execute source file
        if not args.program:
            parser.error('missing program file; or use --emit-ast/--ast')
        _run(parse_program(_read(Path(args.program))), args)
    except LumenError as e:
        _report(e)


if __name__ == '__main__':
    main()
