import pytest

from lumen.analyzer import SemanticAnalyzer, analyze
from lumen.errors import (
    SemanticError, DuplicateIdentifierError, TypeMismatchError, AssignmentTypeError,
    UndefinedSymbolError, UndefinedFunctionError, ArgumentCountError,
    ReturnOutsideFunctionError,
)
from lumen.parser import parse_program
from lumen.symbols import BuiltinTypeSymbol, FunctionSymbol, VarSymbol
from lumen.types import INTEGER, REAL, STRING, NULL, TypeSpec


def check(source):
    return analyze(parse_program(source))


def test_global_scope_has_builtins_and_variables():
    scope = check('let x = 5\nlet s: string')
    assert scope.scope_name == 'global'
    assert scope.scope_level == 1
    assert isinstance(scope.lookup('INTEGER'), BuiltinTypeSymbol)
    x = scope.lookup('x')
    assert isinstance(x, VarSymbol)
    assert x.type == INTEGER
    assert x.scope_level == 1
    assert scope.lookup('s').type == STRING


def test_untyped_declaration_takes_first_assignment():
    scope = check('let x\nx = 2.5')
    assert scope.lookup('x').type == REAL
    with pytest.raises(AssignmentTypeError):
        check('let x\nx = 2.5\nx = "no"')


def test_declared_type_must_match_initializer():
    with pytest.raises(TypeMismatchError):
        check('let x: integer = "five"')


def test_assignment_type_error():
    with pytest.raises(AssignmentTypeError) as exc:
        check('let x : integer\nx = 3.5')
    assert exc.value.name == 'x'
    assert exc.value.phase == 'semantic'


def test_binary_operands_must_agree():
    with pytest.raises(TypeMismatchError):
        check('print 1 + 2.0')
    with pytest.raises(TypeMismatchError):
        check('print "a" == 1')


def test_logical_type_is_unknown():
    scope = check('let b = 1 and "x"\nlet s = "" or "default"\ns = "x"')
    assert scope.lookup('b').type == NULL
    # the first assignment fixes the type
    assert scope.lookup('s').type == STRING


def test_duplicate_identifier():
    with pytest.raises(DuplicateIdentifierError):
        check('let x\nlet x')
    with pytest.raises(DuplicateIdentifierError):
        check('function f(a: integer, a: integer) {\n}')
    with pytest.raises(DuplicateIdentifierError):
        check('function f() {\n}\nfunction f() {\n}')


def test_shadowing_an_outer_scope_is_allowed():
    check('let x = 1\nfunction f() {\n  let x = "inner"\n  print x\n}')


def test_undefined_variable():
    with pytest.raises(UndefinedSymbolError):
        check('print y')
    with pytest.raises(UndefinedSymbolError):
        check('y = 1')


def test_function_name_is_not_a_variable():
    with pytest.raises(UndefinedSymbolError):
        check('function f() {\n}\nprint f')


def test_undefined_function():
    with pytest.raises(UndefinedFunctionError):
        check('print nope(1)')
    with pytest.raises(UndefinedFunctionError):
        check('let x = 1\nx()')


def test_function_symbol_and_return_type():
    source = 'function add(a: integer, b: integer) {\n  return a + b\n}\nlet r = add(1, 2)'
    tree = parse_program(source)
    scope = analyze(tree)
    fn = scope.lookup('add')
    assert isinstance(fn, FunctionSymbol)
    assert [p.name for p in fn.formal_params] == ['a', 'b']
    assert fn.return_type == INTEGER
    assert tree.body.statements[0].return_type == INTEGER
    assert scope.lookup('r').type == INTEGER
    # the function's own scope is gone, parameters are not global
    assert scope.lookup('a') is None


def test_call_nodes_are_resolved():
    tree = parse_program('function f() {\n  return 1\n}\nprint f()')
    scope = analyze(tree)
    call = tree.body.statements[1].expr
    assert call.symbol is scope.lookup('f')


def test_function_without_return_is_null():
    scope = check('function f() {\n  print 1\n}')
    assert scope.lookup('f').return_type == NULL


def test_recursive_call_is_allowed():
    check('function f(n: integer) {\n  return f(n - 1)\n}')


def test_conflicting_returns():
    with pytest.raises(TypeMismatchError):
        check('function f(n: integer) {\n  if (n) then\n    return 1\n  endif\n  return "s"\n}')


def test_argument_checks():
    fn = 'function f(a: integer) {\n  return a\n}\n'
    with pytest.raises(ArgumentCountError) as exc:
        check(fn + 'print f(1, 2)')
    assert 'expects 1' in str(exc.value)
    with pytest.raises(TypeMismatchError):
        check(fn + 'print f("x")')


def test_return_outside_function():
    with pytest.raises(ReturnOutsideFunctionError):
        check('return 1')
    with pytest.raises(ReturnOutsideFunctionError):
        check('if (1) then\n  return 1\nendif')


def test_member_types():
    scope = check('let xs = [1, "a"]\nlet first = xs[0]\nlet second = xs[1]\nlet c = "abc"[2]')
    assert scope.lookup('xs').type == TypeSpec.array(INTEGER, STRING)
    assert scope.lookup('first').type == INTEGER
    assert scope.lookup('second').type == STRING
    assert scope.lookup('c').type == STRING


def test_member_with_unknown_index_is_null():
    scope = check('let i = 0\nlet xs = [1]\nlet v = xs[i]\nv = "anything"')
    assert scope.lookup('v').type == STRING


def test_nested_function_scopes():
    source = (
        'function outer(n: integer) {\n'
        '  function inner() {\n'
        '    return n\n'
        '  }\n'
        '  return inner()\n'
        '}'
    )
    scope = check(source)
    assert scope.lookup('outer').return_type == INTEGER
    assert scope.lookup('inner') is None


def test_errors_share_a_base():
    with pytest.raises(SemanticError):
        check('print missing')


def test_scope_rendering():
    text = str(check('let x = 1'))
    assert 'SCOPE (SCOPED SYMBOL TABLE)' in text
    assert 'Scope name     : global' in text
    assert "<VarSymbol(name='x', type=INTEGER)>" in text


def test_debug_trace(tmp_path):
    debug_file = tmp_path / 'debug.txt'
    analyzer = SemanticAnalyzer(debug_level=3, debug_file=str(debug_file))
    analyzer.analyze(parse_program('let x = 1\nprint x'))
    trace = debug_file.read_text(encoding='utf-8')
    assert 'Enter scope: global' in trace
    assert 'insert: x' in trace
    assert 'lookup: x' in trace
    assert 'Leave scope: global' in trace


def test_no_trace_file_without_debug(tmp_path):
    debug_file = tmp_path / 'debug.txt'
    SemanticAnalyzer(debug_file=str(debug_file)).analyze(parse_program('let x = 1'))
    assert not debug_file.exists()


def test_scope_iterates_in_insertion_order():
    scope = check('let b = 1\nlet a = 2')
    names = [symbol.name for symbol in scope]
    assert names[-2:] == ['b', 'a']
    assert 'a' in scope
    assert 'INTEGER' in scope
    assert len(scope) == len(names)
