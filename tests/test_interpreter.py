import pytest

from lumen.analyzer import analyze
from lumen.callstack import ActivationRecord, ARType, CallStack
from lumen.errors import (
    LumenRuntimeError, UndefinedFunctionError, ReturnOutsideFunctionError,
    LexerError, UnexpectedTokenError,
)
from lumen.interpreter import Interpreter, apply_binary_op, execute, run_program, compile_file
from lumen.parser import parse_program


def output(source):
    lines = []
    run_program(source, write=lines.append)
    return lines


def test_print_variable():
    assert output('let x = 5\nprint x') == ['5']


def test_function_call():
    assert output('function add(a: integer, b: integer) { return a + b }\nprint add(2,3)') == ['5']


def test_if_else():
    assert output('if (1 < 2) then print "yes" else print "no" endif') == ['yes']
    assert output('if (2 < 1) then print "yes" else print "no" endif') == ['no']


def test_while_counts():
    source = 'let i = 0\nwhile (i < 3) repeat\n  print i\n  i = i + 1\nendwhile'
    assert output(source) == ['0', '1', '2']


def test_until_runs_while_false():
    source = 'let i = 0\nuntil (i == 2) repeat\n  i = i + 1\nenduntil\nprint i'
    assert output(source) == ['2']


def test_return_leaves_loops_and_blocks():
    source = (
        'function first_over(limit: integer) {\n'
        '  let i = 0\n'
        '  while (true) repeat\n'
        '    if (i > limit) then\n'
        '      return i\n'
        '    endif\n'
        '    i = i + 1\n'
        '  endwhile\n'
        '  print "unreachable"\n'
        '}\n'
        'print first_over(4)'
    )
    assert output(source) == ['5']


def test_return_from_inside_until():
    source = (
        'function countdown(n: integer) {\n'
        '  until (n == 0) repeat\n'
        '    if (n == 2) then\n'
        '      return n\n'
        '    endif\n'
        '    n = n - 1\n'
        '  enduntil\n'
        '  print "unreachable"\n'
        '  return 0\n'
        '}\n'
        'print countdown(5)\n'
        'print "after"'
    )
    assert output(source) == ['2', 'after']


def test_function_without_return_gives_null():
    assert output('function f() {\n  let x = 1\n}\nprint f()') == ['null']


def test_and_or_evaluate_both_sides():
    source = (
        'function t(label: string) {\n  print label\n  return true\n}\n'
        'function f(label: string) {\n  print label\n  return false\n}\n'
        'let a = f("left") and t("right")\n'
        'let b = t("left") or f("right")\n'
        'print a\n'
        'print b'
    )
    assert output(source) == ['left', 'right', 'left', 'right', 'false', 'true']


def test_logical_returns_operands():
    assert output('print 0 or "fallback"') == ['fallback']
    assert output('print 2 and 3') == ['3']
    assert output('print "" and 3') == ['']


def test_logical_result_can_be_reassigned():
    result = execute('let s = "" or "default"\nprint s\ns = "x"\nprint s')
    assert result.ok
    assert result.output == ['default', 'x']


def test_arrays_are_truthy():
    assert output('if ([]) then print "yes" endif') == ['yes']


def test_callee_reads_caller_records():
    source = (
        'let x = 1\n'
        'function show() {\n  print x\n}\n'
        'function wrapper() {\n  let x = 2\n  show()\n}\n'
        'wrapper()\n'
        'show()'
    )
    # show runs at nesting level 2 and falls back to the record at level 1
    assert output(source) == ['1', '1']


def test_nested_function_sees_outermost_invocation():
    source = (
        'function outer(n: integer) {\n'
        '  function inner() {\n    print n\n  }\n'
        '  if (n > 1) then\n    return outer(n - 1)\n  endif\n'
        '  inner()\n'
        '  return n\n'
        '}\n'
        'print outer(3)'
    )
    assert output(source) == ['3', '1']


def test_assignment_in_function_is_local():
    source = (
        'let x = 1\n'
        'function f() {\n  x = 5\n  print x\n}\n'
        'f()\n'
        'print x'
    )
    assert output(source) == ['5', '1']


def test_global_memory():
    interpreter = run_program('let x = 2\nlet y\nx = x * 10', write=lambda text: None)
    memory = interpreter.global_memory
    assert memory.type is ARType.PROGRAM
    assert memory.nesting_level == 1
    assert memory.members == {'x': 20, 'y': None}
    assert len(interpreter.call_stack) == 0


def test_printing_values():
    assert output('print true\nprint 1.5\nprint 2.0\nprint [1, "a", false, [2.5]]') == [
        'true', '1.5', '2.0', "[1, 'a', false, [2.5]]",
    ]


def test_member_out_of_range_is_null():
    assert output('let xs = [1, 2]\nlet i = 5\nprint xs[i]\nprint "ab"[1]') == ['null', 'b']


def test_integer_division_and_modulo():
    assert apply_binary_op('/', 7, 2) == 3.5
    assert apply_binary_op('/', -7, 2) == -3.5
    assert apply_binary_op('%', -7, 3) == -1
    assert apply_binary_op('%', 7, -3) == 1
    assert apply_binary_op('/', 7.0, 2) == 3.5
    assert apply_binary_op('%', 5.5, 2) == 1.5


def test_comparisons_and_equality():
    assert apply_binary_op('<', 'a', 'b') is True
    assert apply_binary_op('>=', 2, 2.0) is True
    assert apply_binary_op('==', 1, 1) is True
    assert apply_binary_op('==', 1, 1.0) is False
    assert apply_binary_op('==', True, 1) is False
    assert apply_binary_op('==', [1, [2]], [1, [2]]) is True
    assert apply_binary_op('==', None, None) is True


@pytest.mark.parametrize('op, a, b', [
    ('/', 1, 0),
    ('%', 1, 0),
    ('+', 1, 'a'),
    ('-', 'a', 'b'),
    ('*', True, 2),
    ('<', 1, 'a'),
    ('<', [1], [2]),
])
def test_unsupported_operations(op, a, b):
    with pytest.raises(LumenRuntimeError):
        apply_binary_op(op, a, b)


def test_runtime_errors_from_programs():
    with pytest.raises(LumenRuntimeError):
        run_program('print 1 / 0', write=lambda text: None)
    with pytest.raises(LumenRuntimeError):
        run_program('let n = 3\nprint n[0]', write=lambda text: None)
    with pytest.raises(LumenRuntimeError):
        run_program('let b = true\nprint -b', write=lambda text: None)


def test_unbound_variable_is_runtime_error():
    # declared for the analyzer, but the declaration never runs
    source = 'if (false) then\n  let y = 1\nendif\nprint y'
    with pytest.raises(LumenRuntimeError):
        output(source)


def test_interpreter_needs_analyzed_tree():
    tree = parse_program('function f() {\n}\nf()')
    with pytest.raises(LumenRuntimeError):
        Interpreter(tree, write=lambda text: None).interpret()


def test_call_stack_unwinds_after_runtime_error():
    tree = parse_program('function f(a: integer) {\n  return a / 0\n}\nprint f(1)')
    analyze(tree)
    interpreter = Interpreter(tree, write=lambda text: None)
    with pytest.raises(LumenRuntimeError):
        interpreter.interpret()
    assert len(interpreter.call_stack) == 0


def test_undefined_function_fails_before_output():
    result = execute('print 1\nprint nope()')
    assert not result.ok
    assert isinstance(result.error, UndefinedFunctionError)
    assert result.output == []
    assert result.memory is None


def test_top_level_return_fails_analysis():
    result = execute('print 1\nreturn 2')
    assert isinstance(result.error, ReturnOutsideFunctionError)
    assert result.output == []


def test_execute_collects_output_and_state():
    echoed = []
    result = execute('let x = 1\nprint x\nprint x + 1', write=echoed.append)
    assert result.ok
    assert result.output == ['1', '2']
    assert echoed == ['1', '2']
    assert result.memory['x'] == 1
    assert result.scope.lookup('x') is not None
    assert result.tree is not None


def test_execute_keeps_output_before_runtime_error():
    result = execute('print "before"\nprint 1 / 0\nprint "after"')
    assert isinstance(result.error, LumenRuntimeError)
    assert result.error.phase == 'runtime'
    assert result.output == ['before']


def test_execute_reports_lexer_and_parser_errors():
    assert isinstance(execute('let x = #').error, LexerError)
    assert isinstance(execute('let = 1').error, UnexpectedTokenError)


def test_compile_file(tmp_path):
    path = tmp_path / 'hello.lum'
    path.write_text('print "from file"\n', encoding='utf-8')
    result = compile_file(str(path), write=lambda text: None)
    assert result.output == ['from file']


def test_default_sink_is_stdout(capsys):
    run_program('print "out"')
    assert capsys.readouterr().out == 'out\n'


def test_call_stack_trace(tmp_path):
    debug_file = tmp_path / 'debug.txt'
    tree = parse_program('function f(a: integer) {\n  return a\n}\nprint f(7)')
    analyze(tree)
    Interpreter(tree, write=lambda text: None, debug_level=2, debug_file=str(debug_file)).interpret()
    trace = debug_file.read_text(encoding='utf-8')
    assert 'ENTER: PROGRAM' in trace
    assert 'ENTER: FUNCTION f' in trace
    assert 'call stack, depth 2:' in trace
    assert '[function f @ level 2]' in trace
    assert '  a = 7' in trace
    assert 'LEAVE: PROGRAM' in trace


def test_call_stack_records():
    stack = CallStack()
    program = ActivationRecord('program', ARType.PROGRAM, 1)
    fn = ActivationRecord('f', ARType.FUNCTION, 2)
    stack.push(program)
    stack.push(fn)
    fn['a'] = 1
    assert stack.peek() is fn
    assert stack.get_record(1) is program
    assert stack.get_record(3) is None
    assert 'a' in fn and fn.get('b') is None
    assert str(stack).startswith('call stack, depth 2:\n[function f @ level 2]\n  a = 1')
    assert stack.pop() is fn
    assert len(stack) == 1
