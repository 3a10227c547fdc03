from typing import Any, Optional, TextIO

from .ast import Node


class NodeVisitor:
    """Dispatches on node class to a `visit_<ClassName>` method.

    Shared by the semantic analyzer and the interpreter, together with the
    debug trace: when `debug_level` is above zero, messages up to that level
    are written to `debug_file`.
    """

    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt'):
        self.debug_level = debug_level
        self.debug_file = debug_file
        self.debug_fp: Optional[TextIO] = None

    def visit(self, node: Node) -> Any:
        method = getattr(self, 'visit_' + type(node).__name__, None)
        if method is None:
            return self.generic_visit(node)
        return method(node)

    def generic_visit(self, node: Node) -> Any:
        raise NotImplementedError(f"no visit_{type(node).__name__} method on {type(self).__name__}")

    def debug(self, msg: str, level: int = 1):
        if self.debug_level < level:
            return
        if self.debug_fp is None:
            self.debug_fp = open(self.debug_file, 'a', encoding='utf-8')
        self.debug_fp.write(msg + '\n')
        self.debug_fp.flush()

    def close_debug(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None
