import enum
from typing import Any, Dict, Iterator, List, Optional

from .types import to_string


class ARType(enum.Enum):
    PROGRAM = 'PROGRAM'
    FUNCTION = 'FUNCTION'


class ActivationRecord:
    """Local bindings of one program or function invocation."""

    def __init__(self, name: str, type: ARType, nesting_level: int):
        self.name = name
        self.type = type
        self.nesting_level = nesting_level
        self.members: Dict[str, Any] = {}

    def __setitem__(self, key: str, value: Any):
        self.members[key] = value

    def __getitem__(self, key: str) -> Any:
        return self.members[key]

    def __contains__(self, key: str) -> bool:
        return key in self.members

    def get(self, key: str, default: Any = None) -> Any:
        return self.members.get(key, default)

    def __str__(self) -> str:
        header = f"[{self.type.value.lower()} {self.name} @ level {self.nesting_level}]"
        bindings = [f"  {name} = {to_string(value)}" for name, value in self.members.items()]
        return '\n'.join([header] + bindings)

    __repr__ = __str__


class CallStack:
    def __init__(self):
        self._records: List[ActivationRecord] = []

    def push(self, ar: ActivationRecord):
        self._records.append(ar)

    def pop(self) -> ActivationRecord:
        return self._records.pop()

    def peek(self) -> ActivationRecord:
        return self._records[-1]

    def get_record(self, level: int) -> Optional[ActivationRecord]:
        """Record at stack position `level - 1`, counted from the bottom."""
        if 1 <= level <= len(self._records):
            return self._records[level - 1]
        return None

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[ActivationRecord]:
        return iter(self._records)

    def __str__(self) -> str:
        # innermost record first
        frames = [str(ar) for ar in reversed(self._records)]
        return '\n'.join([f"call stack, depth {len(self._records)}:"] + frames)

    __repr__ = __str__
