"""Decorators that gate a branch, rewrite its result or override its weight."""

from __future__ import annotations

import operator
from collections.abc import Callable
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any

from spawnquery.node import DecoratorNode

if TYPE_CHECKING:
    from spawnquery.context import SpawnQueryContext

INDEX_NONE = -1
KINDA_SMALL_NUMBER = 1e-4


class BlueprintDecorator(DecoratorNode):
    """Decorator driven by ``receive_*`` hooks that a subclass may define.

    ``receive_check_is_active(context)``, ``receive_rewrite(result, context)``
    and ``receive_mutate_weight(weight, context)`` are all optional. A hook
    that is not defined keeps the default behaviour: always active, result
    unchanged, weight unchanged.
    """

    def __init__(self) -> None:
        super().__init__()
        self._check_is_active: Callable[..., Any] | None = getattr(
            self, "receive_check_is_active", None
        )
        self._rewrite: Callable[..., Any] | None = getattr(self, "receive_rewrite", None)
        self._mutate_weight: Callable[..., Any] | None = getattr(
            self, "receive_mutate_weight", None
        )

    def is_active(self, context: SpawnQueryContext) -> bool:
        if self._check_is_active is None:
            return True
        return bool(self._check_is_active(context))

    def rewrite(self, result: Any, context: SpawnQueryContext) -> Any:
        if self._rewrite is None:
            return result
        return self._rewrite(result, context)

    def mutate_weight(self, weight: float, context: SpawnQueryContext) -> float:
        if self._mutate_weight is None:
            return weight
        return self._mutate_weight(weight, context)


class WeightOverride(DecoratorNode):
    """Replaces the branch weight with a constant or a blackboard value.

    The branch is inactive while the weight is not positive.
    """

    def __init__(self, weight: float = 1.0, weight_key: str | None = None) -> None:
        super().__init__()
        self.weight_value = weight
        self.weight_key = weight_key

    def _value(self, context: SpawnQueryContext) -> float:
        if self.weight_key is not None:
            return context.blackboard.get_float(self.weight_key)
        return float(self.weight_value)

    def description_details(self) -> str:
        shown = self.weight_key if self.weight_key is not None else f"{self.weight_value:g}"
        return f"Weight: {shown}"

    def is_active(self, context: SpawnQueryContext) -> bool:
        return self._value(context) > 0

    def mutate_weight(self, weight: float, context: SpawnQueryContext) -> float:
        return self._value(context)


class BasicKeyOperation(IntEnum):
    """Tests on whether a key holds a value."""

    SET = 0
    NOT_SET = 1

    @property
    def display_name(self) -> str:
        return _BASIC_NAMES[self]


class ArithmeticKeyOperation(IntEnum):
    """Numeric comparisons against the decorator's value."""

    EQUAL = 0
    NOT_EQUAL = 1
    LESS = 2
    LESS_OR_EQUAL = 3
    GREATER = 4
    GREATER_OR_EQUAL = 5

    @property
    def display_name(self) -> str:
        return _ARITHMETIC_NAMES[self]


class TextKeyOperation(IntEnum):
    """String comparisons against the decorator's value."""

    EQUAL = 0
    NOT_EQUAL = 1
    CONTAIN = 2
    NOT_CONTAIN = 3

    @property
    def display_name(self) -> str:
        return _TEXT_NAMES[self]


_BASIC_NAMES = {
    BasicKeyOperation.SET: "Is Set",
    BasicKeyOperation.NOT_SET: "Is Not Set",
}
_ARITHMETIC_NAMES = {
    ArithmeticKeyOperation.EQUAL: "Is Equal To",
    ArithmeticKeyOperation.NOT_EQUAL: "Is Not Equal To",
    ArithmeticKeyOperation.LESS: "Is Less Than",
    ArithmeticKeyOperation.LESS_OR_EQUAL: "Is Less Than Or Equal To",
    ArithmeticKeyOperation.GREATER: "Is Greater Than",
    ArithmeticKeyOperation.GREATER_OR_EQUAL: "Is Greater Than Or Equal To",
}
_TEXT_NAMES = {
    TextKeyOperation.EQUAL: "Is Equal To",
    TextKeyOperation.NOT_EQUAL: "Is Not Equal To",
    TextKeyOperation.CONTAIN: "Contains",
    TextKeyOperation.NOT_CONTAIN: "Not Contains",
}


class KeyType(Enum):
    """Kinds of blackboard keys a condition can test."""

    BOOL = "bool"
    INT = "int"
    FLOAT = "float"
    ENUM = "enum"
    NATIVE_ENUM = "native_enum"
    STRING = "string"
    NAME = "name"
    OBJECT = "object"
    CLASS = "class"
    VECTOR = "vector"
    ROTATOR = "rotator"

    @property
    def operation(self) -> type[IntEnum]:
        """The operation enum that applies to keys of this type."""
        return _KEY_OPERATIONS[self]

    @property
    def is_enum(self) -> bool:
        return self in (KeyType.ENUM, KeyType.NATIVE_ENUM)


_KEY_OPERATIONS: dict[KeyType, type[IntEnum]] = {
    KeyType.BOOL: BasicKeyOperation,
    KeyType.OBJECT: BasicKeyOperation,
    KeyType.CLASS: BasicKeyOperation,
    KeyType.VECTOR: BasicKeyOperation,
    KeyType.ROTATOR: BasicKeyOperation,
    KeyType.INT: ArithmeticKeyOperation,
    KeyType.FLOAT: ArithmeticKeyOperation,
    KeyType.ENUM: ArithmeticKeyOperation,
    KeyType.NATIVE_ENUM: ArithmeticKeyOperation,
    KeyType.STRING: TextKeyOperation,
    KeyType.NAME: TextKeyOperation,
}

_COMPARE: dict[ArithmeticKeyOperation, Callable[[Any, Any], bool]] = {
    ArithmeticKeyOperation.EQUAL: operator.eq,
    ArithmeticKeyOperation.NOT_EQUAL: operator.ne,
    ArithmeticKeyOperation.LESS: operator.lt,
    ArithmeticKeyOperation.LESS_OR_EQUAL: operator.le,
    ArithmeticKeyOperation.GREATER: operator.gt,
    ArithmeticKeyOperation.GREATER_OR_EQUAL: operator.ge,
}


def _compare_float(value: float, other: float, op: ArithmeticKeyOperation) -> bool:
    if op == ArithmeticKeyOperation.EQUAL:
        return abs(value - other) < KINDA_SMALL_NUMBER
    if op == ArithmeticKeyOperation.NOT_EQUAL:
        return abs(value - other) >= KINDA_SMALL_NUMBER
    return _COMPARE[op](value, other)


class ConditionDecorator(DecoratorNode):
    """Gates a branch on a test of one blackboard key."""

    def __init__(
        self,
        blackboard_key: str = "",
        key_type: KeyType | None = None,
        *,
        enum_type: type[Enum] | None = None,
        int_value: int = 0,
        float_value: float = 0.0,
        string_value: str = "",
        basic_operation: BasicKeyOperation = BasicKeyOperation.SET,
        arithmetic_operation: ArithmeticKeyOperation = ArithmeticKeyOperation.EQUAL,
        text_operation: TextKeyOperation = TextKeyOperation.EQUAL,
    ) -> None:
        super().__init__()
        self.blackboard_key = blackboard_key
        self.key_type = key_type
        self.enum_type = enum_type
        self.int_value = int_value
        self.float_value = float_value
        self.string_value = string_value
        self.basic_operation = basic_operation
        self.arithmetic_operation = arithmetic_operation
        self.text_operation = text_operation
        self.cached_description = ""
        self.build_description()

    @property
    def operation(self) -> IntEnum | None:
        """The operation that applies to the current key type."""
        if self.key_type is None:
            return None
        kind = self.key_type.operation
        if kind is BasicKeyOperation:
            return self.basic_operation
        if kind is ArithmeticKeyOperation:
            return self.arithmetic_operation
        return self.text_operation

    def description_details(self) -> str:
        return self.cached_description

    def is_active(self, context: SpawnQueryContext) -> bool:
        board = context.blackboard
        if not self.blackboard_key or self.key_type is None or not board.has_valid_asset():
            return False
        if not board.has_key(self.blackboard_key):
            return False
        value = board.get_value(self.blackboard_key)
        kind = self.key_type.operation

        if kind is BasicKeyOperation:
            is_set = bool(value) if self.key_type is KeyType.BOOL else value is not None
            return is_set if self.basic_operation == BasicKeyOperation.SET else not is_set

        if kind is ArithmeticKeyOperation:
            if value is None:
                return False
            if self.key_type is KeyType.FLOAT:
                return _compare_float(float(value), self.float_value, self.arithmetic_operation)
            current = value.value if isinstance(value, Enum) else int(value)
            return _COMPARE[self.arithmetic_operation](current, self.int_value)

        text = "" if value is None else str(value)
        op = self.text_operation
        if op == TextKeyOperation.EQUAL:
            return text == self.string_value
        if op == TextKeyOperation.NOT_EQUAL:
            return text != self.string_value
        if op == TextKeyOperation.CONTAIN:
            return self.string_value in text
        return self.string_value not in text

    def _describe_arithmetic_param(self) -> str:
        if self.key_type is KeyType.FLOAT:
            return f"{self.float_value:f}"
        if self.key_type is not None and self.key_type.is_enum and self.enum_type is not None:
            member = next((m for m in self.enum_type if m.value == self.int_value), None)
            if member is not None:
                return member.name
        return str(self.int_value)

    def build_description(self) -> str:
        """Rebuild and return the cached description."""
        description = "Invalid"
        if self.blackboard_key and self.key_type is not None:
            self.refresh_enum_based()
            key = self.blackboard_key
            kind = self.key_type.operation
            if kind is BasicKeyOperation:
                description = f"{key} is {self.basic_operation.display_name}"
            elif kind is ArithmeticKeyOperation:
                description = (
                    f"{key} {self.arithmetic_operation.display_name} "
                    f"{self._describe_arithmetic_param()}"
                )
            else:
                description = f"{key} {self.text_operation.display_name} [{self.string_value}]"
        self.cached_description = description
        return description

    def refresh_enum_based(self) -> None:
        """Keep the enum name in ``string_value`` and its value in ``int_value`` in sync."""
        if self.key_type is None or not self.key_type.is_enum or self.enum_type is None:
            return
        members = list(self.enum_type)
        if self.string_value:
            try:
                self.int_value = int(self.enum_type[self.string_value].value)
            except KeyError:
                self.int_value = INDEX_NONE
        elif 0 <= self.int_value < len(members):
            member = members[self.int_value]
            self.string_value = member.name
            self.int_value = int(member.value)