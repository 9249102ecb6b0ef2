"""Query context: random stream, blackboard, activity flags and per-node state."""

from __future__ import annotations

import struct
from collections.abc import Mapping
from typing import Any, TypeVar

_MASK32 = 0xFFFFFFFF

T = TypeVar("T")


class RandomStream:
    """Small seeded linear congruential generator with a resettable seed."""

    def __init__(self, seed: int = 0) -> None:
        self.initial_seed = seed & _MASK32
        self.seed = self.initial_seed

    def _mutate(self) -> None:
        self.seed = (self.seed * 196314165 + 907633515) & _MASK32

    def frand(self) -> float:
        """Return a float in [0, 1)."""
        self._mutate()
        bits = 0x3F800000 | (self.seed >> 9)
        return struct.unpack("<f", struct.pack("<I", bits))[0] - 1.0

    def frand_range(self, low: float, high: float) -> float:
        """Return a float between ``low`` and ``high``."""
        return low + (high - low) * self.frand()

    def reset(self) -> None:
        """Rewind to the initial seed."""
        self.seed = self.initial_seed


class Blackboard:
    """Key/value store initialised from an asset mapping of keys to defaults."""

    def __init__(self, asset: Mapping[str, Any] | None = None) -> None:
        self.asset: Mapping[str, Any] | None = None
        self._values: dict[str, Any] = {}
        if asset is not None:
            self.initialize(asset)

    def initialize(self, asset: Mapping[str, Any] | None) -> None:
        """Reset all keys to the defaults held by ``asset``."""
        self.asset = asset
        self._values = dict(asset) if asset is not None else {}

    def has_valid_asset(self) -> bool:
        return self.asset is not None

    def has_key(self, key: str) -> bool:
        return key in self._values

    def get_value(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set_value(self, key: str, value: Any) -> None:
        if key not in self._values:
            raise KeyError(key)
        self._values[key] = value

    def get_float(self, key: str) -> float:
        """Return the key's value as a float, 0.0 if missing or not numeric."""
        value = self._values.get(key)
        if value is None:
            return 0.0
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0


class SpawnQueryContext:
    """Everything a query run depends on besides the query graph itself."""

    def __init__(
        self,
        name: str = "SpawnQueryContext",
        random_seed: int = 0,
        blackboard_asset: Mapping[str, Any] | None = None,
    ) -> None:
        self.name = name
        self.random_seed = random_seed
        self.random_stream = RandomStream(random_seed)
        self._blackboard_asset = blackboard_asset
        self._blackboard: Blackboard | None = None
        self._active_states: dict[int, tuple[Any, bool]] = {}
        self._call_stack: list[Any] = []
        self._state_objects: dict[int, tuple[Any, Any]] = {}

    def __repr__(self) -> str:
        return f"SpawnQueryContext(name={self.name!r}, random_seed={self.random_seed})"

    @property
    def blackboard(self) -> Blackboard:
        """The blackboard, created on first use from the blackboard asset."""
        if self._blackboard is None:
            self._blackboard = Blackboard(self._blackboard_asset)
        return self._blackboard

    @property
    def blackboard_asset(self) -> Mapping[str, Any] | None:
        return self._blackboard_asset

    def is_query_active(self, query: Any, default: bool) -> bool:
        found = self._active_states.get(id(query))
        return found[1] if found is not None else default

    def set_query_active_state(self, query: Any, active: bool) -> None:
        self._active_states[id(query)] = (query, active)

    def _ensure_idle(self) -> None:
        if self._call_stack:
            raise RuntimeError("cannot reset the context while a spawn query is running")

    def reset(self) -> None:
        """Rewind the random stream and clear all per-node state."""
        self._ensure_idle()
        self.random_stream.reset()
        self._reset_states()

    def reset_seed(self, seed: int) -> None:
        """Reseed the random stream and clear all per-node state."""
        self._ensure_idle()
        self.random_seed = seed
        self.random_stream = RandomStream(seed)
        self._reset_states()

    def set_blackboard_asset(self, asset: Mapping[str, Any] | None) -> None:
        self._blackboard_asset = asset
        if self._blackboard is not None:
            self._blackboard.initialize(asset)

    def push_call(self, query: Any) -> None:
        self._call_stack.append(query)

    def pop_call(self, query: Any) -> None:
        """Pop ``query`` if it is on top of the call stack; otherwise do nothing."""
        if self._call_stack and self._call_stack[-1] is query:
            self._call_stack.pop()

    def has_query_in_call_stack(self, query: Any) -> bool:
        return any(entry is query for entry in self._call_stack)

    def call_stack_info(self) -> str:
        return "".join(
            f"{getattr(entry, 'name', type(entry).__name__)}\n" for entry in self._call_stack
        )

    def state_object(self, owner: Any, state_class: type[T]) -> T:
        """Return the state object kept for ``owner``, creating it on first use."""
        if owner is None:
            raise ValueError("state owner must not be None")
        found = self._state_objects.get(id(owner))
        if found is not None:
            state = found[1]
            if not isinstance(state, state_class):
                raise TypeError(
                    f"state object for {owner!r} is {type(state).__name__}, "
                    f"expected {state_class.__name__}"
                )
            return state
        state = state_class()
        self._state_objects[id(owner)] = (owner, state)
        return state

    def _reset_states(self) -> None:
        board = self._blackboard
        if board is not None and board.has_valid_asset():
            board.initialize(board.asset)
        self._state_objects.clear()