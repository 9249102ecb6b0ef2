"""Query graphs and the registry of contexts they run in."""

from __future__ import annotations

import functools
import weakref
from collections.abc import Mapping
from typing import Any

from spawnquery.context import SpawnQueryContext
from spawnquery.node import SpawnQueryNode


class SpawnQuery:
    """A query graph: a root node plus an activity flag kept per context.

    An inactive graph yields nothing. Methods taking a context fall back to
    the default registry's default context when given None.
    """

    def __init__(
        self,
        root_node: SpawnQueryNode | None = None,
        name: str = "SpawnQuery",
        active_by_default: bool = True,
    ) -> None:
        self.root_node = root_node
        self.name = name
        self.active_by_default = active_by_default

    def __repr__(self) -> str:
        return f"SpawnQuery(name={self.name!r})"

    @staticmethod
    def _resolve(context: SpawnQueryContext | None) -> SpawnQueryContext:
        return context if context is not None else default_registry().default_context()

    def is_active(self, context: SpawnQueryContext | None = None) -> bool:
        return self._resolve(context).is_query_active(self, self.active_by_default)

    def set_active_state(self, active: bool, context: SpawnQueryContext | None = None) -> None:
        self._resolve(context).set_query_active_state(self, active)

    def query_entry(self, context: SpawnQueryContext | None = None) -> Any:
        """Query the root node; None if the graph is inactive or has no root."""
        context = self._resolve(context)
        if not self.is_active(context) or self.root_node is None:
            return None
        context.push_call(self)
        try:
            return self.root_node.query_result(context)
        finally:
            context.pop_call(self)


class SpawnQueryRegistry:
    """Owns the default context and tracks every context it constructs."""

    DEFAULT_CONTEXT_NAME = "SpawnQueryContext_Default"

    def __init__(self) -> None:
        self._default = SpawnQueryContext(name=self.DEFAULT_CONTEXT_NAME)
        self._contexts: list[weakref.ref[SpawnQueryContext]] = [weakref.ref(self._default)]

    def default_context(self) -> SpawnQueryContext:
        return self._default

    def construct_context(
        self, name: str, blackboard_asset: Mapping[str, Any] | None = None
    ) -> SpawnQueryContext:
        context = SpawnQueryContext(name=name)
        if blackboard_asset:
            context.set_blackboard_asset(blackboard_asset)
        self._contexts.append(weakref.ref(context))
        return context

    def contexts(self) -> list[SpawnQueryContext]:
        """Live contexts; references to collected ones are dropped."""
        live = [(ref, ref()) for ref in self._contexts]
        live = [(ref, ctx) for ref, ctx in live if ctx is not None]
        self._contexts = [ref for ref, _ in live]
        return [ctx for _, ctx in live]


@functools.lru_cache(maxsize=None)
def default_registry() -> SpawnQueryRegistry:
    """The process-wide registry."""
    return SpawnQueryRegistry()