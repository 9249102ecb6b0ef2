"""Query graph nodes: the node base, decorators, composites and samplers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from spawnquery.types import short_type_name

if TYPE_CHECKING:
    from spawnquery.context import SpawnQueryContext


class SpawnQueryNode(ABC):
    """A node of a query graph, optionally carrying decorators."""

    def __init__(self, decorators: Iterable[DecoratorNode] | None = None) -> None:
        self.decorators: list[DecoratorNode] = list(decorators or [])
        self.last_error: str = ""

    def description_title(self) -> str:
        return short_type_name(self)

    def description_details(self) -> str:
        return ""

    @abstractmethod
    def is_active(self, context: SpawnQueryContext) -> bool:
        """Whether this node itself can yield an entry."""

    @abstractmethod
    def query(self, context: SpawnQueryContext) -> Any:
        """Produce an entry, or None."""

    def weight(self, context: SpawnQueryContext) -> float:
        """The weight used by a randomizing parent, as mutated by the decorators."""
        weight = 1.0
        for decorator in self.decorators:
            weight = decorator.mutate_weight(weight, context)
        return weight

    def error_message(self) -> str:
        """Validation message for this node; empty means no error."""
        return ""

    def refresh(self) -> None:
        """Update cached information about this node, its last error included."""
        self.last_error = self.error_message()

    def is_subtree_active(self, context: SpawnQueryContext) -> bool:
        """Whether this node is a valid path to an entry, decorators included."""
        return self.is_active(context) and all(
            decorator.is_active(context) for decorator in self.decorators
        )

    def query_result(self, context: SpawnQueryContext) -> Any:
        """Query this node and let each decorator rewrite the result in turn."""
        entry = self.query(context)
        for decorator in self.decorators:
            entry = decorator.rewrite(entry, context)
        return entry


class DecoratorNode(SpawnQueryNode):
    """Attached to a node to gate it, rewrite its result or change its weight."""

    def query(self, context: SpawnQueryContext) -> Any:
        raise TypeError(f"{type(self).__name__} is a decorator and produces no entries")

    def is_active(self, context: SpawnQueryContext) -> bool:
        return True

    def rewrite(self, result: Any, context: SpawnQueryContext) -> Any:
        return result

    def mutate_weight(self, weight: float, context: SpawnQueryContext) -> float:
        return weight


@dataclass
class CompositeChild:
    """A child slot of a composite node."""

    child_node: SpawnQueryNode

    def is_active(self, context: SpawnQueryContext) -> bool:
        return self.child_node.is_subtree_active(context)

    def weight(self, context: SpawnQueryContext) -> float:
        return self.child_node.weight(context)


class CompositeNode(SpawnQueryNode):
    """A node that chooses among child nodes."""

    def __init__(
        self,
        children: Iterable[CompositeChild | SpawnQueryNode] | None = None,
        decorators: Iterable[DecoratorNode] | None = None,
    ) -> None:
        super().__init__(decorators)
        self.children: list[CompositeChild] = [
            child if isinstance(child, CompositeChild) else CompositeChild(child)
            for child in children or []
        ]

    def is_active(self, context: SpawnQueryContext) -> bool:
        return any(child.child_node.is_subtree_active(context) for child in self.children)


class SamplerNode(SpawnQueryNode):
    """A leaf node that produces entries."""

    def description_title(self) -> str:
        return f"{super().description_title()} Sampler"