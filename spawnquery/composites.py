"""Composite nodes that select among their children."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from spawnquery.node import CompositeChild, CompositeNode, DecoratorNode, SpawnQueryNode
from spawnquery.randomization import randomize_independent, randomize_shuffled_sequence
from spawnquery.types import RandomizationPolicy, RandomizationWeightState

if TYPE_CHECKING:
    from spawnquery.context import SpawnQueryContext

logger = logging.getLogger(__name__)


@dataclass
class PrioritySelectorState:
    """Child indices ordered from highest to lowest priority."""

    child_order: list[int] = field(default_factory=list)


class PrioritySelector(CompositeNode):
    """Queries the highest-priority child whose subtree is active.

    ``reverse_direction`` prefers children on the right. With ``dynamic``
    set, a chosen child drops to the lowest priority in that context.
    """

    def __init__(
        self,
        children: Iterable[CompositeChild | SpawnQueryNode] | None = None,
        decorators: Iterable[DecoratorNode] | None = None,
        reverse_direction: bool = False,
        dynamic: bool = False,
    ) -> None:
        super().__init__(children, decorators)
        self.reverse_direction = reverse_direction
        self.dynamic = dynamic

    def query(self, context: SpawnQueryContext) -> Any:
        if self.dynamic:
            active = self._dynamic_active_child(context)
        else:
            ordered = reversed(self.children) if self.reverse_direction else self.children
            active = next(
                (c.child_node for c in ordered if c.child_node.is_subtree_active(context)),
                None,
            )

        entry = None
        if active is not None:
            entry = active.query_result(context)
        else:
            logger.warning("No active children available in PrioritySelector.query")

        if entry is not None:
            return entry
        logger.warning("Active child returns no entry in PrioritySelector.query")
        return None

    def _dynamic_active_child(self, context: SpawnQueryContext) -> SpawnQueryNode | None:
        state = context.state_object(self, PrioritySelectorState)
        count = len(self.children)
        if count and not state.child_order:
            indices = range(count)
            state.child_order = list(reversed(indices) if self.reverse_direction else indices)
        if len(state.child_order) != count:
            raise RuntimeError("priority state does not match the number of children")

        order = state.child_order
        for position, child_index in enumerate(order):
            child = self.children[child_index].child_node
            if child.is_subtree_active(context):
                del order[position]
                order.append(child_index)
                return child
        return None


@dataclass
class RandomSelectorState:
    """Per-child weight bookkeeping, used mainly by shuffled sequences."""

    weight_base: list[RandomizationWeightState] = field(default_factory=list)


class RandomSelector(CompositeNode):
    """Queries a child chosen at random by weight."""

    def __init__(
        self,
        children: Iterable[CompositeChild | SpawnQueryNode] | None = None,
        decorators: Iterable[DecoratorNode] | None = None,
        randomization_policy: RandomizationPolicy = RandomizationPolicy.INDEPENDENT,
    ) -> None:
        super().__init__(children, decorators)
        self.randomization_policy = randomization_policy

    def query(self, context: SpawnQueryContext) -> Any:
        state = context.state_object(self, RandomSelectorState)
        pick = (
            randomize_independent
            if self.randomization_policy == RandomizationPolicy.INDEPENDENT
            else randomize_shuffled_sequence
        )
        picked = pick(self.children, state.weight_base, context.random_stream, context)
        if picked == -1:
            return None
        return self.children[picked].child_node.query_result(context)