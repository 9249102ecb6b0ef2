"""Leaf samplers: weighted pool tables, nested query graphs and hook-driven samplers."""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Any

from spawnquery.node import DecoratorNode, SamplerNode
from spawnquery.randomization import randomize_shuffled_sequence
from spawnquery.table import DataTable, SpawnEntryRow, SpawnEntryRowHandle
from spawnquery.types import RandomizationPolicy, RandomizationWeightState

if TYPE_CHECKING:
    from spawnquery.context import SpawnQueryContext
    from spawnquery.query import SpawnQuery

logger = logging.getLogger(__name__)


class BranchWeightMethod(IntEnum):
    """How a pool sampler reports its weight to a randomizing parent."""

    DEFAULT = 0
    """Fixed to 1, as mutated by the decorators."""

    TOTAL_ENTRIES = 1
    """The number of entries."""

    TOTAL_ENTRY_WEIGHT = 2
    """The sum of all entry weights."""

    AVERAGE_ENTRY_WEIGHT = 3
    """The average entry weight."""


@dataclass
class InfluencerEntry:
    """A blackboard key whose value, times ``factor``, is added to a row's weight."""

    name: str
    factor: float


@dataclass
class PoolEntryCache:
    """A pool row with its parsed influencers."""

    row: SpawnEntryRow
    influencers: list[InfluencerEntry] = field(default_factory=list)

    def is_active(self, context: SpawnQueryContext) -> bool:
        """Every cached row can be picked; only its weight decides how often."""
        return self.row is not None

    def weight(self, context: SpawnQueryContext) -> float:
        board = context.blackboard
        weight = float(self.row.weight)
        for influencer in self.influencers:
            weight += board.get_float(influencer.name) * influencer.factor
        return weight


@dataclass
class PoolSamplerState:
    """Per-entry weight bookkeeping for shuffled sequences."""

    weight_base: list[RandomizationWeightState] = field(default_factory=list)


def _parse_influencers(text: str) -> list[InfluencerEntry]:
    entries = []
    for item in (part for part in text.split(",") if part):
        name, sep, factor_text = item.partition(":")
        factor = None
        if sep and name:
            try:
                factor = float(factor_text.strip())
            except ValueError:
                factor = None
        if factor is None:
            logger.warning("Invalid influencer format: %s", item)
            continue
        entries.append(InfluencerEntry(name, factor))
    return entries


class PoolSampler(SamplerNode):
    """Yields a handle to a row of a pool table, picked at random by row weight."""

    def __init__(
        self,
        pool_table: DataTable | None = None,
        randomization_policy: RandomizationPolicy = RandomizationPolicy.INDEPENDENT,
        branch_weight: BranchWeightMethod = BranchWeightMethod.DEFAULT,
        decorators: Iterable[DecoratorNode] | None = None,
    ) -> None:
        super().__init__(decorators)
        self.randomization_policy = randomization_policy
        self.branch_weight = branch_weight
        self.entry_num = 0
        self._entry_cache: list[PoolEntryCache] = []
        self._weight_map: list[float] = []
        self._total_weights = 0.0
        self._table_cache_built = False
        self._weight_map_dirty = False
        self._pool_table: DataTable | None = None
        self.pool_table = pool_table

    @property
    def pool_table(self) -> DataTable | None:
        return self._pool_table

    @pool_table.setter
    def pool_table(self, table: DataTable | None) -> None:
        if self._pool_table is not None:
            self._pool_table.unsubscribe(self._on_table_changed)
        self._pool_table = table
        self._table_cache_built = False
        if table is not None:
            self.entry_num = len(table.row_names())
            table.subscribe(self._on_table_changed)

    @property
    def _using_influencers(self) -> bool:
        return any(entry.influencers for entry in self._entry_cache)

    def close(self) -> None:
        """Stop listening for changes of the pool table."""
        if self._pool_table is not None:
            self._pool_table.unsubscribe(self._on_table_changed)

    def _on_table_changed(self) -> None:
        self._table_cache_built = False
        self._weight_map_dirty = True

    def _row_type_valid(self) -> bool:
        return self._pool_table is not None and issubclass(
            self._pool_table.row_type, SpawnEntryRow
        )

    def description_details(self) -> str:
        if self._pool_table is None:
            return "Pool table not set"
        return f"Pool Table: {self._pool_table.name}\nTotal Entries: {self.entry_num}"

    def is_active(self, context: SpawnQueryContext) -> bool:
        return self._pool_table is not None

    def query(self, context: SpawnQueryContext) -> Any:
        table = self._pool_table
        if table is None:
            return None
        if not self._row_type_valid():
            logger.warning(
                "Wrong row type in PoolSampler.query. Need to derive from SpawnEntryRow; Got: %s",
                table.row_type.__name__,
            )
            return None

        self._build_table_cache()
        if self._using_influencers:
            self._weight_map_dirty = True

        if self.randomization_policy == RandomizationPolicy.INDEPENDENT:
            if not self._entry_cache:
                return None
            if self._weight_map_dirty:
                self._build_weight_cache(context)
            position = context.random_stream.frand_range(0, self._total_weights)
            picked = self._search_by_weight_position(position)
        else:
            state = context.state_object(self, PoolSamplerState)
            picked = randomize_shuffled_sequence(
                self._entry_cache, state.weight_base, context.random_stream, context
            )

        if picked == -1:
            return None
        name = table.row_names()[picked]
        return SpawnEntryRowHandle(table.find_row(name), name, table)

    def weight(self, context: SpawnQueryContext) -> float:
        method = self.branch_weight
        if method == BranchWeightMethod.DEFAULT or self._pool_table is None:
            return super().weight(context)

        self._build_table_cache()
        if method == BranchWeightMethod.TOTAL_ENTRIES:
            return float(self.entry_num)
        if self.entry_num == 0:
            return 0.0
        self._build_weight_cache(context)
        total = self._weight_map[self.entry_num - 1]
        if method == BranchWeightMethod.TOTAL_ENTRY_WEIGHT:
            return total
        return total / self.entry_num

    def error_message(self) -> str:
        if self._pool_table is None:
            return "Pool table is not set"
        if self.entry_num == 0:
            return "Pool table has no entries"
        if not self._row_type_valid():
            return "Pool table row type has to derive from SpawnEntryRow"
        return super().error_message()

    def refresh(self) -> None:
        super().refresh()
        if self._pool_table is not None:
            self.entry_num = len(self._pool_table.row_names())

    def _build_table_cache(self) -> None:
        if self._table_cache_built or self._pool_table is None:
            return
        self._entry_cache = [
            PoolEntryCache(row, _parse_influencers(row.influencers))
            for row in self._pool_table.rows.values()
        ]
        self.entry_num = len(self._entry_cache)
        self._table_cache_built = True
        self._weight_map_dirty = True

    def _build_weight_cache(self, context: SpawnQueryContext) -> None:
        if not self._weight_map_dirty:
            return
        total = 0.0
        weight_map = []
        for entry in self._entry_cache:
            weight = entry.weight(context)
            if weight > 0:
                total += weight
            weight_map.append(total)
        self._total_weights = total
        self._weight_map = weight_map
        self._weight_map_dirty = False

    def _search_by_weight_position(self, position: float) -> int:
        index = bisect.bisect_left(self._weight_map, position)
        return min(index, len(self._weight_map) - 1)


class QuerySampler(SamplerNode):
    """Uses another query graph as a sampler."""

    def __init__(
        self,
        query_graph: SpawnQuery | None = None,
        decorators: Iterable[DecoratorNode] | None = None,
    ) -> None:
        super().__init__(decorators)
        self.query_graph = query_graph

    def description_details(self) -> str:
        if self.query_graph is None:
            return "Graph is not set"
        return self.query_graph.name

    def is_active(self, context: SpawnQueryContext) -> bool:
        return self.query_graph is not None and self.query_graph.is_active(context)

    def query(self, context: SpawnQueryContext) -> Any:
        graph = self.query_graph
        if graph is None or not graph.is_active(context):
            return None
        if context.has_query_in_call_stack(graph):
            logger.error(
                "Recursion detected in SpawnQuery graph '%s'. Call Stack: %s",
                graph.name,
                context.call_stack_info(),
            )
            return None
        return graph.query_entry(context)

    def error_message(self) -> str:
        if self.query_graph is None:
            return "QueryGraph is not set"
        return super().error_message()


class BlueprintSampler(SamplerNode):
    """Sampler driven by ``receive_*`` hooks that a subclass defines.

    A subclass may define ``receive_check_is_active(context)``, telling whether
    the sampler can yield an entry, and ``receive_query(context)``, yielding an
    entry. Without ``receive_check_is_active`` the sampler is active exactly
    when ``receive_query`` is defined; without ``receive_query`` it yields None.
    """

    def __init__(self, decorators: Iterable[DecoratorNode] | None = None) -> None:
        super().__init__(decorators)
        self._check_is_active = getattr(self, "receive_check_is_active", None)
        self._query_hook = getattr(self, "receive_query", None)
        self._has_check_is_active = callable(self._check_is_active)
        self._has_query = callable(self._query_hook)

    def is_active(self, context: SpawnQueryContext) -> bool:
        if not self._has_check_is_active:
            return self._has_query
        return bool(self._check_is_active(context))

    def query(self, context: SpawnQueryContext) -> Any:
        if not self._has_query:
            return None
        return self._query_hook(context)