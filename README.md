# spawnquery

`spawnquery` picks what to spawn. You describe the choice as a graph of
nodes: samplers at the leaves produce entries, composites choose between
their children, and decorators switch branches on or off, change their
weight or rewrite their result. A `SpawnQueryContext` holds everything that
changes while queries run: a seeded random stream, a blackboard of named
values, per-node state, which graphs are active, and the stack of graphs
currently being queried.

## Installing

```
pip install spawnquery
```

To run the test suite:

```
pip install "spawnquery[test]"
pytest
```

## Building blocks

### Graphs and contexts

- `spawnquery.query.SpawnQuery(root_node, name, active_by_default)`: a graph.
  `query_entry(context)` queries the root node and returns its result, or
  `None` when the graph is inactive in that context or has no root.
  `is_active(context)` and `set_active_state(active, context)` read and set
  the graph's active flag per context. Passing `None` as the context uses the
  default registry's default context.
- `spawnquery.query.SpawnQueryRegistry` and `default_registry()`: the
  registry owns a default context (`default_context()`), builds further ones
  with `construct_context(name, blackboard_asset)`, and `contexts()` lists
  those still alive.
- `spawnquery.context.SpawnQueryContext(name, random_seed, blackboard_asset)`:
  - `random_stream` is a `RandomStream` with `frand()`, `frand_range(low, high)`
    and `reset()`; the same seed gives the same sequence.
  - `blackboard` is a `Blackboard`, created on first use from the blackboard
    asset, a mapping of keys to default values. `set_value` only accepts keys
    the asset defines and raises `KeyError` otherwise; `get_float` returns
    `0.0` for missing or non-numeric values.
  - `state_object(owner, state_class)` returns the state kept for a node,
    creating it on first use.
  - `reset()` rewinds the random stream, `reset_seed(seed)` reseeds it; both
    restore the blackboard defaults and clear per-node state, and both raise
    `RuntimeError` while a query is running.

### Nodes

`spawnquery.node` has the base classes: `SpawnQueryNode` (with
`is_active`, `query`, `weight`, `error_message`, `is_subtree_active` and
`query_result`), `DecoratorNode`, `CompositeNode` with its `CompositeChild`
slots, and `SamplerNode`. Subclass these for nodes of your own.

Composites in `spawnquery.composites`:

- `PrioritySelector(children, decorators, reverse_direction, dynamic)` queries
  the first child whose subtree is active, from the left or, with
  `reverse_direction`, from the right. With `dynamic`, a chosen child moves to
  the lowest priority in that context.
- `RandomSelector(children, decorators, randomization_policy)` picks a child
  by weight under a `spawnquery.types.RandomizationPolicy`: `INDEPENDENT`
  draws, or `SHUFFLED_SEQUENCE`, where each child appears as often as its
  weight says, in random order, before the sequence repeats.

Samplers in `spawnquery.samplers`:

- `PoolSampler(pool_table, randomization_policy, branch_weight, decorators)`
  draws a row from a `spawnquery.table.DataTable` of `SpawnEntryRow`s and
  returns a `SpawnEntryRowHandle`. Each row has a `weight` and optional
  `influencers` written as `"key:factor,key:factor"`; the blackboard value
  under each key, times its factor, is added to the row's weight.
  `BranchWeightMethod` chooses how the pool weighs itself against siblings:
  `DEFAULT`, `TOTAL_ENTRIES`, `TOTAL_ENTRY_WEIGHT` or `AVERAGE_ENTRY_WEIGHT`.
  The sampler listens for `DataTable.notify_changed()`; `close()` stops that.
- `QuerySampler(query_graph)` uses another `SpawnQuery` as a leaf. A graph
  that would call itself yields `None` and logs the call stack.
- `BlueprintSampler`: subclass it and define `receive_check_is_active(context)`
  and/or `receive_query(context)`.

Decorators in `spawnquery.decorators`:

- `WeightOverride(weight, weight_key)` replaces the branch weight with a
  constant or a blackboard value; the branch is inactive while it is not
  positive.
- `ConditionDecorator(blackboard_key, key_type, ...)` tests one blackboard
  key of a `KeyType` with a `BasicKeyOperation`, `ArithmeticKeyOperation` or
  `TextKeyOperation`; `description_details()` describes the test.
- `BlueprintDecorator`: subclass it and define any of
  `receive_check_is_active`, `receive_rewrite` and `receive_mutate_weight`.

### Rows and placement

- `spawnquery.table.get_spawn_entry_row(entry, row_type)` returns the row
  name and a copy of the row behind a pool result. It raises `EntryRowError`
  when the entry is not a row handle or `row_type` is not exactly the table's
  row type.
- `spawnquery.scatter.SpawnScatter` runs a query `amount` times and, for each
  `ActorRow` result, makes a `Placement` at a random point within
  `scatter_range` of `location`, with a random yaw if `randomize_rotation` is
  set. `SpawnScatterActor.begin_play()` does the same in the default context.

## Example

```python
from spawnquery.context import SpawnQueryContext
from spawnquery.query import SpawnQuery
from spawnquery.samplers import PoolSampler
from spawnquery.table import DataTable, SpawnEntryRow, get_spawn_entry_row

table = DataTable("monsters", {
    "goblin": SpawnEntryRow(weight=3),
    "orc": SpawnEntryRow(weight=1, influencers="danger:0.5"),
})
query = SpawnQuery(PoolSampler(table), name="monsters")

context = SpawnQueryContext(random_seed=42, blackboard_asset={"danger": 0.0})
context.blackboard.set_value("danger", 4.0)

entry = query.query_entry(context)
name, row = get_spawn_entry_row(entry, SpawnEntryRow)
print(name, row.weight)
```

The same seed with the same graph gives the same sequence of results, and
`context.reset()` starts that sequence again.

## What it does not do

`spawnquery` is a library only: it has no command, no graph editor and no
file format for saving graphs, which are built in Python code. It does not
spawn anything into a game world either; `SpawnScatter` returns `Placement`s
and hands each one to an optional `spawner` callable you supply.