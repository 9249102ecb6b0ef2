import pytest

from spawnquery.composites import (
    PrioritySelector,
    PrioritySelectorState,
    RandomSelector,
    RandomSelectorState,
)
from spawnquery.context import SpawnQueryContext
from spawnquery.node import DecoratorNode, SamplerNode
from spawnquery.types import RandomizationPolicy


class _Fixed(SamplerNode):
    def __init__(self, entry, active=True, decorators=None):
        super().__init__(decorators)
        self.entry = entry
        self.active = active

    def is_active(self, context):
        return self.active

    def query(self, context):
        return self.entry


class _SetWeight(DecoratorNode):
    def __init__(self, value):
        super().__init__()
        self.value = value

    def mutate_weight(self, weight, context):
        return self.value


@pytest.fixture
def context():
    return SpawnQueryContext(random_seed=7)


def _abc(**flags):
    return [_Fixed(name, **flags) for name in ("a", "b", "c")]


def test_priority_picks_first_active(context):
    a, b, c = _abc()
    a.active = False
    selector = PrioritySelector([a, b, c])
    assert [selector.query(context) for _ in range(3)] == ["b", "b", "b"]


def test_priority_reverse_picks_last_active(context):
    selector = PrioritySelector(_abc(), reverse_direction=True)
    assert selector.query(context) == "c"


def test_priority_without_active_children(context):
    selector = PrioritySelector(_abc(active=False))
    assert selector.query(context) is None
    assert PrioritySelector().query(context) is None


def test_priority_child_without_entry(context):
    selector = PrioritySelector([_Fixed(None), _Fixed("b")])
    assert selector.query(context) is None


def test_dynamic_priority_rotates(context):
    selector = PrioritySelector(_abc(), dynamic=True)
    assert [selector.query(context) for _ in range(4)] == ["a", "b", "c", "a"]


def test_dynamic_reverse_rotates(context):
    selector = PrioritySelector(_abc(), dynamic=True, reverse_direction=True)
    assert [selector.query(context) for _ in range(4)] == ["c", "b", "a", "c"]


def test_dynamic_state_kept_per_context(context):
    selector = PrioritySelector(_abc(), dynamic=True)
    selector.query(context)
    state = context.state_object(selector, PrioritySelectorState)
    assert state.child_order == [1, 2, 0]
    assert selector.query(SpawnQueryContext()) == "a"


def test_dynamic_skips_inactive(context):
    a, b, c = _abc()
    b.active = False
    selector = PrioritySelector([a, b, c], dynamic=True)
    assert [selector.query(context) for _ in range(3)] == ["a", "c", "a"]


def test_random_single_active_child(context):
    selector = RandomSelector([_Fixed("a", active=False), _Fixed("b"), _Fixed("c", active=False)])
    assert {selector.query(context) for _ in range(20)} == {"b"}


def test_random_no_active_children(context):
    selector = RandomSelector(_abc(active=False))
    assert selector.query(context) is None


def test_random_zero_weight_never_picked(context):
    selector = RandomSelector([_Fixed("a", decorators=[_SetWeight(0.0)]), _Fixed("b")])
    results = {selector.query(context) for _ in range(30)}
    assert results == {"b"}


def test_random_is_reproducible_for_seed():
    selector = RandomSelector(_abc())
    first = [selector.query(SpawnQueryContext(random_seed=3)) for _ in range(1)]
    runs = []
    for _ in range(2):
        ctx = SpawnQueryContext(random_seed=3)
        runs.append([selector.query(ctx) for _ in range(10)])
    assert runs[0] == runs[1]
    assert first[0] == runs[0][0]
    assert set(runs[0]) <= {"a", "b", "c"}


def test_random_state_tracks_children(context):
    selector = RandomSelector(_abc())
    selector.query(context)
    state = context.state_object(selector, RandomSelectorState)
    assert len(state.weight_base) == 3
    assert all(entry.cached_active for entry in state.weight_base)


def test_shuffled_sequence_deals_each_before_repeating(context):
    selector = RandomSelector(
        [_Fixed("a"), _Fixed("b")],
        randomization_policy=RandomizationPolicy.SHUFFLED_SEQUENCE,
    )
    draws = [selector.query(context) for _ in range(6)]
    for start in range(0, 6, 2):
        assert sorted(draws[start : start + 2]) == ["a", "b"]


def test_shuffled_sequence_without_weight(context):
    selector = RandomSelector(
        [_Fixed("a", decorators=[_SetWeight(0.0)])],
        randomization_policy=RandomizationPolicy.SHUFFLED_SEQUENCE,
    )
    assert selector.query(context) is None