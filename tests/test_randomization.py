from collections import Counter

import pytest

from spawnquery.context import RandomStream
from spawnquery.randomization import randomize_independent, randomize_shuffled_sequence


class _Child:
    def __init__(self, weight, active=True):
        self._weight = weight
        self.active = active

    def is_active(self, context):
        return self.active

    def weight(self, context):
        return self._weight


class _FixedStream:
    def __init__(self, position):
        self.position = position

    def frand_range(self, low, high):
        return self.position


def test_independent_zero_total_returns_minus_one():
    children = [_Child(1, active=False), _Child(0)]
    assert randomize_independent(children, [], RandomStream(1), None) == -1


def test_independent_fills_cache():
    children = [_Child(2), _Child(5, active=False)]
    cache = []
    randomize_independent(children, cache, RandomStream(1), None)
    assert len(cache) == 2
    assert (cache[0].cached_active, cache[0].cached_weight) == (True, 2)
    assert (cache[1].cached_active, cache[1].cached_weight) == (False, 0)


def test_independent_fixed_position_picks_middle():
    children = [_Child(1), _Child(1), _Child(1)]
    assert randomize_independent(children, [], _FixedStream(1.5), None) == 1


def test_independent_never_picks_inactive():
    children = [_Child(1, active=False), _Child(1), _Child(1, active=False)]
    stream = RandomStream(5)
    picks = {randomize_independent(children, [], stream, None) for _ in range(200)}
    assert picks == {1}


def test_independent_proportions_follow_weights():
    children = [_Child(1), _Child(3)]
    stream = RandomStream(123)
    cache = []
    counts = Counter(randomize_independent(children, cache, stream, None) for _ in range(4000))
    share = counts[1] / 4000
    assert 0.7 < share < 0.8


def test_shuffled_all_zero_returns_minus_one():
    children = [_Child(0), _Child(0)]
    assert randomize_shuffled_sequence(children, [], RandomStream(1), None) == -1


def test_shuffled_inactive_only_returns_minus_one():
    children = [_Child(3, active=False)]
    assert randomize_shuffled_sequence(children, [], RandomStream(1), None) == -1


@pytest.mark.parametrize("weights", [[1, 2, 3], [4, 1], [2, 2, 2, 2]])
def test_shuffled_each_cycle_matches_weights(weights):
    children = [_Child(w) for w in weights]
    stream = RandomStream(99)
    base = []
    deck = sum(weights)
    for _ in range(3):
        counts = Counter(
            randomize_shuffled_sequence(children, base, stream, None) for _ in range(deck)
        )
        assert [counts[i] for i in range(len(weights))] == weights


def test_shuffled_pick_consumes_from_base():
    children = [_Child(2)]
    base = []
    assert randomize_shuffled_sequence(children, base, RandomStream(1), None) == 0
    assert base[0].base == -1
    assert base[0].cached_weight == 2


def test_shuffled_fractional_weights_eventually_picked():
    children = [_Child(0.5), _Child(0.25)]
    stream = RandomStream(4)
    base = []
    counts = Counter(randomize_shuffled_sequence(children, base, stream, None) for _ in range(30))
    assert set(counts) == {0, 1}
    assert counts[0] > counts[1]


def test_shuffled_skips_inactive_child():
    children = [_Child(2, active=False), _Child(1)]
    stream = RandomStream(8)
    base = []
    picks = {randomize_shuffled_sequence(children, base, stream, None) for _ in range(20)}
    assert picks == {1}