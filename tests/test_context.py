import pytest

from spawnquery.context import Blackboard, RandomStream, SpawnQueryContext


class _Query:
    def __init__(self, name):
        self.name = name


class _StateA:
    def __init__(self):
        self.items = []


class _StateB:
    pass


def test_stream_is_deterministic():
    a, b = RandomStream(42), RandomStream(42)
    assert [a.frand() for _ in range(20)] == [b.frand() for _ in range(20)]


def test_stream_values_in_unit_interval():
    stream = RandomStream(7)
    values = [stream.frand() for _ in range(2000)]
    assert all(0.0 <= v < 1.0 for v in values)
    assert len(set(values)) > 1900


def test_stream_range_bounds():
    stream = RandomStream(3)
    values = [stream.frand_range(2.0, 5.0) for _ in range(500)]
    assert all(2.0 <= v < 5.0 for v in values)


def test_stream_reset_repeats_sequence():
    stream = RandomStream(11)
    first = [stream.frand() for _ in range(10)]
    stream.reset()
    assert [stream.frand() for _ in range(10)] == first


def test_different_seeds_differ():
    assert [RandomStream(1).frand() for _ in range(3)] != [RandomStream(2).frand() for _ in range(3)]


def test_blackboard_initialize_and_values():
    board = Blackboard({"danger": 2, "name": "cave"})
    assert board.has_valid_asset()
    assert board.has_key("danger")
    assert board.get_float("danger") == 2.0
    board.set_value("danger", 5)
    assert board.get_value("danger") == 5
    board.initialize(board.asset)
    assert board.get_value("danger") == 2


def test_blackboard_missing_and_non_numeric():
    board = Blackboard({"name": "cave"})
    assert board.get_float("missing") == 0.0
    assert board.get_float("name") == 0.0
    assert board.get_value("missing", "fallback") == "fallback"


def test_blackboard_set_unknown_key_raises():
    board = Blackboard({"a": 1})
    with pytest.raises(KeyError):
        board.set_value("b", 2)


def test_blackboard_without_asset():
    board = Blackboard()
    assert not board.has_valid_asset()
    assert not board.has_key("a")


def test_query_active_state_default_and_override():
    ctx = SpawnQueryContext()
    query = _Query("q")
    assert ctx.is_query_active(query, True) is True
    ctx.set_query_active_state(query, False)
    assert ctx.is_query_active(query, True) is False
    assert ctx.is_query_active(_Query("other"), False) is False


def test_call_stack_push_pop_and_info():
    ctx = SpawnQueryContext()
    a, b = _Query("alpha"), _Query("beta")
    ctx.push_call(a)
    ctx.push_call(b)
    assert ctx.has_query_in_call_stack(a)
    assert ctx.call_stack_info() == "alpha\nbeta\n"
    ctx.pop_call(a)  # not on top: ignored
    assert ctx.has_query_in_call_stack(b)
    ctx.pop_call(b)
    ctx.pop_call(a)
    assert not ctx.has_query_in_call_stack(a)
    assert ctx.call_stack_info() == ""


def test_reset_while_running_raises():
    ctx = SpawnQueryContext()
    ctx.push_call(_Query("q"))
    with pytest.raises(RuntimeError):
        ctx.reset()
    with pytest.raises(RuntimeError):
        ctx.reset_seed(5)


def test_reset_rewinds_stream():
    ctx = SpawnQueryContext(random_seed=9)
    first = [ctx.random_stream.frand() for _ in range(5)]
    ctx.reset()
    assert [ctx.random_stream.frand() for _ in range(5)] == first


def test_reset_seed_matches_fresh_context():
    ctx = SpawnQueryContext(random_seed=1)
    ctx.random_stream.frand()
    ctx.reset_seed(77)
    fresh = SpawnQueryContext(random_seed=77)
    assert ctx.random_seed == 77
    assert [ctx.random_stream.frand() for _ in range(5)] == [
        fresh.random_stream.frand() for _ in range(5)
    ]


def test_state_object_is_kept_per_owner():
    ctx = SpawnQueryContext()
    owner = object()
    state = ctx.state_object(owner, _StateA)
    state.items.append(1)
    assert ctx.state_object(owner, _StateA) is state
    assert ctx.state_object(object(), _StateA) is not state


def test_state_object_wrong_type_raises():
    ctx = SpawnQueryContext()
    owner = object()
    ctx.state_object(owner, _StateA)
    with pytest.raises(TypeError):
        ctx.state_object(owner, _StateB)


def test_state_object_none_owner_raises():
    with pytest.raises(ValueError):
        SpawnQueryContext().state_object(None, _StateA)


def test_reset_clears_states_and_blackboard():
    ctx = SpawnQueryContext(blackboard_asset={"level": 1})
    owner = object()
    state = ctx.state_object(owner, _StateA)
    ctx.blackboard.set_value("level", 10)
    ctx.reset()
    assert ctx.state_object(owner, _StateA) is not state
    assert ctx.blackboard.get_value("level") == 1


def test_set_blackboard_asset_reinitializes():
    ctx = SpawnQueryContext()
    assert not ctx.blackboard.has_valid_asset()
    ctx.set_blackboard_asset({"gold": 3})
    assert ctx.blackboard.get_float("gold") == 3.0