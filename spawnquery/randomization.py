"""Weighted picks over children that can report activity and weight."""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any, Protocol

from spawnquery.types import RandomizationWeightState

FLT_EPSILON = 1.1920929e-07
_INT32_MAX = 2**31 - 1


class WeightedChoice(Protocol):
    def is_active(self, context: Any) -> bool: ...

    def weight(self, context: Any) -> float: ...


class _Stream(Protocol):
    def frand_range(self, low: float, high: float) -> float: ...


def _state_at(states: list[RandomizationWeightState], index: int) -> RandomizationWeightState:
    if index >= len(states):
        states.append(RandomizationWeightState())
    return states[index]


def randomize_independent(
    children: Sequence[WeightedChoice],
    weight_cache: list[RandomizationWeightState],
    stream: _Stream,
    context: Any,
) -> int:
    """Pick an index with probability proportional to weight; -1 if nothing has weight."""
    total = 0.0
    for index, child in enumerate(children):
        state = _state_at(weight_cache, index)
        if child.is_active(context):
            weight = child.weight(context)
            state.cached_active = True
            state.cached_weight = weight
            total += weight
        else:
            state.cached_active = False
            state.cached_weight = 0.0

    if total == 0:
        return -1

    position = stream.frand_range(0, total)
    for index, state in enumerate(weight_cache[: len(children)]):
        position -= state.cached_weight
        if position <= FLT_EPSILON:
            return index

    raise RuntimeError("weighted pick ran past the last choice")


def randomize_shuffled_sequence(
    children: Sequence[WeightedChoice],
    weight_base: list[RandomizationWeightState],
    stream: _Stream,
    context: Any,
) -> int:
    """Pick like drawing from a shuffled deck holding each choice weight-many times.

    Returns -1 when no active choice has a positive weight.
    """
    total = 0.0
    base_add_multiplier = _INT32_MAX

    for index, child in enumerate(children):
        state = _state_at(weight_base, index)
        original = child.weight(context)
        # the weight accumulates into the base whether or not the child is active
        state.cached_weight = original
        state.cached_active = False

        if not child.is_active(context) or original <= 0:
            continue
        state.cached_active = True

        weight = original + state.base
        # only a weight of at least one puts the child in the current deck
        if weight >= 1 - FLT_EPSILON:
            total += math.floor(weight + FLT_EPSILON)
            base_add_multiplier = 0
        elif base_add_multiplier > 0:
            target = math.ceil((1 - weight) / original)
            base_add_multiplier = min(base_add_multiplier, target)

    states = weight_base[: len(children)]

    if total <= 0:
        if base_add_multiplier == _INT32_MAX:
            return -1
        total = 0.0
        for state in states:
            if state.cached_weight > 0:
                state.base += state.cached_weight * base_add_multiplier
                if state.cached_active:
                    total += math.floor(state.cached_weight + state.base + FLT_EPSILON)

    position = stream.frand_range(0, total)
    for index, state in enumerate(states):
        if state.cached_active:
            position -= math.floor(state.cached_weight + state.base + FLT_EPSILON * 2)
            if position <= FLT_EPSILON:
                state.base -= 1
                return index

    raise RuntimeError("shuffled pick ran past the last choice")