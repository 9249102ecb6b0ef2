"""Shared enums, weight bookkeeping and the spawn entry base type."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any


class RandomizationPolicy(IntEnum):
    """How a node picks among weighted choices."""

    INDEPENDENT = 0
    """Each pick is independent; probabilities follow the weights."""

    SHUFFLED_SEQUENCE = 1
    """Each choice appears weight-many times, in random order, before repeating."""


@dataclass
class RandomizationWeightState:
    """Per-choice bookkeeping kept between randomized picks."""

    base: float = 0.0
    cached_weight: float = 0.0
    cached_active: bool = False


class SpawnEntry:
    """Base type of everything a spawn query can yield."""


def short_type_name(obj: Any) -> str:
    """Return a readable name for the type of ``obj`` (or for ``obj`` if it is a class).

    A prefix up to the first underscore is dropped and words are separated
    at capital letters. Classes flagged with ``blueprint_generated`` lose
    their two-character suffix instead.
    """
    if obj is None:
        return "unknown"

    cls = obj if isinstance(obj, type) else type(obj)
    name = cls.__name__

    if getattr(cls, "blueprint_generated", False):
        return name[:-2]

    _, sep, rest = name.partition("_")
    if sep:
        name = rest

    if not name:
        return name
    return name[0] + "".join(f" {ch}" if ch.isupper() else ch for ch in name[1:])