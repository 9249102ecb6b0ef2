"""Scatter spawning: place the actors a query yields at random around a point."""

from __future__ import annotations

import math
import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from spawnquery.context import SpawnQueryContext
from spawnquery.query import SpawnQuery, default_registry
from spawnquery.table import SpawnEntryRow, SpawnEntryRowHandle

Vector = tuple[float, float, float]


@dataclass
class ActorRow(SpawnEntryRow):
    """A pool row naming the actor class to spawn."""

    actor_class: Any = None


@dataclass(frozen=True)
class Placement:
    """One actor to spawn: its class, location and (pitch, yaw, roll) rotation."""

    actor_class: Any
    location: Vector
    rotation: Vector


class SpawnScatter:
    """Queries a graph repeatedly and scatters the results within a radius."""

    def __init__(
        self,
        spawn_query: SpawnQuery | None = None,
        amount: int = 1,
        scatter_range: float = 1.0,
        randomize_rotation: bool = True,
        location: Vector = (0.0, 0.0, 0.0),
        spawner: Callable[[Placement], Any] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.spawn_query = spawn_query
        self.amount = amount
        self.scatter_range = scatter_range
        self.randomize_rotation = randomize_rotation
        self.location = location
        self.spawner = spawner
        self.rng = rng if rng is not None else random.Random()

    def _placement(self, actor_class: Any) -> Placement:
        angle = self.rng.random() * 2.0 * math.pi
        # the square root keeps the distribution uniform over the disc
        radius = math.sqrt(self.rng.random()) * self.scatter_range
        x, y, z = self.location
        location = (x + radius * math.cos(angle), y + radius * math.sin(angle), z)
        rotation = (0.0, self.rng.random() * 360.0, 0.0) if self.randomize_rotation else (
            0.0,
            0.0,
            0.0,
        )
        return Placement(actor_class, location, rotation)

    def spawn_actors(self, context: SpawnQueryContext | None = None) -> list[Placement]:
        """Run the query ``amount`` times and place every actor row it yields."""
        if self.spawn_query is None:
            raise ValueError("spawn query is not set")
        placements = []
        for _ in range(self.amount):
            entry = self.spawn_query.query_entry(context)
            if not isinstance(entry, SpawnEntryRowHandle):
                continue
            row = entry.table_row(ActorRow)
            if row is None:
                continue
            placement = self._placement(row.actor_class)
            if self.spawner is not None:
                self.spawner(placement)
            placements.append(placement)
        return placements


class SpawnScatterActor:
    """Owns a scatter and runs it in the default context when play begins."""

    def __init__(self, scatter: SpawnScatter | None = None) -> None:
        self.scatter = scatter if scatter is not None else SpawnScatter()
        self._cached_context: SpawnQueryContext | None = None

    def context(self) -> SpawnQueryContext:
        """The context to spawn in; the default registry's default context."""
        if self._cached_context is None:
            self._cached_context = default_registry().default_context()
        return self._cached_context

    def begin_play(self) -> list[Placement]:
        return self.scatter.spawn_actors(self.context())