"""Pool tables of weighted rows, row handles and context helpers."""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from spawnquery.context import SpawnQueryContext
from spawnquery.query import default_registry
from spawnquery.types import SpawnEntry


@dataclass
class SpawnEntryRow:
    """A pool table row: its weight and optional influencers.

    ``influencers`` is a comma-separated list of ``key:factor`` pairs.
    """

    weight: float = 1.0
    influencers: str = ""


class DataTable:
    """Named rows of one row type, with change listeners."""

    def __init__(
        self,
        name: str = "DataTable",
        rows: Mapping[str, Any] | None = None,
        row_type: type = SpawnEntryRow,
    ) -> None:
        self.name = name
        self.row_type = row_type
        self.rows: dict[str, Any] = dict(rows or {})
        for row_name, row in self.rows.items():
            if not isinstance(row, row_type):
                raise TypeError(
                    f"row {row_name!r} is {type(row).__name__}, expected {row_type.__name__}"
                )
        self._listeners: list[Callable[[], None]] = []

    def __repr__(self) -> str:
        return f"DataTable(name={self.name!r}, rows={len(self.rows)})"

    def row_names(self) -> list[str]:
        return list(self.rows)

    def find_row(self, name: str) -> Any:
        """Return the row called ``name``, or None."""
        return self.rows.get(name)

    def subscribe(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[], None]) -> None:
        """Remove every registration of ``callback``."""
        self._listeners = [cb for cb in self._listeners if cb != callback]

    def notify_changed(self) -> None:
        """Tell every listener that the table data changed."""
        for callback in list(self._listeners):
            callback()


class SpawnEntryRowHandle(SpawnEntry):
    """An entry that points at one row of a pool table."""

    def __init__(self, row: Any, row_name: str, pool_table: DataTable) -> None:
        self.row = row
        self.row_name = row_name
        self.pool_table = pool_table

    def __repr__(self) -> str:
        return f"SpawnEntryRowHandle(row_name={self.row_name!r}, table={self.pool_table.name!r})"

    @property
    def row_struct(self) -> type:
        return self.pool_table.row_type

    def table_row(self, row_type: type | None = None) -> Any:
        """Return the row, or None if the table's row type is not a ``row_type``."""
        if row_type is not None and not issubclass(self.pool_table.row_type, row_type):
            return None
        return self.row


class EntryRowError(Exception):
    """A row could not be read from a spawn entry."""


def get_spawn_entry_row(entry: Any, row_type: type | None) -> tuple[str, Any]:
    """Return the row name and a copy of the row held by a row handle entry.

    ``row_type`` must be exactly the table's row type.
    """
    if not isinstance(entry, SpawnEntryRowHandle):
        raise EntryRowError(
            "Failed to resolve the row handle input. Be sure the SpawnEntryRowHandle is valid."
        )
    if row_type is None:
        raise EntryRowError("Failed to resolve the output parameter for GetSpawnEntryRow.")
    if row_type is not entry.row_struct:
        raise EntryRowError(
            "Incompatible output parameter; the data table row's type "
            f"({entry.row_struct.__qualname__}) is not the same as the return type "
            f"({row_type.__qualname__})."
        )
    return entry.row_name, copy.copy(entry.table_row())


def construct_spawn_query_context(
    name: str, blackboard_asset: Mapping[str, Any] | None = None
) -> SpawnQueryContext:
    """Create a context tracked by the default registry."""
    return default_registry().construct_context(name, blackboard_asset)


def default_spawn_query_context() -> SpawnQueryContext:
    """The default registry's default context."""
    return default_registry().default_context()