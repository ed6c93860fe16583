"""Scope policy normalization.

Resources declare the scopes operators may search with in one of several
shapes. They are normalized here, once, into a ``ScopePolicy``:

- absent (``None``): unrestricted, the authorizer falls back to a denylist
- list / tuple / set of entries: allow-list
- mapping of group name to entries: allow-list of the flattened values
- explicitly empty list or mapping: scope search disabled

Entries are strings (``"active"``, ``"with_argument(3)"``, ``"status:*"``)
or symbolic values; ``Enum`` members contribute their ``.value``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

Mode = Literal["unrestricted", "allow_list", "disabled"]


class ScopePolicyError(ValueError):
    """Raised when a collection scope declaration has an unsupported shape."""


def _entry_to_str(entry: Any) -> str:
    if isinstance(entry, Enum):
        return str(entry.value)
    return str(entry)


def _sequence_entries(raw: Any) -> list[Any]:
    if isinstance(raw, (str, bytes)) or not isinstance(raw, Iterable):
        raise ScopePolicyError(f"collection scopes must be a list, got {type(raw).__name__}")
    return list(raw)


def _flatten(raw: Any) -> list[str]:
    if isinstance(raw, Mapping):
        entries: list[Any] = []
        for group, values in raw.items():
            if values is None:
                continue
            try:
                entries.extend(_sequence_entries(values))
            except ScopePolicyError as exc:
                raise ScopePolicyError(f"scope group {group!r}: {exc}") from exc
    else:
        entries = _sequence_entries(raw)
    seen: dict[str, None] = {}
    for entry in entries:
        seen.setdefault(_entry_to_str(entry), None)
    return list(seen)


@dataclass(frozen=True)
class ScopePolicy:
    mode: Mode
    entries: tuple[str, ...] = ()

    @classmethod
    def unrestricted(cls) -> ScopePolicy:
        return cls(mode="unrestricted")

    @classmethod
    def disabled(cls) -> ScopePolicy:
        return cls(mode="disabled")

    @classmethod
    def allow(cls, *entries: Any) -> ScopePolicy:
        return cls.from_collection_scopes(list(entries))

    @classmethod
    def from_collection_scopes(cls, raw: Any) -> ScopePolicy:
        if raw is None:
            return cls.unrestricted()
        entries = _flatten(raw)
        if not entries:
            return cls.disabled()
        return cls(mode="allow_list", entries=tuple(entries))


DEFAULT_GROUP = "default"


def groups(raw: Any) -> dict[str, list[str]]:
    """Return declared scopes by group, for UIs that list them as filters.

    A plain list is reported under ``DEFAULT_GROUP``.
    """
    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        return {str(group): _flatten(values or []) for group, values in raw.items()}
    return {DEFAULT_GROUP: _flatten(raw)}
