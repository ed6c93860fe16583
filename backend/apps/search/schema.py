"""Dashboard metadata: which attributes a resource has and which are searchable."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .policy import ScopePolicy


class Field:
    searchable = False


class String(Field):
    searchable = True


class Email(Field):
    searchable = True


class Text(Field):
    searchable = True


class Select(Field):
    searchable = True


class Number(Field):
    pass


class Boolean(Field):
    pass


class Date(Field):
    pass


class DateTime(Field):
    pass


class BelongsTo(Field):
    pass


class HasMany(Field):
    pass


FIELD_TYPES: dict[str, type[Field]] = {
    "string": String,
    "email": Email,
    "text": Text,
    "select": Select,
    "number": Number,
    "boolean": Boolean,
    "date": Date,
    "datetime": DateTime,
    "belongs_to": BelongsTo,
    "has_many": HasMany,
}


@dataclass(frozen=True)
class Dashboard:
    resource_name: str
    table_name: str
    attribute_types: Mapping[str, type[Field]] = field(default_factory=dict)
    # None means no declaration at all (unrestricted), [] disables scope search
    collection_scopes: Any = None

    def searchable_attributes(self) -> list[str]:
        return [name for name, kind in self.attribute_types.items() if kind.searchable]

    def scope_policy(self) -> ScopePolicy:
        return ScopePolicy.from_collection_scopes(self.collection_scopes)
