"""SQL execution of parsed searches.

The parser only describes a filter; this module turns that description into
a ``text()`` statement with bound parameters and runs it through SQLAlchemy.
Scopes are registered per resource as callables returning a SQL condition and
its parameters, taking no argument or exactly one.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from typing import Any, Callable, Mapping

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Dialect, Engine
from sqlalchemy.exc import SQLAlchemyError

from backend.core.config import settings

from .dto import SearchResult

logger = logging.getLogger("search.storage")

ScopeSQL = Callable[..., tuple[str, Mapping[str, Any]]]


class SearchStorageError(RuntimeError):
    """Raised when a search cannot be executed against storage."""


@lru_cache(maxsize=1)
def _default_engine() -> Engine:
    return create_engine(settings.database_url, future=True)


def _validate_pagination(limit: int | None, offset: int) -> None:
    if limit is not None and limit < 0:
        raise ValueError("limit must be non-negative")
    if offset < 0:
        raise ValueError("offset must be non-negative")
    if limit is None and offset:
        raise ValueError("offset requires limit")


def _rebind(sql: str, params: Mapping[str, Any], prefix: str) -> tuple[str, dict[str, Any]]:
    # Two scopes may use the same bind names; give each invocation its own namespace
    rebound: dict[str, Any] = {}
    for key, value in params.items():
        new_key = f"{prefix}{key}"
        sql = re.sub(rf"(?<!:):{re.escape(key)}\b", f":{new_key}", sql)
        rebound[new_key] = value
    return sql, rebound


class SqlResource:
    def __init__(
        self,
        table_name: str,
        scopes: Mapping[str, ScopeSQL] | None = None,
        *,
        engine: Engine | None = None,
        order_by: str | None = None,
    ) -> None:
        self.table_name = table_name
        self._scopes = dict(scopes or {})
        self._engine = engine
        self.order_by = order_by

    @property
    def engine(self) -> Engine:
        return self._engine or _default_engine()

    def responds_to(self, name: str) -> bool:
        return name in self._scopes

    def _scope_condition(self, index: int, name: str, argument: str | None) -> tuple[str, dict[str, Any]]:
        scope = self._scopes[name]
        try:
            sql, params = scope() if argument is None else scope(argument)
        except TypeError as exc:
            raise SearchStorageError(f"scope {name!r} cannot be applied: {exc}") from exc
        return _rebind(sql, params or {}, f"scope_{index}_")

    def where_clause(self, result: SearchResult, dialect: Dialect) -> tuple[str, dict[str, Any]]:
        conditions: list[str] = []
        params: dict[str, Any] = {}

        spec = result.filter_spec
        if not spec.unfiltered and spec.attributes:
            conditions.append(
                spec.predicate(
                    self.table_name,
                    quote=dialect.identifier_preparer.quote_identifier,
                    placeholder=lambda index: f":search_term_{index}",
                )
            )
            params.update({f"search_term_{i}": value for i, value in enumerate(spec.parameters)})

        for index, (name, argument) in enumerate(result.scope_invocations):
            condition, scope_params = self._scope_condition(index, name, argument)
            conditions.append(condition)
            params.update(scope_params)

        where = " AND ".join(f"({condition})" for condition in conditions)
        return where, params

    def run(
        self, result: SearchResult, limit: int | None = None, offset: int = 0
    ) -> list[dict[str, Any]]:
        _validate_pagination(limit, offset)
        try:
            with self.engine.connect() as conn:
                where, params = self.where_clause(result, conn.dialect)
                sql = f"SELECT * FROM {conn.dialect.identifier_preparer.quote_identifier(self.table_name)}"
                if where:
                    sql += f" WHERE {where}"
                if self.order_by:
                    sql += f" ORDER BY {self.order_by}"
                if limit is not None:
                    sql += " LIMIT :limit OFFSET :offset"
                    params.update({"limit": limit, "offset": offset})
                rows = conn.execute(text(sql), params).mappings()
                items = [dict(row) for row in rows]
        except SQLAlchemyError as exc:
            raise SearchStorageError(str(exc)) from exc
        logger.debug(
            "search_executed",
            extra={"table": self.table_name, "count": len(items), "scopes": result.scopes},
        )
        return items
