"""Registry of searchable resources.

Dashboards may be declared in code or in a YAML file
(``SEARCH_DASHBOARDS_PATH``)::

    resources:
      customers:
        table: customers
        attributes: {name: string, email: email, lifetime_value: number}
        collection_scopes: [active, "kind:*"]
        scopes:
          active: "lifetime_value > 0"
          kind: "kind = :value"

``collection_scopes`` may be a list, a mapping of lists, an empty list
(scope search disabled) or omitted (unrestricted).

``scopes`` maps each scope the resource exposes to a SQL condition. A
condition that references ``:value`` takes the scope argument; any other
condition takes none.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any

import yaml
from sqlalchemy.engine import Engine

from backend.core.config import settings

from .policy import ScopePolicy, ScopePolicyError
from .schema import FIELD_TYPES, Dashboard
from .storage import ScopeSQL, SqlResource

logger = logging.getLogger("search.registry")

ARGUMENT_RE = re.compile(r"(?<!:):value\b")


class SearchConfigError(RuntimeError):
    """Raised when the dashboards file cannot be used."""


class UnknownResourceError(KeyError):
    """Raised when no dashboard is registered under a resource name."""


def _read_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    content = path.read_text(encoding="utf-8")
    if not content.strip():
        return {}
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise SearchConfigError(f"{path}: invalid YAML: {exc}") from exc
    if not isinstance(data, dict):
        raise SearchConfigError(f"{path}: top level must be a mapping")
    return data


def _scope_from_sql(sql: str) -> ScopeSQL:
    if ARGUMENT_RE.search(sql):
        def scope(value: str) -> tuple[str, dict[str, Any]]:
            return sql, {"value": value}
    else:
        def scope() -> tuple[str, dict[str, Any]]:
            return sql, {}
    return scope


def _scopes_from_config(name: str, raw: Any) -> dict[str, ScopeSQL]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SearchConfigError(f"resource {name!r}: scopes must be a mapping")
    scopes = {}
    for scope_name, sql in raw.items():
        if not isinstance(sql, str) or not sql.strip():
            raise SearchConfigError(f"resource {name!r}: scope {scope_name!r} needs a SQL condition")
        scopes[str(scope_name)] = _scope_from_sql(sql)
    return scopes


def _dashboard_from_config(name: str, cfg: Any) -> Dashboard:
    if not isinstance(cfg, dict):
        raise SearchConfigError(f"resource {name!r}: definition must be a mapping")
    attributes = cfg.get("attributes") or {}
    if not isinstance(attributes, dict):
        raise SearchConfigError(f"resource {name!r}: attributes must be a mapping")

    attribute_types = {}
    for attr, kind in attributes.items():
        field_type = FIELD_TYPES.get(str(kind).lower())
        if field_type is None:
            raise SearchConfigError(f"resource {name!r}: unknown field type {kind!r} for {attr!r}")
        attribute_types[str(attr)] = field_type

    scopes = cfg.get("collection_scopes")
    try:
        ScopePolicy.from_collection_scopes(scopes)
    except ScopePolicyError as exc:
        raise SearchConfigError(f"resource {name!r}: {exc}") from exc

    return Dashboard(
        resource_name=name,
        table_name=str(cfg.get("table") or name),
        attribute_types=attribute_types,
        collection_scopes=scopes,
    )


def _resources_section(path: str | Path) -> dict[str, Any]:
    data = _read_yaml(Path(path))
    resources = data.get("resources") or {}
    if not isinstance(resources, dict):
        raise SearchConfigError(f"{path}: 'resources' must be a mapping")
    return resources


def load_resources(
    path: str | Path, *, engine: Engine | None = None
) -> list[tuple[Dashboard, SqlResource]]:
    """Load dashboards together with the SQL resources that execute their scopes."""
    loaded = []
    for name, cfg in _resources_section(path).items():
        dashboard = _dashboard_from_config(str(name), cfg)
        resource = SqlResource(
            dashboard.table_name,
            _scopes_from_config(dashboard.resource_name, cfg.get("scopes")),
            engine=engine,
            order_by=cfg.get("order_by"),
        )
        loaded.append((dashboard, resource))
    return loaded


class SearchRegistry:
    def __init__(self) -> None:
        self._entries: dict[str, tuple[Dashboard, SqlResource]] = {}

    def register(self, dashboard: Dashboard, resource: SqlResource | None = None) -> None:
        self._entries[dashboard.resource_name] = (
            dashboard,
            resource or SqlResource(dashboard.table_name),
        )

    def get(self, name: str) -> tuple[Dashboard, SqlResource]:
        try:
            return self._entries[name]
        except KeyError as exc:
            raise UnknownResourceError(name) from exc

    def names(self) -> list[str]:
        return sorted(self._entries)

    def clear(self) -> None:
        self._entries.clear()


# Global registry instance
registry = SearchRegistry()


def init_registry(path: str | Path | None = None, *, engine: Engine | None = None) -> SearchRegistry:
    """Register every resource from the YAML file not already registered in code."""
    source = path or settings.SEARCH_DASHBOARDS_PATH
    loaded = load_resources(source, engine=engine)
    for dashboard, resource in loaded:
        if dashboard.resource_name not in registry.names():
            registry.register(dashboard, resource)
    logger.info("search_registry_loaded", extra={"source": str(source), "count": len(loaded)})
    return registry
