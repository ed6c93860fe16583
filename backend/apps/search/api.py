from __future__ import annotations

import logging
from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Header, HTTPException, Query, Response

from backend.core.config import settings

from .policy import groups
from .registry import UnknownResourceError, registry
from .search import Search
from .storage import SearchStorageError

logger = logging.getLogger("search.api")

router = APIRouter(prefix="/search", tags=["search"])

DEFAULT_LIMIT = 50


def _serialize_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, UUID):
        return str(value)
    return value


def _serialize(obj: Any) -> Any:
    if is_dataclass(obj):
        return {key: _serialize(value) for key, value in asdict(obj).items()}
    if isinstance(obj, dict):
        return {key: _serialize(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_serialize(item) for item in obj]
    return _serialize_value(obj)


def _log(event: str, *, resource: str, count: int, trace_id: str | None) -> None:
    logger.info(
        event,
        extra={
            "resource": resource,
            "count": count,
            "trace_id": trace_id or "",
        },
    )


def _search_for(resource_name: str, q: str | None) -> Search:
    try:
        dashboard, resource = registry.get(resource_name)
    except UnknownResourceError as exc:
        raise HTTPException(status_code=404, detail="unknown_resource") from exc
    return Search(resource, dashboard, q)


def _describe(search: Search) -> dict[str, Any]:
    return {
        "words": list(search.words),
        "scopes": search.scopes,
        "arguments": search.arguments,
        "scopes_with_arguments": search.scopes_with_arguments,
    }


@router.get("/{resource_name}/parse")
def parse_query(
    resource_name: str,
    q: str | None = Query(None),
    trace_id: str | None = Header(None, alias="X-Trace-ID"),
) -> dict[str, Any]:
    search = _search_for(resource_name, q)
    payload = _describe(search)
    payload["filter"] = _serialize(search.filter_spec)
    payload["scope_groups"] = groups(search.dashboard.collection_scopes)
    _log("search_parse", resource=resource_name, count=len(search.scopes), trace_id=trace_id)
    return payload


@router.get("/{resource_name}")
def search_resource(
    resource_name: str,
    response: Response,
    q: str | None = Query(None),
    limit: int = Query(DEFAULT_LIMIT, ge=0),
    offset: int = Query(0, ge=0),
    trace_id: str | None = Header(None, alias="X-Trace-ID"),
) -> dict[str, Any]:
    if limit > settings.READ_MAX_LIMIT:
        raise HTTPException(status_code=400, detail=f"limit must be <= {settings.READ_MAX_LIMIT}")
    search = _search_for(resource_name, q)
    try:
        items = search.run(limit=limit, offset=offset)
    except (SearchStorageError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    serialized = _serialize(items)
    total = len(serialized)
    response.headers["X-Total-Count"] = str(total)
    _log("search_run", resource=resource_name, count=total, trace_id=trace_id)
    return {
        "items": serialized,
        "total": total,
        "limit": limit,
        "offset": offset,
        "search": _describe(search),
    }
