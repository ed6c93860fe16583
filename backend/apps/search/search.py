from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

from backend.core.config import settings

from .dto import FilterSpec, SearchResult
from .filter_builder import build
from .policy import ScopePolicy
from .schema import Dashboard
from .tokenizer import RespondsTo, classify

logger = logging.getLogger("search")


class SearchableResource(Protocol):
    def responds_to(self, name: str) -> bool: ...

    def run(
        self, result: SearchResult, limit: int | None = None, offset: int = 0
    ) -> list[dict[str, Any]]: ...


def _configured_max_tokens() -> int | None:
    value = int(settings.SEARCH_MAX_SCOPE_TOKENS or 0)
    return value if value > 0 else None


def parse_search(
    term: str | None,
    *,
    responds_to: RespondsTo,
    policy: ScopePolicy,
    searchable_attributes: Sequence[str],
    max_tokens: int | None = None,
) -> SearchResult:
    """Run the full parse pipeline for ``term``.

    Pure: the same inputs always produce the same ``SearchResult``.
    """
    words, directives = classify(term, policy, responds_to, max_tokens=max_tokens)
    return SearchResult(
        term=term,
        words=words,
        directives=directives,
        filter_spec=build(term, words, searchable_attributes),
    )


class Search:
    """A search term interpreted against one resource and its dashboard.

    Parsing happens once, at construction; the object is read-only afterwards.
    """

    def __init__(
        self,
        resource: SearchableResource,
        dashboard: Dashboard,
        term: str | None,
        *,
        max_tokens: int | None = None,
    ) -> None:
        self._resource = resource
        self._dashboard = dashboard
        self._result = parse_search(
            term,
            responds_to=resource.responds_to,
            policy=dashboard.scope_policy(),
            searchable_attributes=dashboard.searchable_attributes(),
            max_tokens=max_tokens if max_tokens is not None else _configured_max_tokens(),
        )
        logger.info(
            "search_parsed",
            extra={
                "resource": dashboard.resource_name,
                "words": len(self._result.words),
                "scopes": self._result.scopes,
            },
        )

    @property
    def dashboard(self) -> Dashboard:
        return self._dashboard

    @property
    def result(self) -> SearchResult:
        return self._result

    @property
    def term(self) -> str | None:
        return self._result.term

    @property
    def words(self) -> tuple[str, ...]:
        return self._result.words

    @property
    def scopes(self) -> list[str]:
        return self._result.scopes

    @property
    def arguments(self) -> list[str | None]:
        return self._result.arguments

    @property
    def scopes_with_arguments(self) -> list[str]:
        return self._result.scopes_with_arguments

    @property
    def scope(self) -> str | None:
        return self._result.scope

    @property
    def filter_spec(self) -> FilterSpec:
        return self._result.filter_spec

    def run(self, limit: int | None = None, offset: int = 0) -> list[dict[str, Any]]:
        return self._resource.run(self._result, limit=limit, offset=offset)
