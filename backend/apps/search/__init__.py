"""Search app module.

Interprets admin search terms (keywords plus ``scope:`` directives) and
provides the FastAPI router exposing it.
"""

from .api import router as search_router  # re-export for app integration
from .dto import FilterSpec, ScopeDirective, SearchResult
from .policy import ScopePolicy
from .search import Search, parse_search

__all__ = [
    "search_router",
    "FilterSpec",
    "ScopeDirective",
    "SearchResult",
    "ScopePolicy",
    "Search",
    "parse_search",
]
