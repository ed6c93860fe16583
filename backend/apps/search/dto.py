from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable


def _ansi_quote(identifier: str) -> str:
    return '"' + identifier.replace('"', '""') + '"'


def _qmark(index: int) -> str:
    return "?"


@dataclass(frozen=True)
class ScopeDirective:
    """A scope reference parsed out of a search term.

    ``user_input`` is what the operator typed for the scope and is the value
    compared against a resource's allow-list.
    """

    user_input: str
    name: str
    argument: str | None = None

    def render(self) -> str:
        if self.argument is None:
            return self.name
        wildcard = f"{self.name}:{self.argument}"
        if self.user_input == wildcard:
            return wildcard
        return f"{self.name}({self.argument})"

    def __str__(self) -> str:
        return self.render()


@dataclass(frozen=True)
class FilterSpec:
    """Storage-agnostic keyword filter.

    ``parameters`` holds one LIKE literal per entry of ``attributes``.
    """

    unfiltered: bool
    attributes: tuple[str, ...] = ()
    parameters: tuple[str, ...] = ()

    @classmethod
    def none(cls) -> FilterSpec:
        return cls(unfiltered=True)

    def predicate(
        self,
        table_name: str,
        quote: Callable[[str], str] = _ansi_quote,
        placeholder: Callable[[int], str] = _qmark,
    ) -> str:
        if self.unfiltered:
            return ""
        return " OR ".join(
            f"lower({quote(table_name)}.{quote(attr)}) LIKE {placeholder(index)}"
            for index, attr in enumerate(self.attributes)
        )


@dataclass(frozen=True)
class SearchResult:
    term: str | None
    words: tuple[str, ...] = ()
    directives: tuple[ScopeDirective, ...] = ()
    filter_spec: FilterSpec = field(default_factory=FilterSpec.none)

    @property
    def scopes(self) -> list[str]:
        return [d.name for d in self.directives]

    @property
    def arguments(self) -> list[str | None]:
        return [d.argument for d in self.directives]

    @property
    def scopes_with_arguments(self) -> list[str]:
        return [d.user_input for d in self.directives]

    @property
    def scope(self) -> str | None:
        return self.directives[0].name if self.directives else None

    @property
    def scope_invocations(self) -> list[tuple[str, str | None]]:
        return [(d.name, d.argument) for d in self.directives]

    @property
    def keyword_text(self) -> str:
        return " ".join(self.words)

    @property
    def is_blank(self) -> bool:
        return self.term is None or not self.term.strip()
