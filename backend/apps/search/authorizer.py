from __future__ import annotations

from collections.abc import Iterable

from .dto import ScopeDirective
from .policy import ScopePolicy

# Only consulted when a resource declares no collection scopes at all
BLACKLISTED_WORDS = ("destroy", "remove", "delete", "update", "create")


def is_banged(text: str) -> bool:
    return text.endswith("!")


def is_blacklisted(text: str) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in BLACKLISTED_WORDS)


def is_wildcarded(name: str, entries: Iterable[str]) -> bool:
    return f"{name}:*" in entries


def authorize(directive: ScopeDirective, policy: ScopePolicy) -> bool:
    """Decide whether a parsed scope may be applied under ``policy``.

    With an allow-list the typed scope must be listed verbatim, or its name
    must be declared with a ``name:*`` wildcard. Without any declaration the
    scope is accepted unless it looks like a mutating operation.
    """
    if policy.mode == "allow_list":
        return directive.user_input in policy.entries or is_wildcarded(
            directive.name, policy.entries
        )
    if policy.mode == "disabled":
        return False
    return not is_banged(directive.user_input) and not is_blacklisted(directive.user_input)
