"""Split a search term into plain words and scope directives.

Two scope notations are recognised inside a whitespace-delimited token:

- ``scope:<name>`` or ``scope:<name>(<argument>)`` (prefix is case-insensitive)
- ``<name>:<argument>``, only usable when the resource allow-lists ``<name>:*``

A token that does not parse, names a scope the resource does not have, or is
not authorized stays a plain word. Classification never raises.
"""

from __future__ import annotations

import logging
import re
from typing import Callable

from .authorizer import authorize
from .dto import ScopeDirective
from .policy import ScopePolicy

logger = logging.getLogger("search.tokenizer")

SCOPE_PREFIX = "scope"

CANDIDATE_RE = re.compile(r"(?P<left>\w+):(?P<right>.+)", re.ASCII)
CALL_RE = re.compile(r"(?P<name>\w+)\((?P<argument>\w+)\)", re.ASCII)

RespondsTo = Callable[[str], bool]


def parse_directive(left: str, right: str) -> ScopeDirective:
    if left.lower() == SCOPE_PREFIX:
        call = CALL_RE.search(right)
        if call:
            return ScopeDirective(user_input=right, name=call["name"], argument=call["argument"])
        return ScopeDirective(user_input=right, name=right, argument=None)
    return ScopeDirective(user_input=f"{left}:{right}", name=left, argument=right)


def candidate(token: str) -> ScopeDirective | None:
    """Return the directive ``token`` would stand for, before any checks."""
    match = CANDIDATE_RE.search(token)
    if match is None:
        return None
    return parse_directive(match["left"], match["right"])


def scope_of(token: str, policy: ScopePolicy, responds_to: RespondsTo) -> ScopeDirective | None:
    directive = candidate(token)
    if directive is None:
        return None
    if not responds_to(directive.name):
        logger.debug("scope_demoted", extra={"scope": directive.name, "reason": "no_capability"})
        return None
    if not authorize(directive, policy):
        logger.debug("scope_demoted", extra={"scope": directive.name, "reason": "not_authorized"})
        return None
    return directive


def classify(
    query: str | None,
    policy: ScopePolicy,
    responds_to: RespondsTo,
    *,
    max_tokens: int | None = None,
) -> tuple[tuple[str, ...], tuple[ScopeDirective, ...]]:
    if not query or not query.strip():
        return (), ()

    words: list[str] = []
    directives: list[ScopeDirective] = []
    for position, token in enumerate(query.split()):
        directive = None
        if not max_tokens or position < max_tokens:
            directive = scope_of(token, policy, responds_to)
        if directive is None:
            words.append(token)
        else:
            directives.append(directive)
    return tuple(words), tuple(directives)
