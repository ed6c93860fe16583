from __future__ import annotations

from typing import Sequence

from .dto import FilterSpec


def like_parameter(words: Sequence[str]) -> str:
    # str.lower is Unicode aware, so Cyrillic and other scripts fold correctly
    return f"%{' '.join(words).lower()}%"


def build(term: str | None, words: Sequence[str], searchable_attributes: Sequence[str]) -> FilterSpec:
    """Build the case-insensitive substring filter for the keyword part of ``term``.

    A blank term means no filtering. Otherwise every searchable attribute is
    matched against the same parameter and the matches are ORed together.
    """
    if term is None or not term.strip():
        return FilterSpec.none()
    attributes = tuple(searchable_attributes)
    parameter = like_parameter(words)
    return FilterSpec(
        unfiltered=False,
        attributes=attributes,
        parameters=(parameter,) * len(attributes),
    )
