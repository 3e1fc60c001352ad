"""Scopes, token kinds and value classifications.

Scopes are evaluation phases with fixed visibility:
Palette sees Palette; Variables sees Palette and Variables;
Theme sees all three.
"""

from __future__ import annotations

from enum import StrEnum


class Scope(StrEnum):
    """Evaluation phases, in resolution order."""

    PALETTE = "palette"
    VARIABLES = "variables"
    THEME = "theme"

    @property
    def visible(self) -> frozenset[Scope]:
        """Scopes whose entries a reference from this scope may observe."""
        order = list(Scope)
        return frozenset(order[: order.index(self) + 1])


class TokenKind(StrEnum):
    """What a token stands for."""

    INPUT = "input"  # a document entry, keyed by flat path
    HEX = "hex"
    REFERENCE = "reference"
    FUNCTION = "function"
    LITERAL = "literal"


class ValueKind(StrEnum):
    """Classification of a value string, in priority order."""

    HEX = "hex"
    REFERENCE = "reference"
    FUNCTION = "function"
    LITERAL = "literal"


class SectionPolicy(StrEnum):
    """How a section combines across import layers."""

    OBJECT_MERGE = "object-merge"
    ARRAY_APPEND = "array-append"
