"""Colour transform catalogue and the colour-math interface boundary.

The catalogue is closed: every recognised name maps to a :class:`Transform`
member, and anything else becomes :attr:`Transform.PASSTHROUGH`, whose
whole call text is handed to the colour parser (``rgb(...)``,
``hsl(...)`` and friends).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol


class Transform(StrEnum):
    """Supported colour transforms."""

    LIGHTEN = "lighten"  # (colour, percent)
    DARKEN = "darken"  # (colour, percent)
    FADE = "fade"  # (colour, factor) scales alpha down
    SOLIDIFY = "solidify"  # (colour, factor) scales alpha up
    ALPHA = "alpha"  # (colour, alpha 0..1)
    INVERT = "invert"  # (colour)
    MIX = "mix"  # (colour, colour, percent=50)
    SHADE = "shade"  # (colour, percent) mix toward black
    TINT = "tint"  # (colour, percent) mix toward white
    CSS = "css"  # (expression) any CSS colour expression
    PASSTHROUGH = "passthrough"

    @classmethod
    def from_name(cls, name: str) -> Transform:
        """Map a call name to its transform, or PASSTHROUGH if unrecognised."""
        try:
            member = cls(name.lower())
        except ValueError:
            return cls.PASSTHROUGH
        return cls.PASSTHROUGH if member is cls.PASSTHROUGH else member


@dataclass(frozen=True)
class TransformCall:
    """A parsed call ready for dispatch."""

    transform: Transform
    args: tuple[str, ...]
    expression: str  # full call text, used by PASSTHROUGH and in errors

    @classmethod
    def parse(cls, name: str, args: Sequence[str], expression: str) -> TransformCall:
        return cls(transform=Transform.from_name(name), args=tuple(args), expression=expression)


class ColourMath(Protocol):
    """Colour arithmetic consumed by the resolution engine.

    Implementations raise :class:`~tinct.domain.errors.ColourParseError`
    for anything they cannot parse.
    """

    def apply(self, call: TransformCall) -> str:
        """Evaluate *call* and return the resulting colour as hex."""
        ...

    def to_hex(self, expression: str) -> str:
        """Parse an arbitrary colour expression and return it as hex."""
        ...
