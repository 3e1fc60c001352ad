"""Tests for the colorsys-backed colour math."""

from __future__ import annotations

import pytest

from tinct.domain.errors import ColourParseError
from tinct.domain.transforms import TransformCall
from tinct.infrastructure.colour import RGBA, ColorsysColourMath, mix, parse_colour


def _call(name: str, *args: str) -> TransformCall:
    return TransformCall.parse(name, args, f"{name}({', '.join(args)})")


class TestParseColour:
    @pytest.mark.parametrize(
        ("expression", "expected"),
        [
            ("#fff", "#ffffff"),
            ("#FF000080", "#ff000080"),
            ("red", "#ff0000"),
            ("Transparent", "#00000000"),
            ("darkslategray", "#2f4f4f"),
            ("SteelBlue", "#4682b4"),
            ("rebeccapurple", "#663399"),
            ("rgb(255, 0, 0)", "#ff0000"),
            ("rgb(0 128 255)", "#0080ff"),
            ("rgba(0, 0, 0, 0.5)", "#00000080"),
            ("rgb(0 0 0 / 50%)", "#00000080"),
            ("hsl(120, 100%, 50%)", "#00ff00"),
            ("hsl(0.5turn, 100%, 50%)", "#00ffff"),
            ("hsv(0, 100%, 100%)", "#ff0000"),
        ],
    )
    def test_formats(self, expression: str, expected: str) -> None:
        assert parse_colour(expression).to_hex() == expected

    @pytest.mark.parametrize("expression", ["", "notacolour", "rgb(1, 2)", "rgb(a, b, c)"])
    def test_invalid(self, expression: str) -> None:
        with pytest.raises(ColourParseError):
            parse_colour(expression)


class TestRGBA:
    def test_alpha_written_only_when_translucent(self) -> None:
        assert RGBA(1.0, 0.0, 0.0).to_hex() == "#ff0000"
        assert RGBA(1.0, 0.0, 0.0, 0.5).to_hex() == "#ff000080"
        assert RGBA(1.0, 0.0, 0.0).to_hex(with_alpha=True) == "#ff0000ff"

    def test_mix_midpoint(self) -> None:
        assert mix(RGBA(0.0, 0.0, 0.0), RGBA(1.0, 1.0, 1.0)).to_hex() == "#808080"


class TestTransforms:
    @pytest.fixture
    def math(self) -> ColorsysColourMath:
        return ColorsysColourMath()

    @pytest.mark.parametrize(
        ("call", "expected"),
        [
            (_call("lighten", "#404040", "100"), "#808080"),
            (_call("darken", "#808080", "50"), "#404040"),
            (_call("fade", "#000000", "0.5"), "#00000080"),
            (_call("solidify", "#00000080", "0.5"), "#000000c0"),
            (_call("alpha", "#ff0000", "0.25"), "#ff000040"),
            (_call("invert", "#000000"), "#ffffff"),
            (_call("mix", "#000000", "#ffffff"), "#808080"),
            (_call("mix", "#000000", "#ffffff", "25"), "#404040"),
            (_call("shade", "#ffffff", "50"), "#808080"),
            (_call("tint", "#000000", "50"), "#808080"),
            (_call("css", "#fff"), "#ffffff"),
            (_call("css", "darkslategray"), "#2f4f4f"),
            (_call("rgb", "0", "0", "255"), "#0000ff"),
        ],
    )
    def test_apply(self, math: ColorsysColourMath, call: TransformCall, expected: str) -> None:
        assert math.apply(call) == expected

    def test_lighten_keeps_alpha(self, math: ColorsysColourMath) -> None:
        assert math.apply(_call("lighten", "#40404080", "100")) == "#80808080"

    def test_missing_argument(self, math: ColorsysColourMath) -> None:
        with pytest.raises(ColourParseError, match="missing argument 2"):
            math.apply(_call("lighten", "#000000"))

    def test_error_names_the_call(self, math: ColorsysColourMath) -> None:
        with pytest.raises(ColourParseError) as excinfo:
            math.apply(_call("mix", "#000000", "nope"))
        assert excinfo.value.expression == "mix(#000000, nope)"

    def test_to_hex(self, math: ColorsysColourMath) -> None:
        assert math.to_hex("navy") == "#000080"
        assert math.to_hex("steelblue") == "#4682b4"
