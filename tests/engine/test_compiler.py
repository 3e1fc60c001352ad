"""Tests for ThemeCompiler — compose, resolve and assemble."""

from __future__ import annotations

import re
from typing import Any

import pytest

from tinct.config.models import CompilerConfig, SectionsConfig
from tinct.domain.errors import ImportSpecError, UnresolvedTokenError
from tinct.domain.types import Scope
from tinct.engine.composer import Layer
from tinct.engine.compiler import ThemeCompiler

_HEX6 = re.compile(r"^#[0-9a-f]{6}$")


@pytest.fixture
def compiler() -> ThemeCompiler:
    return ThemeCompiler()


def _main() -> dict[str, Any]:
    return {
        "config": {
            "name": "Harbour",
            "type": "dark",
            "import": "base.yaml",
            "custom": {"semanticHighlighting": True},
        },
        "vars": {"base": "$$cyan", "std": {"bg": "#1A1A2E"}},
        "theme": {
            "colors": {
                "editor.background": "$(std.bg)",
                "editor.foreground": "lighten($(base), 20)",
            },
            "tokenColors": [
                {"scope": ["comment"], "settings": {"foreground": "$$cyan", "fontStyle": "italic"}},
            ],
        },
    }


def _base() -> Layer:
    return Layer(
        "base.yaml",
        {
            "palette": {"cyan": "#56b6c2", "red": "#e06c75"},
            "theme": {"tokenColors": [{"scope": "invalid", "settings": {"foreground": "$$red"}}]},
        },
    )


class TestCompile:
    def test_full_document(self, compiler: ThemeCompiler) -> None:
        result = compiler.compile(_main(), [_base()])
        out = result.output

        assert out["name"] == "Harbour"
        assert out["type"] == "dark"
        assert out["semanticHighlighting"] is True
        assert "import" not in out
        assert out["colors"]["editor.background"] == "#1A1A2E"
        assert _HEX6.match(out["colors"]["editor.foreground"])
        assert out["colors"]["editor.foreground"] != "#56b6c2"
        assert out["tokenColors"] == [
            {"scope": "invalid", "settings": {"foreground": "#e06c75"}},
            {"scope": ["comment"], "settings": {"foreground": "#56b6c2", "fontStyle": "italic"}},
        ]

    def test_scope_maps(self, compiler: ThemeCompiler) -> None:
        result = compiler.compile(_main(), [_base()])
        assert result.palette == {"palette.cyan": "#56b6c2", "palette.red": "#e06c75"}
        assert result.variables == {"base": "#56b6c2", "std.bg": "#1A1A2E"}
        assert result.scope(Scope.THEME) is result.theme
        assert result.theme["colors.editor.background"] == "#1A1A2E"
        assert result.imports == ["base.yaml"]

    def test_header_order(self, compiler: ThemeCompiler) -> None:
        main = {"config": {"type": "light", "name": "N", "$schema": "vscode://schemas/color-theme"}}
        result = compiler.compile(main)
        assert list(result.output) == ["$schema", "name", "type"]

    def test_nested_colors_are_flattened(self, compiler: ThemeCompiler) -> None:
        main = {"theme": {"colors": {"editor": {"background": "#000000"}}}}
        assert compiler.compile(main).output["colors"] == {"editor.background": "#000000"}

    def test_other_sections_stay_nested(self, compiler: ThemeCompiler) -> None:
        main = {"theme": {"semanticTokenColors": {"variable": {"foreground": "#abc"}}}}
        out = compiler.compile(main).output
        assert out["semanticTokenColors"] == {"variable": {"foreground": "#aabbcc"}}

    def test_list_valued_flat_section_kept(self, compiler: ThemeCompiler) -> None:
        out = compiler.compile({"theme": {"colors": ["#000"]}}).output
        assert out["colors"] == ["#000000"]

    def test_empty_document(self, compiler: ThemeCompiler) -> None:
        result = compiler.compile({})
        assert result.output == {}
        assert len(result.store) == 0

    def test_carry_forward_then_resolve(self, compiler: ThemeCompiler) -> None:
        base = Layer("base", {"vars": {"accent": "#000000"}})
        result = compiler.compile({"vars": {"accent": "invert(^)"}}, [base])
        assert result.variables["accent"] == "#ffffff"

    def test_independent_stores(self, compiler: ThemeCompiler) -> None:
        first = compiler.compile({"vars": {"a": "#000000"}})
        second = compiler.compile({"vars": {"b": "#ffffff"}})
        assert first.store is not second.store
        assert "a" not in second.store


class TestScopeIsolation:
    def test_palette_cannot_reference_variables(self, compiler: ThemeCompiler) -> None:
        main = {"palette": {"x": "$(base)"}, "vars": {"base": "#000000"}}
        with pytest.raises(UnresolvedTokenError) as excinfo:
            compiler.compile(main)
        assert excinfo.value.unresolved == ["palette.x"]

    def test_variables_cannot_reference_theme(self, compiler: ThemeCompiler) -> None:
        main = {"vars": {"x": "$(colors.a)"}, "theme": {"colors": {"a": "#000000"}}}
        with pytest.raises(UnresolvedTokenError) as excinfo:
            compiler.compile(main)
        assert excinfo.value.unresolved == ["x"]
        assert excinfo.value.scope == "variables"


class TestImports:
    def test_import_names(self, compiler: ThemeCompiler) -> None:
        assert compiler.import_names(_main()) == ["base.yaml"]
        assert compiler.import_names({}) == []
        assert compiler.import_names({"config": {"import": ["a", "b"]}}) == ["a", "b"]

    def test_invalid_spec(self, compiler: ThemeCompiler) -> None:
        with pytest.raises(ImportSpecError):
            compiler.import_names({"config": {"import": 3}})


class TestFromConfig:
    def test_custom_sections(self) -> None:
        compiler = ThemeCompiler.from_config(
            CompilerConfig(carry_forward="~"),
            SectionsConfig(palette="pal", vars="variables", flat_sections=[]),
        )
        main = {
            "pal": {"blue": "#0000ff"},
            "variables": {"fg": "$$blue"},
            "theme": {"colors": {"editor": {"foreground": "$(fg)"}}},
        }
        result = compiler.compile(main)
        assert result.palette == {"pal.blue": "#0000ff"}
        assert result.output["colors"] == {"editor": {"foreground": "#0000ff"}}

    def test_iteration_cap(self) -> None:
        compiler = ThemeCompiler.from_config(CompilerConfig(max_iterations=1), SectionsConfig())
        main = {"vars": {"a": "$(b)", "b": "$(c)", "c": "$(d)", "d": "#000000"}}
        with pytest.raises(UnresolvedTokenError):
            compiler.compile(main)
