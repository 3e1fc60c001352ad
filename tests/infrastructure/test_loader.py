"""Tests for theme document I/O."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tests.conftest import write_source
from tinct.domain.errors import DocumentLoadError
from tinct.infrastructure.loader import DocumentLoader, render_theme, write_theme


@pytest.fixture
def loader() -> DocumentLoader:
    return DocumentLoader()


class TestLoad:
    def test_yaml(self, loader: DocumentLoader, tmp_path: Path) -> None:
        path = write_source(
            tmp_path,
            "main.yaml",
            """
            palette:
              cyan: "#56b6c2"
            vars:
              accent: $$cyan
            """,
        )
        assert loader.load(path) == {"palette": {"cyan": "#56b6c2"}, "vars": {"accent": "$$cyan"}}

    def test_json(self, loader: DocumentLoader, tmp_path: Path) -> None:
        path = tmp_path / "main.json"
        path.write_text(json.dumps({"vars": {"a": "#000"}}), encoding="utf-8")
        assert loader.load(path) == {"vars": {"a": "#000"}}

    def test_json5(self, loader: DocumentLoader, tmp_path: Path) -> None:
        path = write_source(
            tmp_path,
            "main.json5",
            """
            // palette only
            {palette: {cyan: '#56b6c2',},}
            """,
        )
        assert loader.load(path) == {"palette": {"cyan": "#56b6c2"}}

    def test_json5_syntax_in_json_file(self, loader: DocumentLoader, tmp_path: Path) -> None:
        path = write_source(tmp_path, "main.json", "{vars: {a: '#000',},}\n")
        assert loader.load(path) == {"vars": {"a": "#000"}}

    def test_malformed_json(self, loader: DocumentLoader, tmp_path: Path) -> None:
        path = write_source(tmp_path, "bad.json5", "{palette: \n")
        with pytest.raises(DocumentLoadError):
            loader.load(path)

    def test_empty_file(self, loader: DocumentLoader, tmp_path: Path) -> None:
        path = write_source(tmp_path, "empty.yaml", "")
        assert loader.load(path) == {}

    def test_missing_file(self, loader: DocumentLoader, tmp_path: Path) -> None:
        with pytest.raises(DocumentLoadError):
            loader.load(tmp_path / "absent.yaml")

    def test_unsupported_extension(self, loader: DocumentLoader, tmp_path: Path) -> None:
        path = write_source(tmp_path, "theme.txt", "a: 1")
        with pytest.raises(DocumentLoadError, match="unsupported extension"):
            loader.load(path)

    def test_malformed(self, loader: DocumentLoader, tmp_path: Path) -> None:
        path = write_source(tmp_path, "bad.yaml", "a: [1, 2\n")
        with pytest.raises(DocumentLoadError):
            loader.load(path)

    def test_top_level_must_be_map(self, loader: DocumentLoader, tmp_path: Path) -> None:
        path = write_source(tmp_path, "list.yaml", "- a\n- b\n")
        with pytest.raises(DocumentLoadError, match="expected a map"):
            loader.load(path)


class TestImports:
    def test_resolve_exact_name(self, loader: DocumentLoader, tmp_path: Path) -> None:
        path = write_source(tmp_path, "base.yaml", "palette: {}")
        assert loader.resolve_import("base.yaml", tmp_path) == path

    def test_resolve_adds_extension(self, loader: DocumentLoader, tmp_path: Path) -> None:
        path = write_source(tmp_path, "shared/base.yml", "palette: {}")
        assert loader.resolve_import("shared/base", tmp_path) == path

    def test_resolve_json5_extension(self, loader: DocumentLoader, tmp_path: Path) -> None:
        path = write_source(tmp_path, "base.json5", "{palette: {}}")
        assert loader.resolve_import("base", tmp_path) == path

    def test_resolve_missing(self, loader: DocumentLoader, tmp_path: Path) -> None:
        with pytest.raises(DocumentLoadError, match="import not found"):
            loader.resolve_import("nope", tmp_path)

    def test_load_layers_in_order(self, loader: DocumentLoader, tmp_path: Path) -> None:
        write_source(tmp_path, "a.yaml", "vars: {x: '#000'}")
        write_source(tmp_path, "b.yaml", "vars: {x: '#fff'}")
        layers = loader.load_layers(["a.yaml", "b"], tmp_path)
        assert [layer.name for layer in layers] == ["a.yaml", "b"]
        assert layers[1].document == {"vars": {"x": "#fff"}}


class TestWrite:
    def test_round_trips_json(self, tmp_path: Path) -> None:
        target = tmp_path / "out" / "theme.json"
        document = {"name": "T", "colors": {"editor.background": "#000000"}}
        write_theme(target, document)
        assert json.loads(target.read_text(encoding="utf-8")) == document

    def test_render_ends_with_newline(self) -> None:
        assert render_theme({}).endswith("\n")
