"""Shared pytest fixtures and test helpers for tinct tests."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from tinct.config.settings import TinctSettings
from tinct.domain.tokens import TokenStore
from tinct.infrastructure.colour import ColorsysColourMath


@pytest.fixture(autouse=True)
def _no_config_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host ``TINCT_*`` variables out of settings under test."""
    monkeypatch.delenv("TINCT_CONFIG", raising=False)
    monkeypatch.delenv("TINCT_VERBOSE", raising=False)
    monkeypatch.delenv("TINCT_COMPILER__MAX_ITERATIONS", raising=False)


@pytest.fixture
def theme_dir(tmp_path: Path) -> Path:
    """Empty directory for theme sources, with a ``tinct.toml`` marking the root."""
    (tmp_path / "tinct.toml").write_text("", encoding="utf-8")
    return tmp_path


@pytest.fixture
def settings(theme_dir: Path) -> TinctSettings:
    return TinctSettings.from_options(root=theme_dir)


@pytest.fixture
def store() -> TokenStore:
    return TokenStore()


@pytest.fixture
def colour() -> ColorsysColourMath:
    return ColorsysColourMath()


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_source(directory: Path, name: str, text: str) -> Path:
    """Write a dedented theme source file and return its path."""
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
    return path
