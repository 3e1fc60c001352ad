"""Theme sources shared by the service tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.conftest import write_source


@pytest.fixture
def harbour(theme_dir: Path) -> Path:
    """A main theme importing a palette from ``base.yaml``."""
    write_source(
        theme_dir,
        "base.yaml",
        """
        palette:
          cyan: "#56b6c2"
          red: "#e06c75"
        theme:
          tokenColors:
            - scope: invalid
              settings:
                foreground: "$$red"
        """,
    )
    return write_source(
        theme_dir,
        "harbour.yaml",
        """
        config:
          name: Harbour
          type: dark
          import: base.yaml
        vars:
          accent: "$$cyan"
          hi: "lighten($(accent), 20)"
        theme:
          colors:
            editor.background: "$(accent)"
            editor.foreground: "$(hi)"
          tokenColors:
            - scope: comment
              settings:
                foreground: "fade($$red, 0.5)"
        """,
    )
