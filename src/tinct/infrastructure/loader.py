"""Theme document I/O.

Theme sources are YAML, JSON or JSON5 maps. Imports name sibling files relative
to the importing document's directory; a name without a suffix is tried
with each configured extension in turn.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

import json5
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from tinct.domain.errors import DocumentLoadError
from tinct.engine.composer import Layer

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".yaml", ".yml", ".json", ".json5")
_JSON_EXTENSIONS = frozenset({".json", ".json5"})


class DocumentLoader:
    """Read theme documents from disk."""

    def __init__(self, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> None:
        self._extensions = tuple(ext.lower() for ext in extensions)

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def load(self, path: Path) -> dict[str, Any]:
        """Parse *path* into a map.

        Raises:
            DocumentLoadError: Unsupported extension, unreadable file,
                malformed content, or a top level that is not a map.
        """
        if path.suffix.lower() not in self._extensions:
            raise DocumentLoadError(path, f"unsupported extension {path.suffix!r}")
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise DocumentLoadError(path, exc.strerror or str(exc)) from exc

        try:
            if path.suffix.lower() in _JSON_EXTENSIONS:
                # json5 also reads plain JSON.
                data = json5.loads(raw) if raw.strip() else {}
            else:
                # A fresh YAML instance per load; the object is stateful.
                data = YAML(typ="safe").load(raw) or {}
        except (YAMLError, ValueError) as exc:
            raise DocumentLoadError(path, str(exc)) from exc

        if not isinstance(data, Mapping):
            raise DocumentLoadError(path, f"expected a map, got {type(data).__name__}")
        logger.debug("Loaded %s (%d top-level key(s))", path, len(data))
        return dict(data)

    def resolve_import(self, name: str, base_dir: Path) -> Path:
        """Locate the file an import *name* refers to."""
        candidate = base_dir / name
        if candidate.is_file():
            return candidate
        if not candidate.suffix:
            for ext in self._extensions:
                with_ext = candidate.with_name(candidate.name + ext)
                if with_ext.is_file():
                    return with_ext
        raise DocumentLoadError(candidate, "import not found")

    def load_layers(self, names: Sequence[str], base_dir: Path) -> list[Layer]:
        """Load each import in declared order."""
        layers: list[Layer] = []
        for name in names:
            path = self.resolve_import(name, base_dir)
            layers.append(Layer(name=name, document=self.load(path)))
        return layers


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def render_theme(document: Mapping[str, Any]) -> str:
    """Serialise an assembled theme as indented JSON."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def write_theme(path: Path, document: Mapping[str, Any]) -> None:
    """Write an assembled theme, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(render_theme(document), encoding="utf-8")
