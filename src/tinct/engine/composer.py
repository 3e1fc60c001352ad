"""Import composer — layer imported documents under the main document.

Layers merge in declared order with the main document applied last.
Per section:

- object-merge (``palette``, ``vars``, map-valued ``theme`` sections):
  recursive merge, later keys win.
- array-append (list-valued ``theme`` sections such as ``tokenColors``):
  concatenation, earlier layers first, so the first match wins downstream.

Before a layer's object-merge section is merged, every leaf string that
contains the carry-forward placeholder has the placeholder replaced with
the value that key held after all earlier layers. No prior value, or a
prior value that is a map, leaves the string untouched.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from tinct.domain.errors import ImportSpecError
from tinct.domain.paths import KeyPath, decompose, join_path
from tinct.domain.types import SectionPolicy

logger = logging.getLogger(__name__)

MAIN_LAYER = "<main>"


def normalise_imports(spec: Any) -> list[str]:
    """Return the import list declared by *spec*.

    ``None`` means no imports, a string is a single import, and a list
    must contain only strings.

    Raises:
        ImportSpecError: If *spec* is any other shape.
    """
    if spec is None:
        return []
    if isinstance(spec, str):
        return [spec]
    if isinstance(spec, list) and all(isinstance(item, str) for item in spec):
        return list(spec)
    msg = f"Imports must be a string or a list of strings, got {spec!r}"
    raise ImportSpecError(msg)


@dataclass(frozen=True)
class Layer:
    """One document taking part in composition."""

    name: str
    document: Mapping[str, Any]


@dataclass
class Composition:
    """The merged, unevaluated document plus where each leaf came from."""

    document: dict[str, Any]
    origins: dict[str, str] = field(default_factory=dict)  # flat path -> layer name
    layers: list[str] = field(default_factory=list)


def policy_for(value: Any) -> SectionPolicy:
    """Sections holding lists append; everything else merges by key."""
    if isinstance(value, list):
        return SectionPolicy.ARRAY_APPEND
    return SectionPolicy.OBJECT_MERGE


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return a new map with *override* merged recursively over *base*.

    Values of differing shape are replaced outright. Inputs are not mutated.
    """
    result: dict[str, Any] = {key: copy.deepcopy(value) for key, value in base.items()}
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            result[key] = deep_merge(current, value)
        else:
            result[key] = copy.deepcopy(value)
    return result


class ImportComposer:
    """Merge layers section by section, applying carry-forward substitution.

    Parameters:
        palette_section: Top-level key of the palette section.
        vars_section: Top-level key of the variables section.
        theme_section: Top-level key of the theme section.
        carry_forward: Placeholder replaced by the key's prior merged value.
    """

    def __init__(
        self,
        *,
        palette_section: str = "palette",
        vars_section: str = "vars",
        theme_section: str = "theme",
        carry_forward: str = "^",
    ) -> None:
        self._palette = palette_section
        self._vars = vars_section
        self._theme = theme_section
        self._carry_forward = carry_forward

    @property
    def sections(self) -> tuple[str, str, str]:
        return (self._palette, self._vars, self._theme)

    def compose(self, imports: Sequence[Layer], main: Mapping[str, Any]) -> Composition:
        """Merge *imports* in order, then *main*.

        Keys of *main* outside the composed sections (``config`` and
        anything else) are carried over from *main* unchanged.
        """
        layers = [*imports, Layer(MAIN_LAYER, main)]
        merged: dict[str, Any] = {}
        origins: dict[str, str] = {}

        for layer in layers:
            for key in layer.document:
                if key not in self.sections and layer.name != MAIN_LAYER:
                    logger.debug("Ignoring section %r imported from %s", key, layer.name)
            self._merge_layer(merged, origins, layer)

        document = {
            key: copy.deepcopy(value) for key, value in main.items() if key not in self.sections
        }
        for key in self.sections:
            if key in merged:
                document[key] = merged[key]

        logger.debug(
            "Composed %d layer(s) into %d leaf value(s)", len(layers), len(origins)
        )
        return Composition(
            document=document,
            origins=origins,
            layers=[layer.name for layer in layers],
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _merge_layer(self, merged: dict[str, Any], origins: dict[str, str], layer: Layer) -> None:
        for name in (self._palette, self._vars):
            incoming = layer.document.get(name)
            if not incoming:
                continue
            if not isinstance(incoming, Mapping):
                logger.debug("Section %r in %s is not a map; replacing", name, layer.name)
                merged[name] = copy.deepcopy(incoming)
                self._record(origins, (name,), incoming, layer.name)
                continue
            prior = merged.get(name)
            base = prior if isinstance(prior, Mapping) else {}
            incoming = self._carry(incoming, base)
            merged[name] = deep_merge(base, incoming)
            self._record(origins, (name,), incoming, layer.name)

        theme = layer.document.get(self._theme)
        if not theme:
            return
        if not isinstance(theme, Mapping):
            logger.debug("Section %r in %s is not a map; ignoring", self._theme, layer.name)
            return

        target: dict[str, Any] = merged.setdefault(self._theme, {})
        for section, incoming in theme.items():
            prior = target.get(section)
            if policy_for(incoming) is SectionPolicy.ARRAY_APPEND:
                start = len(prior) if isinstance(prior, list) else 0
                items = list(prior) if isinstance(prior, list) else []
                items.extend(copy.deepcopy(incoming))
                target[section] = items
                for offset, item in enumerate(incoming):
                    self._record(origins, (self._theme, section, start + offset), item, layer.name)
            elif isinstance(incoming, Mapping):
                base = prior if isinstance(prior, Mapping) else {}
                incoming = self._carry(incoming, base)
                target[section] = deep_merge(base, incoming)
                self._record(origins, (self._theme, section), incoming, layer.name)
            else:
                target[section] = self._carry_leaf(incoming, prior)
                self._record(origins, (self._theme, section), incoming, layer.name)

    def _carry(self, incoming: Mapping[str, Any], prior: Mapping[str, Any]) -> dict[str, Any]:
        """Substitute the placeholder in *incoming*'s leaf strings from *prior*."""
        result: dict[str, Any] = {}
        for key, value in incoming.items():
            previous = prior.get(key) if isinstance(prior, Mapping) else None
            if isinstance(value, Mapping):
                result[key] = self._carry(value, previous if isinstance(previous, Mapping) else {})
            else:
                result[key] = self._carry_leaf(value, previous)
        return result

    def _carry_leaf(self, value: Any, previous: Any) -> Any:
        if not isinstance(value, str) or self._carry_forward not in value:
            return value
        if previous is None or isinstance(previous, (Mapping, list)):
            return value
        substituted = value.replace(self._carry_forward, str(previous))
        logger.debug("Carried %r forward into %r", previous, substituted)
        return substituted

    @staticmethod
    def _record(origins: dict[str, str], prefix: KeyPath, value: Any, layer: str) -> None:
        if isinstance(value, (Mapping, list)):
            for entry in decompose(value, prefix):
                origins[entry.flat_path] = layer
        else:
            origins[join_path(prefix)] = layer
