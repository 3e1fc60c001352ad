"""ThemeCompiler — compose, resolve by scope, and assemble output.

Pipeline: COMPOSE → DECOMPOSE → RESOLVE (palette, variables, theme) → ASSEMBLE

Every :meth:`ThemeCompiler.compile` call builds a fresh
:class:`~tinct.domain.tokens.TokenStore`, so one compiler may be shared
across threads compiling independent documents.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from tinct.domain.paths import PathEntry, decompose, join_path, recompose
from tinct.domain.tokens import TokenStore
from tinct.domain.types import Scope
from tinct.engine.composer import Composition, ImportComposer, Layer, normalise_imports
from tinct.engine.evaluator import DEFAULT_MAX_ITERATIONS, Evaluator
from tinct.infrastructure.colour import ColorsysColourMath

if TYPE_CHECKING:
    from tinct.config.models import CompilerConfig, SectionsConfig
    from tinct.domain.transforms import ColourMath

logger = logging.getLogger(__name__)

HEADER_KEYS = ("$schema", "name", "type")


@dataclass
class Compilation:
    """Everything one compilation produced.

    Attributes:
        composition: The merged, unevaluated document with provenance.
        store: Token store holding every entry and intermediate step.
        palette: Flat resolved palette, keyed ``<palette>.<path>``.
        variables: Flat resolved variables, keyed by bare path.
        theme: Flat resolved theme entries, keyed by path below the theme section.
        theme_document: The theme scope recomposed into a nested document.
        output: The assembled theme document.
        imports: Names of the imported layers, in merge order.
    """

    composition: Composition
    store: TokenStore
    palette: dict[str, Any] = field(default_factory=dict)
    variables: dict[str, Any] = field(default_factory=dict)
    theme: dict[str, Any] = field(default_factory=dict)
    theme_document: dict[str, Any] = field(default_factory=dict)
    output: dict[str, Any] = field(default_factory=dict)
    imports: list[str] = field(default_factory=list)

    def scope(self, scope: Scope) -> dict[str, Any]:
        """The flat resolved mapping for *scope*."""
        return {
            Scope.PALETTE: self.palette,
            Scope.VARIABLES: self.variables,
            Scope.THEME: self.theme,
        }[scope]


class ThemeCompiler:
    """Turn a main document plus imported layers into a resolved theme."""

    def __init__(
        self,
        *,
        colour: ColourMath | None = None,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        carry_forward: str = "^",
        config_section: str = "config",
        palette_section: str = "palette",
        vars_section: str = "vars",
        theme_section: str = "theme",
        flat_sections: Sequence[str] = ("colors",),
    ) -> None:
        self._colour = colour or ColorsysColourMath()
        self._max_iterations = max_iterations
        self._config = config_section
        self._palette = palette_section
        self._vars = vars_section
        self._theme = theme_section
        self._flat_sections = frozenset(flat_sections)
        self._composer = ImportComposer(
            palette_section=palette_section,
            vars_section=vars_section,
            theme_section=theme_section,
            carry_forward=carry_forward,
        )

    @classmethod
    def from_config(
        cls,
        compiler: CompilerConfig,
        sections: SectionsConfig,
        *,
        colour: ColourMath | None = None,
    ) -> ThemeCompiler:
        return cls(
            colour=colour,
            max_iterations=compiler.max_iterations,
            carry_forward=compiler.carry_forward,
            config_section=sections.config,
            palette_section=sections.palette,
            vars_section=sections.vars,
            theme_section=sections.theme,
            flat_sections=sections.flat_sections,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def import_names(self, main: Mapping[str, Any]) -> list[str]:
        """The import list declared in *main*'s config section."""
        config = main.get(self._config) or {}
        spec = config.get("import") if isinstance(config, Mapping) else None
        return normalise_imports(spec)

    def compose(self, main: Mapping[str, Any], imports: Sequence[Layer] = ()) -> Composition:
        return self._composer.compose(imports, main)

    def compile(self, main: Mapping[str, Any], imports: Sequence[Layer] = ()) -> Compilation:
        """Compose *imports* under *main* and resolve the result."""
        return self.resolve(self.compose(main, imports))

    def resolve(self, composition: Composition) -> Compilation:
        """Resolve a composed document with a fresh token store."""
        store = TokenStore()
        evaluator = Evaluator(
            store,
            self._colour,
            max_iterations=self._max_iterations,
            palette_scope=self._palette,
        )
        document = composition.document

        palette = evaluator.evaluate(
            self._entries(document.get(self._palette), (self._palette,)), Scope.PALETTE
        )
        variables = evaluator.evaluate(self._entries(document.get(self._vars)), Scope.VARIABLES)
        theme = evaluator.evaluate(self._entries(document.get(self._theme)), Scope.THEME)

        theme_document = recompose(theme)
        compilation = Compilation(
            composition=composition,
            store=store,
            palette=_flat(palette),
            variables=_flat(variables),
            theme=_flat(theme),
            theme_document=theme_document,
            output=self.assemble(_mapping(document.get(self._config)), theme),
            imports=list(composition.layers[:-1]),
        )
        logger.debug(
            "Compiled theme: %d palette, %d variable, %d theme value(s)",
            len(palette),
            len(variables),
            len(theme),
        )
        return compilation

    def assemble(self, config: Mapping[str, Any], theme: Sequence[PathEntry]) -> dict[str, Any]:
        """Build the output document: header, then ``custom``, then theme sections.

        Sections named in ``flat_sections`` are emitted as flat maps keyed
        by dotted path; every other section keeps its nested shape.
        """
        output: dict[str, Any] = {key: config[key] for key in HEADER_KEYS if key in config}
        custom = config.get("custom")
        if isinstance(custom, Mapping):
            output.update(custom)

        by_section: dict[str, list[PathEntry]] = {}
        for entry in theme:
            by_section.setdefault(str(entry.path[0]), []).append(entry)

        for section, entries in by_section.items():
            if section in self._flat_sections and all(
                len(e.path) > 1 and isinstance(e.path[1], str) for e in entries
            ):
                output[section] = {join_path(entry.path[1:]): entry.value for entry in entries}
            else:
                output[section] = recompose(entries)[section]
        return output

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _entries(section: Any, prefix: tuple[str, ...] = ()) -> list[PathEntry]:
        if not section:
            return []
        if not isinstance(section, (Mapping, list)):
            return []
        return decompose(section, prefix)


def _flat(entries: Sequence[PathEntry]) -> dict[str, Any]:
    return {entry.flat_path: entry.value for entry in entries}


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}
