"""BaseService — shared foundation for tinct services.

Every service receives :class:`~tinct.config.settings.TinctSettings` at
construction time and builds its compiler and loader from them. Engine
errors are converted into failed :class:`ServiceResult` values here.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from tinct.domain.errors import (
    ColourParseError,
    DocumentLoadError,
    ImportSpecError,
    TinctError,
    UnresolvedTokenError,
)
from tinct.engine.compiler import Compilation, ThemeCompiler
from tinct.infrastructure.loader import DocumentLoader
from tinct.services.result import ServiceError, ServiceResult
from tinct.services.telemetry import enable_telemetry, trace_span

if TYPE_CHECKING:
    from tinct.config.settings import TinctSettings
    from tinct.domain.transforms import ColourMath

logger = logging.getLogger(__name__)


def error_result(op: str, exc: TinctError) -> ServiceResult:
    """Convert an engine exception into a failed ServiceResult."""
    detail: dict[str, Any] = {}
    if isinstance(exc, UnresolvedTokenError):
        code = "UNRESOLVED_TOKENS"
        detail = {"unresolved": exc.unresolved, "scope": exc.scope}
    elif isinstance(exc, ColourParseError):
        code = "COLOUR_PARSE"
        detail = {"expression": exc.expression, "path": exc.path}
    elif isinstance(exc, DocumentLoadError):
        code = "LOAD_FAILED"
        detail = {"path": str(exc.path)}
    elif isinstance(exc, ImportSpecError):
        code = "INVALID_IMPORT"
    else:
        code = "COMPILE_FAILED"
    logger.debug("%s failed with %s: %s", op, code, exc)
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code=code, message=str(exc), detail=detail),
    )


class BaseService:
    """Base for service-layer classes.

    Usage::

        class CompileService(BaseService):
            def compile(self, path: Path) -> ServiceResult:
                compilation = self._compile_file(self._source(path))
                ...
    """

    def __init__(self, settings: TinctSettings, *, colour: ColourMath | None = None) -> None:
        self._settings = settings
        self._compiler = ThemeCompiler.from_config(
            settings.compiler, settings.sections, colour=colour
        )
        self._loader = DocumentLoader(settings.loader.extensions)
        if settings.verbose:
            enable_telemetry()

    @property
    def settings(self) -> TinctSettings:
        return self._settings

    def _source(self, path: str | Path) -> Path:
        """Resolve *path* against the settings root."""
        p = Path(path)
        return p if p.is_absolute() else self._settings.root / p

    def _compile_file(self, source: Path) -> Compilation:
        with trace_span("load"):
            main = self._loader.load(source)
        return self._compile_mapping(main, source.parent)

    def _compile_mapping(self, main: Mapping[str, Any], base_dir: Path) -> Compilation:
        with trace_span("imports") as span:
            names = self._compiler.import_names(main)
            layers = self._loader.load_layers(names, base_dir)
            if span:
                span.annotate("count", len(layers))
        with trace_span("resolve"):
            return self._compiler.compile(main, layers)
