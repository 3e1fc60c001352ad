"""CompileService — turn theme sources into assembled themes.

Pipeline: LOAD → IMPORT → COMPOSE → RESOLVE → ASSEMBLE → WRITE → RESPOND
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any

import structlog

from tinct.domain.errors import TinctError
from tinct.engine.composer import Layer
from tinct.engine.compiler import Compilation
from tinct.infrastructure.loader import write_theme
from tinct.services.base import BaseService, error_result
from tinct.services.result import ServiceError, ServiceResult
from tinct.services.telemetry import trace_span, traced

log = structlog.get_logger(__name__)


class CompileService(BaseService):
    """Compile theme documents into output themes."""

    @traced
    def compile(self, path: str | Path, *, output: Path | None = None) -> ServiceResult:
        """Compile the theme at *path*, optionally writing the result to *output*."""
        op = "compile"
        source = self._source(path)
        try:
            compilation = self._compile_file(source)
        except TinctError as exc:
            return error_result(op, exc)

        if output is not None:
            try:
                with trace_span("write"):
                    write_theme(output, compilation.output)
            except OSError as exc:
                return ServiceResult(
                    ok=False,
                    op=op,
                    error=ServiceError(
                        code="WRITE_FAILED",
                        message=f"Unable to write {output}: {exc}",
                        detail={"path": str(output)},
                    ),
                )
        return self._respond(op, compilation, source=source, output=output)

    @traced
    def compile_document(
        self,
        main: Mapping[str, Any],
        imports: Mapping[str, Mapping[str, Any]] | None = None,
        *,
        base_dir: Path | None = None,
    ) -> ServiceResult:
        """Compile an in-memory document.

        *imports* supplies the imported layers by name, in merge order.
        When omitted, the imports declared in *main* are loaded from
        *base_dir* (default: the settings root).
        """
        op = "compile_document"
        try:
            if imports is None:
                compilation = self._compile_mapping(main, base_dir or self._settings.root)
            else:
                layers = [Layer(name, document) for name, document in imports.items()]
                compilation = self._compiler.compile(main, layers)
        except TinctError as exc:
            return error_result(op, exc)
        return self._respond(op, compilation)

    def compile_many(self, paths: Sequence[str | Path]) -> ServiceResult:
        """Compile independent themes concurrently.

        Each document gets its own token store; one failure does not
        affect the others.
        """
        op = "compile_many"
        workers = min(self._settings.batch.max_workers, max(len(paths), 1))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="tinct") as pool:
            results = list(pool.map(self.compile, paths))

        compiled: list[dict[str, Any]] = []
        errors: list[dict[str, Any]] = []
        for path, result in zip(paths, results, strict=True):
            if result.ok:
                compiled.append(result.data)
            else:
                assert result.error is not None
                errors.append(
                    {
                        "source": str(path),
                        "code": result.error.code,
                        "error": result.error.message,
                    }
                )

        log.info("compile_many.complete", compiled=len(compiled), failed=len(errors))
        all_ok = not errors
        return ServiceResult(
            ok=all_ok,
            op=op,
            data={"compiled": compiled, "errors": errors},
            error=ServiceError(
                code="BATCH_PARTIAL",
                message=f"{len(errors)} of {len(paths)} themes failed",
            )
            if not all_ok
            else None,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _respond(
        self,
        op: str,
        compilation: Compilation,
        *,
        source: Path | None = None,
        output: Path | None = None,
    ) -> ServiceResult:
        warnings: list[str] = []
        if not compilation.theme:
            warnings.append("No theme entries were resolved")

        data: dict[str, Any] = {
            "name": compilation.output.get("name"),
            "imports": compilation.imports,
            "theme": compilation.output,
            "palette": compilation.palette,
            "variables": compilation.variables,
        }
        if source is not None:
            data["source"] = str(source)
        if output is not None:
            data["output"] = str(output)

        log.info(
            "theme.compiled",
            name=data["name"],
            imports=len(compilation.imports),
            tokens=len(compilation.store),
        )
        return ServiceResult(
            ok=True,
            op=op,
            data=data,
            warnings=warnings,
            meta={
                "counts": {
                    "palette": len(compilation.palette),
                    "variables": len(compilation.variables),
                    "theme": len(compilation.theme),
                    "tokens": len(compilation.store),
                }
            },
        )
