"""ExplainService — inspect how a compiled theme got its values."""

from __future__ import annotations

from pathlib import Path

from tinct.domain.errors import TinctError
from tinct.services.base import BaseService, error_result
from tinct.services.result import ServiceError, ServiceResult
from tinct.services.telemetry import traced


def _not_found(op: str, key: str) -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(
            code="KEY_NOT_FOUND",
            message=f"'{key}' not found",
            detail={"key": key},
        ),
    )


class ExplainService(BaseService):
    """Trails, lookups and composed previews for one theme."""

    @traced
    def explain(self, path: str | Path, key: str) -> ServiceResult:
        """Derivation of *key*: every expression it passed through, in order.

        Keys are entry paths (``palette.cyan``, ``base``,
        ``colors.editor.background``) or intermediate expressions.
        """
        op = "explain"
        try:
            compilation = self._compile_file(self._source(path))
        except TinctError as exc:
            return error_result(op, exc)

        token = compilation.store.find_token(key)
        if token is None:
            return _not_found(op, key)
        steps = compilation.store.explain(key)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "key": key,
                "value": token.value,
                "scope": token.scope.value if token.scope else None,
                "steps": [
                    {"expression": s.expression, "kind": s.kind.value, "depth": s.depth}
                    for s in steps
                ],
            },
        )

    @traced
    def lookup(self, path: str | Path, key: str) -> ServiceResult:
        """Resolved value of one entry."""
        op = "lookup"
        try:
            compilation = self._compile_file(self._source(path))
        except TinctError as exc:
            return error_result(op, exc)
        token = compilation.store.find_token(key)
        if token is None or not token.is_entry:
            return _not_found(op, key)
        return ServiceResult(
            ok=True,
            op=op,
            data={"key": key, "value": token.value, "raw": token.raw_value},
        )

    @traced
    def preview(self, path: str | Path) -> ServiceResult:
        """The composed but unevaluated document, with per-leaf provenance."""
        op = "preview"
        source = self._source(path)
        try:
            main = self._loader.load(source)
            names = self._compiler.import_names(main)
            layers = self._loader.load_layers(names, source.parent)
            composition = self._compiler.compose(main, layers)
        except TinctError as exc:
            return error_result(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "document": composition.document,
                "origins": composition.origins,
                "layers": composition.layers,
            },
        )
