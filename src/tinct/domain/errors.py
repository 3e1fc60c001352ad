"""Error taxonomy for composition and resolution.

All errors derive from :class:`TinctError` (a ``ValueError``) so callers
can catch the whole family. The service layer converts them into
:class:`~tinct.services.result.ServiceError` payloads.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path


class TinctError(ValueError):
    """Base class for every tinct failure."""


class ImportSpecError(TinctError):
    """An import specification was not a string or a list of strings."""


class DocumentLoadError(TinctError):
    """A theme document could not be read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Unable to load {path}: {reason}")


class UnresolvedTokenError(TinctError):
    """Entries failed to converge within the iteration cap.

    Raised for circular and mutual references as well as references to
    paths that are not visible from the entry's scope.
    """

    def __init__(self, unresolved: Iterable[str], *, scope: str | None = None) -> None:
        self.unresolved = list(unresolved)
        self.scope = scope
        where = f" in {scope}" if scope else ""
        super().__init__(
            f"Unable to resolve {len(self.unresolved)} token(s){where}, "
            f"possibly circular: {', '.join(self.unresolved)}"
        )


class ColourParseError(TinctError):
    """A colour expression could not be parsed or transformed."""

    def __init__(self, expression: str, reason: str, *, path: str | None = None) -> None:
        self.expression = expression
        self.reason = reason
        self.path = path
        where = f" (while resolving {path})" if path else ""
        super().__init__(f"Invalid colour expression {expression!r}{where}: {reason}")

    def with_path(self, path: str) -> ColourParseError:
        """Return a copy of this error annotated with the entry path."""
        return ColourParseError(self.expression, self.reason, path=path)
