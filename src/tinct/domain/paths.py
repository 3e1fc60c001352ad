"""Path codec — flatten nested documents into path entries and back.

Pure functions, no infrastructure dependencies. Consumed by the import
composer (provenance, carry-forward lookups) and by the resolution
engine (one entry per leaf).

A path is a tuple of segments. Map keys are ``str`` segments and are
never split, so a key such as ``"editor.background"`` stays a single
segment. List positions are ``int`` segments. The flat path is the
dot-joined rendering used as a token-store key.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, replace
from typing import Any

Segment = str | int
KeyPath = tuple[Segment, ...]

_MISSING = object()


def join_path(path: Iterable[Segment]) -> str:
    """Render *path* as a dot-joined flat path."""
    return ".".join(str(segment) for segment in path)


@dataclass(frozen=True)
class ArrayDescriptor:
    """Marks an entry as element *index* of the list found at *path*."""

    path: KeyPath
    index: int

    @property
    def flat_path(self) -> str:
        return join_path(self.path)


@dataclass(frozen=True)
class PathEntry:
    """One leaf of a decomposed document."""

    path: KeyPath
    value: Any
    array: ArrayDescriptor | None = None

    @property
    def flat_path(self) -> str:
        return join_path(self.path)

    @property
    def key(self) -> Segment:
        return self.path[-1]

    def with_value(self, value: Any) -> PathEntry:
        return replace(self, value=value)

    def with_prefix(self, *prefix: Segment) -> PathEntry:
        """Return this entry re-rooted below *prefix*."""
        array = self.array
        if array is not None:
            array = ArrayDescriptor(path=(*prefix, *array.path), index=array.index)
        return PathEntry(path=(*prefix, *self.path), value=self.value, array=array)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _children(node: Any) -> Iterator[tuple[Segment, Any]]:
    if isinstance(node, Mapping):
        for key, value in node.items():
            yield str(key), value
    else:
        yield from enumerate(node)


def decompose(doc: Mapping[str, Any] | list[Any], prefix: KeyPath = ()) -> list[PathEntry]:
    """Flatten *doc* into path entries, depth-first in key order.

    Maps recurse by key. Lists recurse by position; a scalar list element
    additionally carries an :class:`ArrayDescriptor` naming the list's
    path and the element's index. Leaves keep their value unchanged, so
    non-string scalars pass straight through.

    Empty maps and lists produce no entries.
    """
    entries: list[PathEntry] = []
    in_list = _is_sequence(doc)
    for segment, item in _children(doc):
        path = (*prefix, segment)
        if isinstance(item, Mapping) or _is_sequence(item):
            entries.extend(decompose(item, path))
        elif in_list:
            assert isinstance(segment, int)
            entries.append(PathEntry(path, item, ArrayDescriptor(prefix, segment)))
        else:
            entries.append(PathEntry(path, item))
    return entries


class _Branch(dict[Segment, Any]):
    """Interior node built during recomposition."""


def _assign(root: _Branch, path: KeyPath, value: Any) -> None:
    node = root
    for segment in path[:-1]:
        child = node.get(segment)
        if not isinstance(child, _Branch):
            child = _Branch()
            node[segment] = child
        node = child
    node[path[-1]] = value


def _finalise(node: Any) -> Any:
    if not isinstance(node, _Branch):
        return node
    if node and all(isinstance(key, int) for key in node):
        return [_finalise(node[key]) for key in sorted(node)]
    return {key: _finalise(value) for key, value in node.items()}


def recompose(entries: Iterable[PathEntry]) -> Any:
    """Rebuild the nested document that *entries* describe.

    Entries with integer segments (including every entry carrying an
    array descriptor) are grouped into lists ordered by index. Duplicate
    flat paths resolve last-seen-wins; callers needing other override
    semantics must filter first. No entries yields an empty map.
    """
    root = _Branch()
    for entry in entries:
        if not entry.path:
            continue
        _assign(root, entry.path, entry.value)
    result = _finalise(root)
    return result if result else {}


def flatten(doc: Mapping[str, Any] | list[Any]) -> dict[str, Any]:
    """Map each flat path of *doc* to its leaf value."""
    return {entry.flat_path: entry.value for entry in decompose(doc)}


def get_path(doc: Any, path: KeyPath, default: Any = None) -> Any:
    """Return the value at *path* inside *doc*, or *default* if absent."""
    node = doc
    for segment in path:
        if isinstance(node, Mapping):
            node = node.get(segment, _MISSING)
        elif _is_sequence(node) and isinstance(segment, int) and 0 <= segment < len(node):
            node = node[segment]
        else:
            return default
        if node is _MISSING:
            return default
    return node
