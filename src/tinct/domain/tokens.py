"""Token records, the per-compilation token store, and trail reconstruction.

A :class:`TokenStore` is owned by exactly one compilation and passed by
handle into the evaluator. Keys are either an entry's flat path (for
``input`` tokens) or a raw expression string (for the intermediate
hex/reference/function steps a resolution passes through).

INVARIANT: one key maps to one Token instance for the life of the store,
so trails can elide repeats by identity. Re-registering a key updates the
existing instance (last write wins) instead of replacing it.
"""

from __future__ import annotations

from collections.abc import Collection, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from tinct.domain.syntax import classify
from tinct.domain.types import Scope, TokenKind, ValueKind


@dataclass(eq=False)
class Token:
    """Resolved-state record for one value."""

    name: str
    kind: TokenKind
    raw_value: Any = None
    value: Any = None
    scope: Scope | None = None
    dependency: Token | None = None
    parent_key: str | None = None  # flat path of the entry that produced this step
    trail: list[Token] = field(default_factory=list)

    @property
    def is_entry(self) -> bool:
        return self.kind is TokenKind.INPUT

    def add_trail(self, steps: Iterable[Token]) -> Token:
        """Append *steps* in order, skipping tokens already on the trail."""
        for step in steps:
            if step is not self and step not in self.trail:
                self.trail.append(step)
        return self

    def __repr__(self) -> str:
        return f"Token({self.name!r}, kind={self.kind.value}, value={self.value!r})"


@dataclass(frozen=True)
class TrailStep:
    """One line of an explained derivation."""

    expression: str
    kind: ValueKind
    depth: int = 0


@dataclass(frozen=True)
class _Checkpoint:
    tokens: dict[str, Token]
    state: dict[int, tuple[Any, Token | None, str | None, list[Token]]]


class TokenStore:
    """Registry of tokens keyed by flat path or expression string."""

    def __init__(self) -> None:
        self._tokens: dict[str, Token] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens.values())

    @property
    def tokens(self) -> dict[str, Token]:
        """A copy of the key to token mapping."""
        return dict(self._tokens)

    # ------------------------------------------------------------------
    # Registration and lookup
    # ------------------------------------------------------------------

    def add_token(self, token: Token, dependency: Token | None = None) -> Token:
        """Register *token* under its name and return the stored instance.

        If a token of the same kind and scope already holds the key, that
        instance is kept and its value (and dependency, when given) are
        updated from *token*. Otherwise *token* replaces whatever was there.
        """
        if dependency is not None:
            token.dependency = dependency
        existing = self._tokens.get(token.name)
        if existing is None or existing.kind is not token.kind or existing.scope != token.scope:
            self._tokens[token.name] = token
            return token
        existing.value = token.value
        if token.dependency is not None:
            existing.dependency = token.dependency
        return existing

    def find_token(self, key: str) -> Token | None:
        """Exact lookup by flat path or expression string."""
        return self._tokens.get(key)

    def find_entry(self, path: str, visible: Collection[Scope]) -> Token | None:
        """Look up an entry token at *path* that is visible from *visible* scopes."""
        token = self._tokens.get(path)
        if token is None or not token.is_entry or token.scope not in visible:
            return None
        return token

    def lookup(self, key: str) -> Any:
        """Return the current value stored under *key*, or None."""
        token = self._tokens.get(key)
        return token.value if token is not None else None

    def reverse_lookup(self, token: Token) -> Token | None:
        """Return the token registered under *token*'s value, if any."""
        if not isinstance(token.value, str):
            return None
        found = self._tokens.get(token.value)
        return found if found is not token else None

    def is_ancestor_of(self, candidate: Token, token: Token) -> bool:
        """Whether *candidate* is reached by following *token*'s dependencies."""
        seen: set[int] = set()
        current: Token | None = token
        while current is not None and id(current) not in seen:
            if current is candidate:
                return True
            seen.add(id(current))
            current = current.dependency
        return False

    def entries(self, scope: Scope | None = None) -> list[Token]:
        """Entry tokens, optionally restricted to one scope, in registration order."""
        return [
            token
            for token in self._tokens.values()
            if token.is_entry and (scope is None or token.scope is scope)
        ]

    # ------------------------------------------------------------------
    # Checkpointing
    # ------------------------------------------------------------------

    def checkpoint(self) -> _Checkpoint:
        """Capture the store so a failed scope can be undone."""
        return _Checkpoint(
            tokens=dict(self._tokens),
            state={
                id(token): (token.value, token.dependency, token.parent_key, list(token.trail))
                for token in self._tokens.values()
            },
        )

    def rollback(self, checkpoint: _Checkpoint) -> None:
        """Restore the store to *checkpoint*."""
        self._tokens = dict(checkpoint.tokens)
        for token in self._tokens.values():
            value, dependency, parent_key, trail = checkpoint.state[id(token)]
            token.value = value
            token.dependency = dependency
            token.parent_key = parent_key
            token.trail = trail

    # ------------------------------------------------------------------
    # Explain
    # ------------------------------------------------------------------

    def explain(self, key: str) -> list[TrailStep]:
        """Reconstruct the derivation of *key* from raw expression to final value.

        Reference steps descend into the referenced token's own trail one
        level deeper. Expressions already emitted are elided.

        Raises:
            KeyError: If *key* is not in the store.
        """
        token = self._tokens.get(key)
        if token is None:
            raise KeyError(key)
        steps: list[TrailStep] = []
        self._walk(token, 0, steps, seen=set(), visiting=set())
        return steps

    def _walk(
        self,
        token: Token,
        depth: int,
        steps: list[TrailStep],
        *,
        seen: set[str],
        visiting: set[int],
    ) -> None:
        def emit(expression: Any, level: int) -> None:
            text = str(expression)
            if text in seen:
                return
            seen.add(text)
            steps.append(TrailStep(expression=text, kind=classify(text), depth=level))

        visiting.add(id(token))
        emit(token.raw_value if token.raw_value is not None else token.value, depth)
        for step in token.trail:
            dependency = step.dependency
            if (
                step.kind is TokenKind.REFERENCE
                and dependency is not None
                and id(dependency) not in visiting
            ):
                self._walk(dependency, depth + 1, steps, seen=seen, visiting=visiting)
            emit(step.value, depth)
        visiting.discard(id(token))
