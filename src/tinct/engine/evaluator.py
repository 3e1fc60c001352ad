"""Resolution engine — fixpoint evaluation of one scope at a time.

Each pass visits every entry in order and resolves its string value as
far as it will go: hex literals are normalised, the first reference is
replaced by the referent's current value, the innermost function call is
replaced by the colour-math result, and the loop repeats on the new
value until nothing changes. Passes repeat until one changes nothing or
the iteration cap is reached.

Entries are registered in the token store with their raw values before
the first pass, so references between siblings of the same scope see
each other immediately. Later entries in a pass observe the updated
values of earlier ones; the visiting order is part of the contract.

INVARIANT: a scope either resolves completely or raises, leaving the
token store as it was before the scope began.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from typing import Any

from tinct.domain.errors import ColourParseError, TinctError, UnresolvedTokenError
from tinct.domain.paths import PathEntry
from tinct.domain.syntax import (
    classify,
    expand_aliases,
    find_function,
    find_reference,
    has_unresolved,
    normalise_hex,
)
from tinct.domain.tokens import Token, TokenStore
from tinct.domain.transforms import ColourMath, TransformCall
from tinct.domain.types import Scope, TokenKind, ValueKind

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 10


class Evaluator:
    """Resolve path entries against a token store.

    Parameters:
        store: The compilation's token store. Never shared between compilations.
        colour: Colour-math capability used for function calls.
        max_iterations: Cap on passes per scope and on steps per entry.
        palette_scope: Prefix that ``$$name`` aliases expand under.
    """

    def __init__(
        self,
        store: TokenStore,
        colour: ColourMath,
        *,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        palette_scope: str = "palette",
    ) -> None:
        if max_iterations < 1:
            msg = f"max_iterations must be at least 1, got {max_iterations}"
            raise ValueError(msg)
        self._store = store
        self._colour = colour
        self._max_iterations = max_iterations
        self._palette_scope = palette_scope
        self.changing_passes = 0

    def evaluate(self, entries: Sequence[PathEntry], scope: Scope) -> list[PathEntry]:
        """Resolve every string value in *entries* within *scope*.

        Returns new entries carrying literal values; *entries* is untouched.

        Raises:
            UnresolvedTokenError: Entries still hold reference or function
                syntax when passes stop (cycles, missing or invisible paths).
            ColourParseError: A function call could not be evaluated.
        """
        checkpoint = self._store.checkpoint()
        try:
            return self._evaluate(entries, scope)
        except TinctError:
            self._store.rollback(checkpoint)
            raise

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    def _evaluate(self, entries: Sequence[PathEntry], scope: Scope) -> list[PathEntry]:
        keys = [entry.flat_path for entry in entries]
        values: list[Any] = [self._expand(entry.value) for entry in entries]
        tokens = [
            self._register(key, entry.value, value, scope)
            for key, entry, value in zip(keys, entries, values, strict=True)
        ]
        visible = scope.visible

        self.changing_passes = 0
        for _ in range(self._max_iterations):
            changed = False
            for index, key in enumerate(keys):
                current = values[index]
                if not isinstance(current, str):
                    continue
                trail: list[Token] = []
                resolved = self._resolve_value(key, current, scope, visible, trail)
                tokens[index].value = resolved
                tokens[index].add_trail(trail)
                if resolved != current:
                    values[index] = resolved
                    changed = True
            if not changed:
                break
            self.changing_passes += 1

        unresolved = [key for key, value in zip(keys, values, strict=True) if has_unresolved(value)]
        if unresolved:
            logger.debug(
                "Unresolved in %s after %d pass(es): %s", scope, self.changing_passes, unresolved
            )
            raise UnresolvedTokenError(unresolved, scope=scope.value)

        logger.debug(
            "Resolved %d %s entr%s in %d changing pass(es)",
            len(keys),
            scope,
            "y" if len(keys) == 1 else "ies",
            self.changing_passes,
        )
        return [entry.with_value(value) for entry, value in zip(entries, values, strict=True)]

    def _expand(self, value: Any) -> Any:
        if isinstance(value, str) and "$$" in value:
            return expand_aliases(value, self._palette_scope)
        return value

    def _register(self, key: str, raw: Any, value: Any, scope: Scope) -> Token:
        token = Token(name=key, kind=TokenKind.INPUT, raw_value=raw, value=value, scope=scope)
        return self._store.add_token(token)

    # ------------------------------------------------------------------
    # Single value
    # ------------------------------------------------------------------

    def _resolve_value(
        self,
        key: str,
        value: str,
        scope: Scope,
        visible: Collection[Scope],
        trail: list[Token],
    ) -> str:
        """Follow substitutions on one value until it stops changing."""
        seen = {value}
        for _ in range(self._max_iterations):
            step = self._step(key, value, scope, visible)
            if step is None or step.value == value:
                return value
            step = self._store.add_token(step)
            step.parent_key = key
            trail.append(step)
            value = step.value
            if value in seen:
                return value
            seen.add(value)
        return value

    def _step(
        self,
        key: str,
        value: str,
        scope: Scope,
        visible: Collection[Scope],
    ) -> Token | None:
        kind = classify(value)

        if kind is ValueKind.HEX:
            return Token(
                name=value,
                kind=TokenKind.HEX,
                raw_value=value,
                value=normalise_hex(value),
                scope=scope,
            )

        if kind is ValueKind.REFERENCE:
            reference = find_reference(value)
            assert reference is not None
            target = self._store.find_entry(reference.path, visible)
            if target is None or target.name == key:
                return None
            return Token(
                name=value,
                kind=TokenKind.REFERENCE,
                raw_value=reference.captured,
                value=value.replace(reference.captured, str(target.value), 1),
                scope=scope,
                dependency=target,
            )

        if kind is ValueKind.FUNCTION:
            found = find_function(value)
            assert found is not None
            call = TransformCall.parse(found.name, found.args, found.captured)
            try:
                result = self._colour.apply(call)
            except ColourParseError as exc:
                raise exc.with_path(key) from exc
            return Token(
                name=value,
                kind=TokenKind.FUNCTION,
                raw_value=found.captured,
                value=value.replace(found.captured, result, 1),
                scope=scope,
            )

        return None
