"""Value syntax — references, function calls, hex literals and aliases.

Classification is a fixed-priority sequence of pure predicates:

1. hex literal     ``#abc``, ``#abcd``, ``#aabbcc``, ``#aabbccdd``
2. reference       ``$(path.to.value)``, ``$path.to.value``, ``${path.to.value}``
3. function call   ``name(arg, arg, ...)`` (innermost call, no nested parens)
4. literal         anything else

The bare ``$path`` form stops at the first character that is neither a
word character nor a dot followed by a word character.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from tinct.domain.types import ValueKind

_LONG_HEX = re.compile(r"^(?P<colour>#[0-9a-fA-F]{6})(?P<alpha>[0-9a-fA-F]{2})?$")
_SHORT_HEX = re.compile(r"^(?P<colour>#[0-9a-fA-F]{3})(?P<alpha>[0-9a-fA-F])?$")

# $(path) | $path.to.value | ${path}
_REFERENCE = re.compile(
    r"\$\((?P<parens>[^()]+)\)"
    r"|\$(?P<bare>\w+(?:\.\w+)*)"
    r"|\$\{(?P<braces>[^(){}]+)\}"
)

# name(args) where args hold no parentheses, i.e. the innermost call.
_FUNCTION = re.compile(r"(?P<name>\w+)\((?P<args>[^()]*)\)")

# $$name | $$(name) | $${name} palette aliases.
_ALIAS = re.compile(
    r"\$\$(?:\((?P<parens>[^()]+)\)|\{(?P<braces>[^(){}]+)\}|(?P<bare>\w+(?:\.\w+)*))"
)


@dataclass(frozen=True)
class Reference:
    """A reference found inside a value string."""

    captured: str  # exact matched text, e.g. ``$(std.bg)``
    path: str  # the referenced flat path, e.g. ``std.bg``


@dataclass(frozen=True)
class FunctionCall:
    """An innermost function call found inside a value string."""

    captured: str  # exact matched text, e.g. ``lighten(#000000, 10)``
    name: str
    args: tuple[str, ...]


def is_hex(value: str) -> bool:
    """Whether *value* is exactly a 3, 4, 6 or 8 digit hex colour."""
    return bool(_LONG_HEX.match(value) or _SHORT_HEX.match(value))


def normalise_hex(value: str) -> str:
    """Expand shorthand hex to 6 or 8 digits; long hex is returned unchanged.

    Examples:
        >>> normalise_hex("#abc")
        '#aabbcc'
        >>> normalise_hex("#F0A8")
        '#ff00aa88'
        >>> normalise_hex("#1A1A2E")
        '#1A1A2E'
    """
    if _LONG_HEX.match(value):
        return value
    match = _SHORT_HEX.match(value)
    if match is None:
        msg = f"Invalid hex format, expected #rgb[a] or #rrggbb[aa]: {value!r}"
        raise ValueError(msg)
    digits = value[1:]
    return "#" + "".join(ch * 2 for ch in digits).lower()


def find_reference(value: str) -> Reference | None:
    """Return the first reference in *value*, in any of the three spellings."""
    match = _REFERENCE.search(value)
    if match is None:
        return None
    path = match.group("parens") or match.group("bare") or match.group("braces")
    return Reference(captured=match.group(0), path=path.strip())


def find_function(value: str) -> FunctionCall | None:
    """Return the first innermost function call in *value*."""
    match = _FUNCTION.search(value)
    if match is None:
        return None
    return FunctionCall(
        captured=match.group(0),
        name=match.group("name"),
        args=split_args(match.group("args")),
    )


def split_args(args: str) -> tuple[str, ...]:
    """Split an argument list on top-level commas, trimming whitespace.

    Commas nested inside parentheses belong to the inner expression.
    """
    if not args.strip():
        return ()
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in args:
        if ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(0, depth - 1)
        current.append(ch)
    parts.append("".join(current).strip())
    return tuple(parts)


def classify(value: str) -> ValueKind:
    """Classify *value* by the first matching predicate in priority order."""
    if is_hex(value):
        return ValueKind.HEX
    if _REFERENCE.search(value):
        return ValueKind.REFERENCE
    if _FUNCTION.search(value):
        return ValueKind.FUNCTION
    return ValueKind.LITERAL


def has_unresolved(value: object) -> bool:
    """Whether *value* still contains reference or function syntax."""
    if not isinstance(value, str):
        return False
    return bool(_REFERENCE.search(value) or _FUNCTION.search(value))


def expand_aliases(value: str, palette_scope: str = "palette") -> str:
    """Rewrite every palette alias in *value* as a parenthesised reference.

    Examples:
        >>> expand_aliases("$$cyan")
        '$(palette.cyan)'
        >>> expand_aliases("mix($${red}, $$(blue), 50)")
        'mix($(palette.red), $(palette.blue), 50)'
    """

    def _replace(match: re.Match[str]) -> str:
        name = match.group("parens") or match.group("braces") or match.group("bare")
        return f"$({palette_scope}.{name.strip()})"

    return _ALIAS.sub(_replace, value)
