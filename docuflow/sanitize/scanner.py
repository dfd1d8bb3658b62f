# docuflow/sanitize/scanner.py
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Set, Tuple

from docuflow.errors import ScanError
from docuflow.sanitize.patterns import DEFAULT_PATTERNS, SecretPattern, placeholder, placeholder_re

_IDENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class ScanMatch:
    """One detected secret: which pattern, and where in the tree."""
    pattern: str
    path: str


@dataclass
class ScanResult:
    tree: Any
    matches: List[ScanMatch] = field(default_factory=list)


def _child_path(path: str, key: Any) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    key = str(key)
    if _IDENT.match(key):
        return f"{path}.{key}"
    return f"{path}[{key!r}]"


def _redact_segment(pattern: SecretPattern, segment: str, found: List[str]) -> str:
    out = []
    last = 0
    for start, end in pattern.find(segment):
        out.append(segment[last:start])
        out.append(placeholder(pattern.name))
        found.append(pattern.name)
        last = end
    out.append(segment[last:])
    return "".join(out)


def redact_text(
    text: str,
    patterns: Sequence[SecretPattern] = DEFAULT_PATTERNS,
    skip: Optional["re.Pattern[str]"] = None,
) -> Tuple[str, List[str]]:
    """
    Redact every secret in a single string.

    Patterns run in priority order over the text left by the previous ones;
    placeholders written by these same patterns are skipped so a second pass
    finds nothing. Any other bracketed text is scanned like the rest.
    Returns the redacted text and the pattern name of each match, in order.
    """
    if skip is None:
        skip = placeholder_re(patterns)
    found: List[str] = []
    for pattern in patterns:
        pieces = []
        last = 0
        for m in skip.finditer(text):
            pieces.append(_redact_segment(pattern, text[last:m.start()], found))
            pieces.append(m.group(0))
            last = m.end()
        pieces.append(_redact_segment(pattern, text[last:], found))
        text = "".join(pieces)
    return text, found


def _walk(node: Any, path: str, patterns: Sequence[SecretPattern], skip: "re.Pattern[str]",
          matches: List[ScanMatch], active: Set[int]) -> Any:
    if isinstance(node, str):
        redacted, found = redact_text(node, patterns, skip)
        matches.extend(ScanMatch(pattern=name, path=path) for name in found)
        return redacted

    if isinstance(node, (dict, list, tuple)):
        if id(node) in active:
            raise ScanError(f"cyclic reference at {path}")
        active.add(id(node))
        try:
            if isinstance(node, dict):
                return {k: _walk(v, _child_path(path, k), patterns, skip, matches, active) for k, v in node.items()}
            return [_walk(v, _child_path(path, i), patterns, skip, matches, active) for i, v in enumerate(node)]
        finally:
            active.discard(id(node))

    # numbers, booleans, None: never scanned
    return node


def scan(tree: Any, patterns: Sequence[SecretPattern] = DEFAULT_PATTERNS) -> ScanResult:
    """
    Scan every string leaf of a JSON-like tree and redact secrets.

    The input is not modified; the result holds a redacted copy with the same
    shape plus one ScanMatch per detected secret (path like `$.headers[0].value`).
    Raises ScanError on cyclic structures.
    """
    matches: List[ScanMatch] = []
    try:
        redacted = _walk(tree, "$", patterns, placeholder_re(patterns), matches, set())
    except RecursionError as e:
        raise ScanError("parameter tree is too deeply nested") from e
    return ScanResult(tree=redacted, matches=matches)
