# docuflow/sanitize/patterns.py
"""
Secret pattern registry.

A registry is an ordered tuple of SecretPattern variants. Order is priority:
when two patterns could match the same substring, the earlier one wins because
the scanner redacts pattern by pattern and later patterns only see what is left.
The generic high-entropy pattern therefore always sits last.

Detection is heuristic. New detectors are added as new variants (or as extra
regex entries from configuration) without touching the scanner.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Mapping, Tuple

from docuflow.errors import ConfigError


def placeholder(pattern_name: str) -> str:
    """Replacement text for a redacted secret."""
    return f"[REDACTED:{pattern_name}]"


def placeholder_re(patterns: Iterable["SecretPattern"]) -> "re.Pattern[str]":
    """Matches exactly the placeholders the given registry writes, nothing else."""
    names = dict.fromkeys(p.name for p in patterns)
    return re.compile("|".join(re.escape(placeholder(n)) for n in names) or r"(?!)")


@dataclass(frozen=True)
class SecretPattern:
    """Registry entry: a named detector over strings."""

    name: str

    def find(self, text: str) -> Iterator[Tuple[int, int]]:
        """Yield non-overlapping (start, end) spans of secrets in text."""
        raise NotImplementedError

    def matches(self, text: str) -> bool:
        return any(True for _ in self.find(text))


@dataclass(frozen=True)
class RegexSecretPattern(SecretPattern):
    regex: "re.Pattern[str]"

    def find(self, text: str) -> Iterator[Tuple[int, int]]:
        for m in self.regex.finditer(text):
            if m.end() > m.start():
                yield m.span()


OPENAI_KEY = RegexSecretPattern(
    name="OpenAI Key",
    regex=re.compile(r"(?<![A-Za-z0-9])sk-(?:proj-|svcacct-|admin-)?[A-Za-z0-9_-]{20,}"),
)

SLACK_TOKEN = RegexSecretPattern(
    name="Slack Token",
    regex=re.compile(r"xox[baprs]-[0-9]{10,13}-[0-9]{10,13}-[A-Za-z0-9]{24,}"),
)

# 32+ char hex/alphanumeric run not glued to other alphanumerics
GENERIC_KEY = RegexSecretPattern(
    name="Generic Key",
    regex=re.compile(r"(?<![A-Za-z0-9])[A-Za-z0-9]{32,}(?![A-Za-z0-9])"),
)

DEFAULT_PATTERNS: Tuple[SecretPattern, ...] = (OPENAI_KEY, SLACK_TOKEN, GENERIC_KEY)


def build_patterns(extra: Iterable[Mapping[str, Any]] = ()) -> Tuple[SecretPattern, ...]:
    """
    Default registry plus user-configured regex detectors.

    Each extra entry is a mapping with `name` and `regex`. Extras are inserted
    after the specific defaults and before the generic pattern.
    """
    added = []
    for i, entry in enumerate(extra or ()):
        name = entry.get("name") if isinstance(entry, Mapping) else None
        expr = entry.get("regex") if isinstance(entry, Mapping) else None
        if not isinstance(name, str) or not name.strip() or not isinstance(expr, str) or not expr:
            raise ConfigError(f"extra_patterns[{i}] needs a non-empty 'name' and 'regex'")
        try:
            compiled = re.compile(expr)
        except re.error as e:
            raise ConfigError(f"extra_patterns[{i}] ({name}): invalid regex: {e}") from e
        added.append(RegexSecretPattern(name=name.strip(), regex=compiled))

    if not added:
        return DEFAULT_PATTERNS
    *specific, generic = DEFAULT_PATTERNS
    return tuple(specific) + tuple(added) + (generic,)
