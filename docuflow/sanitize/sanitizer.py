# docuflow/sanitize/sanitizer.py

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from docuflow.errors import ScanError
from docuflow.sanitize.patterns import DEFAULT_PATTERNS, SecretPattern
from docuflow.sanitize.scanner import scan


@dataclass(frozen=True)
class SecretWarning:
    """A secret detected (and redacted) in one node's parameters."""
    node_name: str
    node_type: str
    pattern_name: str
    path: str = "$"

    def __str__(self) -> str:
        return f'Potential {self.pattern_name} found in node "{self.node_name}" ({self.node_type}).'


@dataclass
class SanitizationResult:
    workflow: Dict[str, Any]
    warnings: List[SecretWarning] = field(default_factory=list)


def sanitize_workflow(
    workflow: Dict[str, Any],
    patterns: Sequence[SecretPattern] = DEFAULT_PATTERNS,
) -> SanitizationResult:
    """
    Return a redacted deep copy of `workflow` plus the warnings raised.

    Only string leaves under each node's `parameters` are rewritten; node
    count, `connections` and every other field keep their values.
    `credentials` blocks hold references only and are left alone.
    Feeding the redacted workflow back in yields no warnings.
    """
    try:
        clean = copy.deepcopy(workflow)
    except RecursionError as e:
        raise ScanError("workflow is too deeply nested to copy") from e

    warnings: List[SecretWarning] = []
    for node in clean.get("nodes", []) or []:
        if not isinstance(node, dict):
            continue
        params = node.get("parameters")
        if params is None:
            continue

        result = scan(params, patterns)
        node["parameters"] = result.tree
        for m in result.matches:
            warnings.append(SecretWarning(
                node_name=str(node.get("name", "")),
                node_type=str(node.get("type", "")),
                pattern_name=m.pattern,
                path=m.path,
            ))

    return SanitizationResult(workflow=clean, warnings=warnings)
