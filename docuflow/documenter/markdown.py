# docuflow/documenter/markdown.py

from typing import Any, Dict, Iterable, List

from docuflow.documenter.documenter import DocumentationRecord
from docuflow.utils.graph import execution_order


def _join(items: Iterable[str], empty: str = "None") -> str:
    items = [str(i) for i in items if str(i).strip()]
    return ", ".join(items) if items else empty


def render_markdown(record: DocumentationRecord, workflow: Dict[str, Any], warnings: Iterable[Any] = ()) -> str:
    """
    Markdown document for one workflow.

    `workflow` must be the redacted copy; the Steps section lists nodes in
    execution order derived from its connections.
    """
    types = {n.get("name"): n.get("type", "") for n in workflow.get("nodes", []) or []}

    lines: List[str] = [
        f"# {record.summary}",
        "",
        "## Tools",
        _join(record.tools_used),
        "",
        "## Credentials",
        _join(record.credentials_required),
        "",
        "## Notes",
        record.usage_notes or "No specific notes.",
        "",
        "## Complexity",
        f"{record.complexity_score}/10",
        "",
        "## Steps",
    ]

    order = execution_order(workflow)
    if order:
        lines.extend(f"{i}. {name} ({types.get(name, '')})" for i, name in enumerate(order, start=1))
    else:
        lines.append("No nodes.")

    warnings = list(warnings)
    if warnings:
        lines += ["", "## Redactions"]
        lines.extend(f"- {w}" for w in warnings)

    return "\n".join(lines) + "\n"
