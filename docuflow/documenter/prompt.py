# docuflow/documenter/prompt.py

from __future__ import annotations
import json
from typing import Any, Dict, List

from docuflow.config import DEFAULT_MAX_CONTEXT_CHARS

_SEPARATORS = (",", ":")


def _node_summary(node: Dict[str, Any]) -> Dict[str, Any]:
    # name/type/notes only; parameters never leave the process
    return {"name": node.get("name"), "type": node.get("type"), "notes": node.get("notes")}


def _encode(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False, separators=_SEPARATORS)


def build_context(workflow: Dict[str, Any], max_chars: int = DEFAULT_MAX_CONTEXT_CHARS) -> str:
    """
    Compact JSON summary of the workflow's nodes, at most `max_chars` long
    whenever that is achievable.

    Nodes are dropped from the tail as whole records until the payload fits,
    so the result is always valid JSON. When nodes were dropped the payload
    carries an `omittedNodes` count.
    """
    summaries: List[Dict[str, Any]] = [_node_summary(n) for n in workflow.get("nodes", []) or []]
    encoded = [_encode(s) for s in summaries]

    full = _encode({"nodes": summaries})
    if len(full) <= max_chars:
        return full

    # {"nodes":[a,b,...],"omittedNodes":N}
    keep = len(encoded)
    body = sum(len(e) for e in encoded) + max(keep - 1, 0)
    while keep > 0:
        omitted = len(encoded) - keep
        size = len('{"nodes":[],"omittedNodes":}') + body + len(str(omitted))
        if omitted and size <= max_chars:
            break
        keep -= 1
        body -= len(encoded[keep]) + (1 if keep > 0 else 0)

    return _encode({"nodes": summaries[:keep], "omittedNodes": len(summaries) - keep})


INSTRUCTIONS = """
You are an expert in n8n workflows. Document the workflow described below.

Return a JSON object with EXACTLY these fields:
- "summary": a clear, human-readable description of what this workflow does (2-3 sentences).
- "toolsUsed": a list of strings naming the external services/tools integrated (e.g. "Google Sheets", "Slack", "OpenAI").
- "credentialsRequired": a list of strings naming the credential types needed (e.g. "Slack API", "Google OAuth").
- "complexityScore": an integer from 1 to 10 (1 = simple, 10 = extremely complex).
- "usageNotes": specific warnings or instructions for a user deploying this workflow.
- "suggestedFilename": a concise filename (<50 chars) in the format Service_Action_Hash, without extension.

Output PURE JSON only: no Markdown, no code fences, no explanations before or after the object.
""".strip()


def build_prompt(workflow: Dict[str, Any], max_chars: int = DEFAULT_MAX_CONTEXT_CHARS) -> str:
    """Full instruction text for one workflow; never includes node parameters."""
    name = workflow.get("name") or "Untitled"
    context = build_context(workflow, max_chars=max_chars)
    return (
        f"{INSTRUCTIONS}\n\n"
        f"Workflow Name: {name}\n\n"
        "Workflow Context (JSON structure, nodes in file order):\n"
        f"{context}\n"
    )
