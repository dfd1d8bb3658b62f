# docuflow/documenter/documenter.py

from __future__ import annotations
import json
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jsonschema import validate, ValidationError

from docuflow.config import DEFAULT_MAX_CONTEXT_CHARS
from docuflow.documenter.generator import TextGenerator
from docuflow.documenter.prompt import build_prompt
from docuflow.errors import AIServiceError
from docuflow.utils.logger import get_logger
from docuflow.workflow.schema import DOCUMENTATION_SCHEMA

log = get_logger("documenter")

_FENCE_OPEN = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\r?\n?")
_FENCE_CLOSE = re.compile(r"\r?\n?```$")


@dataclass
class DocumentationRecord:
    summary: str
    tools_used: List[str] = field(default_factory=list)
    credentials_required: List[str] = field(default_factory=list)
    complexity_score: int = 1
    usage_notes: Optional[str] = None
    suggested_filename: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentationRecord":
        return cls(
            summary=data["summary"],
            tools_used=list(data["toolsUsed"]),
            credentials_required=list(data["credentialsRequired"]),
            complexity_score=int(data["complexityScore"]),
            usage_notes=data.get("usageNotes"),
            suggested_filename=data.get("suggestedFilename"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialise with the camelCase keys of the AI contract."""
        return {
            "summary": self.summary,
            "toolsUsed": list(self.tools_used),
            "credentialsRequired": list(self.credentials_required),
            "complexityScore": self.complexity_score,
            "usageNotes": self.usage_notes,
            "suggestedFilename": self.suggested_filename,
        }


def strip_code_fences(text: str) -> str:
    """Remove one optional leading ```lang fence and one trailing ``` fence."""
    s = text.strip()
    if s.startswith("```"):
        s = _FENCE_OPEN.sub("", s, count=1)
        s = _FENCE_CLOSE.sub("", s, count=1)
    return s.strip()


def parse_documentation(text: str) -> DocumentationRecord:
    """
    Parse the service's raw answer into a DocumentationRecord.

    Tolerates a surrounding fenced code block. Anything that is not a JSON
    object with the required, correctly typed fields raises AIServiceError.
    complexityScore is type-checked only, never clamped.
    """
    body = strip_code_fences(text or "")
    try:
        data = json.loads(body)
    except ValueError as e:
        raise AIServiceError(f"response is not valid JSON: {e}") from e

    try:
        validate(instance=data, schema=DOCUMENTATION_SCHEMA)
    except ValidationError as e:
        raise AIServiceError(f"response has an invalid shape: {e.message}") from e

    # 7.0 passes as an integer
    return DocumentationRecord.from_dict(data)


class AIDocumenter:
    """Documents one sanitized workflow with a single text-generation call."""

    def __init__(self, generator: TextGenerator, max_context_chars: int = DEFAULT_MAX_CONTEXT_CHARS):
        self.generator = generator
        self.max_context_chars = max_context_chars

    async def document(self, sanitized_workflow: Dict[str, Any]) -> DocumentationRecord:
        prompt = build_prompt(sanitized_workflow, max_chars=self.max_context_chars)
        log.debug("prompt for %r: %d chars", sanitized_workflow.get("name") or "Untitled", len(prompt))
        try:
            raw = await self.generator.generate(prompt)
        except AIServiceError:
            raise
        except Exception as e:
            raise AIServiceError(f"text generation failed: {e}") from e
        return parse_documentation(raw)
