# docuflow/workflow/loader.py

import json
from typing import Dict, Any

from jsonschema import validate, ValidationError

from docuflow.errors import ParseError
from docuflow.workflow.schema import WORKFLOW_SCHEMA


def _where(e: ValidationError) -> str:
    path = "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in e.absolute_path)
    return f"${path}"


def validate_workflow(workflow: Any) -> Dict[str, Any]:
    """Check an already-decoded object against WORKFLOW_SCHEMA."""
    try:
        validate(instance=workflow, schema=WORKFLOW_SCHEMA)
    except ValidationError as e:
        raise ParseError(f"not a workflow: {e.message} (at {_where(e)})") from e
    return workflow


def load_workflow(text: str) -> Dict[str, Any]:
    """
    Decode workflow JSON text.

    Raises ParseError when the text is not JSON or does not look like an
    exported workflow (object with a `nodes` list and a `connections` map).
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError) as e:
        raise ParseError(f"invalid JSON: {e}") from e
    return validate_workflow(data)
