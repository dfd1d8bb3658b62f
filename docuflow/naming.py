# docuflow/naming.py

import os
import re
from dataclasses import dataclass
from typing import Optional

from docuflow.documenter.documenter import DocumentationRecord

_OUTPUT_SUFFIX = re.compile(r"\.(json|md)$", re.IGNORECASE)
_SEPARATORS = re.compile(r"[\\/]")


@dataclass(frozen=True)
class OutputNames:
    json_name: str
    md_name: str


def _strip_output_suffixes(name: str) -> str:
    prev = None
    while prev != name:
        prev = name
        name = _OUTPUT_SUFFIX.sub("", name).strip()
    return name


def base_name(suggested: Optional[str], source_file_name: str) -> str:
    """
    AI-suggested name without trailing .json/.md, or the source file name
    without its extension when no usable suggestion exists.
    """
    if isinstance(suggested, str):
        base = _SEPARATORS.sub("_", _strip_output_suffixes(suggested.strip()))
        if base:
            return base
    return os.path.splitext(source_file_name)[0]


def name_outputs(record: DocumentationRecord, source_file_name: str) -> OutputNames:
    base = base_name(record.suggested_filename, source_file_name)
    return OutputNames(json_name=f"{base}.json", md_name=f"{base}.md")
