# docuflow/errors.py
"""
Error taxonomy.

Per-file errors (ParseError, ScanError, AIServiceError, WriteError, FetchError)
are caught by the batch orchestrator at the file boundary and recorded in the
file's outcome. StorageError and ConfigError are raised by collaborators and
settings; they only escape a run when the source listing itself fails or the
configuration is invalid.
"""

from __future__ import annotations


class DocuflowError(Exception):
    """Base class for every error raised by docuflow."""


class ParseError(DocuflowError):
    """Input is not valid workflow JSON."""


class ScanError(DocuflowError):
    """Parameter tree is malformed (e.g. cyclic) and cannot be scanned."""


class AIServiceError(DocuflowError):
    """Text-generation call failed or returned an unusable response."""


class FetchError(DocuflowError):
    """Source file content could not be retrieved."""


class WriteError(DocuflowError):
    """An output artifact could not be written to the destination."""


class StorageError(DocuflowError):
    """Storage collaborator failure (listing, reading or uploading)."""


class ConfigError(DocuflowError):
    """Invalid or incomplete settings."""
