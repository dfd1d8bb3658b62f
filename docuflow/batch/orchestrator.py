# docuflow/batch/orchestrator.py

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional, Sequence, Type

from docuflow.documenter.documenter import AIDocumenter, DocumentationRecord
from docuflow.documenter.markdown import render_markdown
from docuflow.errors import (
    AIServiceError,
    DocuflowError,
    FetchError,
    ParseError,
    ScanError,
    WriteError,
)
from docuflow.naming import OutputNames, name_outputs
from docuflow.sanitize.patterns import DEFAULT_PATTERNS, SecretPattern
from docuflow.sanitize.sanitizer import SecretWarning, sanitize_workflow
from docuflow.storage.base import JSON_MIME, MARKDOWN_MIME, SourceFile, StorageClient
from docuflow.utils.io import dumps_pretty
from docuflow.utils.logger import get_logger
from docuflow.workflow.loader import load_workflow

log = get_logger("batch")


class FileStage(str, Enum):
    PENDING = "Pending"
    FETCHING = "Fetching"
    PARSING = "Parsing"
    SANITIZING = "Sanitizing"
    DOCUMENTING = "Documenting"
    WRITING = "Writing"
    DONE = "Done"
    FAILED = "Failed"


@dataclass
class FileOutcome:
    file: SourceFile
    stage: FileStage = FileStage.PENDING
    failed_stage: Optional[FileStage] = None
    error: Optional[str] = None      # error class name, e.g. "ParseError"
    reason: Optional[str] = None
    json_name: Optional[str] = None
    md_name: Optional[str] = None
    warnings: List[SecretWarning] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.stage is FileStage.DONE

    def as_row(self) -> Dict[str, Any]:
        """Flat record for tabular reports."""
        return {
            "file": self.file.name,
            "status": self.stage.value,
            "failed_stage": self.failed_stage.value if self.failed_stage else "",
            "error": self.error or "",
            "reason": self.reason or "",
            "json_name": self.json_name or "",
            "md_name": self.md_name or "",
            "secrets_redacted": len(self.warnings),
        }


@dataclass
class BatchContext:
    """Everything one run needs; read-only for the duration of the run."""
    source_folder_id: str
    dest_folder_id: str
    mime_filter: str = JSON_MIME
    on_log: Optional[Callable[[str], None]] = None
    cancel_event: Optional[asyncio.Event] = None
    stage_timeout: Optional[float] = None


@dataclass
class BatchResult:
    log: List[str] = field(default_factory=list)
    outcomes: List[FileOutcome] = field(default_factory=list)
    cancelled: bool = False

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.stage is FileStage.FAILED)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)


# error raised for a failure at each stage
STAGE_ERRORS: Dict[FileStage, Type[DocuflowError]] = {
    FileStage.FETCHING: FetchError,
    FileStage.PARSING: ParseError,
    FileStage.SANITIZING: ScanError,
    FileStage.DOCUMENTING: AIServiceError,
    FileStage.WRITING: WriteError,
}


class _RunLog:
    """Append-only run log; every line is pushed to the caller immediately."""

    def __init__(self, lines: List[str], sink: Optional[Callable[[str], None]]):
        self._lines = lines
        self._sink = sink

    def append(self, line: str) -> None:
        self._lines.append(line)
        log.debug("run log: %s", line)
        if self._sink is not None:
            self._sink(line)


class BatchOrchestrator:
    """
    Drives every source file through fetch, parse, sanitize, document and
    write, one file at a time. A failure ends that file's pipeline only.
    """

    def __init__(
        self,
        storage: StorageClient,
        documenter: AIDocumenter,
        patterns: Sequence[SecretPattern] = DEFAULT_PATTERNS,
    ):
        self.storage = storage
        self.documenter = documenter
        self.patterns = patterns

    async def run(self, context: BatchContext) -> BatchResult:
        """
        Process every file of the source folder.

        Raises only when the source listing cannot be obtained; per-file
        failures are recorded in the result and the log.
        """
        result = BatchResult()
        run_log = _RunLog(result.log, context.on_log)

        run_log.append("Starting batch process...")
        try:
            files = await self.storage.list_files(context.source_folder_id, context.mime_filter)
        except Exception as e:
            log.error("cannot list source folder %s: %s", context.source_folder_id, e)
            raise
        run_log.append(f"Found {len(files)} JSON files.")

        for i, f in enumerate(files):
            if context.cancel_event is not None and context.cancel_event.is_set():
                result.cancelled = True
                run_log.append(f"Batch cancelled: {len(files) - i} file(s) not processed.")
                break

            run_log.append(f"Processing: {f.name}...")
            outcome = await self.process_file(f, context)
            result.outcomes.append(outcome)
            if outcome.ok:
                run_log.append(f"Saved: {outcome.json_name} & {outcome.md_name}")
            else:
                run_log.append(f"Error on {f.name}: {outcome.error}")

        failed = result.failed
        run_log.append("Batch processing complete." + (f" ({failed} failed)" if failed else ""))
        return result

    async def process_file(self, f: SourceFile, context: BatchContext) -> FileOutcome:
        """Run one file through the state machine; never raises DocuflowError."""
        outcome = FileOutcome(file=f)
        try:
            with self._stage(outcome, FileStage.FETCHING):
                content = await self._bounded(self.storage.fetch_content(f.id), context)

            with self._stage(outcome, FileStage.PARSING):
                workflow = load_workflow(content)

            with self._stage(outcome, FileStage.SANITIZING):
                sanitized = sanitize_workflow(workflow, self.patterns)
                outcome.warnings = list(sanitized.warnings)
                for w in sanitized.warnings:
                    log.warning("%s: %s (redacted at %s)", f.name, w, w.path)

            with self._stage(outcome, FileStage.DOCUMENTING):
                record = await self._bounded(self.documenter.document(sanitized.workflow), context)

            with self._stage(outcome, FileStage.WRITING):
                names = await self._write(record, sanitized.workflow, sanitized.warnings, f, context)
                outcome.json_name, outcome.md_name = names.json_name, names.md_name

        except DocuflowError as e:
            outcome.failed_stage = outcome.stage
            outcome.stage = FileStage.FAILED
            outcome.error = type(e).__name__
            outcome.reason = str(e)
            log.error("%s failed at %s: %s: %s", f.name, outcome.failed_stage.value, outcome.error, e)
            return outcome

        outcome.stage = FileStage.DONE
        log.debug("%s: %s", f.name, outcome.stage.value)
        return outcome

    async def _write(
        self,
        record: DocumentationRecord,
        workflow: Dict[str, Any],
        warnings: Sequence[SecretWarning],
        f: SourceFile,
        context: BatchContext,
    ) -> OutputNames:
        names = name_outputs(record, f.name)
        md = render_markdown(record, workflow, warnings)
        await self._bounded(self.storage.upload_file(
            names.json_name, dumps_pretty(workflow), context.dest_folder_id, JSON_MIME,
        ), context)
        await self._bounded(self.storage.upload_file(
            names.md_name, md, context.dest_folder_id, MARKDOWN_MIME,
        ), context)
        return names

    @staticmethod
    async def _bounded(aw: Awaitable[Any], context: BatchContext) -> Any:
        if context.stage_timeout is None:
            return await aw
        try:
            return await asyncio.wait_for(aw, timeout=context.stage_timeout)
        except asyncio.TimeoutError as e:
            raise TimeoutError(f"no answer within {context.stage_timeout:g}s") from e

    @staticmethod
    @contextmanager
    def _stage(outcome: FileOutcome, stage: FileStage) -> Iterator[None]:
        """Enter `stage`; any failure inside surfaces as that stage's error class."""
        outcome.stage = stage
        log.debug("%s: %s", outcome.file.name, stage.value)
        error_cls = STAGE_ERRORS[stage]
        try:
            yield
        except error_cls:
            raise
        except Exception as e:
            raise error_cls(f"{stage.value} failed: {e}") from e
