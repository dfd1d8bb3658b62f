#!/usr/bin/env python3
# docuflow/cli.py

import asyncio
from pathlib import Path
from typing import Optional

import typer

from docuflow.batch.orchestrator import BatchContext, BatchOrchestrator
from docuflow.config import Settings, load_settings
from docuflow.documenter.documenter import AIDocumenter
from docuflow.documenter.generator import OpenAIGenerator
from docuflow.documenter.markdown import render_markdown
from docuflow.errors import DocuflowError
from docuflow.sanitize.sanitizer import sanitize_workflow
from docuflow.storage.local import LocalFolderStorage
from docuflow.utils.io import dumps_pretty, read_text, write_json, write_text
from docuflow.utils.logger import init_logger, level_from_name
from docuflow.workflow.loader import load_workflow

app = typer.Typer(help="docuflow CLI - redact secrets from n8n workflow exports and document them with an LLM")


def _settings(config: Optional[Path], log_dir: Optional[Path], **overrides) -> Settings:
    try:
        s = load_settings(config, log_dir=str(log_dir) if log_dir else None, **overrides)
    except DocuflowError as e:
        raise typer.BadParameter(str(e))
    init_logger(level=level_from_name(s.log_level), log_dir=s.log_dir)
    return s


def _load(input: Path):
    try:
        return load_workflow(read_text(input))
    except DocuflowError as e:
        print(f"[error] {input}: {e}")
        raise typer.Exit(code=1)


@app.command()
def sanitize(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Path to n8n workflow JSON"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the redacted workflow here"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", exists=True, help="YAML settings file"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Also log to a rotating file in this directory"),
):
    """
    Detect and redact secrets in a single workflow file.
    """
    s = _settings(config, log_dir)
    wf = _load(input)
    try:
        result = sanitize_workflow(wf, s.patterns())
    except DocuflowError as e:
        print(f"[error] {input}: {e}")
        raise typer.Exit(code=1)

    if result.warnings:
        print(f"Redacted {len(result.warnings)} potential secret(s):")
        for w in result.warnings:
            print(f"- {w} [{w.path}]")
    else:
        print("No secrets detected.")

    if output is not None:
        write_json(output, result.workflow)
        print(f"[ok] wrote redacted workflow to {output}")


@app.command()
def document(
    input: Path = typer.Option(..., "--input", "-i", exists=True, readable=True, help="Path to n8n workflow JSON"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the Markdown documentation here"),
    model: Optional[str] = typer.Option(None, "--model", help="LLM model (default: DOCUFLOW_MODEL or gpt-4o-mini)"),
    max_context_chars: Optional[int] = typer.Option(None, "--max-context-chars", help="Upper bound of the node context sent to the model"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", exists=True, help="YAML settings file"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Also log to a rotating file in this directory"),
):
    """
    Sanitize and document a single workflow file; prints the documentation record as JSON.
    """
    s = _settings(config, log_dir, model=model, max_context_chars=max_context_chars)
    wf = _load(input)

    async def _run():
        result = sanitize_workflow(wf, s.patterns())
        generator = OpenAIGenerator(s)
        try:
            documenter = AIDocumenter(generator, max_context_chars=s.max_context_chars)
            return result, await documenter.document(result.workflow)
        finally:
            await generator.aclose()

    try:
        result, record = asyncio.run(_run())
    except DocuflowError as e:
        print(f"[error] {input}: {type(e).__name__}: {e}")
        raise typer.Exit(code=1)

    for w in result.warnings:
        print(f"- {w}")
    print(dumps_pretty(record.to_dict()))

    if output is not None:
        write_text(output, render_markdown(record, result.workflow, result.warnings))
        print(f"[ok] wrote documentation to {output}")


@app.command()
def batch(
    source: Path = typer.Option(..., "--source", "-s", exists=True, file_okay=False, help="Folder with workflow JSON exports"),
    dest: Path = typer.Option(..., "--dest", "-d", file_okay=False, help="Folder for redacted JSON and Markdown outputs"),
    model: Optional[str] = typer.Option(None, "--model", help="LLM model (default: DOCUFLOW_MODEL or gpt-4o-mini)"),
    max_context_chars: Optional[int] = typer.Option(None, "--max-context-chars", help="Upper bound of the node context sent to the model"),
    timeout: Optional[float] = typer.Option(None, "--timeout", help="Seconds allowed for each fetch, AI call and upload"),
    report: Optional[Path] = typer.Option(None, "--report", help="Write a per-file outcome CSV to this path"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", exists=True, help="YAML settings file"),
    log_dir: Optional[Path] = typer.Option(None, "--log-dir", help="Also log to a rotating file in this directory"),
):
    """
    Batch process every JSON file of a folder: redact, document, write <name>.json and <name>.md.
    Exits with code 1 when any file failed.
    """
    s = _settings(config, log_dir, model=model, max_context_chars=max_context_chars, stage_timeout=timeout)
    try:
        generator = OpenAIGenerator(s)
    except DocuflowError as e:
        raise typer.BadParameter(str(e))

    orchestrator = BatchOrchestrator(
        LocalFolderStorage(),
        AIDocumenter(generator, max_context_chars=s.max_context_chars),
        patterns=s.patterns(),
    )
    ctx = BatchContext(
        source_folder_id=str(source),
        dest_folder_id=str(dest),
        on_log=print,
        stage_timeout=s.stage_timeout,
    )

    async def _run():
        try:
            return await orchestrator.run(ctx)
        finally:
            await generator.aclose()

    try:
        result = asyncio.run(_run())
    except DocuflowError as e:
        print(f"[error] batch did not start: {e}")
        raise typer.Exit(code=2)

    if report is not None:
        import pandas as pd

        report.parent.mkdir(parents=True, exist_ok=True)
        pd.DataFrame([o.as_row() for o in result.outcomes]).to_csv(report, index=False)
        print(f"[ok] wrote {report}")

    if result.failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
