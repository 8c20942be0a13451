#!/usr/bin/env python3
"""
CLI tool for running SlideSmith pipelines locally.

This tool provides command-line interface for:
- Creating a presentation from a transcript (or a document)
- Re-rendering the PDF of a stored presentation
- Extracting text from a document
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Any

# Add the current directory to the path so we can import the scripts helpers
sys.path.append(".")

from pydantic import ValidationError
from rich.live import Live
from rich.table import Table

from scripts._console_utils import get_console, get_err_console, status_label
from slidesmith.configs.config import config
from slidesmith.configs.db import dispose_engine
from slidesmith.configs.logging_config import setup_logging
from slidesmith.core.exceptions import SlideSmithError, UserInputError
from slidesmith.document import extract_document_text
from slidesmith.pipeline import PresentationPipeline
from slidesmith.remote.client import EdgeFunctionClient
from slidesmith.repository.presentation import SqlPresentationStore
from slidesmith.schemas.presentation import (
    PresentationRequest,
    normalize_selected_slides,
)

console = get_console()
err_console = get_err_console()


def build_run_table(snapshot: dict[str, Any], max_logs: int = 8) -> Table:
    """Render the step list of a run snapshot plus its latest log lines."""
    table = Table(title=f"Run {snapshot.get('run_id') or '-'}", expand=True)
    table.add_column("Paso", style="bold")
    table.add_column("Estado")
    table.add_column("Detalle", overflow="fold")

    progress = snapshot.get("slide_progress") or {}
    for step in snapshot.get("steps", []):
        status = step.get("status", "pending")
        detail = step.get("error_message") or step.get("description") or ""
        if step.get("id") == "images" and progress.get("total"):
            detail = f"{progress.get('completed', 0)}/{progress['total']} diapositivas"
        table.add_row(
            step.get("label", step.get("id", "")),
            status_label(status),
            detail,
        )

    logs = snapshot.get("logs", [])[-max_logs:]
    if logs:
        table.caption = "\n".join(logs)
        table.caption_justify = "left"
    return table


async def _run_with_live_table(pipeline: PresentationPipeline, coro: Any) -> bool:
    with Live(
        build_run_table(pipeline.state.snapshot()),
        console=console,
        refresh_per_second=4,
    ) as live:
        unsubscribe = pipeline.state_manager.subscribe(
            lambda snapshot: live.update(build_run_table(snapshot))
        )
        try:
            return bool(await coro)
        finally:
            unsubscribe()


async def create_presentation(args: argparse.Namespace) -> int:
    """Run the full pipeline for a transcript file or a document."""
    async with EdgeFunctionClient() as client:
        if args.document:
            path = Path(args.document)
            transcript = await extract_document_text(
                client, path.name, path.read_bytes()
            )
        else:
            transcript = Path(args.transcript).read_text(encoding="utf-8")

        try:
            request = PresentationRequest(
                transcript=transcript,
                system_prompt=args.system_prompt,
                user_prompt=args.user_prompt,
                style_prompt=args.style_prompt,
                user_id=args.user_id,
            )
        except ValidationError as e:
            raise UserInputError(e.errors()[0]["msg"]) from e

        pipeline = PresentationPipeline(client, SqlPresentationStore())
        ok = await _run_with_live_table(pipeline, pipeline.create_presentation(request))

    if ok:
        console.print(f"[bold green]PDF:[/] {pipeline.state.pdf_url}")
        return 0
    if pipeline.last_artifact_id:
        console.print(
            f"Presentación guardada como {pipeline.last_artifact_id}; "
            f"usa 'retry-render {pipeline.last_artifact_id}' para reintentar el PDF."
        )
    return 1


async def retry_render(args: argparse.Namespace) -> int:
    """Re-render the PDF of a stored presentation."""
    async with EdgeFunctionClient() as client:
        pipeline = PresentationPipeline(client, SqlPresentationStore())
        ok = await _run_with_live_table(
            pipeline,
            pipeline.retry_pdf_only(
                args.presentation_id, normalize_selected_slides(args.slides)
            ),
        )
    if ok:
        console.print(f"[bold green]PDF:[/] {pipeline.state.pdf_url}")
        return 0
    return 1


async def extract(args: argparse.Namespace) -> int:
    """Print (or save) the text extracted from a document."""
    path = Path(args.path)
    async with EdgeFunctionClient() as client:
        text = await extract_document_text(client, path.name, path.read_bytes())
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        console.print(f"{len(text)} caracteres guardados en {args.output}")
    else:
        console.print(text, markup=False, highlight=False)
    return 0


async def main() -> int:
    """Main entry point for the CLI tool."""
    parser = argparse.ArgumentParser(
        description="SlideSmith Presentation CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cli.py create --transcript meeting.txt --style-prompt "Minimalista"
  cli.py create --document minutes.docx
  cli.py retry-render <presentation_id> --slides 1 2 5
  cli.py extract minutes.pdf --output minutes.txt
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    create_parser = subparsers.add_parser("create", help="Create a presentation")
    source = create_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--transcript", help="Path to a UTF-8 transcript file")
    source.add_argument("--document", help="Path to a .txt/.doc/.docx/.pdf file")
    create_parser.add_argument("--system-prompt", default="")
    create_parser.add_argument("--user-prompt", default="")
    create_parser.add_argument("--style-prompt", default="")
    create_parser.add_argument("--user-id", default=None)

    retry_parser = subparsers.add_parser(
        "retry-render", help="Re-render the PDF of a stored presentation"
    )
    retry_parser.add_argument("presentation_id", help="Presentation ID to render")
    retry_parser.add_argument(
        "--slides", type=int, nargs="+", help="Slide numbers to include"
    )

    extract_parser = subparsers.add_parser(
        "extract", help="Extract text from a document"
    )
    extract_parser.add_argument("path", help="Document to extract")
    extract_parser.add_argument("--output", help="Write the text to this file")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 0

    setup_logging(
        config.log_level,
        config.log_file,
        enable_file_logging=config.log_file is not None,
        component="cli",
    )

    handlers = {
        "create": create_presentation,
        "retry-render": retry_render,
        "extract": extract,
    }
    try:
        return await handlers[args.command](args)
    except UserInputError as e:
        err_console.print(f"[bold red]Error:[/] {e}")
        return 2
    except (SlideSmithError, OSError) as e:
        err_console.print(f"[bold red]Error:[/] {e}")
        return 1
    finally:
        await dispose_engine()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
