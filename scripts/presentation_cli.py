#!/usr/bin/env python3
"""Command line utilities for inspecting stored presentations and their slides."""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any

sys.path.append(".")

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from scripts._console_utils import STATUS_STYLES, get_console, status_label
from slidesmith.configs.db import dispose_engine
from slidesmith.core.models import PRESENTATION_STATUSES
from slidesmith.repository.presentation import (
    get_presentation,
    list_presentations,
    list_slides,
)

console = get_console()


def _outline_title(presentation: dict[str, Any]) -> str:
    outline = presentation.get("outline")
    if isinstance(outline, dict):
        return str(outline.get("title") or "-")
    return "-"


async def cmd_list(args: argparse.Namespace) -> None:
    result = await list_presentations(
        limit=args.limit, status=args.status, user_id=args.user_id
    )
    presentations = result["presentations"]
    if args.json:
        console.print_json(data=result)
        return
    if not presentations:
        console.print("[bold yellow]No presentations found.[/]")
        return
    table = Table(
        title=f"{len(presentations)} of {result['total']} presentation(s)",
        header_style="bold cyan",
    )
    table.add_column("ID", style="bold white")
    table.add_column("Status")
    table.add_column("Title")
    table.add_column("Created")
    table.add_column("User")
    table.add_column("PDF", overflow="fold")
    for item in presentations:
        status = item.get("status") or "-"
        table.add_row(
            str(item["id"]),
            Text(status, style=STATUS_STYLES.get(status, "white")),
            _outline_title(item),
            str(item.get("created_at") or "-"),
            str(item.get("user_id") or "-"),
            str(item.get("pdf_url") or ""),
        )
    console.print(table)


async def cmd_show(args: argparse.Namespace) -> None:
    presentation = await get_presentation(args.presentation_id)
    if not presentation:
        console.print(f"[bold red]Presentation {args.presentation_id} not found.[/]")
        sys.exit(1)
    slides = await list_slides(args.presentation_id)
    if args.json:
        console.print_json(data={**presentation, "slides": slides})
        return

    status = presentation.get("status") or "-"
    header = Text()
    header.append("Title: ", style="bold cyan")
    header.append(f"{_outline_title(presentation)}\n")
    header.append("Status: ", style="bold cyan")
    header.append_text(status_label(status))
    header.append("\nPDF: ", style="bold cyan")
    header.append(str(presentation.get("pdf_url") or "-"))
    console.print(
        Panel.fit(
            header,
            title=f"Presentation {args.presentation_id}",
            border_style="cyan",
        )
    )

    table = Table(header_style="bold cyan")
    table.add_column("#", justify="right")
    table.add_column("Description", overflow="fold")
    table.add_column("Image", overflow="fold")
    for slide in slides:
        table.add_row(
            str(slide["slide_number"]),
            str(slide.get("description") or ""),
            str(slide.get("image_url") or "-"),
        )
    console.print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Inspect presentations stored in the database."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="List presentations")
    list_parser.add_argument("--status", choices=PRESENTATION_STATUSES)
    list_parser.add_argument("--user-id")
    list_parser.add_argument("--limit", type=int, default=20)
    list_parser.add_argument("--json", action="store_true", help="Print raw JSON")
    list_parser.set_defaults(func=cmd_list)

    show_parser = subparsers.add_parser("show", help="Show one presentation")
    show_parser.add_argument("presentation_id")
    show_parser.add_argument("--json", action="store_true", help="Print raw JSON")
    show_parser.set_defaults(func=cmd_show)
    return parser


async def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    try:
        await args.func(args)
    finally:
        await dispose_engine()


if __name__ == "__main__":
    asyncio.run(main())
