# Copyright 2025 KTTC AI (https://github.com/kttc-ai)
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Translate command: run text through the zero-tolerance pipeline."""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from puretrans.core.gateway import TranslationGateway
from puretrans.core.models import (
    ContentType,
    Language,
    LegalDomain,
    PureTranslationResult,
    TranslationContext,
    TranslationRequest,
)
from puretrans.utils.config import get_settings
from puretrans.utils.console import console, format_score, print_warning


def load_text(text: str) -> str:
    """Return ``text``, or the contents of the file it names when prefixed with ``@``.

    Raises:
        FileNotFoundError: If the referenced file does not exist
    """
    if not text.startswith("@"):
        return text
    path = Path(text[1:])
    if not path.exists():
        raise FileNotFoundError(f"Text file not found: {text[1:]}")
    return path.read_text(encoding="utf-8")


async def _translate_async(request: TranslationRequest) -> PureTranslationResult:
    gateway = TranslationGateway(get_settings())
    try:
        return await gateway.translate(request)
    finally:
        await gateway.shutdown()


def _show_result(result: PureTranslationResult, verbose: bool) -> None:
    border = "green" if result.is_pure else "red"
    console.print(
        Panel(
            escape(result.translated_text) or "[dim](empty)[/dim]",
            title="Translation",
            border_style=border,
        )
    )

    table = Table(title="Result", show_lines=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Method", result.method.value)
    table.add_row("Purity", format_score(result.purity_score))
    table.add_row("Confidence", f"{result.confidence:.2f}")
    table.add_row("Fallback", "yes" if result.metadata.fallback_used else "no")
    table.add_row("Cache hit", "yes" if result.metadata.cache_hit else "no")
    table.add_row("Time", f"{result.processing_time_ms:.1f} ms")
    if verbose:
        table.add_row("Attempts", str(result.metadata.attempts))
        table.add_row("Methods", ", ".join(m.value for m in result.metadata.methods_tried) or "-")
        for name, value in result.quality_metrics.model_dump(exclude_none=True).items():
            table.add_row(name.replace("_", " ").capitalize(), format_score(value, 85.0))
    console.print(table)

    for warning in result.warnings:
        print_warning(warning)


def translate(
    text: str = typer.Argument(..., help="Text to translate (or file path with @)"),
    source: Language = typer.Option(
        ..., "--source", "-s", help="Source language (ar or fr)", case_sensitive=False
    ),
    target: Language = typer.Option(
        ..., "--target", "-t", help="Target language (ar or fr)", case_sensitive=False
    ),
    content_type: ContentType = typer.Option(
        ContentType.LEGAL_DOCUMENT, "--content-type", "-c", help="Kind of content"
    ),
    domain: LegalDomain | None = typer.Option(None, "--domain", "-d", help="Area of law"),
    output: str | None = typer.Option(None, "--output", "-o", help="Write translation to file"),
    json_output: bool = typer.Option(False, "--json", help="Print the full result as JSON"),
    verbose: bool = typer.Option(False, "--verbose", help="Show attempts and quality metrics"),
) -> None:
    """
    Translate text between Arabic and French.

    The result is either a translation that scored 100 on every purity
    check or clearly marked fallback content. Contaminated output is
    never returned.

    Example:
        puretrans translate "بموجب المادة 5" --source ar --target fr
    """
    try:
        source_text = load_text(text)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    request = TranslationRequest(
        text=source_text,
        source_language=source,
        target_language=target,
        content_type=content_type,
        context=TranslationContext(legal_domain=domain) if domain else None,
    )

    try:
        result = asyncio.run(_translate_async(request))
    except KeyboardInterrupt:
        console.print("\n[yellow]⚠ Interrupted by user[/yellow]")
        raise typer.Exit(code=130) from None

    if json_output:
        typer.echo(result.model_dump_json(indent=2))
    else:
        _show_result(result, verbose)

    if output:
        Path(output).write_text(result.translated_text, encoding="utf-8")
        console.print(f"[dim]Translation saved to: {output}[/dim]")
