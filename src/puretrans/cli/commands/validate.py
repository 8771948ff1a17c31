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

"""Validate command: check the purity and quality of an existing text."""

from __future__ import annotations

import json

import typer
from rich.markup import escape
from rich.table import Table

from puretrans.cli.commands.translate import load_text
from puretrans.core.gateway import TranslationGateway
from puretrans.core.models import Language, LegalDomain
from puretrans.monitoring.quality import PASSING_OVERALL_SCORE
from puretrans.utils.config import get_settings
from puretrans.utils.console import console, format_score, print_error, print_success


def validate(
    text: str = typer.Argument(..., help="Text to validate (or file path with @)"),
    lang: Language = typer.Option(
        ..., "--lang", "-l", help="Expected language of the text", case_sensitive=False
    ),
    domain: LegalDomain | None = typer.Option(None, "--domain", "-d", help="Area of law"),
    json_output: bool = typer.Option(False, "--json", help="Print findings as JSON"),
) -> None:
    """
    Check a text against the zero-tolerance purity rules.

    Exits with code 1 when the text is not perfectly pure.

    Example:
        puretrans validate "Le contrat est nul." --lang fr
    """
    try:
        content = load_text(text)
    except FileNotFoundError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1) from e

    gateway = TranslationGateway(get_settings())
    validation = gateway.validator.validate(content, lang, domain)
    report = gateway.validate_quality(content, lang)

    if json_output:
        payload = {
            "purity": validation.model_dump(mode="json"),
            "quality": report.model_dump(mode="json"),
        }
        typer.echo(json.dumps(payload, ensure_ascii=False, indent=2))
    else:
        scores = Table(title="Purity", show_lines=True)
        scores.add_column("Dimension", style="cyan")
        scores.add_column("Score", justify="right")
        for name, value in validation.score.model_dump().items():
            scores.add_row(name.replace("_", " ").capitalize(), format_score(value))
        scores.add_row("Quality", format_score(report.overall_score, PASSING_OVERALL_SCORE))
        console.print(scores)

        if validation.violations:
            table = Table(title="Violations", show_lines=True)
            table.add_column("Type", style="yellow")
            table.add_column("Span", justify="right")
            table.add_column("Content")
            table.add_column("Severity")
            for violation in validation.violations:
                table.add_row(
                    violation.violation_type.value,
                    f"{violation.start}-{violation.end}",
                    escape(violation.content),
                    violation.severity.value,
                )
            console.print(table)

        for recommendation in report.recommendations:
            console.print(f"[dim]• {escape(recommendation.description)}[/dim]")

        if validation.is_pure:
            print_success("Text is pure")
        else:
            print_error(f"Text is not pure ({len(validation.violations)} violations)")

    if not validation.is_pure:
        raise typer.Exit(code=1)
