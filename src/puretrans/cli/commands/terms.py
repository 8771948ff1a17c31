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

"""Legal terminology CLI commands."""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.table import Table

from puretrans.core.models import Language, LegalDomain
from puretrans.terminology.manager import LegalTerminologyManager
from puretrans.utils.console import console, print_success

terms_app = typer.Typer(
    name="terms",
    help="Search and inspect the legal dictionaries",
    no_args_is_help=True,
)


@terms_app.command("search")
def search_terms(
    query: str = typer.Argument(..., help="Text to search for in terms and definitions"),
    lang: Language | None = typer.Option(
        None, "--lang", "-l", help="Only search this language", case_sensitive=False
    ),
    domain: LegalDomain | None = typer.Option(None, "--domain", "-d", help="Area of law"),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum results to show", min=1),
) -> None:
    """Search dictionary entries.

    Example:
        puretrans terms search contrat
    """
    manager = LegalTerminologyManager()
    results = manager.search_terms(query, language=lang, domain=domain)

    if not results:
        console.print(f"[yellow]No terms found for '{query}'[/yellow]")
        return

    table = Table(title=f"Terms matching '{query}'", show_lines=True)
    table.add_column("French", style="cyan")
    table.add_column("Arabic", style="green")
    table.add_column("Domain", style="magenta")
    table.add_column("Confidence", style="yellow", justify="right")
    table.add_column("Definition", style="dim")

    for entry in results[:limit]:
        table.add_row(
            entry.french,
            entry.arabic,
            entry.domain.value,
            f"{entry.confidence:.2f}",
            entry.definition or "-",
        )

    console.print(table)
    if len(results) > limit:
        console.print(f"\n[dim]Showing {limit} of {len(results)} results[/dim]")


@terms_app.command("lookup")
def lookup_term(
    term: str = typer.Argument(..., help="Term to translate"),
    source: Language = typer.Option(
        ..., "--source", "-s", help="Language of the term", case_sensitive=False
    ),
    domain: LegalDomain | None = typer.Option(None, "--domain", "-d", help="Area of law"),
) -> None:
    """Translate a single legal term.

    Example:
        puretrans terms lookup عقد --source ar
    """
    manager = LegalTerminologyManager()
    hit = manager.lookup(term, source, source.other, domain)
    if hit is None:
        console.print(f"[red]Error: no translation for '{term}'[/red]")
        raise typer.Exit(code=1)

    console.print(f"[bold]{hit.source_term}[/bold] → [bold cyan]{hit.target_term}[/bold cyan]")
    console.print(f"Domain: {hit.domain.value}  Confidence: {hit.confidence:.2f}")
    if hit.is_suggestion:
        console.print("[yellow]⚠ Below the confidence threshold, suggestion only[/yellow]")
    if hit.definition:
        console.print(f"[dim]{hit.definition}[/dim]")


@terms_app.command("stats")
def dictionary_stats() -> None:
    """Show per-domain dictionary statistics."""
    stats = LegalTerminologyManager().get_dictionary_stats()

    table = Table(title="Legal Dictionaries", show_lines=True)
    table.add_column("Domain", style="cyan")
    table.add_column("Terms", style="yellow", justify="right")
    table.add_column("Version")
    table.add_column("Avg. confidence", justify="right")
    table.add_column("Authority", style="dim")

    for domain, info in stats["domains"].items():
        table.add_row(
            domain,
            str(info["terms"]),
            info["version"],
            f"{info['average_confidence']:.2f}",
            info["authority"],
        )

    console.print(table)
    console.print(f"\n[dim]Total: {stats['total_terms']} terms[/dim]")


@terms_app.command("export")
def export_dictionary(
    domain: LegalDomain = typer.Argument(..., help="Domain to export"),
    output: Path = typer.Option(..., "--output", "-o", help="Output JSON file"),
) -> None:
    """Export one domain dictionary as JSON."""
    manager = LegalTerminologyManager()
    try:
        data = manager.export_dictionary(domain)
    except KeyError as e:
        console.print(f"[red]Error: no dictionary for domain '{domain.value}'[/red]")
        raise typer.Exit(code=1) from e

    output.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    print_success(f"Exported {len(data['entries'])} terms to {output}")
