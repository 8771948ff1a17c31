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

"""Rich console helpers shared by the CLI."""

from __future__ import annotations

from rich.console import Console

console = Console()


def print_success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def print_error(message: str) -> None:
    console.print(f"[red]✗[/red] {message}")


def print_warning(message: str) -> None:
    console.print(f"[yellow]⚠[/yellow] {message}")


def print_info(message: str) -> None:
    console.print(f"[cyan]ℹ[/cyan] {message}")


def score_style(score: float, passing: float = 100.0) -> str:
    """Pick a rich style for a 0-100 score.

    Args:
        score: Score to style
        passing: Score at or above which the value is shown as passing

    Returns:
        ``green`` when passing, ``yellow`` within 20 points, ``red`` otherwise

    Example:
        >>> score_style(100.0)
        'green'
        >>> score_style(45.0)
        'red'
    """
    if score >= passing:
        return "green"
    if score >= passing - 20:
        return "yellow"
    return "red"


def format_score(score: float, passing: float = 100.0) -> str:
    """Render a score with rich markup colored by :func:`score_style`."""
    style = score_style(score, passing)
    return f"[{style}]{score:.2f}[/{style}]"


__all__ = [
    "console",
    "format_score",
    "print_error",
    "print_info",
    "print_success",
    "print_warning",
    "score_style",
]
