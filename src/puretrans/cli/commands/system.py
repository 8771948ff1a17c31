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

"""System commands: health check and effective configuration."""

from __future__ import annotations

import asyncio
from typing import Any

import typer
from rich.table import Table

from puretrans.core.gateway import TranslationGateway
from puretrans.core.models import Language, TranslationRequest
from puretrans.monitoring.metrics import HealthStatus, SystemHealth
from puretrans.utils.config import get_settings
from puretrans.utils.console import console, format_score, print_info

# Sample requests used by ``health --sample``
SAMPLE_REQUESTS: tuple[tuple[str, Language, Language], ...] = (
    ("بموجب المادة 5 من القانون المدني", Language.ARABIC, Language.FRENCH),
    ("Le tribunal décide en vertu de l'article 12.", Language.FRENCH, Language.ARABIC),
)

_STATUS_STYLES = {
    HealthStatus.HEALTHY: "green",
    HealthStatus.WARNING: "yellow",
    HealthStatus.CRITICAL: "red",
}


async def _translate_samples(gateway: TranslationGateway) -> None:
    requests = [
        TranslationRequest(text=text, source_language=source, target_language=target)
        for text, source, target in SAMPLE_REQUESTS
    ]
    try:
        results = await gateway.translate_batch(requests)
    finally:
        await gateway.shutdown()
    for request, result in zip(requests, results):
        print_info(
            f"{request.source_language.value} → {request.target_language.value}: "
            f"{result.method.value}, purity {result.purity_score:.2f}"
        )


def _describe_threshold(threshold: dict[str, Any]) -> str:
    bounds = []
    if threshold.get("min_value") is not None:
        bounds.append(f">= {threshold['min_value']:g}")
    if threshold.get("max_value") is not None:
        bounds.append(f"<= {threshold['max_value']:g}")
    state = "" if threshold.get("enabled", True) else " (disabled)"
    return f"{threshold['metric']} {' '.join(bounds)}{state}"


def _show_health(health: SystemHealth) -> None:
    style = _STATUS_STYLES[health.status]
    console.print(f"Status: [bold {style}]{health.status.value.upper()}[/bold {style}]")

    metrics = health.metrics
    table = Table(title="Pipeline Metrics (24h)", show_lines=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Translations", str(metrics.total_translations))
    table.add_row("Purity rate", format_score(metrics.purity_rate, 95.0))
    table.add_row("Average purity", format_score(metrics.average_purity_score))
    table.add_row("Average quality", format_score(metrics.average_quality_score, 85.0))
    table.add_row("Failure rate", f"{metrics.failure_rate:.2f}%")
    table.add_row("Fallback rate", f"{metrics.fallback_rate:.2f}%")
    table.add_row("Cache hit rate", f"{metrics.cache_hit_rate:.2f}%")
    table.add_row("Average time", f"{metrics.average_processing_time_ms:.1f} ms")
    console.print(table)

    for issue in health.issues:
        console.print(f"[{style}]• {issue}[/{style}]")


def health(
    sample: bool = typer.Option(
        False, "--sample", "-s", help="Translate sample texts before reporting"
    ),
) -> None:
    """
    Report pipeline health.

    With --sample, sample Arabic and French texts are translated first so
    the report reflects a live run. Exits with code 1 when CRITICAL.

    Example:
        puretrans health --sample
    """
    gateway = TranslationGateway(get_settings())
    if sample:
        asyncio.run(_translate_samples(gateway))

    status = gateway.get_system_health()
    _show_health(status)
    if status.status is HealthStatus.CRITICAL:
        raise typer.Exit(code=1)


def config() -> None:
    """
    Show the effective pipeline configuration.

    Values come from defaults, PURETRANS_* environment variables and .env.
    """
    settings = get_settings()
    table = Table(title="Configuration", show_lines=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in settings.model_dump(mode="json").items():
        if isinstance(value, dict):
            value = ", ".join(f"{k}={v}" for k, v in value.items())
        elif isinstance(value, list):
            value = ", ".join(
                _describe_threshold(v) if isinstance(v, dict) else str(v) for v in value
            ) or "-"
        table.add_row(name, str(value))
    console.print(table)
