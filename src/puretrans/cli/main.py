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

"""Main CLI application entry point for puretrans.

All commands are organized in separate modules under
`puretrans.cli.commands`.
"""

from __future__ import annotations

import logging

import typer

from puretrans import __version__
from puretrans.cli.commands import config, health, terms_app, translate, validate
from puretrans.utils.config import get_settings
from puretrans.utils.console import console

app = typer.Typer(
    name="puretrans",
    help="puretrans - zero-tolerance Arabic/French legal translation\n\n"
    "Every answer is either perfectly pure or clearly marked fallback content.",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

app.command()(translate)
app.command()(validate)
app.command()(health)
app.command()(config)

app.add_typer(terms_app, name="terms")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"puretrans version: [bold cyan]{__version__}[/bold cyan]")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(  # noqa: ARG001 - Used by Typer callback
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
) -> None:
    """
    puretrans - zero-tolerance Arabic/French legal translation.
    """
    log_level = logging.DEBUG if debug else get_settings().log_level
    logging.basicConfig(level=log_level, format="%(message)s", force=True)


if __name__ == "__main__":
    app()
