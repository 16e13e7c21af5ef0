"""
Root Typer application for the wp-export CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="wp-export",
    help="wp-export - export WordPress posts, custom permalinks and authors through wp-cli.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("wp-export")
        except PackageNotFoundError:
            from wpexport import __version__ as v
        typer.echo(f"wp-export {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """wp-export CLI - discover post types, export and merge, list SSH hosts."""


# ── Command registration ─────────────────────────────────────────────────

from wpexport.cli.categories import list_categories  # noqa: E402
from wpexport.cli.hosts import list_ssh_hosts  # noqa: E402
from wpexport.cli.run import run_export  # noqa: E402

app.command("run")(run_export)
app.command("categories")(list_categories)
app.command("hosts")(list_ssh_hosts)
