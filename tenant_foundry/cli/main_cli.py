# tenant_foundry/cli/main_cli.py
import logging

import typer
from . import admin_cli
from ..settings import settings

app = typer.Typer(
    name="tenant-foundry",
    help="Tenant Foundry Command Line Interface.",
    no_args_is_help=True
)

app.add_typer(admin_cli.app, name="admin")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show INFO level logs.")
):
    """
    Tenant Foundry main CLI application.
    Use 'tenant-foundry admin --help' for admin commands.
    """
    if settings.debug_mode:
        level = logging.DEBUG
    else:
        level = logging.INFO if verbose else logging.WARNING
    logging.getLogger().setLevel(level)


def cli_entry_point():
    """Entry point function for console script registration in pyproject.toml"""
    app()


if __name__ == "__main__":
    cli_entry_point()
