# tenant_foundry/cli/admin_cli.py
import typer
from . import tenant_cli
from ..utils.security import generate_fernet_key

app = typer.Typer(
    name="admin",
    help="Tenant Foundry administrative commands.",
    no_args_is_help=True
)

app.add_typer(tenant_cli.app, name="tenant")


@app.callback()
def admin_callback():
    """
    Tenant Foundry admin CLI entry point callback.
    """
    pass


@app.command("generate-key")
def generate_key():
    """Generate a Fernet key for encrypting tenant connection strings."""
    typer.echo(generate_fernet_key())
    typer.secho(
        "Add this to your .env file as TENANT_FOUNDRY_CONNECTION_STRING_ENCRYPTION_KEY",
        fg=typer.colors.YELLOW,
        err=True
    )


if __name__ == "__main__":
    app()
