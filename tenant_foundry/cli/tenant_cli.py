# tenant_foundry/cli/tenant_cli.py
import typer
from datetime import datetime
from typing import Optional
from typing_extensions import Annotated
from pydantic import ValidationError

from .utils_cli import run_service_call
from ..tenants.models import CreateTenantRequest

app = typer.Typer(
    name="tenant",
    help="Manage tenants: registration, provisioning, activation and subscriptions.",
    no_args_is_help=True
)


@app.command("create")
def create_tenant(
    tenant_id: Annotated[
        str,
        typer.Option("--id", prompt="Tenant ID (e.g., acme)", help="Unique identifier for the tenant.")
    ],
    name: Annotated[
        str,
        typer.Option(prompt="Tenant Name", help="Display name for the tenant.")
    ],
    admin_email: Annotated[
        str,
        typer.Option("--admin-email", prompt="Admin email", help="Email of the tenant administrator.")
    ],
    connection_string: Annotated[
        Optional[str],
        typer.Option(
            "--connection-string",
            help="Dedicated database, e.g. 'Data Source=acme.sqlite3'. Omit to use the shared database."
        )
    ] = None,
    issuer: Annotated[
        Optional[str],
        typer.Option(help="External identity provider hint.")
    ] = None,
):
    """Register a tenant and provision its database. The tenant starts inactive."""
    try:
        request = CreateTenantRequest(
            id=tenant_id,
            name=name,
            connection_string=connection_string,
            admin_email=admin_email,
            issuer=issuer,
        )
    except ValidationError as e:
        problems = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors())
        typer.secho(f"Error: invalid tenant request. {problems}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    run_service_call(lambda service: service.create(request))


@app.command("get")
def get_tenant(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to retrieve.")]
):
    """Get details for a specific tenant."""
    run_service_call(lambda service: service.get_by_id(tenant_id))


@app.command("list")
def list_tenants():
    """List all tenants. Connection strings are shown with credentials hidden."""
    run_service_call(lambda service: service.list_all())


@app.command("exists")
def tenant_exists(
    tenant_id: Annotated[Optional[str], typer.Option("--id", help="Check by tenant ID.")] = None,
    name: Annotated[Optional[str], typer.Option("--name", help="Check by tenant name.")] = None,
):
    """Check whether a tenant with the given ID or name is registered."""
    if (tenant_id is None) == (name is None):
        typer.secho("Error: pass exactly one of --id or --name.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    if tenant_id is not None:
        run_service_call(lambda service: service.exists_with_id(tenant_id))
    else:
        run_service_call(lambda service: service.exists_with_name(name))


@app.command("activate")
def activate_tenant(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to activate.")]
):
    """Activate an inactive tenant."""
    run_service_call(lambda service: service.activate(tenant_id))


@app.command("deactivate")
def deactivate_tenant(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant to deactivate.")]
):
    """Deactivate an active tenant."""
    run_service_call(lambda service: service.deactivate(tenant_id))


@app.command("extend")
def extend_subscription(
    tenant_id: Annotated[str, typer.Argument(help="The ID of the tenant.")],
    valid_until: Annotated[
        datetime,
        typer.Argument(help="New expiry date, e.g. 2027-01-31 or 2027-01-31T00:00:00.")
    ],
):
    """Set the subscription expiry date of a tenant."""
    run_service_call(lambda service: service.update_subscription(tenant_id, valid_until))


if __name__ == "__main__":
    app()
