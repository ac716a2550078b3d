# tenant_foundry/cli/utils_cli.py
import asyncio
import json
from typing import Any, Awaitable, Callable

import typer
from pydantic import BaseModel

from ..dependencies import get_tenant_service
from ..errors import TenantError
from ..storage.sqlite_base import close_all_sqlite_db_connections
from ..tenants.service import TenantLifecycleService


def echo_result(result: Any) -> None:
    """Print a service result: models and lists of models as JSON, everything else as text."""
    if isinstance(result, BaseModel):
        typer.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    elif isinstance(result, list):
        payload = [r.model_dump(mode="json") if isinstance(r, BaseModel) else r for r in result]
        typer.echo(json.dumps(payload, indent=2))
    elif result is not None:
        typer.echo(result)


def run_service_call(call: Callable[[TenantLifecycleService], Awaitable[Any]]) -> Any:
    """
    Build the tenant service, run one operation and print its result.

    Tenant errors are printed in red and end the command with exit code 1.
    """
    async def _run() -> Any:
        try:
            service = await get_tenant_service()
            return await call(service)
        finally:
            await close_all_sqlite_db_connections()

    try:
        result = asyncio.run(_run())
    except TenantError as e:
        typer.secho(f"Error: {e.detail}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    echo_result(result)
    return result
