import json
import time

import click
from rich.console import Console
from rich.table import Table

from ..exceptions import GravixLayerBadRequestError, GravixLayerError
from ..models.deployments import Deployment
from ..resources.deployments import unique_deployment_name
from ._common import (
    AliasedGroup,
    Context,
    error_message,
    handle_sdk_errors,
    pass_context,
)

WAIT_POLL_INTERVAL_SEC = 10
# The API may report a conflict for a create that actually went through.
CONFLICT_RECHECK_DELAY_SEC = 3

READY_STATUSES = ("running", "ready", "active")
FAILED_STATUSES = ("failed", "error", "stopped")

# Computed accelerator fields left out of --json output.
_HARDWARE_JSON_EXCLUDE = {"name", "memory", "gpu_type", "use_case"}


class DeploymentsGroup(AliasedGroup):
    aliases = {"gpu": "hardware"}


@click.group(cls=DeploymentsGroup)
def deployments():
    """
    Dedicated model deployments.
    """
    pass


def _echo_deployment(deployment: Deployment):
    click.echo(f"Deployment ID: {deployment.deployment_id}")
    click.echo(f"Deployment Name: {deployment.deployment_name}")
    click.echo(f"Status: {deployment.status}")
    click.echo(f"Model: {deployment.model_name}")
    click.echo(f"Hardware: {deployment.hardware or deployment.gpu_model}")


def _find(ctx: Context, name: str) -> Deployment | None:
    for deployment in ctx.client.deployments.list():
        if deployment.deployment_name == name:
            return deployment
    return None


def _wait_until_ready(ctx: Context, deployment_id: str, deployment_name: str):
    click.echo(f"\nWaiting for deployment '{deployment_name}' to be ready...")
    click.echo(
        "Press Ctrl+C to stop monitoring (the deployment continues in background)"
    )

    try:
        while True:
            time.sleep(WAIT_POLL_INTERVAL_SEC)
            try:
                current = next(
                    (
                        d
                        for d in ctx.client.deployments.list()
                        if d.deployment_id == deployment_id
                    ),
                    None,
                )
            except GravixLayerError as e:
                click.echo(f"  Error checking status: {error_message(e)}")
                continue

            if current is None:
                click.echo("  Deployment not found")
                return

            status = current.status.lower()
            click.echo(f"  Status: {current.status}")
            if status in READY_STATUSES:
                click.echo("\nDeployment is now ready!")
                _echo_deployment(current)
                return
            if status in FAILED_STATUSES:
                raise click.ClickException(
                    f"Deployment failed with status: {current.status}"
                )
    except KeyboardInterrupt:
        click.echo("\nMonitoring stopped. Deployment continues in background.")
        click.echo("Check status with: gravixlayer deployments list")


@deployments.command()
@click.option("--deployment-name", required=True, help="Deployment name")
@click.option("--hardware", required=True, help="Accelerator, e.g. NVIDIA_T4_16GB")
@click.option("--model-name", required=True, help="Model to deploy")
@click.option("--hw-type", default="dedicated", show_default=True, help="Hardware type")
@click.option("--min-replicas", type=int, default=1, show_default=True)
@click.option("--gpu-count", type=int, default=1, show_default=True)
@click.option(
    "--auto-retry",
    is_flag=True,
    help="Use a unique name if the deployment name is taken",
)
@click.option("--wait", is_flag=True, help="Wait for the deployment to be ready")
@pass_context
@handle_sdk_errors
def create(
    ctx: Context,
    deployment_name: str,
    hardware: str,
    model_name: str,
    hw_type: str,
    min_replicas: int,
    gpu_count: int,
    auto_retry: bool,
    wait: bool,
):
    """
    Create a new deployment.
    """
    click.echo(
        f"Creating deployment '{deployment_name}' with model '{model_name}'..."
    )

    name = deployment_name
    if auto_retry:
        name = unique_deployment_name(deployment_name)
        click.echo(f"Using unique name: '{name}'")

    try:
        response = ctx.client.deployments.create(
            deployment_name=name,
            model_name=model_name,
            gpu_model=hardware,
            gpu_count=gpu_count,
            min_replicas=min_replicas,
            hw_type=hw_type,
        )
    except GravixLayerBadRequestError as e:
        if "already exists" not in str(e).lower():
            raise
        time.sleep(CONFLICT_RECHECK_DELAY_SEC)
        existing = _find(ctx, name)
        if existing is None:
            message = f"Deployment creation failed: {e}"
            if not auto_retry:
                message += "\nTry again with --auto-retry to use a unique name."
            raise click.ClickException(message) from e
        click.echo("Deployment created successfully!")
        _echo_deployment(existing)
        if wait:
            _wait_until_ready(ctx, existing.deployment_id, existing.deployment_name)
        return

    click.echo("Deployment created successfully!")
    click.echo(f"Deployment ID: {response.deployment_id}")
    click.echo(f"Deployment Name: {name}")
    click.echo(f"Status: {response.status}")
    click.echo(f"Model: {model_name}")
    click.echo(f"Hardware: {hardware}")

    status = (response.status or "").lower()
    if wait:
        _wait_until_ready(ctx, response.deployment_id, name)
    elif status in ("creating", "pending"):
        click.echo("\nTip: use --wait to monitor the deployment status")
        click.echo("Or check status with: gravixlayer deployments list")
    elif status in ("running", "ready"):
        click.echo("Deployment is ready to use!")


@deployments.command(name="list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_context
@handle_sdk_errors
def list_deployments(ctx: Context, as_json: bool):
    """
    List all deployments.
    """
    items = ctx.client.deployments.list()

    if as_json:
        click.echo(json.dumps([d.model_dump() for d in items], indent=2))
        return

    if not items:
        click.echo("No deployments found.")
        return

    table = Table()
    table.add_column("ID", no_wrap=True)
    table.add_column("Name")
    table.add_column("Model")
    table.add_column("Status", style="green")
    table.add_column("Hardware")
    table.add_column("Replicas")
    table.add_column("Created At")

    for d in items:
        table.add_row(
            d.deployment_id,
            d.deployment_name,
            d.model_name,
            d.status,
            d.hardware or d.gpu_model or "",
            str(d.min_replicas),
            d.created_at or "",
        )

    console = Console()
    console.print(table)
    if len(items) == 1:
        click.echo("1 deployment")
    else:
        click.echo(f"{len(items)} deployments")


@deployments.command()
@click.argument("deployment_id")
@pass_context
@handle_sdk_errors
def delete(ctx: Context, deployment_id: str):
    """
    Delete a deployment.
    """
    click.echo(f"Deleting deployment {deployment_id}...")
    response = ctx.client.deployments.delete(deployment_id)
    click.echo("Deployment deleted successfully!")
    if response:
        click.echo(json.dumps(response, indent=2))


@deployments.command()
@click.option("--list", "list_", is_flag=True, help="List available hardware")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@pass_context
@handle_sdk_errors
def hardware(ctx: Context, list_: bool, as_json: bool):
    """
    List available hardware and GPUs (alias: gpu).
    """
    if not list_:
        click.echo("Use --list to list available hardware")
        click.echo("Example: gravixlayer deployments hardware --list")
        return

    accelerators = ctx.client.deployments.list_hardware()

    if as_json:
        rows = [a.model_dump(exclude=_HARDWARE_JSON_EXCLUDE) for a in accelerators]
        click.echo(json.dumps(rows, indent=2))
        return

    if not accelerators:
        click.echo("No accelerators found.")
        return

    table = Table(title=f"Available Hardware ({len(accelerators)} found)")
    table.add_column("Accelerator", no_wrap=True)
    table.add_column("Hardware String")
    table.add_column("Memory", style="green")

    for a in accelerators:
        table.add_row(a.gpu_type or a.name, a.hardware_string, a.memory or "N/A")

    Console().print(table)
