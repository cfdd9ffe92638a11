from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import (
    render_dashboard,
    render_file,
    render_file_list,
    render_insights,
)


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for interacting with the sensor insights dashboard service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Dashboard API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("list")
def list_command(ctx: typer.Context) -> None:
    """List stored files."""
    state = _get_state(ctx)
    render_file_list(state.client.list_files())


@app.command("upload")
def upload_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to CSV file."),
    show: bool = typer.Option(
        False,
        "--show/--no-show",
        help="Display the dashboard for the uploaded file.",
    ),
) -> None:
    """Upload a sensor data file."""
    state = _get_state(ctx)
    typer.echo(f"Uploading {file} to {state.config.base_url} ...")
    payload = state.client.upload_file(file)
    typer.secho(f"Upload stored. file_id={payload['id']}", fg=typer.colors.GREEN)
    render_file(payload)

    if not show:
        return

    typer.echo()
    render_dashboard(state.client.get_dashboard(payload["id"]))


@app.command("dashboard")
def dashboard_command(
    ctx: typer.Context,
    file_id: str = typer.Argument(..., help="Identifier returned from the upload command."),
) -> None:
    """Show latest readings, day/night averages and skipped rows for a file."""
    state = _get_state(ctx)
    render_dashboard(state.client.get_dashboard(file_id))


@app.command("insights")
def insights_command(
    ctx: typer.Context,
    file_id: str = typer.Argument(..., help="Identifier returned from the upload command."),
) -> None:
    """Generate fresh AI insights for a file."""
    state = _get_state(ctx)
    payload = state.client.refresh_insights(file_id)
    if payload.get("fallback"):
        typer.secho("Insight service unavailable; showing placeholders.", fg=typer.colors.YELLOW)
    render_insights(payload.get("insights") or [])


@app.command("ask")
def ask_command(
    ctx: typer.Context,
    file_id: str = typer.Argument(..., help="Identifier returned from the upload command."),
    question: str = typer.Argument(..., help="Question about the file's data."),
) -> None:
    """Ask a free-form question about a file."""
    state = _get_state(ctx)
    typer.echo(state.client.ask(file_id, question))


@app.command("rename")
def rename_command(
    ctx: typer.Context,
    file_id: str = typer.Argument(..., help="Identifier of the file to rename."),
    name: str = typer.Argument(..., help="New file name including extension."),
) -> None:
    """Rename a stored file."""
    state = _get_state(ctx)
    render_file(state.client.rename_file(file_id, name))


@app.command("delete")
def delete_command(
    ctx: typer.Context,
    file_id: str = typer.Argument(..., help="Identifier of the file to delete."),
) -> None:
    """Delete a stored file."""
    state = _get_state(ctx)
    if state.client.delete_file(file_id):
        typer.secho(f"Deleted {file_id}.", fg=typer.colors.GREEN)
    else:
        typer.secho(f"Nothing deleted for {file_id}.", fg=typer.colors.YELLOW)
