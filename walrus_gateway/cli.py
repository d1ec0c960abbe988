"""
Walrus Gateway CLI

Command-line client for a running gateway, plus a ``serve`` command to
start one.

Usage:
    wg serve                          - Start the gateway
    wg cost <file|bytes> [--epochs N] - Estimate storage cost
    wg upload <file> [--epochs N]     - Upload a file, print its blob ID
    wg download <blobId> <output>     - Download a blob to a file
"""
import json
import os
import sys
from decimal import Decimal
from pathlib import Path

import click
import httpx
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from walrus_gateway import __version__
from walrus_gateway.core.units import format_native
from walrus_gateway.network.walrus import extract_blob_id

# Load environment variables
load_dotenv()

console = Console()

# API Configuration
DEFAULT_GATEWAY_URL = os.getenv("GATEWAY_URL", "http://localhost:8000")


def _error_message(response: httpx.Response) -> str:
    """Extract the gateway's error message from a failed response."""
    try:
        return response.json().get("error", response.text)
    except ValueError:
        return response.text


def _fail(message: str) -> None:
    console.print(f"[red]✗ {message}[/red]")
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="Walrus Gateway")
@click.option(
    "--url",
    default=DEFAULT_GATEWAY_URL,
    show_default=True,
    help="Gateway base URL (or GATEWAY_URL)",
)
@click.pass_context
def main(ctx: click.Context, url: str):
    """
    Walrus Gateway - estimate, upload and download Walrus blobs.
    """
    ctx.obj = {"url": url.rstrip("/")}


@main.command()
@click.option("--host", default=None, help="Host to bind (defaults to HOST)")
@click.option("--port", default=None, type=int, help="Port to bind (defaults to PORT)")
def serve(host: str | None, port: int | None):
    """
    Start the gateway server.

    Example:
        wg serve --port 8000
    """
    import uvicorn

    from walrus_gateway.config import get_settings

    settings = get_settings()
    host = host or settings.HOST
    port = port or settings.PORT

    console.print(Panel(
        f"[bold green]Starting Walrus Gateway[/bold green]\n\n"
        f"Network: [cyan]{settings.SUI_NETWORK.value}[/cyan]\n"
        f"Listening: [cyan]http://{host}:{port}[/cyan]\n\n"
        f"[dim]Press Ctrl+C to stop[/dim]",
        border_style="green"
    ))
    uvicorn.run("walrus_gateway.main:create_app", factory=True, host=host, port=port)


@main.command()
@click.argument("target")
@click.option("--epochs", default=None, type=int, help="Storage duration in epochs")
@click.pass_context
def cost(ctx: click.Context, target: str, epochs: int | None):
    """
    Estimate the cost of storing a file (path) or a size in bytes.

    Example:
        wg cost report.pdf --epochs 5
        wg cost 1048576
    """
    path = Path(target)
    file_size = str(path.stat().st_size) if path.is_file() else target

    params = {"fileSize": file_size}
    if epochs is not None:
        params["epochs"] = str(epochs)

    try:
        response = httpx.get(f"{ctx.obj['url']}/storage-cost", params=params, timeout=60.0)
    except httpx.HTTPError as e:
        _fail(f"Could not reach gateway: {e}")
        return

    if response.status_code != 200:
        _fail(_error_message(response))
        return

    data = response.json()
    table = Table(title="Storage cost estimate", show_header=True, header_style="bold cyan")
    table.add_column("Field", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("File size (bytes)", str(data["fileSizeBytes"]))
    table.add_row("Epochs", str(data["epochs"]))
    table.add_row("Storage cost", data.get("storageCost", ""))
    table.add_row("Write cost", data.get("writeCost", ""))
    table.add_row("Total cost", data["totalCost"])
    # float repr, e.g. 1e-09, rendered without an exponent
    table.add_row("Total (SUI)", format_native(Decimal(repr(data["totalCostInSui"]))))
    if "totalCostInUsd" in data:
        table.add_row("Total (USD)", f"{data['totalCostInUsd']:.6f}")
    console.print(table)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--epochs", default=None, type=int, help="Storage duration in epochs")
@click.option("--json", "as_json", is_flag=True, help="Print the raw receipt")
@click.pass_context
def upload(ctx: click.Context, file: Path, epochs: int | None, as_json: bool):
    """
    Upload a file and print its blob ID.

    Example:
        wg upload secret.pdf --epochs 5
    """
    contents = file.read_bytes()
    console.print(f"📤 Uploading [cyan]{file.name}[/cyan] ({len(contents)} bytes)...")

    form = {"epochs": str(epochs)} if epochs is not None else None
    try:
        response = httpx.post(
            f"{ctx.obj['url']}/write",
            files={"file": (file.name, contents, "application/octet-stream")},
            data=form,
            timeout=300.0,
        )
    except httpx.HTTPError as e:
        _fail(f"Could not reach gateway: {e}")
        return

    if response.status_code != 200:
        _fail(f"Upload failed: {_error_message(response)}")
        return

    receipt = response.json()
    if as_json:
        console.print_json(json.dumps(receipt))

    blob_id = extract_blob_id(receipt)
    if not blob_id:
        _fail("Gateway receipt has no blob ID")
        return

    console.print(f"[green]✓[/green] Stored as [bold cyan]{blob_id}[/bold cyan]")
    console.print("[dim]Keep the blob ID to download the file later[/dim]")


@main.command()
@click.argument("blob_id")
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def download(ctx: click.Context, blob_id: str, output: Path):
    """
    Download a blob and save it to OUTPUT.

    Example:
        wg download <blobId> restored.pdf
    """
    console.print(f"📥 Downloading [cyan]{blob_id}[/cyan]...")
    try:
        response = httpx.get(f"{ctx.obj['url']}/read/{blob_id}", timeout=300.0)
    except httpx.HTTPError as e:
        _fail(f"Could not reach gateway: {e}")
        return

    if response.status_code == 404:
        _fail(f"Blob not found: {blob_id}")
        return
    if response.status_code != 200:
        _fail(f"Download failed: {_error_message(response)}")
        return

    output.write_bytes(response.content)
    console.print(f"[green]✓[/green] Saved {len(response.content)} bytes to [cyan]{output}[/cyan]")


if __name__ == "__main__":
    main()
