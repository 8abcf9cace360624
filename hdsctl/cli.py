"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from hdsctl import __version__
from hdsctl.core.catalog_loader import load_catalog
from hdsctl.core.config import load_settings
from hdsctl.core.errors import HdsctlError
from hdsctl.core.service import HdsService
from hdsctl.transports.mock import MockDeviceLink

app = typer.Typer(help="Control OWON HDS200 oscilloscopes over USB with SCPI commands")


def _build_service(ctx: typer.Context) -> HdsService:
    link = MockDeviceLink() if ctx.obj and ctx.obj.get("mock") else None
    service = HdsService(link=link)
    for warning in getattr(service, "load_warnings", ()):
        typer.echo(f"Warning: {warning}", err=True)
    return service


@app.callback()
def main(
    ctx: typer.Context,
    mock: bool = typer.Option(False, "--mock", help="Talk to an emulated instrument"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = {"mock": mock}


@app.command("run")
def run_script(
    ctx: typer.Context,
    commands: list[str] | None = typer.Argument(None, help="Commands, ';' separated"),
    file: Path | None = typer.Option(None, "--file", "-f", help="Read commands from a file"),
) -> None:
    """Execute SCPI commands; each query prints one result line."""
    if file is not None:
        script = file.read_text(encoding="utf-8")
    elif commands:
        script = " ".join(commands)
    else:
        typer.echo("Error: no commands given", err=True)
        raise typer.Exit(code=2)

    try:
        service = _build_service(ctx)
        try:
            service.execute_script(script, emit=typer.echo)
        finally:
            service.close()
    except HdsctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("get")
def get_field(ctx: typer.Context, field: str) -> None:
    """Print the current value of FIELD (e.g. ch1Disp)."""
    try:
        service = _build_service(ctx)
        try:
            typer.echo(service.get_field(field))
        finally:
            service.close()
    except HdsctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("set")
def set_field(ctx: typer.Context, field: str, value: str) -> None:
    """Set FIELD to VALUE and print the value the instrument reports back."""
    try:
        service = _build_service(ctx)
        try:
            service.set_field(field, value)
            typer.echo(f"{field}={service.get_field(field, use_cache=False)}")
        finally:
            service.close()
    except HdsctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("fields")
def list_fields() -> None:
    """List addressable fields with their mnemonic and legal values."""
    try:
        loaded = load_catalog(load_settings())
    except HdsctlError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    for warning in loaded.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    for definition in loaded.catalog:
        line = f"{definition.camel_id}: {definition.path} ({definition.mode.value})"
        if definition.domain:
            line += f" [{', '.join(definition.domain)}]"
        typer.echo(line)


@app.command("version")
def version() -> None:
    """Print the hdsctl version."""
    typer.echo(f"hdsctl version {__version__}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
