"""sambal command line.

Thin wrapper around SambalClient: every subcommand opens one smbclient
session, performs one operation and closes the session.

Options given on the command line override ~/.sambal/config.toml.
"""

import logging
import sys
from collections.abc import Callable
from datetime import datetime

import click
from rich.console import Console
from rich.table import Table

from .client import SambalClient
from .config_manager import ConfigManager
from .exceptions import OperationFailure, SambalError
from .listing import Listing
from .response import Response


def _open_client(ctx: click.Context) -> SambalClient:
    overrides = ctx.obj["overrides"]
    options = ConfigManager.load_config(ctx.obj["config_path"]).merged(**overrides)
    return SambalClient(options)


def _check(response: Response) -> Response:
    if response.failure:
        raise OperationFailure(response)
    return response


def _run(ctx: click.Context, action: Callable[[SambalClient], None]) -> None:
    """Run action on a fresh client; report errors and exit 1 on failure."""
    try:
        with _open_client(ctx) as client:
            action(client)
    except SambalError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _format_modified(modified: datetime | str) -> str:
    if isinstance(modified, datetime):
        return modified.strftime("%Y-%m-%d %H:%M:%S")
    return modified


def _listing_table(listing: Listing, qualifier: str) -> Table:
    table = Table(title=f"ls {qualifier}", show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Size", justify="right")
    table.add_column("Modified")

    for name in sorted(listing):
        entry = listing[name]
        table.add_row(
            name,
            entry.kind.value,
            str(entry.size),
            _format_modified(entry.modified),
        )
    return table


@click.group()
@click.option("--config", "config_path", type=click.Path(), help="Config file path")
@click.option("--host", help="SMB server address")
@click.option("--share", help="Share name")
@click.option("--user", help="User name")
@click.option("--password", envvar="SAMBAL_PASSWORD", help="Password (or SAMBAL_PASSWORD)")
@click.option("--domain", help="Workgroup / domain")
@click.option("--port", type=int, help="SMB port")
@click.option("--timeout", type=float, help="Seconds to wait for smbclient")
@click.option("--verbose", "-v", is_flag=True, help="Show smbclient traffic")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: str | None,
    host: str | None,
    share: str | None,
    user: str | None,
    password: str | None,
    domain: str | None,
    port: int | None,
    timeout: float | None,
    verbose: bool,
) -> None:
    """Drive smbclient to list, copy and remove files on an SMB share."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["overrides"] = {
        "host": host,
        "share": share,
        "user": user,
        "password": password,
        "domain": domain,
        "port": port,
        "timeout": timeout,
    }


@main.command(name="ls")
@click.argument("qualifier", default="*")
@click.pass_context
def list_command(ctx: click.Context, qualifier: str) -> None:
    """List remote files matching QUALIFIER."""

    def action(client: SambalClient) -> None:
        listing = client.ls(qualifier)
        _check(listing.response)
        Console().print(_listing_table(listing, qualifier))

    _run(ctx, action)


@main.command()
@click.argument("remote")
@click.argument("local", type=click.Path())
@click.pass_context
def get(ctx: click.Context, remote: str, local: str) -> None:
    """Download REMOTE to LOCAL."""

    def action(client: SambalClient) -> None:
        _check(client.get(remote, local))
        click.echo(f"Downloaded {remote} -> {local}")

    _run(ctx, action)


@main.command()
@click.argument("local", type=click.Path(exists=True, dir_okay=False))
@click.argument("remote")
@click.pass_context
def put(ctx: click.Context, local: str, remote: str) -> None:
    """Upload LOCAL to REMOTE."""

    def action(client: SambalClient) -> None:
        _check(client.put(local, remote))
        click.echo(f"Uploaded {local} -> {remote}")

    _run(ctx, action)


@main.command()
@click.argument("path")
@click.pass_context
def rm(ctx: click.Context, path: str) -> None:
    """Delete remote file PATH."""

    def action(client: SambalClient) -> None:
        _check(client.delete(path))
        click.echo(f"Deleted {path}")

    _run(ctx, action)


@main.command()
@click.argument("path")
@click.pass_context
def rmdir(ctx: click.Context, path: str) -> None:
    """Delete remote directory PATH and everything in it."""

    def action(client: SambalClient) -> None:
        _check(client.rmdir(path))
        click.echo(f"Removed {path}")

    _run(ctx, action)


if __name__ == "__main__":
    main()
