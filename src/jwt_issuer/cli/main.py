"""CLI entry point for jwt-issuer.

Invoked as::

    jwt-issuer [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m jwt_issuer.cli.main

Commands
--------
role write      Create or replace a signing role
role set-key    Replace the key of an existing role
role read       Show a role (key omitted)
role delete     Delete a role
role list       List role names
token issue     Issue a credential under a role
token read      Print a persisted token
token renew     Renew a leased credential from its lease file
token revoke    Revoke a leased credential from its lease file
serve           Run the HTTP server
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from rich.console import Console
from rich.table import Table

from jwt_issuer import __version__
from jwt_issuer.claims.builder import IssueRequest
from jwt_issuer.config import IssuerConfig
from jwt_issuer.errors import IssuerError
from jwt_issuer.issuance.lease import IssuedCredential
from jwt_issuer.service import IssuerService
from jwt_issuer.signing.algorithms import DEFAULT_ALGORITHM, supported_algorithms

console = Console()

DEFAULT_STORE_DIR = ".jwt-issuer"


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="jwt-issuer")
@click.option(
    "--store-dir",
    type=click.Path(file_okay=False),
    envvar="JWT_ISSUER_STORAGE_PATH",
    default=DEFAULT_STORE_DIR,
    show_default=True,
    help="Directory holding roles, tokens and claims.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    envvar="JWT_ISSUER_LOG_LEVEL",
    default="WARNING",
    help="Logging level.",
)
@click.pass_context
def cli(ctx: click.Context, store_dir: str, log_level: str) -> None:
    """Role-scoped JWT issuance with leased credentials"""
    logging.basicConfig(level=getattr(logging, log_level.upper()))
    ctx.obj = {"store_dir": store_dir}


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    console.print(f"[bold]jwt-issuer[/bold] v{__version__}")


# ------------------------------------------------------------------
# role command group
# ------------------------------------------------------------------


@cli.group(name="role")
def role_group() -> None:
    """Manage signing roles."""


@role_group.command(name="write")
@click.argument("name")
@click.option(
    "--algorithm",
    "-a",
    type=click.Choice(supported_algorithms()),
    default=DEFAULT_ALGORITHM.value,
    show_default=True,
    help="Signing algorithm.",
)
@click.option("--key", default=None, help="Signing key (PEM text or HMAC secret).")
@click.option(
    "--key-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Read the signing key from a file.",
)
@click.option(
    "--lease/--no-lease",
    "lease_enabled",
    default=True,
    show_default=True,
    help="Persist issued credentials and attach a lease.",
)
@click.option("--iss", default="", help="Default issuer claim.")
@click.option("--sub", default="", help="Default subject claim.")
@click.option("--aud", default="", help="Default audience claim.")
@click.option("--exp", default="0", help="Default expiration, e.g. 3600 or 1h30m.")
@click.pass_context
def role_write_command(
    ctx: click.Context,
    name: str,
    algorithm: str,
    key: str | None,
    key_file: str | None,
    lease_enabled: bool,
    iss: str,
    sub: str,
    aud: str,
    exp: str,
) -> None:
    """Create or replace the role NAME."""
    if key_file:
        key = Path(key_file).read_text(encoding="utf-8")

    service = _service(ctx)
    try:
        service.roles.write(
            name,
            algorithm=algorithm,
            key=key or "",
            lease_enabled=lease_enabled,
            iss=iss,
            sub=sub,
            aud=aud,
            exp=exp,
        )
    except IssuerError as exc:
        _fail(exc)

    console.print(f"[green]Wrote role[/green] [bold]{name}[/bold] ({algorithm})")


@role_group.command(name="set-key")
@click.argument("name")
@click.option("--key", default=None, help="New signing key (PEM text or HMAC secret).")
@click.option(
    "--key-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Read the new signing key from a file.",
)
@click.pass_context
def role_set_key_command(
    ctx: click.Context, name: str, key: str | None, key_file: str | None
) -> None:
    """Replace the key of the existing role NAME."""
    if key_file:
        key = Path(key_file).read_text(encoding="utf-8")

    try:
        _service(ctx).roles.set_key(name, key or "")
    except IssuerError as exc:
        _fail(exc)

    console.print(f"[green]Replaced key for role[/green] [bold]{name}[/bold]")


@role_group.command(name="read")
@click.argument("name")
@click.pass_context
def role_read_command(ctx: click.Context, name: str) -> None:
    """Show the role NAME. The key is never displayed."""
    try:
        projection = _service(ctx).roles.read(name)
    except IssuerError as exc:
        _fail(exc)

    if projection is None:
        console.print(f"[red]Error:[/red] Unknown role: {name}")
        sys.exit(1)

    console.print(f"\n  Role:       [bold]{projection['name']}[/bold]")
    console.print(f"  Algorithm:  {projection['algorithm']}")
    console.print(f"  Leased:     {'yes' if projection['lease_enabled'] else 'no'}")
    console.print(f"  Issuer:     {projection['iss'] or '-'}")
    console.print(f"  Subject:    {projection['sub'] or '-'}")
    console.print(f"  Audience:   {projection['aud'] or '-'}")
    console.print(f"  Expiration: {projection['exp']}s")


@role_group.command(name="delete")
@click.argument("name")
@click.pass_context
def role_delete_command(ctx: click.Context, name: str) -> None:
    """Delete the role NAME. Succeeds if it does not exist."""
    try:
        _service(ctx).roles.delete(name)
    except IssuerError as exc:
        _fail(exc)
    console.print(f"[red]Deleted[/red] role [bold]{name}[/bold]")


@role_group.command(name="list")
@click.pass_context
def role_list_command(ctx: click.Context) -> None:
    """List all roles."""
    service = _service(ctx)
    try:
        names = service.roles.list_names()
        projections = [service.roles.read(name) for name in names]
    except IssuerError as exc:
        _fail(exc)

    if not names:
        console.print("[yellow]No roles defined.[/yellow]")
        return

    table = Table(title="Roles", show_header=True)
    table.add_column("Name", style="cyan")
    table.add_column("Algorithm")
    table.add_column("Leased", justify="center")
    table.add_column("Issuer")
    table.add_column("Exp (s)", justify="right")

    for projection in projections:
        if projection is None:
            continue
        leased = "[green]Yes[/green]" if projection["lease_enabled"] else "[red]No[/red]"
        table.add_row(
            str(projection["name"]),
            str(projection["algorithm"]),
            leased,
            str(projection["iss"] or "-"),
            str(projection["exp"]),
        )

    console.print(table)
    console.print(f"\nTotal: {len(names)} role(s)")


# ------------------------------------------------------------------
# token command group
# ------------------------------------------------------------------


@cli.group(name="token")
def token_group() -> None:
    """Issue, look up, renew and revoke credentials."""


@token_group.command(name="issue")
@click.argument("role")
@click.option("--iss", default="", help="Issuer claim.")
@click.option("--sub", default="", help="Subject claim.")
@click.option("--aud", default="", help="Audience claim.")
@click.option("--exp", type=int, default=0, help="Expiration (NumericDate).")
@click.option("--nbf", type=int, default=0, help="Not-before (NumericDate).")
@click.option("--iat", type=int, default=0, help="Issued-at (NumericDate).")
@click.option("--jti", default="", help="Token identifier.")
@click.option("--claims", "claims_json", default=None, help="Free-form claims as a JSON object.")
@click.option(
    "--claims-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Read free-form claims from a JSON file.",
)
@click.option(
    "--lease-out",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the lease JSON to this file.",
)
@click.pass_context
def token_issue_command(
    ctx: click.Context,
    role: str,
    iss: str,
    sub: str,
    aud: str,
    exp: int,
    nbf: int,
    iat: int,
    jti: str,
    claims_json: str | None,
    claims_file: str | None,
    lease_out: str | None,
) -> None:
    """Issue a credential under ROLE and print the token."""
    if claims_file:
        claims_json = Path(claims_file).read_text(encoding="utf-8")

    request = IssueRequest(
        iss=iss, sub=sub, aud=aud, exp=exp, nbf=nbf, iat=iat, jti=jti, claims=claims_json
    )
    try:
        credential = _service(ctx).lifecycle.issue(role, request)
    except IssuerError as exc:
        _fail(exc)

    _report_credential(credential, lease_out)


@token_group.command(name="read")
@click.argument("jti")
@click.pass_context
def token_read_command(ctx: click.Context, jti: str) -> None:
    """Print the persisted token for JTI."""
    try:
        token = _service(ctx).tokens.get(jti)
    except IssuerError as exc:
        _fail(exc)

    if token is None:
        console.print(f"[red]Error:[/red] No token stored for {jti}")
        sys.exit(1)
    click.echo(token.decode("utf-8"))


@token_group.command(name="renew")
@click.argument("lease_file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--lease-out",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write the renewed lease here (defaults to LEASE_FILE).",
)
@click.pass_context
def token_renew_command(ctx: click.Context, lease_file: str, lease_out: str | None) -> None:
    """Renew the credential described by LEASE_FILE."""
    lease = _load_lease(lease_file)
    try:
        credential = _service(ctx).lifecycle.renew(lease)
    except IssuerError as exc:
        _fail(exc)

    _report_credential(credential, lease_out or lease_file)


@token_group.command(name="revoke")
@click.argument("lease_file", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def token_revoke_command(ctx: click.Context, lease_file: str) -> None:
    """Revoke the credential described by LEASE_FILE."""
    lease = _load_lease(lease_file)
    try:
        _service(ctx).lifecycle.revoke(lease)
    except IssuerError as exc:
        _fail(exc)

    internal = lease.get("internal_data") or {}
    jti = internal.get("jti", "") if isinstance(internal, dict) else ""
    console.print(f"[red]Revoked[/red] credential [bold]{jti}[/bold]")


# ------------------------------------------------------------------
# serve
# ------------------------------------------------------------------


@cli.command(name="serve")
@click.option("--host", default=None, help="Bind address.")
@click.option("--port", type=int, default=None, help="TCP port.")
@click.pass_context
def serve_command(ctx: click.Context, host: str | None, port: int | None) -> None:
    """Run the HTTP server over the CLI's store directory."""
    from jwt_issuer.server.app import run_server

    try:
        config = IssuerConfig.from_env(
            storage_path=ctx.obj["store_dir"], host=host, port=port
        )
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(1)

    console.print(
        f"Serving jwt-issuer on [bold]http://{config.host}:{config.port}[/bold]"
        " (Ctrl-C to stop)"
    )
    run_server(config)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _service(ctx: click.Context) -> IssuerService:
    """Return an IssuerService over the filesystem store chosen on the root group."""
    store_dir = ctx.obj["store_dir"] if ctx.obj else DEFAULT_STORE_DIR
    config = IssuerConfig(storage_backend="filesystem", storage_path=Path(store_dir))
    return IssuerService.from_config(config)


def _fail(exc: IssuerError) -> NoReturn:
    console.print(f"[red]Error:[/red] {exc}")
    sys.exit(1)


def _load_lease(lease_file: str) -> dict[str, object]:
    try:
        data = json.loads(Path(lease_file).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        console.print(f"[red]Error reading lease file:[/red] {exc}")
        sys.exit(1)
    if not isinstance(data, dict):
        console.print("[red]Error:[/red] Lease file must contain a JSON object")
        sys.exit(1)
    return data


def _report_credential(credential: IssuedCredential, lease_out: str | None) -> None:
    """Print the token and, for leased credentials, write or show the lease."""
    click.echo(credential.token)

    if credential.lease is None:
        console.print("[yellow]Role has leasing disabled; credential was not stored.[/yellow]")
        return

    lease_json = json.dumps(credential.lease.to_dict(), indent=2)
    if lease_out:
        Path(lease_out).write_text(lease_json, encoding="utf-8")
        console.print(f"[green]Lease written to[/green] {lease_out}")

    console.print(f"\n  Token ID:  [bold]{credential.identifier}[/bold]")
    console.print(f"  Role:      {credential.role_name}")
    console.print(f"  Expires:   {credential.lease.expires_at.isoformat()}")


if __name__ == "__main__":
    cli()
