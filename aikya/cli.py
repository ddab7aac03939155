"""CLI for Aikya integration vault operations."""
import json
import secrets

import click

from aikya.errors import ConfigurationError
from aikya.domain.integrations.keys import describe_key_source, key_fingerprint
from aikya.settings import settings


@click.group()
def cli():
    """Aikya Integration Vault CLI."""
    pass


@cli.group()
def keys():
    """Inspect and generate master keys."""
    pass


@keys.command("generate")
def generate_key():
    """Print a fresh 256-bit master key as 64 hex characters."""
    click.echo(secrets.token_hex(32))


@keys.command("inspect")
def inspect_key():
    """Show how INTEGRATION_MASTER_KEY is interpreted (never the key itself)."""
    raw = settings.INTEGRATION_MASTER_KEY
    try:
        source = describe_key_source(raw)
    except ConfigurationError:
        click.echo("Error: INTEGRATION_MASTER_KEY is not set", err=True)
        raise SystemExit(1)

    click.echo(f"Encoding:    {source}")
    click.echo(f"Fingerprint: {key_fingerprint(raw)}")
    if source == "sha256":
        click.echo("Note: key was hashed; supply 64 hex chars or base64 of 32 bytes to use it verbatim.")


@cli.group()
def integrations():
    """Manage organization integrations."""
    pass


@integrations.command("list")
@click.option("--org", "org_id", required=True, help="Organization ID")
@click.option("--format", "fmt", type=click.Choice(["table", "json"]), default="table")
def list_integrations(org_id: str, fmt: str):
    """List integrations of an organization (metadata only)."""
    from aikya.adapters.postgres.integration_store import PostgresIntegrationStore
    from aikya.adapters.postgres.session import SessionLocal

    db = SessionLocal()
    try:
        rows = PostgresIntegrationStore(db).list_integrations(org_id)
    finally:
        db.close()

    if fmt == "json":
        click.echo(json.dumps([r.model_dump(mode="json") for r in rows], indent=2))
        return

    click.echo(f"\n{'ID':<8} {'Type':<12} {'Name':<24} {'Status':<10} {'Credentials':<12}")
    click.echo("-" * 70)
    for r in rows:
        status = "active" if r.is_active else "inactive"
        creds = "stored" if r.has_credentials else "missing"
        click.echo(f"{r.id:<8} {r.type:<12} {r.name[:22]:<24} {status:<10} {creds:<12}")


if __name__ == "__main__":
    cli()
