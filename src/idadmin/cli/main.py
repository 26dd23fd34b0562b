"""Click-based CLI entry point for the idadmin identity administration tool."""

import sys
from pathlib import Path

import click

from .. import __version__
from ..core.exceptions import AuthConfigError
from ..utils.logging_utils import init_default_logging
from ..utils.rich_utils import get_console, install_rich_tracebacks
from .commands import OperationHandler

ENV_CHOICE = click.Choice(["dev", "prod"])


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="idadmin")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """idadmin - administration client for the identity backend."""
    init_default_logging()
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("env", type=ENV_CHOICE, default="dev")
@click.option("--test-api", is_flag=True, help="Test API access")
def doctor(env: str, test_api: bool) -> None:
    """Check configuration, credentials and API access."""
    try:
        handler = OperationHandler()
        success = handler.handle_doctor(env, test_api)
        if not success:
            sys.exit(1)
    except AuthConfigError as e:
        click.echo(f"Authentication configuration error: {e}", err=True)
        sys.exit(1)


@cli.group()
def users() -> None:
    """Account operations."""


@users.command("get")
@click.argument("env", type=ENV_CHOICE, default="dev")
@click.option("--uid", help="Look up by uid")
@click.option("--email", help="Look up by email")
@click.option("--phone", "phone_number", help="Look up by E.164 phone number")
@click.option("--json", "as_json", is_flag=True, help="Print the account as JSON")
def get_user(
    env: str,
    uid: str | None,
    email: str | None,
    phone_number: str | None,
    as_json: bool,
) -> None:
    """Show one account."""
    if sum(value is not None for value in (uid, email, phone_number)) != 1:
        raise click.UsageError("Provide exactly one of --uid, --email or --phone")
    handler = OperationHandler()
    handler.handle_get_user(env, uid, email, phone_number, as_json)


@users.command("export")
@click.argument("env", type=ENV_CHOICE, default="dev")
@click.option("--max-results", type=int, help="Page size (at most 1000)")
@click.option("--page-token", help="Token of the page to fetch")
@click.option("--all", "all_pages", is_flag=True, help="Follow page tokens to the end")
@click.option(
    "--output",
    type=click.Path(dir_okay=False, writable=True),
    help="Write accounts as JSON lines to this file",
)
def export_users(
    env: str,
    max_results: int | None,
    page_token: str | None,
    all_pages: bool,
    output: str | None,
) -> None:
    """Export accounts page by page."""
    if env == "prod" and output:
        click.confirm(
            "You are about to export user data from production. Continue?",
            abort=True,
        )
    handler = OperationHandler()
    handler.handle_export_users(
        env, max_results, page_token, all_pages, Path(output) if output else None
    )


@users.command("import")
@click.argument(
    "input_file",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True),
)
@click.argument("env", type=ENV_CHOICE, default="dev")
def import_users(input_file: str, env: str) -> None:
    """Import up to 1000 accounts from a JSON file."""
    if env == "prod":
        click.confirm(
            "You are about to import users into production. Continue?",
            abort=True,
        )
    handler = OperationHandler()
    handler.handle_import_users(Path(input_file), env)


@users.command("delete")
@click.argument(
    "input_file",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True),
)
@click.argument("env", type=ENV_CHOICE, default="dev")
def delete_users(input_file: str, env: str) -> None:
    """Delete the accounts whose uids are listed in a file."""
    if env == "prod":
        click.confirm(
            "You are about to delete users in production. Continue?",
            abort=True,
        )
    handler = OperationHandler()
    handler.handle_delete_users(Path(input_file), env)


@cli.group()
def providers() -> None:
    """OIDC and SAML provider configuration operations."""


@providers.command("list")
@click.argument("provider_type", type=click.Choice(["oidc", "saml"]))
@click.argument("env", type=ENV_CHOICE, default="dev")
@click.option("--max-results", type=int, help="Page size (at most 100)")
@click.option("--page-token", help="Token of the page to fetch")
@click.option("--json", "as_json", is_flag=True, help="Print the page as JSON")
def list_providers(
    provider_type: str,
    env: str,
    max_results: int | None,
    page_token: str | None,
    as_json: bool,
) -> None:
    """List provider configs of one type."""
    handler = OperationHandler()
    handler.handle_list_providers(env, provider_type, max_results, page_token, as_json)


@providers.command("get")
@click.argument("provider_id")
@click.argument("env", type=ENV_CHOICE, default="dev")
def get_provider(provider_id: str, env: str) -> None:
    """Show one provider config as JSON."""
    handler = OperationHandler()
    handler.handle_get_provider(env, provider_id)


@providers.command("delete")
@click.argument("provider_id")
@click.argument("env", type=ENV_CHOICE, default="dev")
def delete_provider(provider_id: str, env: str) -> None:
    """Delete one provider config."""
    if env == "prod":
        click.confirm(
            f"You are about to delete {provider_id} in production. Continue?",
            abort=True,
        )
    handler = OperationHandler()
    handler.handle_delete_provider(env, provider_id)


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        install_rich_tracebacks()
        cli()
    except KeyboardInterrupt:
        get_console().print("\n[warning]Operation interrupted by user.[/warning]")
        sys.exit(0)


if __name__ == "__main__":
    main()
