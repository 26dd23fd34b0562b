"""Command handlers for CLI operations."""

import base64
import binascii
import json
import sys
from pathlib import Path
from typing import Any

import click

from ..core.admin_client import AdminClient, get_admin_client
from ..core.auth import doctor as auth_doctor
from ..core.config import check_env_file
from ..core.exceptions import IdAdminError
from ..models.provider_config import OIDCProviderConfig
from ..models.user import AccountRecord
from ..models.user_import import HashConfig
from ..utils.logging_utils import get_logger
from ..utils.rich_utils import build_table, get_console
from ..utils.time_utils import utc_date_string

logger = get_logger(__name__)

# Byte-valued fields arrive base64 encoded in import files
_RECORD_BYTE_FIELDS = ("passwordHash", "passwordSalt")
_HASH_BYTE_FIELDS = ("key", "saltSeparator")


def decode_base64_fields(data: dict[str, Any], names: tuple[str, ...]) -> dict[str, Any]:
    """Decode the named base64 string fields of a dict into bytes.

    Raises:
        click.BadParameter: If a field is not valid base64
    """
    decoded = dict(data)
    for name in names:
        value = decoded.get(name)
        if not isinstance(value, str):
            continue
        try:
            decoded[name] = base64.b64decode(value, validate=True)
        except binascii.Error as e:
            raise click.BadParameter(f'"{name}" is not valid base64: {e}') from e
    return decoded


def load_import_file(path: Path) -> tuple[list[Any], HashConfig | None]:
    """Read an import file.

    The file holds either a JSON list of user records or an object
    ``{"users": [...], "hash": {...}}``.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    hash_data = None
    if isinstance(data, dict):
        hash_data = data.get("hash")
        data = data.get("users", [])
    if not isinstance(data, list):
        raise click.BadParameter("Import file must contain a list of users")

    # Records stay dicts so that a malformed one fails alone at its index
    records = [
        decode_base64_fields(entry, _RECORD_BYTE_FIELDS) if isinstance(entry, dict) else entry
        for entry in data
    ]
    hash_config = None
    if isinstance(hash_data, dict):
        hash_config = HashConfig.from_dict(decode_base64_fields(hash_data, _HASH_BYTE_FIELDS))
    return records, hash_config


def read_identifiers(path: Path) -> list[str]:
    """Read one identifier per line, skipping blanks and ``#`` comments."""
    with open(path, encoding="utf-8") as f:
        return [
            line.strip()
            for line in f
            if line.strip() and not line.lstrip().startswith("#")
        ]


class OperationHandler:
    """Handles CLI operations for identity administration.

    Every handler resolves a cached admin client for the environment and
    renders results on the shared rich console.
    """

    def __init__(self, client: AdminClient | None = None):
        self._client = client
        self.console = get_console()

    def _get_client(self, env: str) -> AdminClient:
        if self._client is None:
            self._client = get_admin_client(env)
        return self._client

    def _handle_operation_error(self, error: Exception, operation_name: str) -> None:
        """Report a failed operation and exit with status 1."""
        code = getattr(error, "code", None)
        suffix = f" ({code})" if code else ""
        self.console.print(f"[error]{operation_name} failed{suffix}: {error}[/error]")
        logger.debug(f"{operation_name} failed", exc_info=error)
        sys.exit(1)

    def _echo_json(self, data: Any) -> None:
        click.echo(json.dumps(data, indent=2, sort_keys=True, default=str))

    def handle_doctor(self, env: str, test_api: bool = False) -> bool:
        """Check credentials for an environment.

        Returns:
            bool: True if the configuration works
        """
        check_env_file()
        result = auth_doctor(env, test_api)
        if result["success"]:
            self.console.print(f"[success]✓ Configuration is valid for {env} environment[/success]")
            if result.get("api_status") == "success":
                self.console.print("[success]✓ API access test successful[/success]")
            elif result.get("api_status") == "failed":
                self.console.print(f"[warning]! {result['details']}[/warning]")
                return False
        else:
            self.console.print(
                f"[error]✗ Configuration check failed: {result.get('error')}[/error]"
            )
        return bool(result["success"])

    def handle_get_user(
        self,
        env: str,
        uid: str | None = None,
        email: str | None = None,
        phone_number: str | None = None,
        as_json: bool = False,
    ) -> None:
        try:
            client = self._get_client(env)
            if uid is not None:
                user = client.get_user(uid)
            elif email is not None:
                user = client.get_user_by_email(email)
            else:
                user = client.get_user_by_phone_number(phone_number)
        except IdAdminError as e:
            self._handle_operation_error(e, "Get user")
            return

        if as_json:
            self._echo_json(user.to_dict())
            return
        self.console.print(self._users_table(f"User {user.uid}", [user]))

    def handle_export_users(
        self,
        env: str,
        max_results: int | None = None,
        page_token: str | None = None,
        all_pages: bool = False,
        output_file: Path | None = None,
    ) -> None:
        """Export accounts as a table, or as JSON lines into a file."""
        try:
            client = self._get_client(env)
            if all_pages:
                users = list(client.iterate_users(page_size=max_results))
                next_page_token = None
            else:
                page = client.list_users(max_results=max_results, page_token=page_token)
                users = page.items
                next_page_token = page.next_page_token
        except IdAdminError as e:
            self._handle_operation_error(e, "Export users")
            return

        if output_file is not None:
            with open(output_file, "w", encoding="utf-8") as f:
                for user in users:
                    f.write(json.dumps(user.to_dict(), sort_keys=True) + "\n")
            self.console.print(
                f"[success]Exported {len(users)} users to {output_file}[/success]"
            )
        else:
            self.console.print(self._users_table(f"Users ({len(users)})", users))

        if next_page_token:
            self.console.print(f"[info]Next page token: {next_page_token}[/info]")

    def handle_import_users(self, input_file: Path, env: str) -> None:
        try:
            records, hash_config = load_import_file(input_file)
            result = self._get_client(env).import_users(records, hash_config)
        except IdAdminError as e:
            self._handle_operation_error(e, "Import users")
            return

        self._print_batch_summary("Import", result.success_count, result.failure_count)
        if result.errors:
            self.console.print(
                build_table(
                    "Import errors",
                    ["Index", "Code", "Message"],
                    [(entry.index, entry.error.code, entry.error.message) for entry in result.errors],
                )
            )

    def handle_delete_users(self, input_file: Path, env: str) -> None:
        uids = read_identifiers(input_file)
        if not uids:
            self.console.print("[warning]No user ids found in input file[/warning]")
            return
        try:
            result = self._get_client(env).delete_users(uids)
        except IdAdminError as e:
            self._handle_operation_error(e, "Delete users")
            return

        self._print_batch_summary("Delete", result.success_count, result.failure_count)
        if result.errors:
            self.console.print(
                build_table(
                    "Delete errors",
                    ["Index", "Uid", "Code", "Message"],
                    [
                        (entry.index, uids[entry.index], entry.error.code, entry.error.message)
                        for entry in result.errors
                    ],
                )
            )

    def handle_list_providers(
        self,
        env: str,
        provider_type: str,
        max_results: int | None = None,
        page_token: str | None = None,
        as_json: bool = False,
    ) -> None:
        try:
            page = self._get_client(env).list_provider_configs(
                provider_type, max_results=max_results, page_token=page_token
            )
        except IdAdminError as e:
            self._handle_operation_error(e, "List providers")
            return

        if as_json:
            self._echo_json(page.to_dict("providerConfigs"))
            return
        self.console.print(
            build_table(
                f"{provider_type.upper()} providers ({len(page.items)})",
                ["Provider ID", "Display name", "Enabled", "Endpoint"],
                [
                    (
                        config.provider_id,
                        config.display_name,
                        config.enabled,
                        config.issuer if isinstance(config, OIDCProviderConfig) else config.sso_url,
                    )
                    for config in page.items
                ],
            )
        )
        if page.next_page_token:
            self.console.print(f"[info]Next page token: {page.next_page_token}[/info]")

    def handle_get_provider(self, env: str, provider_id: str) -> None:
        try:
            config = self._get_client(env).get_provider_config(provider_id)
        except IdAdminError as e:
            self._handle_operation_error(e, "Get provider")
            return
        self._echo_json(config.to_dict())

    def handle_delete_provider(self, env: str, provider_id: str) -> None:
        try:
            self._get_client(env).delete_provider_config(provider_id)
        except IdAdminError as e:
            self._handle_operation_error(e, "Delete provider")
            return
        self.console.print(f"[success]Deleted provider config {provider_id}[/success]")

    def _users_table(self, title: str, users: list[AccountRecord]) -> Any:
        return build_table(
            title,
            ["UID", "Email", "Display name", "Disabled", "Created", "Last sign-in"],
            [
                (
                    user.uid,
                    user.email,
                    user.display_name,
                    user.disabled,
                    utc_date_string(user.metadata.creation_time),
                    utc_date_string(user.metadata.last_sign_in_time),
                )
                for user in users
            ],
        )

    def _print_batch_summary(self, operation: str, success: int, failure: int) -> None:
        style = "success" if failure == 0 else "warning"
        self.console.print(
            f"[{style}]{operation} complete: {success} succeeded, {failure} failed[/{style}]"
        )
