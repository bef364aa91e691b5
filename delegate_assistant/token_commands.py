"""token commands: refresh, test, get and info for the stored credential."""

from __future__ import annotations

from typing import Any, Callable, Dict

from delegate_core.cli_errors import ExitCode, RemoteError
from delegate_core.credentials import CredentialStore, decode_token_claims
from delegate_core.outlook import OutlookClient

from .app import get_config, token_group

_IDENTITY_CLAIMS = ("upn", "preferred_username", "unique_name", "email")


@token_group.command("refresh", help="Refresh access token")
def cmd_refresh(args) -> int:
    config = get_config(args)
    settings = config.require_client()
    store = CredentialStore(config.credentials_path)
    credential = store.refresh(
        settings.client_id,
        settings.client_secret,
        store.load_refresh_token(),
        settings.scopes,
        tenant=settings.tenant,
    )
    args._output.print_data({"status": "token refreshed", "expires_in": credential.expires_in})
    return ExitCode.SUCCESS


def _probe(label: str, call: Callable[[], Dict[str, Any]], shape: Callable[[Dict[str, Any]], Dict[str, Any]]) -> Dict[str, Any]:
    try:
        data = call()
    except RemoteError as e:
        return {"check": label, "error": e.message, "code": e.remote_code}
    row = {"check": label, "status": "OK"}
    row.update(shape(data))
    return row


@token_group.command("test", help="Test delegate access to the owner's mailbox and calendar")
def cmd_test(args) -> int:
    config = get_config(args)
    client = OutlookClient.from_config(config)
    claims = decode_token_claims(client.credential.access_token)
    authenticated = next((claims[k] for k in _IDENTITY_CLAIMS if claims.get(k)), None)
    owner = client.context.owner_identity

    identity = {
        "check": "delegate identity",
        "authenticated_as": authenticated or "unknown (token is not a JWT)",
        "display_name": claims.get("name"),
    }
    inbox = _probe(
        f"owner mailbox ({owner})",
        lambda: client.folder_stats("inbox"),
        lambda d: {"folder": d.get("displayName"), "unread": d.get("unreadItemCount"), "total": d.get("totalItemCount")},
    )
    calendar = _probe(
        f"owner calendar ({owner})",
        client.get_calendar,
        lambda d: {"calendar": d.get("name"), "canEdit": d.get("canEdit")},
    )
    args._output.print_records([
        identity,
        inbox,
        calendar,
        {"check": "summary", "delegate": config.delegate_email, "owner": owner, "mode": "Delegate Access"},
    ])
    failed = [p for p in (inbox, calendar) if "error" in p]
    for probe in failed:
        args._output.print_error(f"{probe['check']}: {probe['error']} [{probe['code']}]. Check delegate permissions.")
    return ExitCode.ERROR if failed else ExitCode.SUCCESS


@token_group.command("get", help="Print current access token")
def cmd_get(args) -> int:
    credential = CredentialStore(get_config(args).credentials_path).load()
    args._output.print(credential.access_token)
    return ExitCode.SUCCESS


@token_group.command("info", help="Show configuration info")
def cmd_info(args) -> int:
    config = get_config(args)
    store = CredentialStore(config.credentials_path)
    client_id = config.client.client_id or ""
    info: Dict[str, Any] = {
        "config_dir": config.config_dir,
        "delegate": config.delegate_email,
        "owner": config.owner_email,
        "client_id": f"{client_id[:8]}..." if client_id else None,
        "token_exists": "yes" if store.exists() else "no",
    }
    if store.exists():
        info["expires_in"] = store.read_raw().get("expires_in", "unknown")
    args._output.print_data(info)
    return ExitCode.SUCCESS
