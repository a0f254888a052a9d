"""Asset commands -- download order assets.

Provides one command per asset kind plus ``getall``. Every command fetches
a single bearer token, then runs its retrieval(s) and prints the summary to
stdout. Errors are reported on stderr and mapped to the exit code of the
:class:`~viya4_orders_cli.exceptions.OrdersCliError` that caused them.

Typical usage::

    viya4-orders-cli license 9CV123 stable 2025.01
    viya4-orders-cli dep 9CV123 stable -p ~/sas -n depAssets_9CV123
    viya4-orders-cli certs 9CV123 -o json
    viya4-orders-cli getall 9CV123 stable 2025.01
"""

from __future__ import annotations

from typing import Callable, Optional

import httpx
import typer

from viya4_orders_cli.assets import AssetRetriever, get_all, validate_order_number
from viya4_orders_cli.auth import get_bearer_token
from viya4_orders_cli.exceptions import OrdersCliError
from viya4_orders_cli.exit_codes import EXIT_GENERIC_FAILURE
from viya4_orders_cli.models import REQUEST_TIMEOUT, AssetKind, AssetRequest, Settings
from viya4_orders_cli.output import error, info, warning


def _http_client() -> httpx.Client:
    """Create the HTTP client shared by the token request and the downloads."""
    return httpx.Client(timeout=REQUEST_TIMEOUT)


def _settings(ctx: typer.Context) -> Settings:
    """Return the settings resolved by the root callback."""
    obj = ctx.obj or {}
    return obj.get("settings") or Settings()


def _fail(exc: OrdersCliError) -> typer.Exit:
    error(str(exc))
    return typer.Exit(code=exc.exit_code)


def _retrieve(
    ctx: typer.Context,
    kind: AssetKind,
    order_number: str,
    cadence_name: str = "",
    cadence_version: str = "",
    cadence_release: str = "",
) -> None:
    """Authenticate and run a single retrieval."""
    settings = _settings(ctx)
    try:
        validate_order_number(order_number)
        with _http_client() as client:
            token = get_bearer_token(settings, client=client)
            request = AssetRequest(
                token=token,
                kind=kind,
                order_number=order_number,
                cadence_name=cadence_name,
                cadence_version=cadence_version,
                cadence_release=cadence_release,
                file_path=settings.file_path,
                file_name=settings.file_name,
                output_format=settings.output,
            )
            AssetRetriever(request, client).get_asset()
    except OrdersCliError as exc:
        raise _fail(exc) from None


def license_command(
    ctx: typer.Context,
    order_number: str = typer.Argument(help="Order number, e.g. 9CV123."),
    cadence_name: str = typer.Argument(help="Cadence name, e.g. stable or lts."),
    cadence_version: str = typer.Argument(help="Cadence version, e.g. 2025.01."),
) -> None:
    """Download a license for the given order number at the given cadence name and version.

    Example::

        viya4-orders-cli lic 9CV123 stable 2025.01 -p ~/sas -n license_9CV123
    """
    _retrieve(ctx, AssetKind.LICENSE, order_number, cadence_name, cadence_version)


def deployment_assets_command(
    ctx: typer.Context,
    order_number: str = typer.Argument(help="Order number, e.g. 9CV123."),
    cadence_name: str = typer.Argument(help="Cadence name, e.g. stable or lts."),
    cadence_version: Optional[str] = typer.Argument(
        None, help="Cadence version; the latest version when omitted."
    ),
    cadence_release: Optional[str] = typer.Argument(
        None, help="Cadence release; the latest release when omitted."
    ),
) -> None:
    """Download deployment assets for the given order number at the given cadence name and version.

    If the version is not specified, the latest version of the given cadence
    name is downloaded.
    """
    _retrieve(
        ctx,
        AssetKind.DEPLOYMENT_ASSETS,
        order_number,
        cadence_name,
        cadence_version or "",
        cadence_release or "",
    )


def certificates_command(
    ctx: typer.Context,
    order_number: str = typer.Argument(help="Order number, e.g. 9CV123."),
) -> None:
    """Download certificates for the given order number."""
    _retrieve(ctx, AssetKind.CERTIFICATES, order_number)


def asset_history_command(
    ctx: typer.Context,
    order_number: str = typer.Argument(help="Order number, e.g. 9CV123."),
) -> None:
    """Get the list of completed asset downloads for the given order number."""
    _retrieve(ctx, AssetKind.ASSET_HISTORY, order_number)


def getall_command(
    ctx: typer.Context,
    order_number: str = typer.Argument(help="Order number, e.g. 9CV123."),
    cadence_name: str = typer.Argument(help="Cadence name, e.g. stable or lts."),
    cadence_version: str = typer.Argument(help="Cadence version, e.g. 2025.01."),
) -> None:
    """Download the license, deployment assets and certificates for the given order number.

    The three downloads run concurrently. A failure in one download does not
    stop the others; every failure is reported once all have finished.
    """
    settings = _settings(ctx)
    if settings.file_name:
        warning(
            "The getall command ignores the --file-name option. "
            "Default file names will be used instead."
        )

    try:
        validate_order_number(order_number)
        with _http_client() as client:
            token = get_bearer_token(settings, client=client)
            info("Waiting for downloads to complete.")
            outcomes = get_all(
                token,
                order_number,
                cadence_name,
                cadence_version,
                file_path=settings.file_path,
                output_format=settings.output,
                client=client,
            )
    except OrdersCliError as exc:
        raise _fail(exc) from None
    info("Downloads are complete.")

    failures = [outcome for outcome in outcomes if not outcome.ok]
    for outcome in failures:
        error(f"Error occurred while getting asset type {outcome.kind.value}: {outcome.error}")
    if failures:
        first = failures[0].error
        code = first.exit_code if isinstance(first, OrdersCliError) else EXIT_GENERIC_FAILURE
        raise typer.Exit(code=code)


ASSET_COMMANDS: list[tuple[Callable[..., None], tuple[str, ...]]] = [
    (license_command, ("license", "lic")),
    (deployment_assets_command, ("deploymentAssets", "depassets", "dep")),
    (certificates_command, ("certificates", "certs", "cer")),
    (asset_history_command, ("assetHistory", "ah")),
    (getall_command, ("getall", "all")),
]
"""Command callbacks and their names; the first name is the visible one."""


def register_asset_commands(app: typer.Typer) -> None:
    """Register every asset command on *app*, with aliases as hidden commands."""
    for callback, names in ASSET_COMMANDS:
        primary, *aliases = names
        app.command(primary)(callback)
        for alias in aliases:
            app.command(alias, hidden=True)(callback)
