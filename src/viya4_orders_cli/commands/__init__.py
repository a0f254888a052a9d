"""Built-in CLI commands for viya4_orders_cli.

Each asset kind is exposed as a Typer command registered on the root app
by :func:`register_asset_commands`:

- ``license`` (``lic``) -- download a license.
- ``deploymentAssets`` (``depassets``, ``dep``) -- download deployment assets.
- ``certificates`` (``certs``, ``cer``) -- download certificates.
- ``assetHistory`` (``ah``) -- download the asset download history.
- ``getall`` (``all``) -- license, deployment assets and certificates at once.
"""

from viya4_orders_cli.commands.assets import register_asset_commands

__all__ = ["register_asset_commands"]
