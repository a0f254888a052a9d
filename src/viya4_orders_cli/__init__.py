"""viya4_orders_cli -- a command-line client for the SAS Viya Orders API.

The CLI exchanges OAuth client credentials for a bearer token and then
downloads order assets (licenses, deployment assets, certificates and the
asset download history) for a given order number, saving each response body
to disk and printing a short summary of what was retrieved.

Typical workflow::

    viya4-orders-cli license 9CV123 stable 2025.01
    viya4-orders-cli dep 9CV123 stable -p ~/sas -o json
    viya4-orders-cli getall 9CV123 stable 2025.01

Modules:
    app: Typer application and CLI entry point.
    auth: Client-credentials token exchange.
    assets: Order-number validation, asset retrieval, cadence extraction.
    config: Layered configuration (flag > environment > config file).
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    models: Pydantic models shared across the package.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "1.0.0"
