"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~viya4_orders_cli.exceptions.OrdersCliError` subclass.
Shell wrappers can inspect the exit code to determine the failure class
without parsing stderr.

Example::

    $ viya4-orders-cli certs 9CV123
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- client credentials were rejected
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (including configuration problems)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or option values."""

EXIT_AUTH_FAILURE = 3
"""The bearer token exchange failed."""

EXIT_NOT_FOUND = 4
"""The Orders API returned HTTP 404."""

EXIT_SERVER_ERROR = 5
"""The Orders API returned a non-200 response."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_FORMAT_ERROR = 7
"""A response header, downloaded archive, or manifest could not be parsed."""

EXIT_IO_ERROR = 8
"""The downloaded asset could not be written to the local filesystem."""
