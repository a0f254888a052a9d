"""Exception hierarchy for viya4_orders_cli.

All exceptions inherit from :class:`OrdersCliError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`viya4_orders_cli.exit_codes`. Commands catch ``OrdersCliError`` and
exit with the appropriate code, and :func:`viya4_orders_cli.app.main` does
the same for anything raised outside a command.

Subclass hierarchy::

    OrdersCliError (exit 1)
    +-- ConfigError         (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- ValidationError     (exit 2)
    +-- AuthError           (exit 3)
    +-- ServerError         (exit 5)
    |   +-- NotFoundError   (exit 4)
    +-- RequestError        (exit 6)
    +-- FormatError         (exit 7)
    +-- IOError_            (exit 8)
"""

from viya4_orders_cli.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_FORMAT_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_IO_ERROR,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class OrdersCliError(Exception):
    """Base exception for all viya4_orders_cli errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`viya4_orders_cli.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(OrdersCliError):
    """Raised for configuration problems (unreadable config file, bad credential encoding)."""

    exit_code = EXIT_GENERIC_FAILURE


class InvalidUsageError(OrdersCliError):
    """Raised for invalid option values such as a non-existent ``--file-path``."""

    exit_code = EXIT_INVALID_USAGE


class ValidationError(OrdersCliError):
    """Raised when an order number does not have the format of a valid order number."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(OrdersCliError):
    """Raised when the client-credentials token exchange fails."""

    exit_code = EXIT_AUTH_FAILURE


class ServerError(OrdersCliError):
    """Raised when the Orders API answers an asset request with a non-200 status."""

    exit_code = EXIT_SERVER_ERROR


class NotFoundError(ServerError):
    """Raised when the Orders API returns HTTP 404 (unknown order or cadence)."""

    exit_code = EXIT_NOT_FOUND


class RequestError(OrdersCliError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused)."""

    exit_code = EXIT_CONNECTION_ERROR


class FormatError(OrdersCliError):
    """Raised when a ``Content-Disposition`` header, archive, or manifest cannot be parsed."""

    exit_code = EXIT_FORMAT_ERROR


class IOError_(OrdersCliError):
    """Raised when a downloaded asset cannot be written to disk.

    Named with a trailing underscore to avoid shadowing the built-in
    ``IOError``.
    """

    exit_code = EXIT_IO_ERROR
