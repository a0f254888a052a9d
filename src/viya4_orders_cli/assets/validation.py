"""Order-number format check.

SAS order numbers are six characters long, made of ASCII letters and digits,
and always contain at least one of each (``9CV123`` is valid, ``993456`` is
not).
"""

from __future__ import annotations

import re

from viya4_orders_cli.exceptions import ValidationError

ORDER_NUMBER_LENGTH = 6

_ALNUM = re.compile(r"[A-Za-z0-9]+")
_LETTER = re.compile(r"[A-Za-z]")
_DIGIT = re.compile(r"[0-9]")


def is_valid_order_number(order_number: str) -> bool:
    """Return whether *order_number* has the format of a valid order number."""
    if len(order_number) != ORDER_NUMBER_LENGTH:
        return False
    if not _ALNUM.fullmatch(order_number):
        return False
    return bool(_LETTER.search(order_number)) and bool(_DIGIT.search(order_number))


def validate_order_number(order_number: str) -> str:
    """Return *order_number* unchanged, or raise if its format is invalid.

    Raises:
        ValidationError: If the order number is not six ASCII letters and
            digits with at least one of each.
    """
    if not is_valid_order_number(order_number):
        raise ValidationError(
            f"Given order number '{order_number}' does not have the format of a valid order number."
        )
    return order_number
