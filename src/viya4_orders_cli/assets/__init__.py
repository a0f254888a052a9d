"""Order asset retrieval.

Classes and functions:
    :class:`AssetRetriever` -- one fetch-save-describe cycle.
    :func:`get_all` -- concurrent license + deployment assets + certificates.
    :func:`is_valid_order_number` / :func:`validate_order_number` -- format check.
    :func:`extract_cadence` -- cadence fields from a checksums manifest.
"""

from viya4_orders_cli.assets.cadence import extract_cadence
from viya4_orders_cli.assets.fanout import FetchOutcome, get_all
from viya4_orders_cli.assets.retriever import AssetRetriever, build_url, format_result
from viya4_orders_cli.assets.validation import is_valid_order_number, validate_order_number

__all__ = [
    "AssetRetriever",
    "FetchOutcome",
    "build_url",
    "extract_cadence",
    "format_result",
    "get_all",
    "is_valid_order_number",
    "validate_order_number",
]
