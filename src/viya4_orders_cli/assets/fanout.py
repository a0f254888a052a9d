"""Concurrent "get everything" retrieval.

:func:`get_all` downloads the license, deployment assets and certificates of
an order at the same time and waits for all three (a join barrier). Each
download runs in its own worker thread with its own
:class:`~viya4_orders_cli.assets.retriever.AssetRetriever`; a failure in one
never stops or hides the others. Errors are returned to the caller, which
decides how to report them.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import httpx

from viya4_orders_cli.assets.retriever import AssetRetriever
from viya4_orders_cli.assets.validation import validate_order_number
from viya4_orders_cli.models import DEFAULT_API_HOST, AssetKind, AssetRequest, AssetResult

logger = logging.getLogger(__name__)

GET_ALL_KINDS = (AssetKind.LICENSE, AssetKind.DEPLOYMENT_ASSETS, AssetKind.CERTIFICATES)


@dataclass
class FetchOutcome:
    """Result of one retrieval in a fan-out: either *result* or *error* is set."""

    kind: AssetKind
    result: Optional[AssetResult] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def build_requests(
    token: str,
    order_number: str,
    cadence_name: str,
    cadence_version: str,
    *,
    file_path: str = "",
    output_format: str = "text",
    base_url: str = DEFAULT_API_HOST,
) -> list[AssetRequest]:
    """Return one request per kind in :data:`GET_ALL_KINDS`.

    Certificates are not tied to a cadence, so they are requested without
    cadence parameters. Server-supplied file names are always used.
    """
    requests = []
    for kind in GET_ALL_KINDS:
        with_cadence = kind != AssetKind.CERTIFICATES
        requests.append(
            AssetRequest(
                token=token,
                kind=kind,
                order_number=order_number,
                cadence_name=cadence_name if with_cadence else "",
                cadence_version=cadence_version if with_cadence else "",
                file_path=file_path,
                output_format=output_format,
                base_url=base_url,
            )
        )
    return requests


def run_concurrently(
    requests: list[AssetRequest],
    client: Optional[httpx.Client] = None,
) -> list[FetchOutcome]:
    """Run :meth:`AssetRetriever.get_asset` for every request and wait for all of them.

    Args:
        requests: The retrievals to run.
        client: Optional HTTP client shared by all workers.

    Returns:
        One :class:`FetchOutcome` per request, in request order.
    """
    with ThreadPoolExecutor(max_workers=max(len(requests), 1)) as pool:
        futures = [
            pool.submit(lambda r=request: AssetRetriever(r, client).get_asset())
            for request in requests
        ]
        logger.debug("Waiting for %d downloads to complete", len(futures))

    outcomes = []
    for request, future in zip(requests, futures):
        exc = future.exception()
        if exc is not None:
            logger.debug("%s failed: %s", request.kind.value, exc)
            outcomes.append(FetchOutcome(kind=request.kind, error=exc))
        else:
            outcomes.append(FetchOutcome(kind=request.kind, result=future.result()))
    return outcomes


def get_all(
    token: str,
    order_number: str,
    cadence_name: str,
    cadence_version: str,
    *,
    file_path: str = "",
    output_format: str = "text",
    client: Optional[httpx.Client] = None,
    base_url: str = DEFAULT_API_HOST,
) -> list[FetchOutcome]:
    """Download the license, deployment assets and certificates of an order concurrently.

    Raises:
        ValidationError: If *order_number* is malformed; nothing is started.
    """
    validate_order_number(order_number)
    requests = build_requests(
        token,
        order_number,
        cadence_name,
        cadence_version,
        file_path=file_path,
        output_format=output_format,
        base_url=base_url,
    )
    return run_concurrently(requests, client)
