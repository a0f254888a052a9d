"""Cadence information for license and deployment-assets downloads.

A license request already names its cadence, so the display string is built
from the request parameters. Deployment assets are a gzip-compressed tar
archive whose ``sas-bases/checksums.txt`` manifest states the cadence that
was actually delivered, including lines such as::

    Cadence Display Name: Stable 2025.01
    Cadence Release: 20250115

The manifest fields are located by fixed token offsets after their labels:
the display name starts at the 4th whitespace-delimited token after
``Cadence Display Name:`` and runs to the end of that line, and the release
is the 3rd token after ``Cadence Release:``. Anything that does not match
that layout is reported as a :class:`~viya4_orders_cli.exceptions.FormatError`.
"""

from __future__ import annotations

import itertools
import logging
import re
import tarfile
import zlib
from pathlib import Path

from viya4_orders_cli.exceptions import FormatError

logger = logging.getLogger(__name__)

CHECKSUMS_FILE = "sas-bases/checksums.txt"
"""Archive member that carries cadence information."""

DISPLAY_NAME_LABEL = b"Cadence Display Name:"
RELEASE_LABEL = b"Cadence Release:"

_TOKEN = re.compile(rb"\S+")


def _is_word_separator(ch: str) -> bool:
    # ASCII letters, digits and underscore continue a word; every other ASCII
    # character ends one. Beyond ASCII only whitespace does.
    if ch.isascii():
        return not (ch.isalnum() or ch == "_")
    if ch.isalpha() or ch.isdecimal():
        return False
    return ch.isspace()


def title_case(text: str) -> str:
    """Upper-case the first letter of every word, leaving the rest alone.

    A word starts after any separator, so ``"long-term"`` becomes
    ``"Long-Term"``. Unlike :meth:`str.title`, ``"LTS"`` stays ``"LTS"``.
    """
    chars = []
    prev = " "
    for ch in text:
        if _is_word_separator(prev):
            titled = ch.title()
            chars.append(titled if len(titled) == 1 else ch)
        else:
            chars.append(ch)
        prev = ch
    return "".join(chars)


def license_cadence(cadence_name: str, cadence_version: str) -> tuple[str, str]:
    """Return ``(display, release)`` for a license request; release is always empty."""
    return f"{title_case(cadence_name)} {cadence_version}", ""


def read_checksums(archive: Path) -> bytes:
    """Scan a ``.tar.gz`` sequentially and return the manifest's content.

    Args:
        archive: Path of the downloaded deployment assets.

    Returns:
        The full byte content of ``sas-bases/checksums.txt``.

    Raises:
        FormatError: If the archive cannot be opened or read, the member is
            missing or not a regular file, or fewer bytes could be read than
            the member header declares.
    """
    try:
        with tarfile.open(archive, mode="r|gz") as tar:
            for member in tar:
                if member.name != CHECKSUMS_FILE:
                    continue
                handle = tar.extractfile(member)
                if handle is None:
                    raise FormatError(f"{CHECKSUMS_FILE} in {archive} is not a regular file")
                data = handle.read()
                if len(data) < member.size:
                    raise FormatError(
                        f"attempt to read {CHECKSUMS_FILE} failed: read {len(data)} of "
                        f"{member.size} bytes"
                    )
                return data
    except (tarfile.TarError, OSError, EOFError, zlib.error) as exc:
        raise FormatError(f"attempt to read {archive} failed: {exc}") from exc

    raise FormatError(f"end of file reached in {archive} before cadence information found")


def _value_after(data: bytes, label: bytes, token_index: int, *, to_line_end: bool) -> str:
    """Return the token at *token_index* counted from the start of *label*.

    The label's own words count as tokens. When *to_line_end* is set, the
    value extends from that token to the end of its line.
    """
    start = data.find(label)
    if start < 0:
        raise FormatError(f"'{label.decode()}' not found in {CHECKSUMS_FILE}")
    tail = data[start:]
    line_end = tail.find(b"\n")
    if line_end < 0:
        line_end = len(tail)

    tokens = list(itertools.islice(_TOKEN.finditer(tail), token_index + 1))
    if len(tokens) <= token_index or tokens[token_index].start() >= line_end:
        raise FormatError(f"no value follows '{label.decode()}' in {CHECKSUMS_FILE}")

    token = tokens[token_index]
    value = tail[token.start():line_end] if to_line_end else token.group()
    return value.rstrip().decode("utf-8", errors="replace")


def extract_cadence(data: bytes) -> tuple[str, str]:
    """Extract ``(display name, release)`` from manifest content.

    Example::

        >>> extract_cadence(b"Cadence Display Name: Stable 2025.01\\nCadence Release: 20250115\\n")
        ('Stable 2025.01', '20250115')

    Raises:
        FormatError: If either label is missing or not followed by a value
            on the same line.
    """
    display = _value_after(data, DISPLAY_NAME_LABEL, 3, to_line_end=True)
    release = _value_after(data, RELEASE_LABEL, 2, to_line_end=False)
    return display, release


def deployment_cadence(archive: Path) -> tuple[str, str]:
    """Return ``(display name, release)`` read from a deployment-assets archive."""
    logger.debug("Scanning %s for %s", archive, CHECKSUMS_FILE)
    return extract_cadence(read_checksums(archive))
