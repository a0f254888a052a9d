"""Shared test fixtures for viya4_orders_cli.

Provides an isolated config environment, deployment-assets archive
builders, and an in-process fake of the Orders API built on
:class:`httpx.MockTransport`. These fixtures are automatically discovered
by pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import base64
import io
import tarfile
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest

from viya4_orders_cli.output import OutputManager, reset_output, set_output


CHECKSUMS_TEXT = (
    "# SAS deployment assets\n"
    "Cadence Name: stable\n"
    "Cadence Display Name: Stable 2025.01\n"
    "Cadence Version: 2025.01\n"
    "Cadence Release: 20250115.1736960000000\n"
    "\n"
    "3f2a...  sas-bases/base/kustomization.yaml\n"
)

CLIENT_ID = "my-client-id"
CLIENT_SECRET = "my-client-secret"


def make_deployment_archive(
    checksums: Optional[str] = CHECKSUMS_TEXT,
    member_name: str = "sas-bases/checksums.txt",
) -> bytes:
    """Return the bytes of a ``.tar.gz`` resembling downloaded deployment assets.

    Args:
        checksums: Manifest text, or ``None`` to leave the manifest out.
        member_name: Archive path of the manifest.
    """
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        readme = b"Deployment assets\n"
        info = tarfile.TarInfo("sas-bases/README.md")
        info.size = len(readme)
        tar.addfile(info, io.BytesIO(readme))
        if checksums is not None:
            data = checksums.encode("utf-8")
            info = tarfile.TarInfo(member_name)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Install a plain, colourless OutputManager and reset it afterwards.

    The OutputManager's Rich console caches a reference to sys.stderr at
    creation time. When Typer's CliRunner redirects the streams during a
    test, the cached reference becomes stale once the test finishes.
    """
    set_output(OutputManager(no_color=True))
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points ``HOME`` at ``tmp_path / "home"`` so the default config file is
    never the user's real one, clears every environment variable the CLI
    reads, and changes the working directory to ``tmp_path / "work"``.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setattr(Path, "home", classmethod(lambda cls: home))
    for var in [
        "CLIENTCREDENTIALSID",
        "CLIENTCREDENTIALSSECRET",
        "FILE_PATH",
        "FILE_NAME",
        "OUTPUT",
    ]:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    monkeypatch.chdir(work)
    return tmp_path


@pytest.fixture
def credentials_env(isolated_config: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Export base64-encoded client credentials the way users configure them."""
    monkeypatch.setenv("CLIENTCREDENTIALSID", base64.b64encode(CLIENT_ID.encode()).decode())
    monkeypatch.setenv(
        "CLIENTCREDENTIALSSECRET", base64.b64encode(CLIENT_SECRET.encode()).decode()
    )


# ---------------------------------------------------------------------------
# Fake Orders API
# ---------------------------------------------------------------------------


class FakeOrdersAPI:
    """An in-process stand-in for ``api.sas.com``.

    Serves ``POST /mysas/token`` and ``GET /mysas/orders/...`` requests.
    Asset responses are chosen by the last URL path segment (the asset
    kind) and can be overridden per kind with :meth:`fail`.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.token_status = 200
        self.failures: dict[str, tuple[int, str]] = {}
        self.assets: dict[str, tuple[str, bytes]] = {
            "license": ("SASViyaV4_9CV123_license.jwt", b"license-jwt-content"),
            "deploymentAssets": (
                "SASViyaV4_9CV123_0_stable_2025.01_20250115.1736960000000_deploymentAssets.tgz",
                make_deployment_archive(),
            ),
            "certificates": ("SASViyaV4_9CV123_certs.zip", b"PK\x03\x04certs"),
            "assetHistory": ("SASViyaV4_9CV123_assetHistory.json", b"[]"),
        }

    def fail(self, kind: str, status: int, body: str = "") -> None:
        self.failures[kind] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/mysas/token":
            if self.token_status != 200:
                return httpx.Response(self.token_status, text="invalid_client")
            return httpx.Response(
                200,
                json={
                    "access_token": "fake-token",
                    "token_type": "BearerToken",
                    "issued_at": 1736960000000,
                    "expires_in": 1799,
                    "scope": "",
                },
            )

        if request.headers.get("Authorization") != "Bearer fake-token":
            return httpx.Response(401, text="missing bearer token")

        kind = path.rsplit("/", 1)[-1]
        if kind in self.failures:
            status, body = self.failures[kind]
            return httpx.Response(status, text=body)
        filename, content = self.assets[kind]
        return httpx.Response(
            200,
            content=content,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_api() -> FakeOrdersAPI:
    """A fresh :class:`FakeOrdersAPI`."""
    return FakeOrdersAPI()


@pytest.fixture
def use_fake_api(
    fake_api: FakeOrdersAPI, monkeypatch: pytest.MonkeyPatch
) -> FakeOrdersAPI:
    """Route the CLI commands' HTTP client to *fake_api*."""
    monkeypatch.setattr(
        "viya4_orders_cli.commands.assets._http_client", fake_api.client
    )
    return fake_api


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()


@pytest.fixture
def archive_factory() -> Callable[..., bytes]:
    """Return :func:`make_deployment_archive` for tests that need custom archives."""
    return make_deployment_archive
