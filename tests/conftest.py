"""Root conftest for all tests - provides shared fixtures."""

import shutil
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from breakoutroom.core.config import GPG_BINARY


@pytest.fixture
def http_response():
    """Build a real httpx.Response bound to a GET request."""

    def _make(status_code=200, *, json=None, text=None, content=None, url="https://keybase.io/"):
        kwargs = {}
        if json is not None:
            kwargs["json"] = json
        elif text is not None:
            kwargs["text"] = text
        elif content is not None:
            kwargs["content"] = content
        return httpx.Response(status_code, request=httpx.Request("GET", url), **kwargs)

    return _make


@pytest.fixture
def mock_async_client():
    """Patch httpx.AsyncClient so that get() returns or raises a fixed value.

    Returns the mocked client instance so tests can inspect calls.
    """
    patchers = []

    def _patch(response=None, side_effect=None):
        mock_instance = AsyncMock()
        mock_instance.get = AsyncMock(return_value=response, side_effect=side_effect)
        mock_instance.__aenter__ = AsyncMock(return_value=mock_instance)
        mock_instance.__aexit__ = AsyncMock(return_value=None)

        patcher = patch("httpx.AsyncClient")
        mock_client_class = patcher.start()
        mock_client_class.return_value = mock_instance
        patchers.append(patcher)
        return mock_instance

    yield _patch

    for patcher in patchers:
        patcher.stop()


def _generate_keypair(tmp_path_factory, name: str) -> dict:
    if shutil.which(GPG_BINARY) is None:
        pytest.skip("gpg binary not available")
    gnupg = pytest.importorskip("gnupg")

    home = tmp_path_factory.mktemp(f"gpg-{name}")
    gpg = gnupg.GPG(gnupghome=str(home), gpgbinary=GPG_BINARY)
    key_input = gpg.gen_key_input(
        name_real=f"Breakout {name}",
        name_email=f"{name}@breakout.invalid",
        key_type="RSA",
        key_length=2048,
        no_protection=True,
    )
    key = gpg.gen_key(key_input)
    if not key.fingerprint:
        pytest.skip(f"gpg key generation failed: {key.stderr}")

    return {
        "fingerprint": key.fingerprint,
        "public": gpg.export_keys(key.fingerprint),
        "private": gpg.export_keys(key.fingerprint, secret=True, expect_passphrase=False),
    }


@pytest.fixture(scope="session")
def gpg_keypair(tmp_path_factory):
    """Unprotected RSA keypair generated once per session."""
    return _generate_keypair(tmp_path_factory, "host")


@pytest.fixture(scope="session")
def other_gpg_keypair(tmp_path_factory):
    """A second, unrelated keypair."""
    return _generate_keypair(tmp_path_factory, "other")
