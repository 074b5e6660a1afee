"""Shared pytest fixtures for all test modules."""

import base64
import os
import subprocess
import sys
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

import stackready.redact as redact_module

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the stackready CLI as a subprocess."""

    def _run(*args, env=None):
        result = subprocess.run(
            [sys.executable, "-m", "stackready.stackready", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env={**os.environ, **(env or {})},
        )
        return result.returncode, result.stdout, result.stderr

    return _run


# ── Unit-test fixtures ──────────────────────────────────────────────


@pytest.fixture
def sleeps():
    """Replace asyncio.sleep in the poller with an AsyncMock that records calls."""
    with patch("stackready.provisioning.poller.asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
        yield mock_sleep


@pytest.fixture
def compute():
    """Compute client double; tests script each method with side_effect/return_value."""
    client = MagicMock()
    client.get_server_password = AsyncMock()
    client.get_server = AsyncMock()
    client.get_image = AsyncMock()
    client.create_image = AsyncMock()
    client.delete_image = AsyncMock()
    return client


@pytest.fixture(scope="session")
def rsa_key():
    """A throwaway RSA private key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def rsa_key_pem(rsa_key):
    return rsa_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture(scope="session")
def encrypt_password(rsa_key):
    """Return a callable that encrypts a password the way Nova publishes it."""

    def _encrypt(plaintext, key=None):
        key = key or rsa_key
        ciphertext = key.public_key().encrypt(plaintext.encode(), padding.PKCS1v15())
        return base64.b64encode(ciphertext).decode()

    return _encrypt


@pytest.fixture(autouse=True)
def reset_redaction():
    """Drop runtime-registered secrets and the pattern cache around each test."""
    redact_module._runtime_secrets.clear()
    redact_module._patterns = None
    yield
    redact_module._runtime_secrets.clear()
    redact_module._patterns = None
