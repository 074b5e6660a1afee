"""Windows admin password: wait for Nova to publish it, then decrypt it."""

import base64
import binascii
import logging

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from stackready.provisioning.errors import DecryptionError, ResourceNotFound, WaitTimeout
from stackready.provisioning.poller import wait_until
from stackready.provisioning.types import PollSpec, ResourceHandle

logger = logging.getLogger(__name__)

# 15 minutes
PASSWORD_POLL = PollSpec(interval=10, max_wait=900)


def server_handle(machine_spec):
    """ResourceHandle for the server behind *machine_spec*."""
    server_id = machine_spec.reference.get("server_id")
    if not server_id:
        raise ResourceNotFound(f"Machine {machine_spec.name} has no server_id in its reference")
    return ResourceHandle(id=server_id, name=machine_spec.name)


async def wait_for_admin_password(compute, machine_spec, spec=PASSWORD_POLL, cancel=None, logger=None):
    """Wait for the encrypted admin password of a server to become available.

    An empty or missing password means it has not been issued yet.

    Returns:
        The encrypted password blob (base64 text), undecoded.

    Raises:
        WaitTimeout: the password never became available within ``spec.max_wait``.
    """
    logger = logger or logging.getLogger(__name__)
    handle = server_handle(machine_spec)

    async def fetch():
        return await compute.get_server_password(handle.id)

    try:
        blob = await wait_until(
            fetch,
            bool,
            spec,
            handle=handle,
            header=f"Waiting for {machine_spec.name}'s admin password to be available...",
            describe=lambda s: "issued" if s else "not issued",
            cancel=cancel,
            logger=logger,
        )
    except WaitTimeout as e:
        raise WaitTimeout(
            f"Admin password for {handle} never became available ({e.elapsed:g}/{e.max_wait:g}s elapsed)",
            handle=handle,
            elapsed=e.elapsed,
            max_wait=e.max_wait,
            last_error=e.last_error,
        ) from e
    logger.info(f"{machine_spec.name}'s admin password is available!")
    return blob


def decrypt_password(private_key_pem, encrypted_password):
    """Decrypt a Nova-issued admin password with the server's RSA key.

    Args:
        private_key_pem: PEM-encoded RSA private key (bytes or str).
        encrypted_password: base64 ciphertext as returned by Nova.

    Raises:
        DecryptionError: the blob is malformed or the key does not match.
    """
    if isinstance(private_key_pem, str):
        private_key_pem = private_key_pem.encode()
    if isinstance(encrypted_password, str):
        encrypted_password = encrypted_password.encode()

    try:
        key = serialization.load_pem_private_key(private_key_pem, password=None)
    except (ValueError, TypeError) as e:
        raise DecryptionError(f"Could not load private key: {e}") from e
    if not isinstance(key, rsa.RSAPrivateKey):
        raise DecryptionError(f"Private key must be RSA, got {type(key).__name__}")

    try:
        ciphertext = base64.b64decode(encrypted_password)
    except binascii.Error as e:
        raise DecryptionError(f"Encrypted password is not valid base64: {e}") from e

    try:
        plaintext = key.decrypt(ciphertext, padding.PKCS1v15())
    except ValueError as e:
        raise DecryptionError("Encrypted password could not be decrypted with the supplied key") from e

    try:
        return plaintext.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecryptionError("Decrypted password is not valid UTF-8") from e
