"""WinRM connection assembly: pick a reachable address and build session parameters."""

import logging

from stackready.provisioning.errors import UnreachableError
from stackready.provisioning.password import PASSWORD_POLL, decrypt_password, server_handle, wait_for_admin_password
from stackready.provisioning.types import EndpointChoice, WinRMConnectionParams
from stackready.redact import register_secret

logger = logging.getLogger(__name__)

DEFAULT_WINRM_PORT = 5986
DEFAULT_WINRM_USERNAME = "Admin"
WINRM_PATH = "/wsman"
WINRM_TRANSPORT = "ssl"


def choose_endpoint(server, reference, name, logger=None):
    """Pick the address to connect to.

    ``use_private_ip_for_ssh`` forces the private address. Without it the public
    address is used, falling back to the private one (with a warning) when the
    server has no public address.

    Raises:
        UnreachableError: the chosen address is missing.
    """
    logger = logger or logging.getLogger(__name__)
    private_ip = server.get("private_ip_address")
    public_ip = server.get("public_ip_address")

    warning = None
    if reference.get("use_private_ip_for_ssh"):
        address, source = private_ip, "private"
    elif not public_ip:
        address, source = private_ip, "private"
        if private_ip:
            warning = (
                f"Server {name} has no public IP address. Using private IP {private_ip}. "
                "Set use_private_ip_for_ssh: true in the machine reference if this will always be the case."
            )
            logger.warning(warning)
    else:
        address, source = public_ip, "public"

    if not address:
        raise UnreachableError(f"Server {name} ({server.id}) has no {source} IP address to connect to")

    logger.info(f"Connecting to server {address}")
    return EndpointChoice(address=address, source=source, warning=warning)


def build_winrm_params(choice, password, reference):
    """Build WinRM session parameters for *choice*.

    Endpoint is https://<address>:<port>/wsman with basic auth only and no SSL
    peer verification.
    """
    port = reference.get("winrm_port") or DEFAULT_WINRM_PORT
    return WinRMConnectionParams(
        endpoint=f"https://{choice.address}:{port}{WINRM_PATH}",
        transport=WINRM_TRANSPORT,
        user=reference.get("winrm.username") or DEFAULT_WINRM_USERNAME,
        password=password,
        disable_sspi=True,
        basic_auth_only=True,
        no_ssl_peer_verification=True,
        ca_trust_path=None,
    )


async def create_winrm_connection(
    compute,
    machine_spec,
    private_key_pem,
    server=None,
    spec=PASSWORD_POLL,
    cancel=None,
    logger=None,
):
    """Resolve everything needed to open a WinRM session to *machine_spec*'s server.

    Reads the server (unless *server* is given), chooses the address, waits for
    the admin password and decrypts it. The plaintext password is registered
    for log redaction before it is returned.

    Returns:
        WinRMConnectionParams
    """
    logger = logger or logging.getLogger(__name__)
    if server is None:
        server = await compute.get_server(server_handle(machine_spec).id)

    choice = choose_endpoint(server, machine_spec.reference, machine_spec.name, logger=logger)
    encrypted = await wait_for_admin_password(compute, machine_spec, spec=spec, cancel=cancel, logger=logger)
    password = decrypt_password(private_key_pem, encrypted)
    register_secret(password)

    return build_winrm_params(choice, password, machine_spec.reference)
