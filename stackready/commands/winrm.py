"""WinRM command: resolve endpoint and credentials for a Windows server."""

import asyncio
import logging
import os
import sys

from stackready.commands import add_common_args, make_client, run_or_exit
from stackready.config import load_state, machine_spec
from stackready.provisioning.password import PASSWORD_POLL
from stackready.provisioning.types import PollSpec
from stackready.provisioning.winrm import create_winrm_connection

logger = logging.getLogger(__name__)


def handle_winrm(args):
    """CLI handler for 'winrm'."""
    asyncio.run(_handle_winrm(args))


async def _handle_winrm(args):
    key_path = os.path.expanduser(args.private_key)
    try:
        with open(key_path, "rb") as f:
            pem_bytes = f.read()
    except OSError as e:
        logger.error(f"Error: cannot read private key '{key_path}': {e}")
        sys.exit(1)

    state = load_state(args.state)
    machine = machine_spec(state, args.machine)
    compute = make_client(args)
    spec = PollSpec(interval=args.interval, max_wait=args.timeout)

    params = await run_or_exit(create_winrm_connection(compute, machine, pem_bytes, spec=spec))

    logger.info(f"Endpoint:  {params.endpoint}")
    logger.info(f"Transport: {params.transport}")
    logger.info(f"User:      {params.user}")
    if args.show_password:
        # Printed, not logged: the log filter would mask it.
        print(f"Password:  {params.password}")


def register_winrm_command(subparsers):
    """Register the 'winrm' command."""
    parser = subparsers.add_parser("winrm", help="Resolve WinRM connection parameters for a machine")
    add_common_args(parser)
    parser.add_argument("--machine", required=True, help="Machine name in the state file")
    parser.add_argument("--private-key", required=True, help="RSA private key (PEM) the server was booted with")
    parser.add_argument(
        "--interval", type=float, default=PASSWORD_POLL.interval, help=f"Seconds between polls (default: {PASSWORD_POLL.interval:g})"
    )
    parser.add_argument(
        "--timeout", type=float, default=PASSWORD_POLL.max_wait, help=f"Seconds to wait for the password (default: {PASSWORD_POLL.max_wait:g})"
    )
    parser.add_argument("--show-password", action="store_true", help="Print the decrypted admin password")
    parser.set_defaults(func=handle_winrm)
