"""Password command: wait for a Windows server's admin password."""

import asyncio

from stackready.commands import add_common_args, make_client, run_or_exit
from stackready.config import load_state, machine_spec
from stackready.provisioning.password import PASSWORD_POLL, wait_for_admin_password
from stackready.provisioning.types import PollSpec


def handle_wait(args):
    """CLI handler for 'password wait'."""
    asyncio.run(_handle_wait(args))


async def _handle_wait(args):
    state = load_state(args.state)
    machine = machine_spec(state, args.machine)
    compute = make_client(args)
    spec = PollSpec(interval=args.interval, max_wait=args.timeout)
    await run_or_exit(wait_for_admin_password(compute, machine, spec=spec))


def register_password_command(subparsers):
    """Register the 'password' command."""
    password_parser = subparsers.add_parser("password", help="Windows admin password")
    action_subparsers = password_parser.add_subparsers(dest="action", required=True)

    parser = action_subparsers.add_parser("wait", help="Wait until the encrypted admin password is issued")
    add_common_args(parser)
    parser.add_argument("--machine", required=True, help="Machine name in the state file")
    parser.add_argument(
        "--interval", type=float, default=PASSWORD_POLL.interval, help=f"Seconds between polls (default: {PASSWORD_POLL.interval:g})"
    )
    parser.add_argument(
        "--timeout", type=float, default=PASSWORD_POLL.max_wait, help=f"Seconds to wait (default: {PASSWORD_POLL.max_wait:g})"
    )
    parser.set_defaults(func=handle_wait)
