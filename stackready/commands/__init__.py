"""Shared CLI plumbing: connection flags, client construction, error exit."""

import logging
import sys

from stackready.config import DEFAULT_STATE_PATH, resolve_setting
from stackready.provisioning.errors import ProvisioningError
from stackready.provisioning.openstack import NovaClient, driver_url_for

logger = logging.getLogger(__name__)

DRY_RUN_COMPUTE_URL = "https://compute.dry-run"


def add_common_args(parser):
    """Add state file and OpenStack connection flags to *parser*."""
    parser.add_argument("--state", default=DEFAULT_STATE_PATH, help=f"Reference state file (default: {DEFAULT_STATE_PATH})")
    parser.add_argument("--compute-url", default=None, help="Nova endpoint (fallback: OS_COMPUTE_URL env var)")
    parser.add_argument("--token", default=None, help="Auth token (fallback: OS_AUTH_TOKEN env var)")
    parser.add_argument("--auth-url", default=None, help="Identity URL recorded as driver_url (fallback: OS_AUTH_URL env var)")
    parser.add_argument("--username", default=None, help="OpenStack user recorded as creator (fallback: OS_USERNAME env var)")


def make_client(args, dry_run=False):
    """Build a NovaClient from CLI flags and env vars."""
    compute_url = resolve_setting(args.compute_url, "OS_COMPUTE_URL", "compute_url", required=not dry_run)
    token = resolve_setting(args.token, "OS_AUTH_TOKEN", "token", required=not dry_run)
    return NovaClient(compute_url or DRY_RUN_COMPUTE_URL, token or "", dry_run=dry_run)


def driver_url(args):
    return driver_url_for(resolve_setting(args.auth_url, "OS_AUTH_URL", "auth_url", required=False))


def creator(args):
    return resolve_setting(args.username, "OS_USERNAME", "username", required=False) or ""


async def run_or_exit(coro):
    """Await *coro*; log provisioning failures and exit 1."""
    try:
        return await coro
    except ProvisioningError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
