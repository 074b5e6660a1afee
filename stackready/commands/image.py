"""Image commands: create an image from a machine, wait for it, destroy it."""

import asyncio
import logging

from stackready.commands import add_common_args, creator, driver_url, make_client, run_or_exit
from stackready.config import image_spec, load_state, machine_spec, save_state
from stackready.provisioning.images import IMAGE_POLL, allocate_image, destroy_image, ready_image
from stackready.provisioning.types import PollSpec

logger = logging.getLogger(__name__)


def handle_create(args):
    """CLI handler for 'image create'."""
    asyncio.run(_handle_create(args))


async def _handle_create(args):
    state = load_state(args.state)
    machine = machine_spec(state, args.machine)
    image = image_spec(state, args.image)
    compute = make_client(args, dry_run=args.dry_run)

    options = {"description": args.description} if args.description else None
    reference = await run_or_exit(
        allocate_image(compute, image, machine, driver_url(args), creator(args), image_options=options)
    )

    if args.dry_run:
        logger.info(f"[dry-run] Would record image '{args.image}' in {args.state}")
        return
    state["images"][args.image] = reference
    save_state(state, args.state)


def handle_ready(args):
    """CLI handler for 'image ready'."""
    asyncio.run(_handle_ready(args))


async def _handle_ready(args):
    state = load_state(args.state)
    image = image_spec(state, args.image)
    compute = make_client(args)
    spec = PollSpec(interval=args.interval, max_wait=args.timeout)
    await run_or_exit(ready_image(compute, image, spec=spec))


def handle_destroy(args):
    """CLI handler for 'image destroy'."""
    asyncio.run(_handle_destroy(args))


async def _handle_destroy(args):
    state = load_state(args.state)
    image = image_spec(state, args.image)
    compute = make_client(args, dry_run=args.dry_run)
    await run_or_exit(destroy_image(compute, image))

    if args.dry_run or args.image not in state["images"]:
        return
    del state["images"][args.image]
    save_state(state, args.state)
    logger.info(f"Removed image '{args.image}' from {args.state}")


# ── Registration ───────────────────────────────────────────────────


def register_image_command(subparsers):
    """Register the 'image' command with create/ready/destroy actions."""
    image_parser = subparsers.add_parser("image", help="Manage machine images")
    action_subparsers = image_parser.add_subparsers(dest="action", required=True)

    parser = action_subparsers.add_parser("create", help="Create an image from a running machine")
    add_common_args(parser)
    parser.add_argument("--image", required=True, help="Image name")
    parser.add_argument("--machine", required=True, help="Machine name in the state file")
    parser.add_argument("--description", default=None, help="Image description metadata")
    parser.add_argument("--dry-run", action="store_true", help="Print requests without executing")
    parser.set_defaults(func=handle_create)

    parser = action_subparsers.add_parser("ready", help="Wait until an image is ACTIVE")
    add_common_args(parser)
    parser.add_argument("--image", required=True, help="Image name")
    parser.add_argument(
        "--interval", type=float, default=IMAGE_POLL.interval, help=f"Seconds between polls (default: {IMAGE_POLL.interval:g})"
    )
    parser.add_argument(
        "--timeout", type=float, default=IMAGE_POLL.max_wait, help=f"Seconds to wait for ACTIVE (default: {IMAGE_POLL.max_wait:g})"
    )
    parser.set_defaults(func=handle_ready)

    parser = action_subparsers.add_parser("destroy", help="Delete an image")
    add_common_args(parser)
    parser.add_argument("--image", required=True, help="Image name")
    parser.add_argument("--dry-run", action="store_true", help="Print requests without executing")
    parser.set_defaults(func=handle_destroy)
