"""Image lifecycle: allocate from a running server, wait until ACTIVE, destroy."""

import logging
import time

from stackready import __version__
from stackready.provisioning.errors import ResourceConflict, ResourceNotFound
from stackready.provisioning.password import server_handle
from stackready.provisioning.poller import wait_until
from stackready.provisioning.types import PollSpec, ResourceHandle

logger = logging.getLogger(__name__)

ACTIVE = "ACTIVE"
DELETED = "DELETED"

# Independent of the password budget: snapshotting a disk and issuing a
# password are unrelated operations.
IMAGE_POLL = PollSpec(interval=10, max_wait=300)


async def image_for(compute, image_spec):
    """Look up the image recorded in *image_spec*'s reference.

    Returns:
        Snapshot of the image, or None when there is no reference or the image is gone.
    """
    image_id = image_spec.reference.get("image_id")
    if not image_id:
        return None
    try:
        return await compute.get_image(image_id)
    except ResourceNotFound:
        return None


async def allocate_image(compute, image_spec, machine_spec, driver_url, creator, image_options=None, logger=None):
    """Create an image from *machine_spec*'s server and record it in *image_spec*.

    Raises:
        ResourceConflict: the image spec already points at an existing image.
    """
    logger = logger or logging.getLogger(__name__)

    existing = await image_for(compute, image_spec)
    if existing is not None:
        raise ResourceConflict(f"Image {image_spec.name} already exists ({existing.id}); refusing to create it again")

    server = server_handle(machine_spec)
    options = {"description": f"The Image named '{image_spec.name}'"}
    options.update(image_options or {})

    logger.info(f"Create image {image_spec.name} from machine {machine_spec.name} with options {options}")
    image_id = await compute.create_image(server.id, image_spec.name, options)

    image_spec.reference = {
        "driver_url": driver_url,
        "driver_version": __version__,
        "image_id": image_id,
        "creator": creator,
        "created_at": int(time.time()),
    }
    logger.info(f"Image {image_spec.name} requested (id={image_id}).")
    return image_spec.reference


async def wait_for_active(compute, image_spec, image=None, spec=IMAGE_POLL, driver_url="", cancel=None, logger=None):
    """Wait until the image reaches ACTIVE.

    If *image* is given and already ACTIVE, returns it without any API call.

    Raises:
        ResourceNotFound: no image is recorded for *image_spec*.
        WaitTimeout: the image did not become ACTIVE within ``spec.max_wait``.
    """
    logger = logger or logging.getLogger(__name__)

    if image is None:
        image = await image_for(compute, image_spec)
        if image is None:
            raise ResourceNotFound(f"Image {image_spec.name} does not exist")
    if image.status == ACTIVE:
        return image

    driver_url = driver_url or image_spec.reference.get("driver_url", "")
    handle = ResourceHandle(id=image.id, name=f"image {image_spec.name} on {driver_url}")

    async def fetch():
        return await compute.get_image(image.id)

    result = await wait_until(
        fetch,
        lambda s: s.status == ACTIVE,
        spec,
        handle=handle,
        initial=image,
        header=f"Waiting for image {image_spec.name} ({image.id} on {driver_url}) to be {ACTIVE}...",
        cancel=cancel,
        logger=logger,
    )
    logger.info(f"Image {image_spec.name} is now ready")
    return result


async def ready_image(compute, image_spec, spec=IMAGE_POLL, cancel=None, logger=None):
    """Ensure the image exists and is ACTIVE, waiting if needed.

    Raises:
        ResourceNotFound: the image does not exist.
    """
    logger = logger or logging.getLogger(__name__)

    image = await image_for(compute, image_spec)
    if image is None:
        raise ResourceNotFound(f"Cannot ready image {image_spec.name}: it does not exist")

    if image.status != ACTIVE:
        return await wait_for_active(compute, image_spec, image, spec=spec, cancel=cancel, logger=logger)

    logger.info(f"Image {image_spec.name} is active!")
    return image


async def destroy_image(compute, image_spec, logger=None):
    """Delete the image if it still exists.

    An image that is absent or already DELETED counts as destroyed.

    Returns:
        True if a delete request was issued.
    """
    logger = logger or logging.getLogger(__name__)

    image = await image_for(compute, image_spec)
    if image is None or image.status == DELETED:
        logger.info(f"Image {image_spec.name} is already deleted.")
        return False

    logger.info(f"Deleting image {image_spec.name} ({image.id})...")
    try:
        await compute.delete_image(image.id)
    except ResourceNotFound:
        logger.info(f"Image {image_spec.name} disappeared before it could be deleted.")
        return False
    logger.info("Image deleted.")
    return True
