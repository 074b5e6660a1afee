"""Bounded polling of a refreshable resource until it reaches a target state."""

import asyncio
import logging

from stackready.provisioning.errors import TransientFetchError, WaitCancelled, WaitTimeout

logger = logging.getLogger(__name__)


def _fmt(seconds):
    return f"{seconds:g}"


async def wait_until(fetch, ready, spec, *, handle, initial=None, describe=None, header=None, cancel=None, logger=None):
    """Re-fetch a resource every ``spec.interval`` seconds until ``ready`` accepts it.

    Elapsed time advances by the fixed interval on each iteration rather than by
    wall-clock time, so the total blocked time can exceed ``spec.max_wait`` by
    less than one interval.

    Args:
        fetch: async callable returning a fresh snapshot (or ``None``).
        ready: predicate over the snapshot.
        spec: PollSpec with interval and max_wait.
        handle: ResourceHandle used in progress lines and errors.
        initial: optional snapshot the caller already holds; used in place of the
            first fetch, so the first read happens after the first sleep.
        describe: optional callable mapping the last snapshot to a status string
            for progress lines.
        header: optional progress line logged once before the first sleep.
        cancel: optional asyncio.Event; checked before every sleep.
        logger: progress sink (defaults to this module's logger).

    Returns:
        The first snapshot that satisfies ``ready``.

    Raises:
        WaitTimeout: ``ready`` was still false once ``max_wait`` was reached.
        WaitCancelled: ``cancel`` was set while waiting.
    """
    logger = logger or logging.getLogger(__name__)
    describe = describe or _default_describe

    if initial is not None:
        snapshot, last_error = initial, None
    else:
        snapshot, last_error = await _fetch_once(fetch, handle, logger)
    if last_error is None and ready(snapshot):
        return snapshot

    elapsed = 0
    logger.info(header or f"Waiting for {handle} (every {_fmt(spec.interval)}s, up to {_fmt(spec.max_wait)}s)...")
    while elapsed < spec.max_wait:
        if cancel is not None and cancel.is_set():
            raise WaitCancelled(f"Wait for {handle} cancelled after {_fmt(elapsed)}s", handle=handle, elapsed=elapsed)

        logger.info(
            f"{_fmt(elapsed)}/{_fmt(spec.max_wait)}s elapsed -- sleeping {_fmt(spec.interval)} seconds "
            f"for {handle} (status: {describe(snapshot)})"
        )
        await asyncio.sleep(spec.interval)
        elapsed += spec.interval

        result, error = await _fetch_once(fetch, handle, logger)
        if error is not None:
            last_error = error
            continue
        snapshot = result
        if ready(snapshot):
            return snapshot

    message = f"{handle} not ready after {_fmt(elapsed)}/{_fmt(spec.max_wait)}s (last status: {describe(snapshot)})"
    if last_error is not None:
        message += f"; last error: {last_error}"
    raise WaitTimeout(message, handle=handle, elapsed=elapsed, max_wait=spec.max_wait, last_error=last_error)


async def _fetch_once(fetch, handle, logger):
    """Run one fetch, absorbing transient failures.

    Returns:
        (snapshot, error) tuple; exactly one of them is meaningful.
    """
    try:
        return await fetch(), None
    except TransientFetchError as e:
        logger.warning(f"Transient error reading {handle}: {e}")
        return None, e


def _default_describe(snapshot):
    if snapshot is None:
        return "unknown"
    return getattr(snapshot, "status", None) or "unknown"
