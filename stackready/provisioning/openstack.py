"""OpenStack compute adapter: the handful of Nova calls the readiness policies need."""

import json
import logging
from typing import Protocol

import httpx

from stackready.provisioning.errors import ComputeAPIError, ResourceNotFound, TransientFetchError
from stackready.provisioning.types import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60
DRY_RUN_IMAGE_ID = "dry-run-image-id"


class ComputeClient(Protocol):
    """Narrow view of a compute service used by the readiness policies."""

    async def get_server_password(self, server_id: str) -> str | None: ...

    async def get_server(self, server_id: str) -> Snapshot: ...

    async def get_image(self, image_id: str) -> Snapshot: ...

    async def create_image(self, server_id: str, name: str, options: dict) -> str: ...

    async def delete_image(self, image_id: str) -> None: ...


def driver_url_for(auth_url):
    """Identity string recorded in image references (``openstack:<auth_url>``)."""
    return f"openstack:{auth_url}" if auth_url else "openstack"


# ── Response parsing ──────────────────────────────────────────────


def _server_snapshot(server):
    """Build a Snapshot from a Nova server dict.

    Fixed addresses are private, floating addresses are public; ``accessIPv4``
    stands in for the public address when no floating IP is attached.
    """
    private_ip = None
    public_ip = None
    for addresses in (server.get("addresses") or {}).values():
        for addr in addresses:
            ip = addr.get("addr")
            kind = addr.get("OS-EXT-IPS:type", "fixed")
            if kind == "floating" and public_ip is None:
                public_ip = ip
            elif kind == "fixed" and private_ip is None:
                private_ip = ip
    if public_ip is None:
        public_ip = server.get("accessIPv4") or None

    return Snapshot(
        id=server.get("id", ""),
        status=server.get("status"),
        attributes={
            "name": server.get("name"),
            "private_ip_address": private_ip,
            "public_ip_address": public_ip,
        },
    )


def _image_snapshot(image):
    return Snapshot(
        id=image.get("id", ""),
        status=image.get("status"),
        attributes={
            "name": image.get("name"),
            "progress": image.get("progress"),
            "server_id": (image.get("server") or {}).get("id"),
        },
    )


def _created_image_id(resp):
    """Extract the new image id from a createImage response.

    Newer microversions return ``{"image_id": ...}``; older ones only set the
    ``Location`` header.
    """
    if resp.content:
        body = resp.json()
        if body.get("image_id"):
            return body["image_id"]
        if (body.get("image") or {}).get("id"):
            return body["image"]["id"]
    location = resp.headers.get("Location", "")
    if location:
        return location.rstrip("/").rsplit("/", 1)[-1]
    raise ComputeAPIError("createImage response carried no image id")


# ── Client ────────────────────────────────────────────────────────


class NovaClient:
    """Thin httpx adapter over the Nova compute API.

    Expects an already-issued token and the compute endpoint from the service
    catalog.

    In dry-run mode requests are logged instead of sent; reads return ``None``
    and ``create_image`` returns a placeholder id.
    """

    def __init__(self, compute_url, token, dry_run=False, timeout=DEFAULT_TIMEOUT, transport=None):
        self.compute_url = compute_url.rstrip("/")
        self.token = token
        self.dry_run = dry_run
        self.timeout = timeout
        self.transport = transport

    async def _api_request(self, method, path, data=None):
        """Make an authenticated Nova request.

        Returns:
            The httpx.Response, or ``None`` in dry-run mode.

        Raises:
            ResourceNotFound: on HTTP 404.
            TransientFetchError: on transport errors and 5xx responses.
            ComputeAPIError: on any other 4xx response.
        """
        url = f"{self.compute_url}{path}"

        if self.dry_run:
            logger.info(f"[dry-run] {method} {url}")
            if data is not None:
                logger.info(f"[dry-run] payload: {json.dumps(data, indent=2)}")
            return None

        headers = {"X-Auth-Token": self.token, "Accept": "application/json"}
        try:
            async with httpx.AsyncClient(transport=self.transport) as client:
                resp = await client.request(method, url, json=data, headers=headers, timeout=self.timeout)
        except httpx.TransportError as e:
            raise TransientFetchError(f"{method} {url} failed: {e}") from e

        if resp.status_code == 404:
            raise ResourceNotFound(f"{method} {url} returned 404")
        if resp.status_code >= 500:
            raise TransientFetchError(f"{method} {url} returned {resp.status_code}")
        if resp.status_code >= 400:
            raise ComputeAPIError(f"{method} {url} returned {resp.status_code}: {resp.text[:200]}")
        return resp

    async def get_server_password(self, server_id):
        """GET /servers/{id}/os-server-password; empty string until the password is issued."""
        resp = await self._api_request("GET", f"/servers/{server_id}/os-server-password")
        if resp is None:
            return None
        return resp.json().get("password") or None

    async def get_server(self, server_id):
        resp = await self._api_request("GET", f"/servers/{server_id}")
        if resp is None:
            return None
        return _server_snapshot(resp.json()["server"])

    async def get_image(self, image_id):
        resp = await self._api_request("GET", f"/images/{image_id}")
        if resp is None:
            return None
        return _image_snapshot(resp.json()["image"])

    async def create_image(self, server_id, name, options):
        """POST /servers/{id}/action with a createImage body.

        Returns:
            The new image id.
        """
        data = {"createImage": {"name": name, "metadata": dict(options or {})}}
        resp = await self._api_request("POST", f"/servers/{server_id}/action", data)
        if resp is None:
            return DRY_RUN_IMAGE_ID
        return _created_image_id(resp)

    async def delete_image(self, image_id):
        await self._api_request("DELETE", f"/images/{image_id}")
