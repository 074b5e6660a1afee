"""Readiness polling, image lifecycle and WinRM connection assembly."""

from stackready.provisioning.errors import (
    ComputeAPIError,
    DecryptionError,
    ProvisioningError,
    ResourceConflict,
    ResourceNotFound,
    TransientFetchError,
    UnreachableError,
    WaitCancelled,
    WaitTimeout,
)
from stackready.provisioning.images import (
    IMAGE_POLL,
    allocate_image,
    destroy_image,
    image_for,
    ready_image,
    wait_for_active,
)
from stackready.provisioning.openstack import ComputeClient, NovaClient, driver_url_for
from stackready.provisioning.password import PASSWORD_POLL, decrypt_password, wait_for_admin_password
from stackready.provisioning.poller import wait_until
from stackready.provisioning.types import (
    EndpointChoice,
    ImageSpec,
    MachineSpec,
    PollSpec,
    ResourceHandle,
    Snapshot,
    WinRMConnectionParams,
)
from stackready.provisioning.winrm import build_winrm_params, choose_endpoint, create_winrm_connection

__all__ = [
    "ComputeClient",
    "NovaClient",
    "driver_url_for",
    "wait_until",
    "PollSpec",
    "ResourceHandle",
    "Snapshot",
    "EndpointChoice",
    "MachineSpec",
    "ImageSpec",
    "WinRMConnectionParams",
    "PASSWORD_POLL",
    "wait_for_admin_password",
    "decrypt_password",
    "IMAGE_POLL",
    "image_for",
    "allocate_image",
    "ready_image",
    "wait_for_active",
    "destroy_image",
    "choose_endpoint",
    "build_winrm_params",
    "create_winrm_connection",
    "ProvisioningError",
    "WaitTimeout",
    "WaitCancelled",
    "ResourceNotFound",
    "ResourceConflict",
    "UnreachableError",
    "DecryptionError",
    "TransientFetchError",
    "ComputeAPIError",
]
