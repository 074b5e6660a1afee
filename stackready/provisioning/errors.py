"""Exceptions raised by the provisioning layer."""


class ProvisioningError(RuntimeError):
    """Base class for all provisioning failures."""


class WaitTimeout(ProvisioningError):
    """A bounded wait ran out before the resource became ready."""

    def __init__(self, message, handle=None, elapsed=0, max_wait=0, last_error=None):
        super().__init__(message)
        self.handle = handle
        self.elapsed = elapsed
        self.max_wait = max_wait
        self.last_error = last_error


class WaitCancelled(ProvisioningError):
    """A wait was interrupted by its cancellation event."""

    def __init__(self, message, handle=None, elapsed=0):
        super().__init__(message)
        self.handle = handle
        self.elapsed = elapsed


class ResourceNotFound(ProvisioningError):
    pass


class ResourceConflict(ProvisioningError):
    pass


class UnreachableError(ProvisioningError):
    """A server has no usable network address."""


class DecryptionError(ProvisioningError):
    pass


class TransientFetchError(ProvisioningError):
    """A single read from the compute API failed and may succeed on retry."""


class ComputeAPIError(ProvisioningError):
    """The compute API rejected a request or returned an unusable response."""
