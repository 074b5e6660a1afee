"""Shared data types for readiness polling and connection assembly."""

from dataclasses import dataclass, field

# Reference keys persisted by earlier runs may carry a leading ':' (symbol-style
# spelling). Both spellings name the same field.
_LEGACY_KEY_PREFIX = ":"


def normalize_reference(reference):
    """Return a copy of *reference* with legacy ``:key`` spellings folded into ``key``.

    When both spellings are present the plain key wins.
    """
    if not reference:
        return {}
    normalized = {}
    for key, value in reference.items():
        key = str(key)
        if key.startswith(_LEGACY_KEY_PREFIX):
            normalized.setdefault(key[len(_LEGACY_KEY_PREFIX) :], value)
        else:
            normalized[key] = value
    return normalized


@dataclass(frozen=True)
class ResourceHandle:
    """Provider-assigned id plus a human-readable name."""

    id: str
    name: str

    def __str__(self) -> str:
        return f"{self.name} ({self.id})" if self.name and self.name != self.id else self.id


@dataclass(frozen=True)
class PollSpec:
    """Interval and maximum wait (seconds) for a bounded retry loop."""

    interval: float
    max_wait: float

    def __post_init__(self):
        if self.interval <= 0:
            raise ValueError(f"Poll interval must be positive, got {self.interval}")
        if self.max_wait < 0:
            raise ValueError(f"Poll max_wait must not be negative, got {self.max_wait}")


@dataclass(frozen=True)
class Snapshot:
    """Point-in-time read of a resource's observable state."""

    id: str
    status: str | None = None
    attributes: dict = field(default_factory=dict)

    def get(self, key, default=None):
        return self.attributes.get(key, default)


@dataclass(frozen=True)
class EndpointChoice:
    """Network address picked for a connection, and where it came from."""

    address: str
    source: str
    warning: str | None = None


@dataclass
class MachineSpec:
    """A named machine and its caller-owned reference metadata."""

    name: str
    reference: dict = field(default_factory=dict)

    def __post_init__(self):
        self.reference = normalize_reference(self.reference)


@dataclass
class ImageSpec:
    """A named image and its caller-owned reference metadata."""

    name: str
    reference: dict = field(default_factory=dict)

    def __post_init__(self):
        self.reference = normalize_reference(self.reference)


@dataclass
class WinRMConnectionParams:
    """Everything needed to open a WinRM session to a Windows server."""

    endpoint: str
    transport: str
    user: str
    password: str = field(repr=False)
    disable_sspi: bool = True
    basic_auth_only: bool = True
    no_ssl_peer_verification: bool = True
    ca_trust_path: str | None = None

    @property
    def options(self) -> dict:
        """Session options in the form WinRM transports accept."""
        return {
            "user": self.user,
            "pass": self.password,
            "disable_sspi": self.disable_sspi,
            "basic_auth_only": self.basic_auth_only,
            "no_ssl_peer_verification": self.no_ssl_peer_verification,
            "ca_trust_path": self.ca_trust_path,
        }
