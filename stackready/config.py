"""Reference state file and connection settings for CLI commands."""

import logging
import os
import sys

import yaml

from stackready.provisioning.types import ImageSpec, MachineSpec

logger = logging.getLogger(__name__)

DEFAULT_STATE_PATH = "stackready.yaml"


def load_state(state_path: str = DEFAULT_STATE_PATH) -> dict:
    """Load the reference state file; a missing file is an empty state."""
    state_path = _expand_path(state_path)
    try:
        with open(state_path) as f:
            state = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {"machines": {}, "images": {}}
    except yaml.YAMLError as e:
        logger.error(f"Error parsing state file '{state_path}': {e}")
        sys.exit(1)

    if not isinstance(state, dict):
        logger.error(f"Error: state file '{state_path}' must contain a mapping.")
        sys.exit(1)
    state.setdefault("machines", {})
    state.setdefault("images", {})
    return state


def save_state(state: dict, state_path: str = DEFAULT_STATE_PATH) -> None:
    """Write the reference state file, replacing it atomically."""
    state_path = _expand_path(state_path)
    tmp_path = f"{state_path}.tmp"
    with open(tmp_path, "w") as f:
        yaml.safe_dump(state, f, default_flow_style=False, sort_keys=True)
    os.replace(tmp_path, state_path)


def machine_spec(state: dict, name: str) -> MachineSpec:
    """MachineSpec for *name*; exits if the state has no such machine."""
    reference = (state.get("machines") or {}).get(name)
    if reference is None:
        logger.error(f"Error: machine '{name}' not found in state file.")
        sys.exit(1)
    return MachineSpec(name=name, reference=reference)


def image_spec(state: dict, name: str) -> ImageSpec:
    """ImageSpec for *name*; an unknown image gets an empty reference."""
    return ImageSpec(name=name, reference=(state.get("images") or {}).get(name) or {})


def resolve_setting(value, env_var, label, required=True):
    """Return *value*, falling back to *env_var*; exit if required and unset."""
    value = value or os.environ.get(env_var)
    if not value and required:
        logger.error(f"Error: {label} required (--{label.replace('_', '-')} or {env_var} env var).")
        sys.exit(1)
    return value


def _expand_path(path: str) -> str:
    """Expand user home directory and environment variables in path."""
    return os.path.expanduser(os.path.expandvars(path))
