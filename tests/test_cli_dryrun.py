"""Dry-run end-to-end tests for the stackready CLI."""

import yaml


def _write_state(tmp_path, state):
    path = tmp_path / "state.yaml"
    path.write_text(yaml.safe_dump(state))
    return str(path)


# ── image create ──────────────────────────────────────────────────


def test_image_create_dry_run(run_cli, tmp_path):
    state_path = _write_state(tmp_path, {"machines": {"win-build": {"server_id": "srv-1"}}})

    rc, stdout, stderr = run_cli(
        "image", "create",
        "--state", state_path,
        "--machine", "win-build",
        "--image", "golden",
        "--dry-run",
    )

    assert rc == 0, f"stderr: {stderr}\nstdout: {stdout}"
    assert "[dry-run] POST" in stdout
    assert "/servers/srv-1/action" in stdout
    assert "createImage" in stdout
    assert "The Image named 'golden'" in stdout
    assert "golden" not in (yaml.safe_load(open(state_path)).get("images") or {})


def test_image_create_dry_run_description(run_cli, tmp_path):
    state_path = _write_state(tmp_path, {"machines": {"win-build": {"server_id": "srv-1"}}})

    rc, stdout, _ = run_cli(
        "image", "create",
        "--state", state_path,
        "--machine", "win-build",
        "--image", "golden",
        "--description", "nightly build",
        "--dry-run",
    )

    assert rc == 0
    assert "nightly build" in stdout


def test_image_create_unknown_machine(run_cli, tmp_path):
    state_path = _write_state(tmp_path, {"machines": {}})

    rc, stdout, _ = run_cli(
        "image", "create",
        "--state", state_path,
        "--machine", "win-build",
        "--image", "golden",
        "--dry-run",
    )

    assert rc == 1
    assert "machine 'win-build' not found" in stdout


def test_image_create_machine_without_server_id(run_cli, tmp_path):
    state_path = _write_state(tmp_path, {"machines": {"win-build": {"winrm_port": 5986}}})

    rc, stdout, _ = run_cli(
        "image", "create",
        "--state", state_path,
        "--machine", "win-build",
        "--image", "golden",
        "--dry-run",
    )

    assert rc == 1
    assert "server_id" in stdout


# ── image destroy ─────────────────────────────────────────────────


def test_image_destroy_dry_run_keeps_state(run_cli, tmp_path):
    state = {"machines": {}, "images": {"golden": {"image_id": "img-1"}}}
    state_path = _write_state(tmp_path, state)

    rc, stdout, _ = run_cli("image", "destroy", "--state", state_path, "--image", "golden", "--dry-run")

    assert rc == 0
    assert "[dry-run] GET" in stdout
    assert "/images/img-1" in stdout
    assert yaml.safe_load(open(state_path)) == state


# ── Settings ──────────────────────────────────────────────────────


def test_missing_token_is_an_error(run_cli, tmp_path):
    state_path = _write_state(tmp_path, {"images": {"golden": {"image_id": "img-1"}}})

    rc, stdout, _ = run_cli(
        "image", "ready",
        "--state", state_path,
        "--image", "golden",
        "--compute-url", "https://nova.test",
        env={"OS_AUTH_TOKEN": ""},
    )

    assert rc == 1
    assert "OS_AUTH_TOKEN" in stdout


def test_winrm_missing_private_key(run_cli, tmp_path):
    state_path = _write_state(tmp_path, {"machines": {"win-build": {"server_id": "srv-1"}}})

    rc, stdout, _ = run_cli(
        "winrm",
        "--state", state_path,
        "--machine", "win-build",
        "--private-key", str(tmp_path / "absent.pem"),
    )

    assert rc == 1
    assert "cannot read private key" in stdout


def test_help_lists_commands(run_cli):
    rc, stdout, _ = run_cli("--help")

    assert rc == 0
    for command in ("image", "password", "winrm"):
        assert command in stdout
