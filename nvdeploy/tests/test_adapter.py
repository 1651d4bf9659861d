import subprocess
from pathlib import Path

import pytest

from nvdeploy.config import DeploymentDefaults
from nvdeploy.modules import adapter as adapter_module
from nvdeploy.modules.adapter import HelmKubectlAdapter, duration_seconds
from nvdeploy.modules.errors import (
    ConfigurationError, ConnectivityError, DeploymentToolError, ReadinessTimeoutError
)
from nvdeploy.modules.models import DeploymentRequest


def make_request(**overrides):
    fields = dict(
        cluster="c1",
        credential="c1-kubeconfig",
        namespace="neuvector",
        release_name="neuvector",
        chart_version="latest",
        dry_run=False,
        values_file=Path("clusters/c1/values.yaml"),
        env_file=Path("clusters/c1/env"),
    )
    fields.update(overrides)
    return DeploymentRequest(**fields)


class Recorder:
    def __init__(self, error=None):
        self.commands = []
        self.timeouts = []
        self.error = error

    def __call__(self, cmd, **kwargs):
        self.commands.append(cmd)
        self.timeouts.append(kwargs.get("timeout"))
        if self.error:
            raise self.error
        return subprocess.CompletedProcess(cmd, 0, stdout="", stderr="")


@pytest.fixture
def recorder(monkeypatch):
    rec = Recorder()
    monkeypatch.setattr(adapter_module, "run_command", rec)
    return rec


def failing(monkeypatch, error):
    rec = Recorder(error)
    monkeypatch.setattr(adapter_module, "run_command", rec)
    return rec


def test_release_command_without_version_pin():
    cmd = HelmKubectlAdapter().release_command("/tmp/kc", make_request())
    assert cmd == [
        "helm", "upgrade", "--install", "neuvector", "neuvector/core",
        "--kubeconfig", "/tmp/kc",
        "--namespace", "neuvector", "--create-namespace",
        "--values", "clusters/c1/values.yaml",
        "--wait", "--timeout", "10m",
    ]


def test_release_command_with_version_and_dry_run():
    cmd = HelmKubectlAdapter().release_command(
        "/tmp/kc", make_request(chart_version="5.3.0", dry_run=True, namespace="nv")
    )
    assert cmd[cmd.index("--version") + 1] == "5.3.0"
    assert "--dry-run" in cmd
    assert cmd[cmd.index("--namespace") + 1] == "nv"


def test_apply_release_uses_process_timeout(recorder):
    HelmKubectlAdapter().apply_release("/tmp/kc", make_request())
    assert recorder.commands[0][:3] == ["helm", "upgrade", "--install"]
    assert recorder.timeouts[0] == 600 + adapter_module.PROCESS_GRACE


def test_apply_release_failure(monkeypatch):
    failing(monkeypatch, subprocess.CalledProcessError(
        1, ["helm"], output="", stderr="Error: UPGRADE FAILED: timed out\n"
    ))
    with pytest.raises(DeploymentToolError) as exc:
        HelmKubectlAdapter().apply_release("/tmp/kc", make_request())
    assert exc.value.cluster == "c1"
    assert "UPGRADE FAILED" in str(exc.value)


def test_apply_release_timeout(monkeypatch):
    failing(monkeypatch, subprocess.TimeoutExpired(["helm"], 630))
    with pytest.raises(DeploymentToolError, match="timed out after 10m"):
        HelmKubectlAdapter().apply_release("/tmp/kc", make_request())


def test_check_connectivity_command(recorder):
    HelmKubectlAdapter().check_connectivity("/tmp/kc", "c1", 5)
    assert recorder.commands == [
        ["kubectl", "--kubeconfig", "/tmp/kc", "get", "nodes", "--request-timeout=5s"]
    ]


def test_check_connectivity_failure(monkeypatch):
    failing(monkeypatch, subprocess.CalledProcessError(
        1, ["kubectl"], output="", stderr="Unable to connect to the server"
    ))
    with pytest.raises(ConnectivityError, match="c1"):
        HelmKubectlAdapter().check_connectivity("/tmp/kc", "c1", 5)


def test_sync_repo_commands(recorder):
    HelmKubectlAdapter().sync_repo()
    assert recorder.commands == [
        ["helm", "repo", "add", "--force-update", "neuvector",
         "https://neuvector.github.io/neuvector-helm/"],
        ["helm", "repo", "update", "neuvector"],
    ]


def test_sync_repo_failure(monkeypatch):
    failing(monkeypatch, subprocess.CalledProcessError(1, ["helm"], output="", stderr="offline"))
    with pytest.raises(DeploymentToolError):
        HelmKubectlAdapter().sync_repo()


def test_wait_ready_command(recorder):
    HelmKubectlAdapter().wait_ready("/tmp/kc", "c1", "nv", "app=neuvector-manager-pod", 300)
    assert recorder.commands == [[
        "kubectl", "--kubeconfig", "/tmp/kc", "wait", "--for=condition=ready", "pod",
        "-l", "app=neuvector-manager-pod", "-n", "nv", "--timeout=300s",
    ]]


def test_wait_ready_timeout(monkeypatch):
    failing(monkeypatch, subprocess.CalledProcessError(
        1, ["kubectl"], output="", stderr="error: timed out waiting for the condition"
    ))
    with pytest.raises(ReadinessTimeoutError, match="timed out waiting"):
        HelmKubectlAdapter().wait_ready("/tmp/kc", "c1", "nv", "app=x", 300)


def test_custom_chart_and_timeout():
    adapter = HelmKubectlAdapter(DeploymentDefaults(chart="mirror/core", helm_timeout="5m"))
    cmd = adapter.release_command("/tmp/kc", make_request())
    assert cmd[4] == "mirror/core"
    assert cmd[-1] == "5m"


@pytest.mark.parametrize("value,expected", [
    ("10m", 600), ("300s", 300), ("1h30m", 5400), ("45", 45),
])
def test_duration_seconds(value, expected):
    assert duration_seconds(value) == expected


@pytest.mark.parametrize("value", ["", "10x", "m10", "10m bogus"])
def test_duration_seconds_rejects_garbage(value):
    with pytest.raises(ValueError):
        duration_seconds(value)


def test_required_tools():
    assert HelmKubectlAdapter().required_tools() == ("helm", "kubectl")


@pytest.mark.parametrize("value", ["1.5m", "600sec"])
def test_invalid_helm_timeout_rejected_up_front(value):
    with pytest.raises(ConfigurationError, match="Invalid helm timeout"):
        HelmKubectlAdapter(DeploymentDefaults(helm_timeout=value))
