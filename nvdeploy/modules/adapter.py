"""
Cluster tooling adapters.

The deployer only talks to clusters through a ``ClusterAdapter``. The
production implementation shells out to ``helm`` and ``kubectl``; tests use
a recording fake.
"""
import logging
import re
import subprocess
from typing import List, Optional, Tuple

from ..config import DeploymentDefaults
from ..utils import command_output, run_command
from .errors import (
    ConfigurationError, ConnectivityError, DeploymentToolError, ReadinessTimeoutError
)
from .models import DeploymentRequest

logger = logging.getLogger("nvdeploy.adapter")

# Extra seconds the process gets on top of the tool's own timeout
PROCESS_GRACE = 30

_DURATION_RE = re.compile(r'(\d+)([hms])')
_UNIT_SECONDS = {'h': 3600, 'm': 60, 's': 1}


def duration_seconds(value: str) -> int:
    """Convert a helm-style duration such as ``10m`` or ``1h30m`` to seconds."""
    if value.isdigit():
        return int(value)
    parts = _DURATION_RE.findall(value)
    if not parts or ''.join(n + u for n, u in parts) != value:
        raise ValueError(f"Invalid duration: {value!r}")
    return sum(int(n) * _UNIT_SECONDS[u] for n, u in parts)


class ClusterAdapter:
    """Interface for the operations a deployment performs against a cluster."""

    def required_tools(self) -> Tuple[str, ...]:
        """External binaries this adapter needs on PATH."""
        return ()

    def check_connectivity(self, kubeconfig: str, cluster: str, timeout: int):
        """Raise ConnectivityError if the cluster API is unreachable."""
        raise NotImplementedError("Subclasses must implement check_connectivity()")

    def sync_repo(self):
        """Refresh the chart repository. Raise DeploymentToolError on failure."""
        raise NotImplementedError("Subclasses must implement sync_repo()")

    def apply_release(self, kubeconfig: str, request: DeploymentRequest):
        """Install or upgrade the release. Raise DeploymentToolError on failure."""
        raise NotImplementedError("Subclasses must implement apply_release()")

    def wait_ready(self, kubeconfig: str, cluster: str, namespace: str, selector: str, timeout: int):
        """Block until a pod matching ``selector`` is ready, or raise ReadinessTimeoutError."""
        raise NotImplementedError("Subclasses must implement wait_ready()")


class HelmKubectlAdapter(ClusterAdapter):
    """ClusterAdapter backed by the ``helm`` and ``kubectl`` binaries."""

    def __init__(self, defaults: Optional[DeploymentDefaults] = None):
        self.defaults = defaults or DeploymentDefaults()
        try:
            self.helm_timeout_seconds = duration_seconds(self.defaults.helm_timeout)
        except ValueError as e:
            raise ConfigurationError(f"Invalid helm timeout: {e}") from e

    def required_tools(self) -> Tuple[str, ...]:
        return ("helm", "kubectl")

    def check_connectivity(self, kubeconfig: str, cluster: str, timeout: int):
        logger.info(f"📡 Checking connectivity to cluster '{cluster}'")
        cmd = [
            "kubectl", "--kubeconfig", kubeconfig,
            "get", "nodes", f"--request-timeout={timeout}s",
        ]
        try:
            run_command(cmd, timeout=timeout + PROCESS_GRACE)
        except subprocess.CalledProcessError as e:
            raise ConnectivityError(
                f"Cluster '{cluster}' is unreachable: {command_output(e)}", cluster
            ) from e
        except subprocess.TimeoutExpired as e:
            raise ConnectivityError(
                f"Cluster '{cluster}' did not respond within {timeout}s", cluster
            ) from e

    def sync_repo(self):
        d = self.defaults
        try:
            run_command(["helm", "repo", "add", "--force-update", d.repo_name, d.repo_url])
            run_command(["helm", "repo", "update", d.repo_name])
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
            raise DeploymentToolError(
                f"Could not sync helm repository '{d.repo_name}': {command_output(e)}"
            ) from e

    def release_command(self, kubeconfig: str, request: DeploymentRequest) -> List[str]:
        """Build the ``helm upgrade --install`` command for ``request``."""
        cmd = [
            "helm", "upgrade", "--install", request.release_name, self.defaults.chart,
            "--kubeconfig", kubeconfig,
            "--namespace", request.namespace, "--create-namespace",
            "--values", str(request.values_file),
        ]
        if request.version_pinned:
            cmd += ["--version", request.chart_version]
        if request.dry_run:
            cmd += ["--dry-run"]
        cmd += ["--wait", "--timeout", self.defaults.helm_timeout]
        return cmd

    def apply_release(self, kubeconfig: str, request: DeploymentRequest):
        version = request.chart_version if request.version_pinned else "latest"
        mode = " (dry-run)" if request.dry_run else ""
        logger.info(
            f"🚀 Applying release '{request.release_name}' ({self.defaults.chart} {version}) "
            f"to namespace '{request.namespace}' on '{request.cluster}'{mode}"
        )
        timeout = self.helm_timeout_seconds + PROCESS_GRACE
        try:
            run_command(self.release_command(kubeconfig, request), timeout=timeout)
        except subprocess.CalledProcessError as e:
            raise DeploymentToolError(
                f"helm upgrade of '{request.release_name}' failed on cluster "
                f"'{request.cluster}': {command_output(e)}",
                request.cluster,
            ) from e
        except subprocess.TimeoutExpired as e:
            raise DeploymentToolError(
                f"helm upgrade of '{request.release_name}' on cluster '{request.cluster}' "
                f"timed out after {self.defaults.helm_timeout}",
                request.cluster,
            ) from e
        logger.info(f"✅ Release '{request.release_name}' applied on '{request.cluster}'")

    def wait_ready(self, kubeconfig: str, cluster: str, namespace: str, selector: str, timeout: int):
        logger.info(f"⏳ Waiting for pods '{selector}' in '{namespace}' on '{cluster}'")
        cmd = [
            "kubectl", "--kubeconfig", kubeconfig,
            "wait", "--for=condition=ready", "pod",
            "-l", selector, "-n", namespace, f"--timeout={timeout}s",
        ]
        try:
            run_command(cmd, timeout=timeout + PROCESS_GRACE)
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
            raise ReadinessTimeoutError(
                f"Pods '{selector}' in namespace '{namespace}' on cluster '{cluster}' "
                f"were not ready within {timeout}s: {command_output(e)}",
                cluster,
            ) from e
        logger.info(f"✅ Pods '{selector}' ready on '{cluster}'")
