from contextlib import contextmanager

import pytest

from nvdeploy.modules.adapter import ClusterAdapter
from nvdeploy.modules.errors import (
    ConnectivityError, DeploymentToolError, ReadinessTimeoutError
)

KUBECONFIG = """
apiVersion: v1
kind: Config
current-context: test
contexts:
- name: test
  context:
    cluster: test
    user: test
clusters:
- name: test
  cluster:
    server: https://127.0.0.1:6443
users:
- name: test
  user:
    token: abc123
"""


class FakeAdapter(ClusterAdapter):
    """Records every call; ``fail`` maps a step name to the clusters it fails for."""

    def __init__(self, fail=None, tools=("helm", "kubectl")):
        self.calls = []
        self.fail = fail or {}
        self.tools = tools

    def required_tools(self):
        return self.tools

    def _fails(self, step, cluster):
        return cluster in self.fail.get(step, ())

    def check_connectivity(self, kubeconfig, cluster, timeout):
        self.calls.append(("connect", cluster, timeout))
        if self._fails("connect", cluster):
            raise ConnectivityError(f"Cluster '{cluster}' is unreachable", cluster)

    def sync_repo(self):
        self.calls.append(("sync",))
        if self.fail.get("sync"):
            raise DeploymentToolError("Could not sync helm repository 'neuvector'")

    def apply_release(self, kubeconfig, request):
        self.calls.append(("apply", request.cluster, request))
        if self._fails("apply", request.cluster):
            raise DeploymentToolError("helm failed", request.cluster)

    def wait_ready(self, kubeconfig, cluster, namespace, selector, timeout):
        self.calls.append(("wait", cluster, namespace, selector, timeout))
        if self._fails("wait", cluster):
            raise ReadinessTimeoutError(f"Pods '{selector}' not ready", cluster)

    def steps(self):
        return [c[0] for c in self.calls]


class FakeCredentials:
    def __init__(self):
        self.acquired = []
        self.released = []

    @contextmanager
    def acquire(self, credential, cluster=None):
        self.acquired.append(credential)
        try:
            yield f"/tmp/{credential}"
        finally:
            self.released.append(credential)


def write_cluster(root, name, env="", values="manager:\n  svc:\n    type: ClusterIP\n"):
    cluster_dir = root / "clusters" / name
    cluster_dir.mkdir(parents=True, exist_ok=True)
    if values is not None:
        (cluster_dir / "values.yaml").write_text(values)
    if env is not None:
        (cluster_dir / "env").write_text(env)
    return cluster_dir


@pytest.fixture
def adapter():
    return FakeAdapter()


@pytest.fixture
def credentials():
    return FakeCredentials()
