"""Deployment of the NeuVector release to changed clusters."""
import logging
import shutil
import time
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence, Tuple, Union

from ..config import DeploymentDefaults
from .adapter import ClusterAdapter
from .credentials import CredentialStore
from .envfile import load_env_file, resolve_request
from .errors import (
    ConfigFileError, DeploymentError, DeploymentToolError, MissingFileError, PrerequisiteError
)
from .models import ClusterResult, DeploymentRequest, RunSummary

logger = logging.getLogger("nvdeploy.deployer")

CLUSTERS_DIR = "clusters"
VALUES_FILE = "values.yaml"
ENV_FILE = "env"


def check_prerequisites(
    tools: Sequence[str],
    which: Optional[Callable[[str], Optional[str]]] = None,
):
    """Raise PrerequisiteError naming every tool in ``tools`` not found on PATH."""
    which = which or shutil.which
    missing = [tool for tool in tools if not which(tool)]
    if missing:
        raise PrerequisiteError(missing)
    logger.debug(f"All required tools found: {', '.join(tools)}")


def cluster_paths(root: Union[str, Path], name: str) -> Tuple[Path, Path]:
    """Return the (values file, env file) paths for a cluster."""
    cluster_dir = Path(root) / CLUSTERS_DIR / name
    return cluster_dir / VALUES_FILE, cluster_dir / ENV_FILE


def prepare_request(
    root: Union[str, Path],
    name: str,
    defaults: Optional[DeploymentDefaults] = None,
) -> DeploymentRequest:
    """Check a cluster's files and resolve its DeploymentRequest.

    Raises:
        MissingFileError: If either required file does not exist
        ConfigFileError: If the env file cannot be read as UTF-8 text
    """
    values_file, env_file = cluster_paths(root, name)
    for path in (values_file, env_file):
        if not path.is_file():
            raise MissingFileError(name, path)

    try:
        env = load_env_file(env_file)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigFileError(name, env_file, str(e)) from e

    request = resolve_request(name, env, values_file, env_file, defaults)
    logger.debug(f"Resolved request for '{name}': {request}")
    return request


class ClusterDeployer:
    """Applies the release to clusters, one at a time.

    Args:
        adapter: Performs the helm/kubectl operations
        credentials: Resolves each cluster's kubeconfig credential
        defaults: Settings used when a cluster's env file leaves them out
        root: Repository root containing the ``clusters/`` directory
    """

    def __init__(
        self,
        adapter: ClusterAdapter,
        credentials: CredentialStore,
        defaults: Optional[DeploymentDefaults] = None,
        root: Union[str, Path] = ".",
    ):
        self.adapter = adapter
        self.credentials = credentials
        self.defaults = defaults or DeploymentDefaults()
        self.root = Path(root)

    def cluster_paths(self, name: str) -> Tuple[Path, Path]:
        return cluster_paths(self.root, name)

    def prepare(self, name: str) -> DeploymentRequest:
        return prepare_request(self.root, name, self.defaults)

    def deploy(self, name: str) -> DeploymentRequest:
        """Deploy the release to one cluster.

        Raises:
            DeploymentError: On the first failing step
        """
        request = self.prepare(name)
        d = self.defaults

        with self.credentials.acquire(request.credential, cluster=name) as kubeconfig:
            self.adapter.check_connectivity(kubeconfig, name, d.connect_timeout)

            try:
                self.adapter.sync_repo()
            except DeploymentToolError as e:
                logger.warning(f"⚠️  {e} (continuing with cached repository index)")

            self.adapter.apply_release(kubeconfig, request)

            if request.dry_run:
                logger.info(f"🔍 Dry run for '{name}', skipping readiness checks")
                return request

            for selector in (d.controller_selector, d.manager_selector):
                self.adapter.wait_ready(kubeconfig, name, request.namespace, selector, d.ready_timeout)

        return request

    def run(self, clusters: Iterable[str]) -> RunSummary:
        """Deploy to each cluster in order, recording every outcome.

        A failing cluster does not stop the ones after it.
        """
        summary = RunSummary()
        for name in clusters:
            logger.info(f"🚀 Deploying to cluster: {name}")
            start = time.monotonic()
            try:
                request = self.deploy(name)
            except DeploymentError as e:
                logger.error(f"❌ Deployment to '{name}' failed: {e}")
                summary.record(ClusterResult(
                    cluster=name,
                    success=False,
                    error=str(e),
                    error_kind=type(e).__name__,
                    duration=time.monotonic() - start,
                ))
                continue

            logger.info(f"✅ Cluster '{name}' deployed")
            summary.record(ClusterResult(
                cluster=name,
                success=True,
                duration=time.monotonic() - start,
                dry_run=request.dry_run,
            ))
        return summary
