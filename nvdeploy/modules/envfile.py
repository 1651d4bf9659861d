"""Parsing of per-cluster ``env`` files and resolution of deployment settings."""
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from ..config import DeploymentDefaults
from .models import DeploymentRequest

logger = logging.getLogger("nvdeploy.envfile")

QUOTES = ('"', "'")


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] in QUOTES and value[0] == value[-1]:
        return value[1:-1]
    return value


def parse_env(content: str) -> Dict[str, str]:
    """Parse ``KEY=VALUE`` lines into a dict.

    Blank lines, ``#`` comments and lines without ``=`` are skipped. Only the
    first ``=`` splits a line, so values may contain ``=``. One layer of
    matching single or double quotes is stripped from values. A repeated key
    overwrites the earlier value.
    """
    values: Dict[str, str] = {}
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith('#'):
            continue
        parts = line.split('=', 1)
        if len(parts) < 2:
            logger.debug(f"Skipping malformed env line: {line!r}")
            continue
        key, value = parts[0].strip(), parts[1].strip()
        values[key] = _unquote(value)
    return values


def load_env_file(path: Union[str, Path]) -> Dict[str, str]:
    """Read and parse an env file."""
    with open(path, 'r', encoding='utf-8') as f:
        return parse_env(f.read())


def resolve_request(
    cluster: str,
    env: Dict[str, str],
    values_file: Path,
    env_file: Path,
    defaults: Optional[DeploymentDefaults] = None,
) -> DeploymentRequest:
    """Combine a cluster's env settings with the deployment defaults.

    Args:
        cluster: Cluster name
        env: Parsed env file
        values_file: Path to the cluster's Helm values file
        env_file: Path to the cluster's env file
        defaults: Defaults for anything the env file leaves out

    Returns:
        The resolved DeploymentRequest
    """
    defaults = defaults or DeploymentDefaults()
    return DeploymentRequest(
        cluster=cluster,
        credential=env.get('KUBECONFIG_CREDENTIAL') or f"{cluster}{defaults.credential_suffix}",
        namespace=env.get('NAMESPACE') or defaults.namespace,
        release_name=env.get('RELEASE_NAME') or defaults.release_name,
        chart_version=env.get('HELM_CHART_VERSION') or defaults.chart_version,
        dry_run=env.get('DRY_RUN', '').lower() == 'true',
        values_file=Path(values_file),
        env_file=Path(env_file),
    )
