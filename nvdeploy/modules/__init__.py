"""
Change detection and cluster deployment modules.
"""
from .adapter import ClusterAdapter, HelmKubectlAdapter
from .changes import detect_changed_clusters, get_changed_files, read_changed_files
from .credentials import CredentialStore
from .deployer import ClusterDeployer, check_prerequisites
from .envfile import parse_env, resolve_request

__all__ = [
    'ClusterAdapter',
    'HelmKubectlAdapter',
    'detect_changed_clusters',
    'get_changed_files',
    'read_changed_files',
    'CredentialStore',
    'ClusterDeployer',
    'check_prerequisites',
    'parse_env',
    'resolve_request',
]
