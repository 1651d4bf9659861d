"""Exceptions raised while deploying to clusters."""
from pathlib import Path
from typing import Optional, Sequence, Union


class DeploymentError(Exception):
    """Base class for deployment failures.

    Every subclass except ``PrerequisiteError`` is fatal to one cluster only.
    """

    def __init__(self, message: str, cluster: Optional[str] = None):
        super().__init__(message)
        self.cluster = cluster


class PrerequisiteError(DeploymentError):
    """A required external tool is not installed. Fatal to the whole run."""

    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__(f"Required tools not found on PATH: {', '.join(self.missing)}")


class MissingFileError(DeploymentError):
    """A cluster directory lacks one of its required files."""

    def __init__(self, cluster: str, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"Cluster '{cluster}' is missing required file: {self.path}", cluster)


class CredentialError(DeploymentError):
    """The kubeconfig credential could not be found or loaded."""


class ConnectivityError(DeploymentError):
    """The cluster API did not answer within the connect timeout."""


class DeploymentToolError(DeploymentError):
    """helm returned non-zero or timed out."""


class ReadinessTimeoutError(DeploymentError):
    """Pods did not become ready. The release itself was already applied."""


class ConfigFileError(DeploymentError):
    """A cluster's env file exists but cannot be read or decoded."""

    def __init__(self, cluster: str, path: Union[str, Path], reason: str):
        self.path = Path(path)
        super().__init__(f"Cluster '{cluster}' has an unreadable file {self.path}: {reason}", cluster)


class ConfigurationError(DeploymentError):
    """An nvdeploy setting is invalid. Fatal to the whole run."""
