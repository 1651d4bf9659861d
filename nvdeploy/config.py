"""Configuration management for the nvdeploy application."""
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
load_dotenv()


@dataclass(frozen=True)
class DeploymentDefaults:
    """Values used when a cluster's env file leaves a setting out."""

    namespace: str = "neuvector"
    release_name: str = "neuvector"
    chart_version: str = "latest"
    credential_suffix: str = "-kubeconfig"

    # Chart source
    chart: str = "neuvector/core"
    repo_name: str = "neuvector"
    repo_url: str = "https://neuvector.github.io/neuvector-helm/"

    # Timeouts
    connect_timeout: int = 5
    helm_timeout: str = "10m"
    ready_timeout: int = 300

    # Readiness selectors
    controller_selector: str = "app=neuvector-controller-pod"
    manager_selector: str = "app=neuvector-manager-pod"


class Config:
    """Application configuration with sensible defaults."""

    # Deployment defaults
    NAMESPACE: str = os.getenv("NVDEPLOY_NAMESPACE", "neuvector")
    RELEASE_NAME: str = os.getenv("NVDEPLOY_RELEASE_NAME", "neuvector")
    CHART_VERSION: str = os.getenv("NVDEPLOY_CHART_VERSION", "latest")
    CHART: str = os.getenv("NVDEPLOY_CHART", "neuvector/core")
    REPO_NAME: str = os.getenv("NVDEPLOY_REPO_NAME", "neuvector")
    REPO_URL: str = os.getenv(
        "NVDEPLOY_REPO_URL", "https://neuvector.github.io/neuvector-helm/"
    )

    # Timeouts (in seconds unless noted)
    CONNECT_TIMEOUT: int = int(os.getenv("NVDEPLOY_CONNECT_TIMEOUT", "5"))
    HELM_TIMEOUT: str = os.getenv("NVDEPLOY_HELM_TIMEOUT", "10m")  # helm duration
    READY_TIMEOUT: int = int(os.getenv("NVDEPLOY_READY_TIMEOUT", "300"))

    # Credentials
    CREDENTIALS_DIR: Optional[str] = os.getenv("NVDEPLOY_CREDENTIALS_DIR") or None

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FORMAT: str = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Security
    REDACT_KEYS: tuple = ("kubeconfig", "credential", "password", "secret", "token")

    @classmethod
    def defaults(cls) -> DeploymentDefaults:
        """Build the deployment defaults from the current configuration."""
        return DeploymentDefaults(
            namespace=cls.NAMESPACE,
            release_name=cls.RELEASE_NAME,
            chart_version=cls.CHART_VERSION,
            chart=cls.CHART,
            repo_name=cls.REPO_NAME,
            repo_url=cls.REPO_URL,
            connect_timeout=cls.CONNECT_TIMEOUT,
            helm_timeout=cls.HELM_TIMEOUT,
            ready_timeout=cls.READY_TIMEOUT,
        )
