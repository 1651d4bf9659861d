"""
Data models for cluster deployments.
"""
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

# Chart version meaning "install without a --version pin"
LATEST_VERSION = 'latest'


@dataclass(frozen=True)
class DeploymentRequest:
    """Everything needed to apply the release to one cluster."""
    cluster: str
    credential: str
    namespace: str
    release_name: str
    chart_version: str
    dry_run: bool
    values_file: Path
    env_file: Path

    @property
    def version_pinned(self) -> bool:
        """False when the chart version should be left to helm."""
        return self.chart_version != LATEST_VERSION

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['values_file'] = str(self.values_file)
        data['env_file'] = str(self.env_file)
        return data


@dataclass
class ClusterResult:
    """Outcome of one cluster's deployment."""
    cluster: str
    success: bool
    error: Optional[str] = None
    error_kind: Optional[str] = None
    duration: float = 0.0
    dry_run: bool = False


@dataclass
class RunSummary:
    """Per-cluster outcomes of a run, in the order clusters were processed."""
    results: List[ClusterResult] = field(default_factory=list)

    def record(self, result: ClusterResult):
        self.results.append(result)

    @property
    def succeeded(self) -> List[ClusterResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[ClusterResult]:
        return [r for r in self.results if not r.success]

    @property
    def ok(self) -> bool:
        return not self.failed
