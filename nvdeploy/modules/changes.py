"""Detection of clusters touched by a revision."""
import logging
import re
from pathlib import Path
from typing import Iterable, List, TextIO, Union

from ..utils import run_command

logger = logging.getLogger("nvdeploy.changes")

CLUSTER_FILE_RE = re.compile(r'^clusters/([^/]+)/(values\.yaml|env)$')

# Written by pipelines in place of a diff when no previous revision exists
NO_DIFF = "NO_DIFF"


def detect_changed_clusters(paths: Iterable[str]) -> List[str]:
    """Return the cluster names referenced by ``paths``, once each, first-seen order."""
    clusters: List[str] = []
    for path in paths:
        match = CLUSTER_FILE_RE.match(path.strip())
        if not match:
            continue
        name = match.group(1)
        if name not in clusters:
            clusters.append(name)
    return clusters


def read_changed_files(stream: TextIO) -> List[str]:
    """Read newline-separated paths, dropping blanks and the ``NO_DIFF`` marker."""
    return [
        line.strip() for line in stream
        if line.strip() and line.strip() != NO_DIFF
    ]


def get_changed_files(
    repo_root: Union[str, Path] = ".",
    base: str = "HEAD~1",
    head: str = "HEAD",
) -> List[str]:
    """List files changed between two revisions with ``git diff``.

    A missing base revision (for example the very first commit) yields an
    empty list instead of an error.
    """
    probe = run_command(
        ["git", "rev-parse", "--verify", "--quiet", f"{base}^{{commit}}"],
        check=False,
        cwd=Path(repo_root),
    )
    if probe.returncode != 0:
        logger.info(f"ℹ️  No revision '{base}' to diff against, treating change set as empty")
        return []

    result = run_command(
        ["git", "diff", "--name-only", base, head],
        cwd=Path(repo_root),
    )
    return [line.strip() for line in result.stdout.splitlines() if line.strip()]
