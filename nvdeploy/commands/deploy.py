"""Cluster Deployment Commands.

This module provides commands for applying the NeuVector Helm release to
the clusters whose configuration changed in a revision, or to a single
named cluster.
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer

from ..config import Config
from ..modules.adapter import HelmKubectlAdapter
from ..modules.changes import detect_changed_clusters
from ..modules.credentials import CredentialStore
from ..modules.deployer import ClusterDeployer, check_prerequisites
from ..modules.errors import ConfigurationError, PrerequisiteError
from ..modules.models import RunSummary
from .detect import collect_changes

logger = logging.getLogger("nvdeploy.deploy")

app = typer.Typer(help="Cluster deployment commands")


def build_deployer(repo_root: Path) -> ClusterDeployer:
    """Create a deployer wired to helm, kubectl and the configured credentials."""
    defaults = Config.defaults()
    return ClusterDeployer(
        HelmKubectlAdapter(defaults),
        CredentialStore(directory=Config.CREDENTIALS_DIR),
        defaults,
        root=repo_root,
    )


def deployer_or_exit(repo_root: Path) -> ClusterDeployer:
    """Build the deployer, exiting with code 2 if the configuration is invalid."""
    try:
        return build_deployer(repo_root)
    except ConfigurationError as e:
        logger.error(f"❌ {e}")
        raise typer.Exit(code=2)


def print_summary(summary: RunSummary):
    typer.echo("\n--- Deployment Summary ---")
    for result in summary.results:
        if result.success:
            mode = " (dry-run)" if result.dry_run else ""
            typer.echo(f"✅ {result.cluster}{mode} [{result.duration:.1f}s]")
        else:
            typer.echo(f"❌ {result.cluster}: {result.error_kind}: {result.error}")
    typer.echo(f"{len(summary.succeeded)} succeeded, {len(summary.failed)} failed")
    typer.echo("--------------------------\n")


def deploy_clusters(deployer: ClusterDeployer, clusters: List[str]) -> int:
    """Run the deployment for ``clusters`` and return the process exit code."""
    try:
        check_prerequisites(deployer.adapter.required_tools())
    except PrerequisiteError as e:
        logger.error(f"❌ {e}")
        return 2

    summary = deployer.run(clusters)
    print_summary(summary)
    if not summary.ok:
        logger.error(f"❌ {len(summary.failed)} of {len(summary.results)} cluster deployments failed")
        return 1
    logger.info(f"🎉 All {len(summary.results)} cluster deployments succeeded")
    return 0


@app.command("changed")
def deploy_changed(
    base: str = typer.Option("HEAD~1", "--base", help="Revision to diff from"),
    head: str = typer.Option("HEAD", "--head", help="Revision to diff to"),
    changes_file: Optional[Path] = typer.Option(
        None, "--changes-file", help="File listing changed paths, one per line ('-' for stdin)"
    ),
    repo_root: Path = typer.Option(Path("."), "--repo-root", help="Repository root"),
):
    """Deploy to every cluster whose configuration changed.

    Example:
        nvdeploy deploy changed --base origin/main --head HEAD
    """
    paths = collect_changes(repo_root, base, head, changes_file)
    clusters = detect_changed_clusters(paths)
    if not clusters:
        typer.echo("ℹ️  No cluster configuration changed, nothing to deploy.")
        return

    logger.info(f"Detected {len(clusters)} changed cluster(s): {', '.join(clusters)}")
    code = deploy_clusters(deployer_or_exit(repo_root), clusters)
    if code:
        raise typer.Exit(code=code)


@app.command("cluster")
def deploy_cluster(
    name: str = typer.Option(..., "--name", "-n", help="Name of the cluster to deploy"),
    repo_root: Path = typer.Option(Path("."), "--repo-root", help="Repository root"),
):
    """Deploy to a single cluster regardless of what changed."""
    code = deploy_clusters(deployer_or_exit(repo_root), [name])
    if code:
        raise typer.Exit(code=code)
