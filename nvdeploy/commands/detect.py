import logging
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

import typer

from ..modules.changes import detect_changed_clusters, get_changed_files, read_changed_files
from ..modules.deployer import check_prerequisites
from ..modules.errors import PrerequisiteError

logger = logging.getLogger("nvdeploy.detect")

app = typer.Typer(help="Change detection commands")


def collect_changes(
    repo_root: Path,
    base: str,
    head: str,
    changes_file: Optional[Path],
) -> List[str]:
    """Return the changed paths from ``changes_file`` ("-" for stdin) or from git."""
    if changes_file is not None:
        if str(changes_file) == "-":
            return read_changed_files(sys.stdin)
        with open(changes_file, "r") as f:
            return read_changed_files(f)

    try:
        check_prerequisites(["git"])
    except PrerequisiteError as e:
        logger.error(f"❌ {e}")
        raise typer.Exit(code=2)
    try:
        return get_changed_files(repo_root, base=base, head=head)
    except subprocess.CalledProcessError:
        logger.error(f"❌ Could not list changes between '{base}' and '{head}'")
        raise typer.Exit(code=2)


@app.command("clusters")
def detect_clusters(
    base: str = typer.Option("HEAD~1", "--base", help="Revision to diff from"),
    head: str = typer.Option("HEAD", "--head", help="Revision to diff to"),
    changes_file: Optional[Path] = typer.Option(
        None, "--changes-file", help="File listing changed paths, one per line ('-' for stdin)"
    ),
    repo_root: Path = typer.Option(Path("."), "--repo-root", help="Repository root"),
):
    """List the clusters whose configuration changed."""
    paths = collect_changes(repo_root, base, head, changes_file)
    for name in detect_changed_clusters(paths):
        typer.echo(name)
