import json
import logging
from pathlib import Path

import typer
import yaml
from jsonschema import ValidationError, validate

from ..config import Config
from ..modules.adapter import HelmKubectlAdapter
from ..modules.deployer import check_prerequisites, prepare_request
from ..modules.envfile import load_env_file
from ..modules.errors import ConfigFileError, MissingFileError, PrerequisiteError
from ..utils import redact_sensitive_data

logger = logging.getLogger("nvdeploy.validate")

app = typer.Typer(help="Validation commands")

ENV_SCHEMA = {
    "type": "object",
    "properties": {
        "KUBECONFIG_CREDENTIAL": {"type": "string", "minLength": 1},
        "HELM_CHART_VERSION": {
            "type": "string",
            "pattern": r"^(latest|v?\d+\.\d+\.\d+([-+][0-9A-Za-z.-]+)?)$",
        },
        "NAMESPACE": {"type": "string", "pattern": r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"},
        "RELEASE_NAME": {"type": "string", "pattern": r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"},
        "DRY_RUN": {"type": "string"},
    },
    "additionalProperties": {"type": "string"},
}


@app.command("tools")
def validate_tools():
    """Check that helm and kubectl are installed."""
    tools = HelmKubectlAdapter().required_tools()
    try:
        check_prerequisites(tools)
    except PrerequisiteError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(code=2)
    typer.echo(f"✅ Found {', '.join(tools)}")


@app.command("cluster")
def validate_cluster(
    name: str = typer.Option(..., "--name", "-n", help="Cluster name"),
    repo_root: Path = typer.Option(Path("."), "--repo-root", help="Repository root"),
):
    """Validate a cluster's values and env files and show the resolved settings."""
    try:
        request = prepare_request(repo_root, name, Config.defaults())
    except (MissingFileError, ConfigFileError) as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(code=1)

    try:
        with open(request.values_file, "r") as f:
            values = yaml.safe_load(f)
    except yaml.YAMLError as e:
        typer.echo(f"❌ Invalid YAML in {request.values_file}: {e}")
        raise typer.Exit(code=1)
    if values is not None and not isinstance(values, dict):
        typer.echo(f"❌ {request.values_file} must contain a mapping of Helm values")
        raise typer.Exit(code=1)

    env = load_env_file(request.env_file)
    try:
        validate(instance=env, schema=ENV_SCHEMA)
    except ValidationError as e:
        typer.echo(f"❌ Invalid setting in {request.env_file}: {e.message}")
        raise typer.Exit(code=1)

    dry_run = env.get("DRY_RUN")
    if dry_run is not None and dry_run.lower() not in ("true", "false"):
        typer.echo(f"⚠️  DRY_RUN={dry_run!r} is not true/false and will be treated as false")

    typer.echo(f"✅ Cluster '{name}' configuration is valid")
    typer.echo(json.dumps(redact_sensitive_data(request.as_dict()), indent=2))
