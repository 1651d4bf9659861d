import logging

import typer

from nvdeploy.commands import deploy, detect, validate
from nvdeploy.logging import setup_logging

app = typer.Typer(help="Deploy NeuVector to the clusters changed in a revision.")

# Add all command groups
app.add_typer(detect.app, name="detect")
app.add_typer(deploy.app, name="deploy")
app.add_typer(validate.app, name="validate")


# Global options callback
@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", "-d", help="Enable debug logging"),
):
    """NVDeploy - change-driven NeuVector deployment CLI."""
    setup_logging(debug)
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Debug mode enabled")
