"""Typer command groups for the nvdeploy CLI."""
from . import deploy, detect, validate

__all__ = ['deploy', 'detect', 'validate']
