"""Change-driven NeuVector deployment across Kubernetes clusters."""

__version__ = "0.1.0"
