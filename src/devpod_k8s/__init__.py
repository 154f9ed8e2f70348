"""Kubernetes driver for devcontainer workspaces."""

__version__ = "0.1.0"
