"""Composition engine for composite resources in a Kubernetes control plane."""

__version__ = "0.1.0"
