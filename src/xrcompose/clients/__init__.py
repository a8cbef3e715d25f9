"""Object store clients."""

from xrcompose.clients.base import K8sClient

__all__ = ["K8sClient"]
