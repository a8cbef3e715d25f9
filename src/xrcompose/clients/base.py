"""Kubernetes object store client used by the composer."""

from __future__ import annotations

import logging
from typing import Any

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic.exceptions import DynamicApiError, ResourceNotFoundError

from xrcompose.config import AuthMode, XRComposeConfig, get_config
from xrcompose.models.common import ObjectReference
from xrcompose.models.resource import Unstructured
from xrcompose.utils.errors import ConfigurationError, ConflictError, NotFoundError, StoreError

logger = logging.getLogger(__name__)

MERGE_PATCH = "application/merge-patch+json"


def _translate(e: ApiException, kind: str, name: str, namespace: str | None) -> Exception:
    """Map an API error onto the xrcompose error hierarchy."""
    if e.status == 404:
        return NotFoundError(kind, name, namespace)
    if e.status == 409:
        return ConflictError(f"{kind} '{name}' was modified concurrently: {e.reason}")
    return StoreError(f"{kind} '{name}': {e.status} {e.reason}")


class K8sClient:
    """Client for the Kubernetes object store.

    Works with objects of any kind through the dynamic client. Not-found
    responses are raised as NotFoundError so callers can tell a missing
    object apart from a failed request.
    """

    def __init__(self, config_obj: XRComposeConfig | None = None) -> None:
        self._config = config_obj or get_config()
        self._api_client: client.ApiClient | None = None
        self._core_v1: client.CoreV1Api | None = None
        self._dynamic_client: DynamicClient | None = None
        self._crd_cache: dict[str, Any] = {}

    @property
    def is_connected(self) -> bool:
        return self._dynamic_client is not None

    @property
    def core_v1(self) -> client.CoreV1Api:
        if self._core_v1 is None:
            raise RuntimeError("K8s client not connected. Call connect() first.")
        return self._core_v1

    @property
    def dynamic(self) -> DynamicClient:
        if self._dynamic_client is None:
            raise RuntimeError("K8s client not connected. Call connect() first.")
        return self._dynamic_client

    def connect(self) -> None:
        """Load credentials and build the API clients."""
        self._load_config()
        self._api_client = client.ApiClient()
        self._core_v1 = client.CoreV1Api(self._api_client)
        self._dynamic_client = DynamicClient(self._api_client)
        logger.info("Connected to Kubernetes API server")

    def disconnect(self) -> None:
        """Close the API clients."""
        if self._api_client is not None:
            self._api_client.close()
        self._api_client = None
        self._core_v1 = None
        self._dynamic_client = None
        self._crd_cache.clear()
        logger.info("Disconnected from Kubernetes API server")

    def _load_config(self) -> None:
        mode = self._config.auth_mode
        if mode in (AuthMode.AUTO, AuthMode.IN_CLUSTER):
            try:
                config.load_incluster_config()
                logger.debug("Using in-cluster configuration")
                return
            except config.ConfigException as e:
                if mode == AuthMode.IN_CLUSTER:
                    raise ConfigurationError(f"Cannot load in-cluster configuration: {e}") from e
                logger.debug(f"In-cluster configuration unavailable, trying kubeconfig: {e}")
        try:
            config.load_kube_config(
                config_file=str(self._config.kubeconfig_path) if self._config.kubeconfig_path else None,
                context=self._config.kubeconfig_context,
            )
        except (config.ConfigException, OSError) as e:
            raise ConfigurationError(f"Cannot load kubeconfig: {e}") from e
        logger.debug("Using kubeconfig configuration")

    def get_resource(self, api_version: str, kind: str) -> Any:
        """Get the dynamic resource handle for a kind, cached per client."""
        cache_key = f"{api_version}/{kind}"
        if cache_key not in self._crd_cache:
            try:
                self._crd_cache[cache_key] = self.dynamic.resources.get(
                    api_version=api_version, kind=kind
                )
            except ResourceNotFoundError as e:
                raise StoreError(f"Kind {kind} is not served by API version {api_version}") from e
        return self._crd_cache[cache_key]

    # -------------------------------------------------------------------------
    # Object operations
    # -------------------------------------------------------------------------

    def get(self, ref: ObjectReference) -> dict[str, Any]:
        """Get an object by reference.

        Raises:
            NotFoundError: If the object does not exist.
            StoreError: On any other failure.
        """
        resource = self.get_resource(ref.api_version, ref.kind)
        try:
            result = resource.get(name=ref.name, namespace=ref.namespace or None)
        except DynamicApiError as e:
            raise _translate(e, ref.kind, ref.name, ref.namespace) from e
        return result.to_dict()

    def create(self, obj: Unstructured, dry_run: bool = False) -> dict[str, Any]:
        """Create an object, or validate it and allocate its name when dry_run is set."""
        resource = self.get_resource(obj.api_version, obj.kind)
        kwargs: dict[str, Any] = {"field_manager": self._config.field_manager}
        if dry_run:
            kwargs["dry_run"] = "All"
        try:
            result = resource.create(body=obj.object, namespace=obj.namespace or None, **kwargs)
        except DynamicApiError as e:
            raise _translate(e, obj.kind, obj.name or obj.generate_name, obj.namespace) from e
        return result.to_dict()

    def update(self, obj: Unstructured) -> dict[str, Any]:
        """Replace an object. Conflicting resource versions raise ConflictError."""
        resource = self.get_resource(obj.api_version, obj.kind)
        try:
            result = resource.replace(
                body=obj.object,
                namespace=obj.namespace or None,
                field_manager=self._config.field_manager,
            )
        except DynamicApiError as e:
            raise _translate(e, obj.kind, obj.name, obj.namespace) from e
        return result.to_dict()

    def patch(self, obj: Unstructured, body: dict[str, Any]) -> dict[str, Any]:
        """Apply a JSON merge patch to an object."""
        resource = self.get_resource(obj.api_version, obj.kind)
        try:
            result = resource.patch(
                body=body,
                name=obj.name,
                namespace=obj.namespace or None,
                content_type=MERGE_PATCH,
                field_manager=self._config.field_manager,
            )
        except DynamicApiError as e:
            raise _translate(e, obj.kind, obj.name, obj.namespace) from e
        return result.to_dict()

    def delete(self, obj: Unstructured) -> None:
        """Delete an object."""
        resource = self.get_resource(obj.api_version, obj.kind)
        try:
            resource.delete(name=obj.name, namespace=obj.namespace or None)
        except DynamicApiError as e:
            raise _translate(e, obj.kind, obj.name, obj.namespace) from e

    # -------------------------------------------------------------------------
    # Secret operations
    # -------------------------------------------------------------------------

    def get_secret(self, name: str, namespace: str) -> dict[str, str]:
        """Get the base64-encoded data of a secret.

        Raises:
            NotFoundError: If the secret does not exist.
        """
        try:
            secret = self.core_v1.read_namespaced_secret(name=name, namespace=namespace)
        except ApiException as e:
            raise _translate(e, "Secret", name, namespace) from e
        return dict(secret.data or {})
