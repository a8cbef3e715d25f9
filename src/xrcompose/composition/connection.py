"""Fetching and extracting the connection details of composed resources."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

from xrcompose.models.composition import ConnectionDetail, ConnectionDetailType
from xrcompose.models.resource import ComposedObject, Unstructured
from xrcompose.utils.errors import (
    ConnectionDetailError,
    FieldNotFoundError,
    FieldPathError,
    NotFoundError,
)

if TYPE_CHECKING:
    from xrcompose.clients.base import K8sClient

logger = logging.getLogger(__name__)

ConnectionDetails = dict[str, bytes]


class ConnectionDetailsFetcher(Protocol):
    """Fetches the connection details a composed resource has published."""

    def fetch(self, owner: ComposedObject) -> ConnectionDetails: ...


class ConnectionDetailsFetcherFn:
    """Adapts a plain function to the ConnectionDetailsFetcher protocol."""

    def __init__(self, fn: Callable[[ComposedObject], ConnectionDetails]) -> None:
        self._fn = fn

    def fetch(self, owner: ComposedObject) -> ConnectionDetails:
        return self._fn(owner)


class SecretConnectionDetailsFetcher:
    """Reads connection details from the secret a resource writes them to."""

    def __init__(self, client: K8sClient) -> None:
        self._client = client

    def fetch(self, owner: ComposedObject) -> ConnectionDetails:
        """Fetch the decoded contents of the owner's connection secret.

        A resource that declares no connection secret, or whose secret has
        not been written yet, has no connection details.

        Raises:
            ConnectionDetailError: If the secret holds invalid base64 data.
        """
        ref = owner.write_connection_secret_to_ref
        if ref is None:
            return {}
        try:
            data = self._client.get_secret(ref.name, ref.namespace)
        except NotFoundError:
            logger.debug(f"Connection secret {ref.namespace}/{ref.name} does not exist yet")
            return {}

        details: ConnectionDetails = {}
        for key, value in data.items():
            try:
                details[key] = base64.b64decode(value or "", validate=True)
            except (binascii.Error, ValueError) as e:
                raise ConnectionDetailError(
                    f"secret {ref.namespace}/{ref.name} key {key} is not valid base64"
                ) from e
        return details


class ConnectionDetailsExtractor(Protocol):
    """Projects fetched connection details onto those a composite exposes."""

    def extract(
        self,
        composed: Unstructured,
        details: ConnectionDetails,
        *configs: ConnectionDetail,
    ) -> ConnectionDetails: ...


class ConnectionDetailsExtractorFn:
    """Adapts a plain function to the ConnectionDetailsExtractor protocol."""

    def __init__(self, fn: Callable[..., ConnectionDetails]) -> None:
        self._fn = fn

    def extract(
        self,
        composed: Unstructured,
        details: ConnectionDetails,
        *configs: ConnectionDetail,
    ) -> ConnectionDetails:
        return self._fn(composed, details, *configs)


def extract_connection_details(
    composed: Unstructured,
    details: ConnectionDetails,
    *configs: ConnectionDetail,
) -> ConnectionDetails:
    """Build the connection details a composed resource contributes.

    Args:
        composed: The composed resource, read by FromFieldPath details.
        details: The details fetched from the resource's connection secret.
        configs: The template's connection detail configuration.

    Returns:
        The extracted details. Secret keys and field paths that are not set
        are skipped.

    Raises:
        ConnectionDetailError: If a detail is misconfigured or its field
            path is malformed.
    """
    out: ConnectionDetails = {}
    for cfg in configs:
        detail_type = cfg.resolved_type()
        if detail_type is None:
            raise ConnectionDetailError(f"connection detail {cfg.name!r} has no source")

        name = cfg.name
        if name is None and detail_type == ConnectionDetailType.FROM_CONNECTION_SECRET_KEY:
            name = cfg.from_connection_secret_key
        if not name:
            raise ConnectionDetailError(f"{detail_type.value} connection detail must have a name")

        if detail_type == ConnectionDetailType.FROM_VALUE:
            if cfg.value is None:
                raise ConnectionDetailError(f"connection detail {name} has no value")
            out[name] = cfg.value.encode()

        elif detail_type == ConnectionDetailType.FROM_CONNECTION_SECRET_KEY:
            if cfg.from_connection_secret_key is None:
                raise ConnectionDetailError(f"connection detail {name} has no fromConnectionSecretKey")
            value = details.get(cfg.from_connection_secret_key)
            if value is not None:
                out[name] = value

        elif detail_type == ConnectionDetailType.FROM_FIELD_PATH:
            if cfg.from_field_path is None:
                raise ConnectionDetailError(f"connection detail {name} has no fromFieldPath")
            try:
                field_value = composed.get_value(cfg.from_field_path)
            except FieldNotFoundError:
                continue
            except FieldPathError as e:
                raise ConnectionDetailError(f"connection detail {name}: {e}") from e
            if isinstance(field_value, str):
                out[name] = field_value.encode()
            else:
                out[name] = json.dumps(field_value).encode()

    return out
