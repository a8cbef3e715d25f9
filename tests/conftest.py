"""Shared pytest fixtures for xrcompose tests."""

from typing import Any
from unittest.mock import MagicMock

import pytest

from xrcompose.models.composition import ComposedTemplate
from xrcompose.models.resource import CompositeResource, Unstructured
from xrcompose.utils.errors import NotFoundError
from xrcompose.utils.labels import XRLabels

GENERATED_SUFFIX = "x7k2p"


def _create(obj: Unstructured, dry_run: bool = False) -> dict[str, Any]:
    """Mimic the API server allocating a name from generateName."""
    body = obj.to_dict()
    metadata = body.setdefault("metadata", {})
    if not metadata.get("name"):
        metadata["name"] = f"{metadata.get('generateName', '')}{GENERATED_SUFFIX}"
    if not dry_run:
        metadata["uid"] = f"{metadata['name']}-uid"
    return body


@pytest.fixture
def mock_k8s() -> MagicMock:
    """Create a mocked K8sClient backed by an empty store."""
    mock = MagicMock()
    mock.get.side_effect = NotFoundError("Object", "missing")
    mock.get_secret.side_effect = NotFoundError("Secret", "missing")
    mock.create.side_effect = _create
    mock.patch.side_effect = lambda obj, body: body
    mock.update.side_effect = lambda obj: obj.to_dict()
    return mock


@pytest.fixture
def composite() -> CompositeResource:
    """Sample composite resource with a name prefix label."""
    return CompositeResource(
        {
            "apiVersion": "example.org/v1alpha1",
            "kind": "XDatabase",
            "metadata": {
                "name": "ola",
                "uid": "xr-uid-12345",
                "labels": {
                    XRLabels.COMPOSITE: "ola",
                    XRLabels.CLAIM_NAME: "rola",
                    XRLabels.CLAIM_NAMESPACE: "rolans",
                },
            },
            "spec": {"region": "us-east-1", "size": "small"},
        }
    )


@pytest.fixture
def bucket_base() -> dict[str, Any]:
    """Base object for a composed bucket."""
    return {
        "apiVersion": "storage.example.org/v1",
        "kind": "Bucket",
        "spec": {
            "forProvider": {"acl": "private"},
            "writeConnectionSecretToRef": {"name": "bucket-conn", "namespace": "crossplane-system"},
        },
    }


@pytest.fixture
def bucket_template(bucket_base: dict[str, Any]) -> ComposedTemplate:
    """Named template for a composed bucket."""
    return ComposedTemplate(name="cool-resource", base=bucket_base)
