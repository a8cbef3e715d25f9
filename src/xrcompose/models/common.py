"""Common Pydantic models shared by composite and composed resources."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class EventType(str, Enum):
    """Kubernetes event types."""

    NORMAL = "Normal"
    WARNING = "Warning"


class ObjectReference(BaseModel):
    """Reference to a Kubernetes object."""

    api_version: str = Field("", description="API version")
    kind: str = Field("", description="Resource kind")
    name: str = Field("", description="Resource name")
    namespace: str | None = Field(None, description="Resource namespace")
    uid: str | None = Field(None, description="Kubernetes UID")

    @property
    def is_empty(self) -> bool:
        """Check whether this reference points at nothing."""
        return not self.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize using Kubernetes field names."""
        ref: dict[str, Any] = {"apiVersion": self.api_version, "kind": self.kind, "name": self.name}
        if self.namespace:
            ref["namespace"] = self.namespace
        if self.uid:
            ref["uid"] = self.uid
        return ref

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ObjectReference":
        """Create from a Kubernetes object reference dict."""
        return cls(
            api_version=data.get("apiVersion", ""),
            kind=data.get("kind", ""),
            name=data.get("name", ""),
            namespace=data.get("namespace"),
            uid=data.get("uid"),
        )


class SecretReference(BaseModel):
    """Reference to a Kubernetes Secret."""

    name: str = Field(..., description="Secret name")
    namespace: str = Field(..., description="Secret namespace")


class OwnerReference(BaseModel):
    """Kubernetes owner reference."""

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = False
    block_owner_deletion: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Serialize using Kubernetes field names."""
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "name": self.name,
            "uid": self.uid,
            "controller": self.controller,
            "blockOwnerDeletion": self.block_owner_deletion,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OwnerReference":
        """Create from a Kubernetes owner reference dict."""
        return cls(
            api_version=data.get("apiVersion", ""),
            kind=data.get("kind", ""),
            name=data.get("name", ""),
            uid=data.get("uid", ""),
            controller=bool(data.get("controller")),
            block_owner_deletion=bool(data.get("blockOwnerDeletion")),
        )


class Condition(BaseModel):
    """Kubernetes-style condition."""

    type: str = Field(..., description="Condition type")
    status: str = Field(..., description="Condition status (True, False, Unknown)")
    reason: str | None = Field(None, description="Machine-readable reason")
    message: str | None = Field(None, description="Human-readable message")

    @property
    def is_true(self) -> bool:
        """Check if condition status is True."""
        return self.status == "True"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Condition":
        """Create from a Kubernetes condition dict."""
        return cls(
            type=data.get("type", ""),
            status=data.get("status", "Unknown"),
            reason=data.get("reason"),
            message=data.get("message"),
        )


class Event(BaseModel):
    """An event to be recorded against a composite resource."""

    type: EventType = Field(..., description="Event type")
    reason: str = Field(..., description="Machine-readable reason")
    message: str = Field(..., description="Human-readable message")

    @classmethod
    def warning(cls, reason: str, err: BaseException | str) -> "Event":
        """Create a warning event from an error."""
        return cls(type=EventType.WARNING, reason=reason, message=str(err))

    @classmethod
    def normal(cls, reason: str, message: str) -> "Event":
        """Create a normal event."""
        return cls(type=EventType.NORMAL, reason=reason, message=message)
