"""Idempotent create-or-patch of rendered objects."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from xrcompose.models.resource import Unstructured
from xrcompose.utils.errors import NotFoundError, OwnershipConflictError, StoreError

if TYPE_CHECKING:
    from xrcompose.clients.base import K8sClient

logger = logging.getLogger(__name__)


class Applicator(Protocol):
    """Makes the stored object match a rendered one."""

    def apply(self, obj: Unstructured, controller_uid: str | None = None) -> None: ...


class APIPatchingApplicator:
    """Creates an object if it does not exist, otherwise merge-patches it.

    The object is refreshed in place from the store's response so callers
    observe server-populated fields such as uid and status.
    """

    def __init__(self, client: K8sClient) -> None:
        self._client = client

    def apply(self, obj: Unstructured, controller_uid: str | None = None) -> None:
        """Apply a rendered object to the store.

        Args:
            obj: The desired object. Updated in place with the stored result.
            controller_uid: When set, an existing object must not be
                controlled by any other owner.

        Raises:
            StoreError: If the current object cannot be read.
            OwnershipConflictError: If another owner controls the object.
        """
        try:
            current = Unstructured(self._client.get(obj.to_reference()))
        except NotFoundError:
            current = None
        except Exception as e:
            raise StoreError(f"cannot get object: {e}") from e

        if current is None:
            logger.debug(f"Creating {obj.kind} {obj.name}")
            obj.object = self._client.create(obj)
            return

        if controller_uid is not None:
            controller = current.get_controller()
            if controller is not None and controller.uid != controller_uid:
                raise OwnershipConflictError(
                    f"existing {current.kind} {current.name} is controlled by "
                    f"{controller.kind} {controller.name} (UID {controller.uid})"
                )

        logger.debug(f"Patching {obj.kind} {obj.name}")
        obj.object = self._client.patch(obj, obj.to_dict())
