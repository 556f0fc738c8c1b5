"""Apply or delete groups of objects in order."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from kubernetes.client.exceptions import ApiException

logger = logging.getLogger(__name__)


class ObjectClient(Protocol):
    """Subset of the Kubernetes client used for batches."""

    def apply(self, obj: dict[str, Any]) -> None: ...

    def create(self, obj: dict[str, Any]) -> None: ...

    def delete(
        self,
        obj: dict[str, Any],
        propagation: str = "Background",
        inclusions: dict[str, str] | None = None,
    ) -> bool: ...


class BatchError(Exception):
    """A batch stopped part way through.

    ``completed`` holds the objects handled before the failure.
    """

    def __init__(self, message: str, completed: list[dict[str, Any]], cause: Exception) -> None:
        super().__init__(message)
        self.completed = completed
        self.cause = cause


class ObjectBatch:
    """Runs one operation over a list of objects, stopping at the first failure."""

    def __init__(self, client: ObjectClient, objects: list[dict[str, Any]]) -> None:
        self.client = client
        self.objects = objects

    def apply_all(self) -> list[dict[str, Any]]:
        """Apply every object and return them.

        Raises:
            BatchError: carrying the objects applied before the failure
        """
        applied: list[dict[str, Any]] = []
        for obj in self.objects:
            try:
                self.client.apply(obj)
            except Exception as e:
                raise BatchError(f"apply failed: {e}", applied, e) from e
            applied.append(obj)
        return applied

    def create_all(self, ignore_existing: bool = True) -> list[dict[str, Any]]:
        """Create every object, skipping ones that already exist."""
        created: list[dict[str, Any]] = []
        for obj in self.objects:
            try:
                self.client.create(obj)
            except ApiException as e:
                if ignore_existing and e.status == 409:
                    logger.info(f"{obj['kind']} {obj['metadata']['name']} already exists")
                    continue
                raise BatchError(f"create failed: {e}", created, e) from e
            created.append(obj)
        return created

    def delete_all(
        self,
        propagation: str = "Background",
        inclusions: dict[str, str] | None = None,
    ) -> list[dict[str, Any]]:
        """Delete every object and return the ones handled.

        Missing objects and objects filtered out by ``inclusions`` count as handled.

        Raises:
            BatchError: carrying the objects deleted before the failure
        """
        deleted: list[dict[str, Any]] = []
        for obj in self.objects:
            try:
                self.client.delete(obj, propagation=propagation, inclusions=inclusions)
            except Exception as e:
                raise BatchError(f"delete failed: {e}", deleted, e) from e
            deleted.append(obj)
        return deleted
