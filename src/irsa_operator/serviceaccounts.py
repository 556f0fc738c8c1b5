"""ServiceAccount reconciliation against the inventory kept in IRSA status."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from .manifests import build_service_account
from .models import RoleManager
from .services.kubernetes.batch import BatchError, ObjectBatch, ObjectClient
from .utils.inventory import Inventory, NamespacedName, diff

logger = logging.getLogger(__name__)


def to_ref(obj: dict[str, Any]) -> NamespacedName:
    meta = obj["metadata"]
    return NamespacedName(name=meta["name"], namespace=meta["namespace"])


class IdentityInventoryReconciler:
    """Applies and prunes ServiceAccounts, recording progress in an inventory.

    The inventory is updated as each object is handled, so a failure part way
    through still leaves it describing what exists in the cluster.
    """

    def __init__(self, client: ObjectClient, inventory: Inventory) -> None:
        self.client = client
        self.inventory = inventory

    def apply(self, desired: Iterable[NamespacedName], role: RoleManager) -> list[NamespacedName]:
        """Apply a ServiceAccount annotated with the role ARN for every desired pair."""
        objects = [build_service_account(ref, role) for ref in desired]
        try:
            applied = ObjectBatch(self.client, objects).apply_all()
        except BatchError as e:
            for obj in e.completed:
                self.inventory.add(to_ref(obj))
            raise
        refs = [to_ref(obj) for obj in applied]
        for ref in refs:
            self.inventory.add(ref)
        return refs

    def stale(self, desired: Iterable[NamespacedName]) -> list[NamespacedName]:
        return diff(self.inventory.items(), list(desired))

    def prune(self, desired: Iterable[NamespacedName]) -> list[NamespacedName]:
        """Delete inventoried ServiceAccounts that are no longer desired."""
        stale = self.stale(desired)
        if not stale:
            return []
        logger.info(f"Pruning ServiceAccounts no longer desired: {', '.join(str(ref) for ref in stale)}")
        return self.delete(stale)

    def delete(self, refs: Iterable[NamespacedName]) -> list[NamespacedName]:
        """Delete ServiceAccounts and drop each from the inventory once it is gone."""
        objects = [build_service_account(ref) for ref in refs]
        try:
            deleted = ObjectBatch(self.client, objects).delete_all()
        except BatchError as e:
            for obj in e.completed:
                self.inventory.remove(to_ref(obj))
            raise
        removed = [to_ref(obj) for obj in deleted]
        for ref in removed:
            self.inventory.remove(ref)
        return removed
