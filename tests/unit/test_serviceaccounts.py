"""Tests for ServiceAccount reconciliation against the inventory."""

from __future__ import annotations

import pytest

from irsa_operator.models import RoleManager, ServiceAccountSpec
from irsa_operator.serviceaccounts import IdentityInventoryReconciler
from irsa_operator.services.kubernetes.batch import BatchError
from irsa_operator.utils.inventory import Inventory, NamespacedName

SA_A = NamespacedName(name="sa-1", namespace="ns-a")
SA_B = NamespacedName(name="sa-1", namespace="ns-b")
SA_C = NamespacedName(name="sa-1", namespace="ns-c")


def make_role(*namespaces: str) -> RoleManager:
    return RoleManager(
        role_name="s3-reader",
        service_account=ServiceAccountSpec(name="sa-1", namespaces=namespaces),
        policies=("ReadOnlyAccess",),
        account_id="123456789012",
    )


def sa_key(ref: NamespacedName) -> tuple[str, str, str, str]:
    return ("v1", "ServiceAccount", ref.namespace, ref.name)


class TestApply:
    """Test cases for applying ServiceAccounts."""

    def test_apply_annotates_and_records(self, kube) -> None:
        inventory = Inventory()
        reconciler = IdentityInventoryReconciler(kube, inventory)

        applied = reconciler.apply([SA_A, SA_B], make_role("ns-a", "ns-b"))

        assert applied == [SA_A, SA_B]
        assert inventory.items() == [SA_A, SA_B]
        sa = kube.objects[sa_key(SA_A)]
        assert sa["metadata"]["annotations"] == {
            "eks.amazonaws.com/role-arn": "arn:aws:iam::123456789012:role/s3-reader"
        }

    def test_partial_failure_keeps_completed(self, kube) -> None:
        kube.fail("apply", "ns-b/sa-1")
        inventory = Inventory()
        reconciler = IdentityInventoryReconciler(kube, inventory)

        with pytest.raises(BatchError) as exc_info:
            reconciler.apply([SA_A, SA_B, SA_C], make_role("ns-a", "ns-b", "ns-c"))

        assert inventory.items() == [SA_A]
        assert [obj["metadata"]["namespace"] for obj in exc_info.value.completed] == ["ns-a"]
        assert sa_key(SA_C) not in kube.objects


class TestPrune:
    """Test cases for pruning stale ServiceAccounts."""

    def test_stale(self, kube) -> None:
        reconciler = IdentityInventoryReconciler(kube, Inventory([SA_A, SA_B]))

        assert reconciler.stale([SA_B]) == [SA_A]
        assert reconciler.stale([SA_A, SA_B]) == []

    def test_prune_removes_from_cluster_and_inventory(self, kube) -> None:
        inventory = Inventory()
        reconciler = IdentityInventoryReconciler(kube, inventory)
        reconciler.apply([SA_A, SA_B], make_role("ns-a", "ns-b"))

        removed = reconciler.prune([SA_B])

        assert removed == [SA_A]
        assert inventory.items() == [SA_B]
        assert sa_key(SA_A) not in kube.objects
        assert sa_key(SA_B) in kube.objects

    def test_prune_nothing_stale(self, kube) -> None:
        reconciler = IdentityInventoryReconciler(kube, Inventory([SA_A]))

        assert reconciler.prune([SA_A]) == []
        assert kube.calls == []

    def test_already_deleted_is_dropped_from_inventory(self, kube) -> None:
        inventory = Inventory([SA_A])

        IdentityInventoryReconciler(kube, inventory).prune([])

        assert len(inventory) == 0

    def test_partial_delete_failure(self, kube) -> None:
        inventory = Inventory()
        reconciler = IdentityInventoryReconciler(kube, inventory)
        reconciler.apply([SA_A, SA_B, SA_C], make_role("ns-a", "ns-b", "ns-c"))
        kube.fail("delete", "ns-b/sa-1")

        with pytest.raises(BatchError):
            reconciler.prune([])

        assert inventory.items() == [SA_B, SA_C]
