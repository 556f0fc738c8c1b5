"""Tests for inventory helpers."""

from __future__ import annotations

from irsa_operator.utils.inventory import Inventory, NamespacedName, diff

R1 = NamespacedName(name="sa-1", namespace="ns-a")
R2 = NamespacedName(name="sa-1", namespace="ns-b")
R3 = NamespacedName(name="sa-2", namespace="ns-a")


class TestDiff:
    """Test cases for diff."""

    def test_elements_missing_from_reference(self) -> None:
        assert diff([R1, R2, R3], [R2]) == [R1, R3]

    def test_identical_lists(self) -> None:
        assert diff([R1, R2], [R1, R2]) == []

    def test_empty_reference(self) -> None:
        assert diff([R1, R2], []) == [R1, R2]

    def test_empty_target(self) -> None:
        assert diff([], [R1]) == []

    def test_order_follows_target(self) -> None:
        assert diff([R3, R1], [R2]) == [R3, R1]

    def test_name_and_namespace_both_count(self) -> None:
        assert diff([R1], [NamespacedName(name="sa-1", namespace="ns-c")]) == [R1]


class TestNamespacedName:
    def test_str(self) -> None:
        assert str(R1) == "ns-a/sa-1"


class TestInventory:
    """Test cases for Inventory."""

    def test_status_round_trip(self) -> None:
        status = [{"name": "sa-1", "namespace": "ns-a"}, {"name": "sa-1", "namespace": "ns-b"}]

        inventory = Inventory.from_status(status)

        assert inventory.items() == [R1, R2]
        assert inventory.to_status() == status

    def test_from_missing_status(self) -> None:
        assert len(Inventory.from_status(None)) == 0

    def test_add_is_deduplicated(self) -> None:
        inventory = Inventory([R1])
        inventory.add(R1)
        inventory.add(R2)

        assert inventory.items() == [R1, R2]

    def test_remove(self) -> None:
        inventory = Inventory([R1, R2, R3])
        inventory.remove(R2)

        assert inventory.items() == [R1, R3]
        assert R2 not in inventory

    def test_remove_missing_is_noop(self) -> None:
        inventory = Inventory([R1])
        inventory.remove(R3)

        assert inventory.items() == [R1]

    def test_iteration_allows_mutation(self) -> None:
        inventory = Inventory([R1, R2])
        for item in inventory:
            inventory.remove(item)

        assert len(inventory) == 0

    def test_equality(self) -> None:
        assert Inventory([R1, R2]) == Inventory([R1, R2])
        assert Inventory([R1, R2]) != Inventory([R2, R1])
