"""Inventory of namespaced objects applied on behalf of a resource."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, NamedTuple, Sequence, TypeVar

T = TypeVar("T")


class NamespacedName(NamedTuple):
    """Name and namespace of a namespaced object."""

    name: str
    namespace: str

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


def diff(target: Sequence[T], reference: Iterable[T]) -> list[T]:
    """Return the elements of ``target`` that are not present in ``reference``.

    Order of ``target`` is preserved. Membership is exact equality; duplicates
    in ``target`` are kept as-is.
    """
    reference_list = list(reference)
    return [item for item in target if item not in reference_list]


class Inventory:
    """Ordered, deduplicated set of NamespacedName entries.

    Serialized into resource status as a list of ``{"name", "namespace"}``
    mappings.
    """

    def __init__(self, items: Iterable[NamespacedName] = ()) -> None:
        self._items: dict[NamespacedName, None] = {}
        for item in items:
            self.add(item)

    @classmethod
    def from_status(cls, entries: list[dict[str, Any]] | None) -> Inventory:
        """Build an inventory from the status representation."""
        return cls(
            NamespacedName(name=entry.get("name", ""), namespace=entry.get("namespace", ""))
            for entry in entries or []
        )

    def to_status(self) -> list[dict[str, str]]:
        """Render the inventory for resource status."""
        return [{"name": item.name, "namespace": item.namespace} for item in self._items]

    def add(self, item: NamespacedName) -> None:
        self._items.setdefault(item, None)

    def remove(self, item: NamespacedName) -> None:
        self._items.pop(item, None)

    def items(self) -> list[NamespacedName]:
        return list(self._items)

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[NamespacedName]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Inventory):
            return NotImplemented
        return self.items() == other.items()

    def __repr__(self) -> str:
        return f"Inventory({self.items()!r})"
