"""Tests for ordered object batches."""

from __future__ import annotations

import pytest
from kubernetes.client.exceptions import ApiException

from irsa_operator.services.kubernetes.batch import BatchError, ObjectBatch


def secret(name: str, labels: dict[str, str] | None = None) -> dict:
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {"name": name, "namespace": "kube-system", "labels": labels or {}},
    }


class TestApplyAll:
    def test_applies_in_order(self, kube) -> None:
        objects = [secret("a"), secret("b")]

        assert ObjectBatch(kube, objects).apply_all() == objects
        assert [key[3] for op, key in kube.calls] == ["a", "b"]

    def test_stops_at_first_failure(self, kube) -> None:
        kube.fail("apply", "kube-system/b")

        with pytest.raises(BatchError) as exc_info:
            ObjectBatch(kube, [secret("a"), secret("b"), secret("c")]).apply_all()

        assert [obj["metadata"]["name"] for obj in exc_info.value.completed] == ["a"]
        assert isinstance(exc_info.value.cause, ApiException)
        assert len(kube.calls) == 2


class TestCreateAll:
    def test_existing_objects_are_skipped(self, kube) -> None:
        kube.add(secret("a"))

        created = ObjectBatch(kube, [secret("a"), secret("b")]).create_all()

        assert [obj["metadata"]["name"] for obj in created] == ["b"]

    def test_conflict_is_error_when_not_ignored(self, kube) -> None:
        kube.add(secret("a"))

        with pytest.raises(BatchError):
            ObjectBatch(kube, [secret("a")]).create_all(ignore_existing=False)


class TestDeleteAll:
    def test_missing_and_filtered_count_as_handled(self, kube) -> None:
        kube.add(secret("a", {"owner": "me"}))
        kube.add(secret("b", {"owner": "someone-else"}))
        objects = [secret("a"), secret("b"), secret("c")]

        handled = ObjectBatch(kube, objects).delete_all(inclusions={"owner": "me"})

        assert handled == objects
        assert ("v1", "Secret", "kube-system", "a") not in kube.objects
        assert ("v1", "Secret", "kube-system", "b") in kube.objects

    def test_failure_reports_completed(self, kube) -> None:
        kube.add(secret("a"))
        kube.add(secret("b"))
        kube.fail("delete", "kube-system/b")

        with pytest.raises(BatchError) as exc_info:
            ObjectBatch(kube, [secret("a"), secret("b")]).delete_all()

        assert [obj["metadata"]["name"] for obj in exc_info.value.completed] == ["a"]
