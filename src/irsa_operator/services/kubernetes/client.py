"""Kubernetes object operations over the dynamic client."""

from __future__ import annotations

import logging
from typing import Any

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic import DynamicClient

from ... import metrics
from ...constants import FIELD_MANAGER

logger = logging.getLogger(__name__)


def load_kube_config() -> client.ApiClient:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()
    return client.ApiClient()


def object_ref(obj: dict[str, Any]) -> str:
    meta = obj.get("metadata", {})
    namespace = meta.get("namespace")
    name = meta.get("name", "")
    ref = f"{namespace}/{name}" if namespace else name
    return f"{obj.get('kind', 'Object')} {ref}"


def labels_match(labels: dict[str, str] | None, inclusions: dict[str, str] | None) -> bool:
    """Return True when every inclusion label is present with the same value."""
    labels = labels or {}
    return all(labels.get(key) == value for key, value in (inclusions or {}).items())


class KubernetesClient:
    """Apply, create, get, delete and list arbitrary objects given as dicts."""

    def __init__(self, dynamic_client: DynamicClient, field_manager: str = FIELD_MANAGER) -> None:
        self.client = dynamic_client
        self.field_manager = field_manager

    @classmethod
    def from_config(cls) -> KubernetesClient:
        return cls(DynamicClient(load_kube_config()))

    def _resource(self, api_version: str, kind: str) -> Any:
        return self.client.resources.get(api_version=api_version, kind=kind)

    def _resource_for(self, obj: dict[str, Any]) -> Any:
        return self._resource(obj["apiVersion"], obj["kind"])

    def apply(self, obj: dict[str, Any]) -> None:
        """Server-side apply the object, taking ownership of conflicting fields."""
        meta = obj["metadata"]
        try:
            self.client.server_side_apply(
                self._resource_for(obj),
                body=obj,
                name=meta["name"],
                namespace=meta.get("namespace"),
                field_manager=self.field_manager,
                force_conflicts=True,
            )
            metrics.k8s_operations_total.labels(operation="apply", result="success").inc()
        except ApiException as e:
            metrics.k8s_operations_total.labels(operation="apply", result="error").inc()
            logger.error(f"Failed to apply {object_ref(obj)}: {e.reason}")
            raise
        logger.info(f"Applied {object_ref(obj)}")

    def create(self, obj: dict[str, Any]) -> None:
        """Create the object. Raises ApiException (409) if it already exists."""
        meta = obj["metadata"]
        try:
            self.client.create(
                self._resource_for(obj),
                body=obj,
                namespace=meta.get("namespace"),
                field_manager=self.field_manager,
            )
            metrics.k8s_operations_total.labels(operation="create", result="success").inc()
        except ApiException as e:
            result = "exists" if e.status == 409 else "error"
            metrics.k8s_operations_total.labels(operation="create", result=result).inc()
            raise
        logger.info(f"Created {object_ref(obj)}")

    def get(self, obj: dict[str, Any]) -> dict[str, Any] | None:
        """Return the live object, or None when it does not exist."""
        meta = obj["metadata"]
        try:
            live = self.client.get(
                self._resource_for(obj),
                name=meta["name"],
                namespace=meta.get("namespace"),
            )
        except ApiException as e:
            if e.status == 404:
                return None
            metrics.k8s_operations_total.labels(operation="get", result="error").inc()
            raise
        metrics.k8s_operations_total.labels(operation="get", result="success").inc()
        return live.to_dict()

    def delete(
        self,
        obj: dict[str, Any],
        propagation: str = "Background",
        inclusions: dict[str, str] | None = None,
    ) -> bool:
        """Delete the object.

        Objects that are already gone, or whose labels do not carry every
        ``inclusions`` label, are left alone.

        Returns:
            True if a delete request was issued
        """
        live = self.get(obj)
        if live is None:
            logger.info(f"{object_ref(obj)} already deleted")
            return False
        if not labels_match(live.get("metadata", {}).get("labels"), inclusions):
            logger.info(f"Skipping deletion of {object_ref(obj)}: labels do not match {inclusions}")
            return False

        meta = obj["metadata"]
        try:
            self.client.delete(
                self._resource_for(obj),
                name=meta["name"],
                namespace=meta.get("namespace"),
                body={"propagationPolicy": propagation},
            )
        except ApiException as e:
            if e.status == 404:
                return False
            metrics.k8s_operations_total.labels(operation="delete", result="error").inc()
            logger.error(f"Failed to delete {object_ref(obj)}: {e.reason}")
            raise
        metrics.k8s_operations_total.labels(operation="delete", result="success").inc()
        logger.info(f"Deleted {object_ref(obj)}")
        return True

    def list(self, api_version: str, kind: str, namespace: str | None = None) -> list[dict[str, Any]]:
        """List all objects of a kind, cluster-wide unless a namespace is given."""
        try:
            result = self.client.get(self._resource(api_version, kind), namespace=namespace)
        except ApiException:
            metrics.k8s_operations_total.labels(operation="list", result="error").inc()
            raise
        metrics.k8s_operations_total.labels(operation="list", result="success").inc()
        return result.to_dict().get("items", [])
