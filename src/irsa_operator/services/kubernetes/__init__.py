"""Kubernetes object clients."""

from .batch import BatchError, ObjectBatch
from .client import KubernetesClient

__all__ = ["KubernetesClient", "ObjectBatch", "BatchError"]
