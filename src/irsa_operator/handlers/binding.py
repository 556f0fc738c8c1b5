"""Handler for IRSA CRD."""

from __future__ import annotations

from typing import Any, Callable

import kopf

from .. import metrics
from ..constants import (
    API_GROUP_VERSION,
    KIND_BINDING,
    KIND_SETUP,
    REASON_INVALID_SPEC,
    REASON_IRSA_FAILED_ACCOUNT_ID,
    REASON_IRSA_FAILED_APPLYING,
    REASON_IRSA_FAILED_DELETING,
    REASON_IRSA_FAILED_ROLE_UPDATE,
    REASON_IRSA_FAILED_SETUP,
    REASON_IRSA_READY,
)
from ..issuer import IssuerMeta, new_issuer_meta
from ..models import BindingSpec, RoleManager, SetupSpec
from ..serviceaccounts import IdentityInventoryReconciler
from ..services.aws.client import AwsClient
from ..services.aws.role import RoleSynchronizer
from ..services.kubernetes.client import KubernetesClient
from ..tracing import add_span_attribute, trace_span
from ..utils.errors import ConfigurationError
from ..utils.events import (
    emit_cleanup_succeeded,
    emit_role_synced,
    emit_service_accounts_applied,
    emit_service_accounts_deleted,
    emit_validate_succeeded,
)
from ..utils.inventory import Inventory
from .base import BaseHandler, ReconcileState

STATUS_INVENTORY = "serviceAccounts"


class BindingHandler(BaseHandler):
    """Handler for IRSA resources."""

    def __init__(
        self,
        aws_factory: Callable[[], AwsClient] = AwsClient,
        kube_factory: Callable[[], KubernetesClient] = KubernetesClient.from_config,
    ):
        super().__init__(KIND_BINDING)
        self.aws_factory = aws_factory
        self.kube_factory = kube_factory

    def validate(self, body: dict[str, Any], meta: dict[str, Any], binding: BindingSpec) -> None:
        if not binding.service_account.name:
            self.handle_validation_error(body, meta, "serviceAccount.name is required")
        if not binding.role_name:
            self.handle_validation_error(body, meta, "iamRole.name is required")
        emit_validate_succeeded(body)

    def lookup_issuer(self, kube: KubernetesClient) -> IssuerMeta:
        """Issuer of the one IRSASetup in the cluster."""
        setups = kube.list(API_GROUP_VERSION, KIND_SETUP)
        if len(setups) != 1:
            raise ConfigurationError(f"there should be exactly one IRSASetup item, found {len(setups)}")
        return new_issuer_meta(SetupSpec.from_spec(setups[0].get("spec") or {}))

    def reconcile(
        self,
        body: dict[str, Any],
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Reconcile IRSA resource."""
        binding = BindingSpec.from_spec(spec)
        name = meta.get("name", "unknown")

        with trace_span("reconcile_binding", kind=KIND_BINDING, attributes={"binding.name": name}):
            with self.status_scope(meta, status, patch) as state:
                inventory = Inventory.from_status(status.get(STATUS_INVENTORY))
                try:
                    self._reconcile(body, meta, binding, state, inventory)
                finally:
                    self._track_inventory(state, inventory)

    def _track_inventory(self, state: ReconcileState, inventory: Inventory) -> None:
        state.fields[STATUS_INVENTORY] = inventory.to_status()

    def _reconcile(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        binding: BindingSpec,
        state: ReconcileState,
        inventory: Inventory,
    ) -> None:
        with state.failure_reason(REASON_INVALID_SPEC):
            self.validate(body, meta, binding)

        kube = self.kube_factory()
        aws = self.aws_factory()

        with state.failure_reason(REASON_IRSA_FAILED_SETUP):
            issuer = self.lookup_issuer(kube)

        with state.failure_reason(REASON_IRSA_FAILED_ACCOUNT_ID):
            account_id = aws.sts().get_account_id()

        role = RoleManager(
            role_name=binding.role_name,
            service_account=binding.service_account,
            policies=binding.policies,
            account_id=account_id,
        )
        add_span_attribute("binding.role_arn", role.role_arn)

        with state.failure_reason(REASON_IRSA_FAILED_ROLE_UPDATE), trace_span("sync_role", kind=KIND_BINDING):
            RoleSynchronizer(aws.iam()).sync(issuer, role)
        emit_role_synced(body, role.role_name)

        desired = binding.service_account.namespaced_names()
        reconciler = IdentityInventoryReconciler(kube, inventory)

        with state.failure_reason(REASON_IRSA_FAILED_APPLYING), trace_span("apply_service_accounts", kind=KIND_BINDING):
            applied = reconciler.apply(desired, role)
        emit_service_accounts_applied(body, len(applied))

        with state.failure_reason(REASON_IRSA_FAILED_DELETING), trace_span("prune_service_accounts", kind=KIND_BINDING):
            stale = reconciler.stale(desired)
            if stale:
                metrics.drift_detected_total.labels(kind=KIND_BINDING, resource_type="ServiceAccount").inc(len(stale))
            deleted = reconciler.prune(desired)
        if deleted:
            emit_service_accounts_deleted(body, len(deleted))

        state.ready(REASON_IRSA_READY, "successfully reconciled IRSA resources")
        self.log_info(meta, "IRSA resources are reconciled", reason=REASON_IRSA_READY, role_arn=role.role_arn)

    def delete(
        self,
        body: dict[str, Any],
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Handle IRSA resource deletion."""
        binding = BindingSpec.from_spec(spec)
        self.log_info(meta, "IRSA is being deleted", event="deletion", reason="Deletion", cleanup=binding.cleanup)

        if binding.cleanup:
            inventory = Inventory.from_status(status.get(STATUS_INVENTORY))
            try:
                with trace_span("cleanup_binding", kind=KIND_BINDING):
                    self.cleanup(binding, inventory)
            finally:
                patch.status.update({STATUS_INVENTORY: inventory.to_status()})
            emit_cleanup_succeeded(body)

        self.remove_finalizer(meta, patch)

    def cleanup(self, binding: BindingSpec, inventory: Inventory) -> None:
        """Delete the role, then every ServiceAccount tracked or desired."""
        role = RoleManager(
            role_name=binding.role_name,
            service_account=binding.service_account,
            policies=binding.policies,
            account_id="",
        )
        RoleSynchronizer(self.aws_factory().iam()).delete(role)

        targets = inventory.items()
        targets.extend(ref for ref in binding.service_account.namespaced_names() if ref not in inventory)
        IdentityInventoryReconciler(self.kube_factory(), inventory).delete(targets)


# Global handler instance
_handler = BindingHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_BINDING)
@kopf.on.update(API_GROUP_VERSION, KIND_BINDING)
@kopf.on.resume(API_GROUP_VERSION, KIND_BINDING)
def handle_binding(
    body: dict[str, Any],
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle IRSA resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(body, spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_BINDING)
def handle_binding_delete(
    body: dict[str, Any],
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle IRSA resource deletion."""
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.delete(body, spec, meta, status, patch))
