"""Handler for IRSASetup CRD."""

from __future__ import annotations

from typing import Any, Callable

import kopf

from ..constants import (
    API_GROUP_VERSION,
    KIND_SETUP,
    MODE_EKS,
    MODE_SELFHOSTED,
    REASON_EKS_NOT_READY,
    REASON_EKS_READY,
    REASON_FAILED_ISSUER,
    REASON_FAILED_KEYS,
    REASON_FAILED_OIDC,
    REASON_FAILED_WEBHOOK,
    REASON_INVALID_SPEC,
    REASON_SELFHOSTED_READY,
)
from ..issuer import IssuerMeta, new_issuer_meta
from ..manifests import MANAGED_LABELS, build_key_secret, key_secret_ref
from ..models import SetupSpec
from ..selfhosted.discovery import DiscoveryContents
from ..selfhosted.idp import AwsIdentityProvider
from ..selfhosted.keys import JWKS, create_key_pair, new_jwks
from ..selfhosted.orchestrator import SetupOrchestrator
from ..selfhosted.storage import S3IdPDiscovery
from ..selfhosted.webhook import webhook_references, webhook_resources
from ..services.aws.client import AwsClient
from ..services.kubernetes.batch import ObjectBatch
from ..services.kubernetes.client import KubernetesClient
from ..tracing import add_span_attribute, trace_span
from ..utils.conditions import is_ready, ready_reason
from ..utils.events import emit_cleanup_succeeded, emit_setup_ready, emit_validate_succeeded
from .base import BaseHandler, ReconcileState

# A failure before the key Secret was stored means keys and documents are redone
FORCE_UPDATE_REASONS = (REASON_FAILED_KEYS, REASON_FAILED_OIDC)


class SetupHandler(BaseHandler):
    """Handler for IRSASetup resources."""

    def __init__(
        self,
        aws_factory: Callable[[], AwsClient] = AwsClient,
        kube_factory: Callable[[], KubernetesClient] = KubernetesClient.from_config,
    ):
        """Initialize setup handler.

        Args:
            aws_factory: Builds the AWS client for a reconcile
            kube_factory: Builds the Kubernetes client for a reconcile
        """
        super().__init__(KIND_SETUP)
        self.aws_factory = aws_factory
        self.kube_factory = kube_factory

    def build_orchestrator(
        self,
        aws: AwsClient,
        setup: SetupSpec,
        issuer: IssuerMeta,
        jwks: JWKS,
    ) -> SetupOrchestrator:
        return SetupOrchestrator(
            S3IdPDiscovery(aws.s3(setup.s3.region, setup.s3.bucket_name)),
            AwsIdentityProvider(aws.iam(), issuer),
            DiscoveryContents(jwks, issuer),
        )

    def check_mode(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        setup: SetupSpec,
        status: dict[str, Any],
        state: ReconcileState,
    ) -> None:
        """Reject unknown modes and mode changes after the first reconcile."""
        if setup.mode not in (MODE_SELFHOSTED, MODE_EKS):
            self.handle_validation_error(
                body, meta, f"mode must be '{MODE_SELFHOSTED}' or '{MODE_EKS}', got {setup.mode!r}"
            )
        recorded = status.get("mode")
        if recorded and recorded != setup.mode:
            state.fields["mode"] = recorded
            self.handle_validation_error(
                body, meta, f"mode is immutable: resource was set up as {recorded!r}, spec.mode is now {setup.mode!r}"
            )
        state.fields["mode"] = setup.mode
        emit_validate_succeeded(body)

    def reconcile(
        self,
        body: dict[str, Any],
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Reconcile IRSASetup resource."""
        setup = SetupSpec.from_spec(spec)
        name = meta.get("name", "unknown")

        with trace_span("reconcile_setup", kind=KIND_SETUP, attributes={"setup.name": name, "setup.mode": setup.mode}):
            with self.status_scope(meta, status, patch) as state:
                with state.failure_reason(REASON_INVALID_SPEC):
                    self.check_mode(body, meta, setup, status, state)

                if setup.mode == MODE_EKS:
                    self.reconcile_eks(body, meta, setup, state)
                else:
                    self.reconcile_selfhosted(body, meta, setup, state)

    def reconcile_eks(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        setup: SetupSpec,
        state: ReconcileState,
    ) -> None:
        """Delegate to the cluster's existing IAM OIDC provider."""
        with state.failure_reason(REASON_EKS_NOT_READY):
            if not setup.iam_oidc_provider:
                self.handle_validation_error(body, meta, "IamOIDCProvider parameter must be set when Mode is 'eks'")
            issuer = new_issuer_meta(setup)

        state.ready(REASON_EKS_READY, "successfully setup for eks")
        self.log_info(meta, "OIDC provider for EKS is set up", reason=REASON_EKS_READY)
        emit_setup_ready(body, issuer.issuer_url())

    def reconcile_selfhosted(
        self,
        body: dict[str, Any],
        meta: dict[str, Any],
        setup: SetupSpec,
        state: ReconcileState,
    ) -> None:
        """Publish the issuer, register it with IAM and install the key and webhook."""
        if is_ready(state.conditions):
            self.log_info(meta, "Self-hosted resources are already set up", reason=REASON_SELFHOSTED_READY)
            return

        force_update = ready_reason(state.conditions) in FORCE_UPDATE_REASONS
        self.log_info(meta, "Setting up self-hosted resources", reason="SettingUp", force_update=force_update)

        with state.failure_reason(REASON_FAILED_ISSUER):
            issuer = new_issuer_meta(setup)
        add_span_attribute("setup.issuer_url", issuer.issuer_url())

        with state.failure_reason(REASON_FAILED_KEYS):
            key_pair = create_key_pair()
            jwks = new_jwks(key_pair.public_key_pem)

        aws = self.aws_factory()
        kube = self.kube_factory()

        with state.failure_reason(REASON_FAILED_OIDC):
            self.build_orchestrator(aws, setup, issuer, jwks).execute(force_update)

        with state.failure_reason(REASON_FAILED_KEYS), trace_span("store_key_secret", kind=KIND_SETUP):
            batch = ObjectBatch(kube, [build_key_secret(key_pair.public_key_pem, key_pair.private_key_pem)])
            if force_update:
                batch.apply_all()
            else:
                batch.create_all()

        with state.failure_reason(REASON_FAILED_WEBHOOK), trace_span("apply_webhook", kind=KIND_SETUP):
            ObjectBatch(kube, webhook_resources()).apply_all()

        state.ready(REASON_SELFHOSTED_READY, "successfully setup resources for self-hosted")
        self.log_info(meta, "Self-hosted resources are set up", reason=REASON_SELFHOSTED_READY, issuer=issuer.issuer_url())
        emit_setup_ready(body, issuer.issuer_url())

    def delete(
        self,
        body: dict[str, Any],
        spec: dict[str, Any],
        meta: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Handle IRSASetup resource deletion."""
        setup = SetupSpec.from_spec(spec)
        self.log_info(meta, "IRSASetup is being deleted", event="deletion", reason="Deletion", cleanup=setup.cleanup)

        if setup.mode == MODE_SELFHOSTED and setup.cleanup:
            with trace_span("cleanup_setup", kind=KIND_SETUP):
                self.cleanup_selfhosted(setup)
            emit_cleanup_succeeded(body)

        self.remove_finalizer(meta, patch)

    def cleanup_selfhosted(self, setup: SetupSpec) -> None:
        """Remove the key Secret, the webhook, the discovery bucket and the IAM provider."""
        kube = self.kube_factory()
        ObjectBatch(kube, [key_secret_ref(), *webhook_references()]).delete_all(inclusions=MANAGED_LABELS)

        issuer = new_issuer_meta(setup)
        aws = self.aws_factory()
        account_id = aws.sts().get_account_id()
        self.build_orchestrator(aws, setup, issuer, JWKS(keys=())).delete(account_id)


# Global handler instance
_handler = SetupHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_SETUP)
@kopf.on.update(API_GROUP_VERSION, KIND_SETUP)
@kopf.on.resume(API_GROUP_VERSION, KIND_SETUP)
def handle_setup(
    body: dict[str, Any],
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle IRSASetup resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.reconcile(body, spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_SETUP)
def handle_setup_delete(
    body: dict[str, Any],
    spec: dict[str, Any],
    meta: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle IRSASetup resource deletion."""
    _handler.reconcile_with_metrics(body, meta, lambda: _handler.delete(body, spec, meta, patch))
