"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_CLEANUP_SUCCEEDED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_ROLE_SYNCED,
    EVENT_REASON_SERVICE_ACCOUNTS_APPLIED,
    EVENT_REASON_SERVICE_ACCOUNTS_DELETED,
    EVENT_REASON_SETUP_READY,
    EVENT_REASON_VALIDATE_FAILED,
    EVENT_REASON_VALIDATE_SUCCEEDED,
)


def emit_event(
    body: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        body: Full resource body; the event is attached to the object
            described by its apiVersion, kind and metadata
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        body,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(body: dict[str, Any]) -> None:
    """Emit reconcile started event."""
    emit_event(body, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(body: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(body, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_validate_succeeded(body: dict[str, Any]) -> None:
    """Emit validation succeeded event."""
    emit_event(body, EVENT_REASON_VALIDATE_SUCCEEDED, "Validation succeeded")


def emit_validate_failed(body: dict[str, Any], message: str) -> None:
    """Emit validation failed event."""
    emit_event(body, EVENT_REASON_VALIDATE_FAILED, message, type_="Warning")


def emit_setup_ready(body: dict[str, Any], issuer_url: str) -> None:
    """Emit setup ready event."""
    emit_event(body, EVENT_REASON_SETUP_READY, f"OIDC issuer {issuer_url} is ready")


def emit_role_synced(body: dict[str, Any], role_name: str) -> None:
    """Emit role synced event."""
    emit_event(body, EVENT_REASON_ROLE_SYNCED, f"IAM role {role_name} synced")


def emit_service_accounts_applied(body: dict[str, Any], count: int) -> None:
    """Emit service accounts applied event."""
    emit_event(body, EVENT_REASON_SERVICE_ACCOUNTS_APPLIED, f"{count} ServiceAccount(s) applied")


def emit_service_accounts_deleted(body: dict[str, Any], count: int) -> None:
    """Emit service accounts deleted event."""
    emit_event(body, EVENT_REASON_SERVICE_ACCOUNTS_DELETED, f"{count} ServiceAccount(s) deleted")


def emit_cleanup_succeeded(body: dict[str, Any]) -> None:
    """Emit cleanup succeeded event."""
    emit_event(body, EVENT_REASON_CLEANUP_SUCCEEDED, "External resources cleaned up")
