"""Prometheus metrics for the IRSA Operator."""

from prometheus_client import Counter, Histogram

# Reconciliation metrics
reconcile_total = Counter(
    "irsa_operator_reconcile_total",
    "Total number of reconciliations",
    ["kind", "result"],
)

reconcile_duration_seconds = Histogram(
    "irsa_operator_reconcile_duration_seconds",
    "Duration of reconciliations in seconds",
    ["kind"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)

error_total = Counter(
    "irsa_operator_error_total",
    "Total number of reconciliation errors",
    ["kind", "error_type"],
)

resource_status_total = Counter(
    "irsa_operator_resource_status_total",
    "Resource status transitions recorded by the operator",
    ["kind", "status"],
)

# AWS operation metrics
aws_operations_total = Counter(
    "irsa_operator_aws_operations_total",
    "Total number of AWS API operations",
    ["service", "operation", "result"],
)

# Kubernetes operation metrics
k8s_operations_total = Counter(
    "irsa_operator_k8s_operations_total",
    "Total number of Kubernetes object operations",
    ["operation", "result"],
)

# Configuration drift detection metrics
drift_detected_total = Counter(
    "irsa_operator_drift_detected_total",
    "Total number of configuration drift detections",
    ["kind", "resource_type"],
)
