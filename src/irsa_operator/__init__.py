"""IRSA Operator: IAM Roles for Service Accounts on any Kubernetes cluster."""

__version__ = "0.1.0"
