"""Service clients for AWS and Kubernetes."""
