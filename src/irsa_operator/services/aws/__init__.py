"""AWS service clients."""

from .client import AwsClient, IamClient, S3Client, StsClient, error_code
from .role import RoleSynchronizer, extract_new_policies, extract_stale_policies, policy_arn

__all__ = [
    "AwsClient",
    "IamClient",
    "S3Client",
    "StsClient",
    "error_code",
    "RoleSynchronizer",
    "policy_arn",
    "extract_new_policies",
    "extract_stale_policies",
]
