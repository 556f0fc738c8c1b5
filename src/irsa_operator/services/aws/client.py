"""AWS IAM, S3 and STS clients used by the operator."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

import boto3
from botocore.exceptions import ClientError

from ... import metrics

logger = logging.getLogger(__name__)

DEFAULT_IAM_REGION = "us-east-1"


def error_code(error: ClientError) -> str:
    """Return the AWS error code carried by a ClientError."""
    return error.response.get("Error", {}).get("Code", "")


def _record(service: str, operation: str, result: str) -> None:
    metrics.aws_operations_total.labels(service=service, operation=operation, result=result).inc()


class IamClient:
    """IAM operations for OIDC providers and roles."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def create_open_id_connect_provider(self, url: str, client_ids: list[str], thumbprints: list[str]) -> None:
        """Register an OIDC provider, treating an existing registration as success."""
        try:
            self.client.create_open_id_connect_provider(
                Url=url,
                ClientIDList=client_ids,
                ThumbprintList=thumbprints,
            )
            _record("iam", "create_oidc_provider", "success")
        except ClientError as e:
            if error_code(e) == "EntityAlreadyExists":
                logger.info(f"OIDC provider {url} already exists")
                _record("iam", "create_oidc_provider", "exists")
                return
            _record("iam", "create_oidc_provider", "error")
            logger.error(f"Failed to create OIDC provider {url}: {e}")
            raise

    def delete_open_id_connect_provider(self, arn: str) -> None:
        """Deregister an OIDC provider, treating a missing one as success."""
        try:
            self.client.delete_open_id_connect_provider(OpenIDConnectProviderArn=arn)
            _record("iam", "delete_oidc_provider", "success")
        except ClientError as e:
            if error_code(e) == "NoSuchEntity":
                logger.info(f"OIDC provider {arn} already deleted")
                _record("iam", "delete_oidc_provider", "not_found")
                return
            _record("iam", "delete_oidc_provider", "error")
            logger.error(f"Failed to delete OIDC provider {arn}: {e}")
            raise

    def create_role(self, role_name: str, trust_policy: dict[str, Any]) -> None:
        """Create a role, treating an existing role as success."""
        try:
            self.client.create_role(
                RoleName=role_name,
                AssumeRolePolicyDocument=json.dumps(trust_policy),
            )
            _record("iam", "create_role", "success")
        except ClientError as e:
            if error_code(e) == "EntityAlreadyExists":
                logger.info(f"IAM role {role_name} already exists")
                _record("iam", "create_role", "exists")
                return
            _record("iam", "create_role", "error")
            logger.error(f"Failed to create IAM role {role_name}: {e}")
            raise

    def update_assume_role_policy(self, role_name: str, trust_policy: dict[str, Any]) -> None:
        try:
            self.client.update_assume_role_policy(
                RoleName=role_name,
                PolicyDocument=json.dumps(trust_policy),
            )
            _record("iam", "update_assume_role_policy", "success")
        except ClientError as e:
            _record("iam", "update_assume_role_policy", "error")
            logger.error(f"Failed to update trust policy of IAM role {role_name}: {e}")
            raise

    def list_attached_role_policies(self, role_name: str) -> list[str]:
        """Return the ARNs of all managed policies attached to a role."""
        arns: list[str] = []
        try:
            paginator = self.client.get_paginator("list_attached_role_policies")
            for page in paginator.paginate(RoleName=role_name):
                arns.extend(policy["PolicyArn"] for policy in page.get("AttachedPolicies", []))
            _record("iam", "list_attached_role_policies", "success")
        except ClientError as e:
            _record("iam", "list_attached_role_policies", "error")
            logger.error(f"Failed to list policies attached to IAM role {role_name}: {e}")
            raise
        return arns

    def attach_role_policy(self, role_name: str, policy_arn: str) -> None:
        try:
            self.client.attach_role_policy(RoleName=role_name, PolicyArn=policy_arn)
            _record("iam", "attach_role_policy", "success")
        except ClientError as e:
            _record("iam", "attach_role_policy", "error")
            logger.error(f"Failed to attach policy {policy_arn} to IAM role {role_name}: {e}")
            raise

    def detach_role_policy(self, role_name: str, policy_arn: str) -> None:
        """Detach a policy, treating a policy that is not attached as success."""
        try:
            self.client.detach_role_policy(RoleName=role_name, PolicyArn=policy_arn)
            _record("iam", "detach_role_policy", "success")
        except ClientError as e:
            if error_code(e) == "NoSuchEntity":
                logger.info(f"Policy {policy_arn} is not attached to IAM role {role_name}")
                _record("iam", "detach_role_policy", "not_found")
                return
            _record("iam", "detach_role_policy", "error")
            logger.error(f"Failed to detach policy {policy_arn} from IAM role {role_name}: {e}")
            raise

    def delete_role(self, role_name: str) -> None:
        """Delete a role.

        A role that still carries policies this operator does not manage
        (DeleteConflict) or that no longer exists is left alone.
        """
        try:
            self.client.delete_role(RoleName=role_name)
            _record("iam", "delete_role", "success")
        except ClientError as e:
            code = error_code(e)
            if code in ("DeleteConflict", "NoSuchEntity"):
                logger.info(f"Skipping deletion of IAM role {role_name}: {code}")
                _record("iam", "delete_role", "skipped")
                return
            _record("iam", "delete_role", "error")
            logger.error(f"Failed to delete IAM role {role_name}: {e}")
            raise


class S3Client:
    """S3 operations scoped to a single bucket."""

    def __init__(self, client: Any, region: str, bucket_name: str) -> None:
        self.client = client
        self.region = region
        self.bucket_name = bucket_name

    def create_bucket(self) -> None:
        """Create the bucket, treating a bucket we already own as success."""
        params: dict[str, Any] = {"Bucket": self.bucket_name}
        # us-east-1 rejects an explicit LocationConstraint
        if self.region != "us-east-1":
            params["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
        try:
            self.client.create_bucket(**params)
            _record("s3", "create_bucket", "success")
        except ClientError as e:
            if error_code(e) == "BucketAlreadyOwnedByYou":
                logger.info(f"Bucket {self.bucket_name} already exists")
                _record("s3", "create_bucket", "exists")
                return
            _record("s3", "create_bucket", "error")
            logger.error(f"Failed to create bucket {self.bucket_name}: {e}")
            raise

    def delete_public_access_block(self) -> None:
        try:
            self.client.delete_public_access_block(Bucket=self.bucket_name)
            _record("s3", "delete_public_access_block", "success")
        except ClientError as e:
            _record("s3", "delete_public_access_block", "error")
            logger.error(f"Failed to delete public access block of bucket {self.bucket_name}: {e}")
            raise

    def put_bucket_ownership_controls(self, object_ownership: str) -> None:
        try:
            self.client.put_bucket_ownership_controls(
                Bucket=self.bucket_name,
                OwnershipControls={"Rules": [{"ObjectOwnership": object_ownership}]},
            )
            _record("s3", "put_bucket_ownership_controls", "success")
        except ClientError as e:
            _record("s3", "put_bucket_ownership_controls", "error")
            logger.error(f"Failed to set ownership controls of bucket {self.bucket_name}: {e}")
            raise

    def put_object_public(self, key: str, body: bytes) -> None:
        """Upload an object that anyone can read."""
        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=body,
                ACL="public-read",
                ContentType="application/json",
            )
            _record("s3", "put_object", "success")
        except ClientError as e:
            _record("s3", "put_object", "error")
            logger.error(f"Failed to upload s3://{self.bucket_name}/{key}: {e}")
            raise

    def object_exists(self, key: str) -> bool:
        try:
            self.client.head_object(Bucket=self.bucket_name, Key=key)
            _record("s3", "head_object", "success")
            return True
        except ClientError as e:
            if error_code(e) in ("404", "NotFound", "NoSuchKey"):
                _record("s3", "head_object", "not_found")
                return False
            _record("s3", "head_object", "error")
            logger.error(f"Failed to check s3://{self.bucket_name}/{key}: {e}")
            raise

    def delete_objects(self, keys: list[str]) -> None:
        """Delete objects by key, treating a missing bucket as success."""
        try:
            self.client.delete_objects(
                Bucket=self.bucket_name,
                Delete={"Objects": [{"Key": key} for key in keys]},
            )
            _record("s3", "delete_objects", "success")
        except ClientError as e:
            if error_code(e) == "NoSuchBucket":
                logger.info(f"Bucket {self.bucket_name} does not exist, nothing to delete")
                _record("s3", "delete_objects", "not_found")
                return
            _record("s3", "delete_objects", "error")
            logger.error(f"Failed to delete objects from bucket {self.bucket_name}: {e}")
            raise

    def delete_bucket(self) -> None:
        """Delete the bucket unless it still holds objects we did not create."""
        try:
            self.client.delete_bucket(Bucket=self.bucket_name)
            _record("s3", "delete_bucket", "success")
        except ClientError as e:
            code = error_code(e)
            if code in ("BucketNotEmpty", "NoSuchBucket"):
                logger.info(f"Skipping deletion of bucket {self.bucket_name}: {code}")
                _record("s3", "delete_bucket", "skipped")
                return
            _record("s3", "delete_bucket", "error")
            logger.error(f"Failed to delete bucket {self.bucket_name}: {e}")
            raise


class StsClient:
    """STS identity lookups."""

    def __init__(self, client: Any) -> None:
        self.client = client

    def get_account_id(self) -> str:
        """Return the AWS account id of the operator's credentials."""
        try:
            account_id = self.client.get_caller_identity()["Account"]
            _record("sts", "get_caller_identity", "success")
            return account_id
        except ClientError as e:
            _record("sts", "get_caller_identity", "error")
            logger.error(f"Failed to resolve AWS account id: {e}")
            raise


class AwsClient:
    """Factory for AWS clients sharing one boto3 session.

    Credentials and default region come from the standard boto3 chain
    (environment, shared config, IRSA web identity, instance profile).
    """

    def __init__(self, session: boto3.session.Session | None = None, iam_region: str | None = None) -> None:
        self.session = session or boto3.session.Session()
        self.iam_region = iam_region or os.getenv("IAM_REGION", DEFAULT_IAM_REGION)

    def iam(self) -> IamClient:
        return IamClient(self.session.client("iam", region_name=self.iam_region))

    def s3(self, region: str, bucket_name: str) -> S3Client:
        return S3Client(self.session.client("s3", region_name=region), region, bucket_name)

    def sts(self) -> StsClient:
        return StsClient(self.session.client("sts", region_name=self.iam_region))
