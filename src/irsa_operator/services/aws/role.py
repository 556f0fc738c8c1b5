"""IAM role synchronization for IRSA bindings."""

from __future__ import annotations

import logging
from typing import Any, Sequence

from ...issuer import IssuerMeta
from ...models import RoleManager
from .client import IamClient

logger = logging.getLogger(__name__)

IAM_ARN_PREFIX = "arn:aws:iam::"


def policy_arn(policy: str) -> str:
    """Return the ARN of a policy given by AWS-managed name or full ARN."""
    if policy.startswith(IAM_ARN_PREFIX):
        return policy
    return f"{IAM_ARN_PREFIX}aws:policy/{policy}"


def extract_new_policies(desired: Sequence[str], attached: Sequence[str] | None) -> list[str]:
    """Return desired policies whose ARN is not among the attached ARNs."""
    if not attached:
        return list(desired)
    attached_arns = set(attached)
    return [policy for policy in desired if policy_arn(policy) not in attached_arns]


def extract_stale_policies(desired: Sequence[str], attached: Sequence[str] | None) -> list[str]:
    """Return attached ARNs that no desired policy resolves to."""
    if not attached:
        return []
    desired_arns = {policy_arn(policy) for policy in desired}
    return [arn for arn in attached if arn not in desired_arns]


def oidc_provider_arn(account_id: str, issuer: IssuerMeta) -> str:
    return f"arn:aws:iam::{account_id}:oidc-provider/{issuer.issuer_host_path()}"


def build_trust_policy(issuer: IssuerMeta, role: RoleManager) -> dict[str, Any]:
    """Trust policy letting the ServiceAccount in each namespace assume the role."""
    host_path = issuer.issuer_host_path()
    provider_arn = oidc_provider_arn(role.account_id, issuer)
    statements = [
        {
            "Effect": "Allow",
            "Principal": {"Federated": provider_arn},
            "Action": "sts:AssumeRoleWithWebIdentity",
            "Condition": {
                "StringEquals": {
                    f"{host_path}:sub": f"system:serviceaccount:{namespace}:{role.service_account.name}",
                },
            },
        }
        for namespace in role.service_account.namespaces
    ]
    return {"Version": "2012-10-17", "Statement": statements}


class RoleSynchronizer:
    """Keeps an IAM role's trust policy and attached policies in line with a binding."""

    def __init__(self, iam: IamClient) -> None:
        self.iam = iam

    def sync(self, issuer: IssuerMeta, role: RoleManager) -> None:
        """Create or update the role, then attach new and detach stale policies."""
        trust_policy = build_trust_policy(issuer, role)

        self.iam.create_role(role.role_name, trust_policy)
        self.iam.update_assume_role_policy(role.role_name, trust_policy)

        attached = self.iam.list_attached_role_policies(role.role_name)
        # Attach before detach so a role never drops to zero policies mid-swap
        for policy in extract_new_policies(role.policies, attached):
            self.iam.attach_role_policy(role.role_name, policy_arn(policy))
            logger.info(f"Policy {policy} attached to role {role.role_name}")
        for arn in extract_stale_policies(role.policies, attached):
            self.iam.detach_role_policy(role.role_name, arn)
            logger.info(f"Policy {arn} detached from role {role.role_name}")

        logger.info(f"Role {role.role_name} synced")

    def delete(self, role: RoleManager) -> None:
        """Detach the managed policies and delete the role."""
        for policy in role.policies:
            self.iam.detach_role_policy(role.role_name, policy_arn(policy))
            logger.info(f"Policy {policy} detached from role {role.role_name}")
        self.iam.delete_role(role.role_name)
        logger.info(f"Role {role.role_name} deleted")
