"""Tests for the IAM OIDC provider registration."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from irsa_operator.issuer import S3IssuerMeta
from irsa_operator.selfhosted.idp import AwsIdentityProvider
from irsa_operator.services.aws.client import IamClient


@pytest.fixture
def iam_api() -> MagicMock:
    return MagicMock()


@pytest.fixture
def idp(iam_api: MagicMock) -> AwsIdentityProvider:
    return AwsIdentityProvider(IamClient(iam_api), S3IssuerMeta("ap-northeast-1", "irsa-manager-1"))


class TestAwsIdentityProvider:
    """Test cases for AwsIdentityProvider."""

    def test_create(self, idp: AwsIdentityProvider, iam_api: MagicMock) -> None:
        idp.create()

        iam_api.create_open_id_connect_provider.assert_called_once_with(
            Url="https://s3-ap-northeast-1.amazonaws.com/irsa-manager-1",
            ClientIDList=["sts.amazonaws.com"],
            ThumbprintList=["x" * 40],
        )

    def test_create_existing_is_success(self, idp: AwsIdentityProvider, iam_api: MagicMock) -> None:
        iam_api.create_open_id_connect_provider.side_effect = ClientError(
            {"Error": {"Code": "EntityAlreadyExists"}}, "CreateOpenIDConnectProvider"
        )

        idp.create()

    def test_create_other_error_propagates(self, idp: AwsIdentityProvider, iam_api: MagicMock) -> None:
        iam_api.create_open_id_connect_provider.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied"}}, "CreateOpenIDConnectProvider"
        )

        with pytest.raises(ClientError):
            idp.create()

    def test_delete(self, idp: AwsIdentityProvider, iam_api: MagicMock) -> None:
        idp.delete("123456789012")

        iam_api.delete_open_id_connect_provider.assert_called_once_with(
            OpenIDConnectProviderArn=(
                "arn:aws:iam::123456789012:oidc-provider/s3-ap-northeast-1.amazonaws.com/irsa-manager-1"
            )
        )

    def test_delete_missing_is_success(self, idp: AwsIdentityProvider, iam_api: MagicMock) -> None:
        iam_api.delete_open_id_connect_provider.side_effect = ClientError(
            {"Error": {"Code": "NoSuchEntity"}}, "DeleteOpenIDConnectProvider"
        )

        idp.delete("123456789012")

    def test_never_requests_update(self, idp: AwsIdentityProvider, iam_api: MagicMock) -> None:
        assert idp.is_update() is False
        idp.update()
        assert iam_api.method_calls == []
