"""S3-backed storage for the issuer's discovery documents."""

from __future__ import annotations

import logging

from ..services.aws.client import S3Client
from .discovery import DiscoveryContents

logger = logging.getLogger(__name__)


class S3IdPDiscovery:
    """Publishes discovery documents to a public S3 bucket."""

    def __init__(self, s3: S3Client) -> None:
        self.s3 = s3

    def create_storage(self) -> None:
        """Create the bucket and allow public-read object ACLs."""
        self.s3.create_bucket()
        self.s3.delete_public_access_block()
        self.s3.put_bucket_ownership_controls("BucketOwnerPreferred")
        logger.info(f"Bucket {self.s3.bucket_name} ready for discovery documents")

    def upload(self, contents: DiscoveryContents, force_update: bool) -> None:
        """Upload the discovery and JWKS documents.

        Without ``force_update`` an object that already exists is kept as-is.
        """
        documents = [
            (contents.discovery_file_name, contents.discovery()),
            (contents.jwks_file_name, contents.jwk()),
        ]
        for key, body in documents:
            if not force_update and self.s3.object_exists(key):
                logger.info(f"s3://{self.s3.bucket_name}/{key} already exists, keeping it")
                continue
            self.s3.put_object_public(key, body)
            logger.info(f"Uploaded s3://{self.s3.bucket_name}/{key}")

    def delete(self, contents: DiscoveryContents) -> None:
        self.s3.delete_objects([contents.discovery_file_name, contents.jwks_file_name])
        self.s3.delete_bucket()
