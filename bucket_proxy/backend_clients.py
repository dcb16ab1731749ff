"""
Helpers for creating the boto3 client that targets the S3-compatible store.
"""
from __future__ import annotations

import boto3
from botocore.config import Config

from .config import GatewaySettings


def build_client(settings: GatewaySettings):
    """
    Create an S3 client for the configured MinIO endpoint.

    Path-style addressing keeps bucket names out of the hostname, which MinIO
    requires when it is reached through a plain service name. Missing
    credentials fall through to boto3's default credential chain.
    """
    return boto3.client(
        "s3",
        endpoint_url=settings.endpoint_url,
        region_name=settings.region,
        aws_access_key_id=settings.access_key,
        aws_secret_access_key=settings.secret_key,
        config=Config(signature_version="s3v4", s3={"addressing_style": "path"}),
    )
