"""S3 fixtures backed by moto's in-memory AWS."""
import os

import boto3
import pytest
from moto import mock_aws

from file_manager_api.s3.client import S3ClientManager
from tests.consts import OTHER_BUCKET_NAME, TEST_BUCKET_NAME, TEST_REGION


def point_away_from_aws() -> None:
    """Make sure boto3 can never reach a real account from the tests."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = TEST_REGION
    for var in ("AWS_PROFILE", "S3_ENDPOINT_URL", "S3_ALLOWED_BUCKETS", "AWS_ENDPOINT_URL"):
        os.environ.pop(var, None)


@pytest.fixture
def mocked_aws():
    point_away_from_aws()
    S3ClientManager().clear_client()
    with mock_aws():
        s3_client = boto3.client("s3", region_name=TEST_REGION)
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)
        s3_client.create_bucket(Bucket=OTHER_BUCKET_NAME)

        yield

    S3ClientManager().clear_client()


@pytest.fixture
def s3_client(mocked_aws):
    return boto3.client("s3", region_name=TEST_REGION)


@pytest.fixture
def put_object(s3_client):
    """Write an object into the mocked bucket."""

    def _put(key: str, body: bytes = b"content", bucket: str = TEST_BUCKET_NAME, content_type: str = "text/plain"):
        s3_client.put_object(Bucket=bucket, Key=key, Body=body, ContentType=content_type)
        return key

    return _put


def list_keys(s3_client, bucket: str = TEST_BUCKET_NAME, prefix: str = ""):
    response = s3_client.list_objects_v2(Bucket=bucket, Prefix=prefix)
    return sorted(item["Key"] for item in response.get("Contents", []))
