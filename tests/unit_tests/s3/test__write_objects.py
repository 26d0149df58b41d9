import io
from unittest.mock import MagicMock

from file_manager_api.s3.write_objects import create_folder, upload_s3_object
from tests.consts import TEST_BUCKET_NAME
from tests.fixtures.mocked_aws import list_keys


def test_upload_s3_object(s3_client):
    upload_s3_object(
        bucket_name=TEST_BUCKET_NAME,
        object_key="docs/hello.txt",
        file_obj=io.BytesIO(b"hello world"),
        content_type="text/plain",
        s3_client=s3_client,
    )

    obj = s3_client.get_object(Bucket=TEST_BUCKET_NAME, Key="docs/hello.txt")
    assert obj["Body"].read() == b"hello world"
    assert obj["ContentType"] == "text/plain"


def test_upload_s3_object_defaults_content_type(s3_client):
    upload_s3_object(TEST_BUCKET_NAME, "blob", io.BytesIO(b"\x00\x01"), s3_client=s3_client)

    head = s3_client.head_object(Bucket=TEST_BUCKET_NAME, Key="blob")
    assert head["ContentType"] == "application/octet-stream"


def test_upload_s3_object_reports_cumulative_progress():
    fake_client = MagicMock()

    def _upload_fileobj(file_obj, bucket, key, ExtraArgs=None, Callback=None):
        for chunk in (4, 4, 3):
            Callback(chunk)

    fake_client.upload_fileobj.side_effect = _upload_fileobj
    reported = []

    upload_s3_object(
        TEST_BUCKET_NAME,
        "hello.txt",
        io.BytesIO(b"hello world"),
        progress_callback=reported.append,
        s3_client=fake_client,
    )

    assert reported == [4, 8, 11]


def test_create_folder_writes_an_empty_marker(s3_client):
    key = create_folder(TEST_BUCKET_NAME, "photos/2024", s3_client=s3_client)

    assert key == "photos/2024/"
    assert list_keys(s3_client) == ["photos/2024/"]
    head = s3_client.head_object(Bucket=TEST_BUCKET_NAME, Key="photos/2024/")
    assert head["ContentLength"] == 0
