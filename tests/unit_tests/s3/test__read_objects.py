from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from file_manager_api.errors import ObjectTooLargeError
from file_manager_api.s3.read_objects import (
    fetch_object_content,
    fetch_object_metadata,
    iter_keys_under_prefix,
    list_buckets,
    list_objects,
    object_exists_in_s3,
)
from tests.consts import OTHER_BUCKET_NAME, TEST_BUCKET_NAME


def test_list_buckets(s3_client):
    names = [bucket.name for bucket in list_buckets(s3_client=s3_client)]
    assert sorted(names) == sorted([TEST_BUCKET_NAME, OTHER_BUCKET_NAME])


def test_list_buckets_honours_allow_list(s3_client):
    buckets = list_buckets(allowed_buckets=[OTHER_BUCKET_NAME, "missing"], s3_client=s3_client)
    assert [bucket.name for bucket in buckets] == [OTHER_BUCKET_NAME]
    assert buckets[0].creation_date is not None


def test_list_objects_shows_folders_before_files(s3_client, put_object):
    put_object("readme.md")
    put_object("docs/guide.md")
    put_object("docs/2024/report.pdf")
    put_object("images/")  # empty folder marker

    result = list_objects(TEST_BUCKET_NAME, s3_client=s3_client)

    assert [(obj.name, obj.is_folder) for obj in result.objects] == [
        ("docs", True),
        ("images", True),
        ("readme.md", False),
    ]
    assert result.prefixes == ["docs/", "images/"]
    assert result.prefix == ""
    assert result.parent_prefix is None
    assert [crumb.name for crumb in result.breadcrumbs] == [TEST_BUCKET_NAME]
    assert result.is_truncated is False
    assert result.next_continuation_token is None


def test_list_objects_inside_a_folder_hides_its_marker(s3_client, put_object):
    put_object("docs/")
    put_object("docs/guide.md", body=b"12345")
    put_object("docs/2024/report.pdf")

    result = list_objects(TEST_BUCKET_NAME, prefix="docs", s3_client=s3_client)

    assert [obj.key for obj in result.objects] == ["docs/2024/", "docs/guide.md"]
    guide = result.objects[1]
    assert guide.name == "guide.md"
    assert guide.size == 5
    assert guide.etag
    assert guide.last_modified is not None


def test_list_objects_paginates(s3_client, put_object):
    for i in range(5):
        put_object(f"file{i}.txt")

    first = list_objects(TEST_BUCKET_NAME, max_keys=2, s3_client=s3_client)
    assert len(first.objects) == 2
    assert first.is_truncated is True
    assert first.next_continuation_token

    seen = [obj.key for obj in first.objects]
    token = first.next_continuation_token
    while token:
        page = list_objects(TEST_BUCKET_NAME, continuation_token=token, max_keys=2, s3_client=s3_client)
        seen.extend(obj.key for obj in page.objects)
        token = page.next_continuation_token

    assert sorted(seen) == [f"file{i}.txt" for i in range(5)]


def test_iter_keys_under_prefix_is_recursive(s3_client, put_object):
    put_object("docs/")
    put_object("docs/a.txt")
    put_object("docs/deep/b.txt")
    put_object("other.txt")

    assert sorted(iter_keys_under_prefix(TEST_BUCKET_NAME, "docs/", s3_client=s3_client)) == [
        "docs/",
        "docs/a.txt",
        "docs/deep/b.txt",
    ]


def test_object_exists_in_s3(s3_client, put_object):
    put_object("present.txt")
    assert object_exists_in_s3(TEST_BUCKET_NAME, "present.txt", s3_client=s3_client)
    assert not object_exists_in_s3(TEST_BUCKET_NAME, "absent.txt", s3_client=s3_client)


def test_object_exists_in_s3_propagates_other_errors():
    s3_client = MagicMock()
    s3_client.head_object.side_effect = ClientError(
        {"Error": {"Code": "403", "Message": "Forbidden"}}, "HeadObject"
    )
    with pytest.raises(ClientError):
        object_exists_in_s3(TEST_BUCKET_NAME, "key.txt", s3_client=s3_client)


def test_fetch_object_metadata(s3_client, put_object):
    put_object("docs/notes.txt", body=b"hello", content_type="text/plain")

    metadata = fetch_object_metadata(TEST_BUCKET_NAME, "docs/notes.txt", s3_client=s3_client)

    assert metadata.key == "docs/notes.txt"
    assert metadata.name == "notes.txt"
    assert metadata.size == 5
    assert metadata.content_type == "text/plain"
    assert metadata.is_folder is False


def test_fetch_object_content(s3_client, put_object):
    put_object("notes.txt", body="héllo".encode("utf-8"))

    content = fetch_object_content(TEST_BUCKET_NAME, "notes.txt", max_bytes=1024, s3_client=s3_client)

    assert content.content == "héllo"
    assert content.content_type == "text/plain"


def test_fetch_object_content_replaces_invalid_utf8(s3_client, put_object):
    put_object("blob.bin", body=b"ok\xff", content_type="application/octet-stream")

    content = fetch_object_content(TEST_BUCKET_NAME, "blob.bin", max_bytes=1024, s3_client=s3_client)

    assert content.content == "ok�"


def test_fetch_object_content_rejects_large_objects(s3_client, put_object):
    put_object("big.txt", body=b"x" * 20)

    with pytest.raises(ObjectTooLargeError):
        fetch_object_content(TEST_BUCKET_NAME, "big.txt", max_bytes=10, s3_client=s3_client)
