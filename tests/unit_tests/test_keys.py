import pytest

from file_manager_api.errors import InvalidKeyError
from file_manager_api.keys import (
    base_name,
    breadcrumbs,
    display_name,
    folder_key,
    is_folder_key,
    join_key,
    normalize_prefix,
    parent_prefix,
    renamed_key,
    split_filename,
    validate_name,
)


@pytest.mark.parametrize(
    "prefix, expected",
    [
        ("", ""),
        ("/", ""),
        ("docs", "docs/"),
        ("docs/", "docs/"),
        ("/docs/2024", "docs/2024/"),
    ],
)
def test_normalize_prefix(prefix, expected):
    assert normalize_prefix(prefix) == expected


def test_folder_key_requires_a_path():
    assert folder_key("photos") == "photos/"
    with pytest.raises(InvalidKeyError):
        folder_key("")
    with pytest.raises(InvalidKeyError):
        folder_key("/")


def test_display_name_is_relative_to_the_listed_prefix():
    assert display_name("docs/readme.md", "docs/") == "readme.md"
    assert display_name("docs/2024/", "docs/") == "2024"
    assert display_name("top.txt", "") == "top.txt"


def test_base_name_and_parent_prefix():
    assert base_name("a/b/c.txt") == "c.txt"
    assert base_name("a/b/") == "b"
    assert parent_prefix("a/b/c.txt") == "a/b/"
    assert parent_prefix("a/b/") == "a/"
    assert parent_prefix("c.txt") == ""


def test_join_key_does_not_double_the_delimiter():
    assert join_key("", "file.txt") == "file.txt"
    assert join_key("docs", "file.txt") == "docs/file.txt"
    assert join_key("docs/", "/file.txt") == "docs/file.txt"


def test_renamed_key_keeps_the_folder_suffix():
    assert renamed_key("docs/old.txt", "new.txt") == "docs/new.txt"
    assert renamed_key("docs/old/", " new ") == "docs/new/"
    assert renamed_key("old.txt", "new.txt") == "new.txt"


@pytest.mark.parametrize("name", ["", "   ", "a/b", ".", ".."])
def test_validate_name_rejects_bad_names(name):
    with pytest.raises(InvalidKeyError):
        validate_name(name)


def test_split_filename():
    assert split_filename("report.final.pdf") == ("report.final", ".pdf")
    assert split_filename("Makefile") == ("Makefile", "")
    assert split_filename(".env") == (".env", "")


def test_is_folder_key():
    assert is_folder_key("docs/")
    assert not is_folder_key("docs")


def test_breadcrumbs_walk_from_the_bucket_root():
    assert breadcrumbs("assets", "a/b") == [
        ("assets", ""),
        ("a", "a/"),
        ("b", "a/b/"),
    ]
    assert breadcrumbs("assets") == [("assets", "")]
