"""
Helpers that present S3's flat key space as folders.

S3 has no directories: a "folder" is either a common prefix returned by a
delimited listing or an empty marker object whose key ends with ``/``.
Everything here is pure string manipulation so it can be shared by the S3
adapter, the routers and the upload client.
"""
from typing import List, Tuple

from file_manager_api.errors import InvalidKeyError

DELIMITER = "/"


def is_folder_key(key: str) -> bool:
    return key.endswith(DELIMITER)


def normalize_prefix(prefix: str) -> str:
    """Return ``prefix`` as a folder prefix: no leading ``/``, one trailing ``/``.

    The empty prefix (bucket root) stays empty.
    """
    prefix = (prefix or "").lstrip(DELIMITER)
    if not prefix:
        return ""
    return prefix if prefix.endswith(DELIMITER) else f"{prefix}{DELIMITER}"


def folder_key(path: str) -> str:
    """Key of the marker object for the folder at ``path``."""
    key = normalize_prefix(path)
    if not key:
        raise InvalidKeyError("Folder path is required")
    return key


def display_name(key: str, prefix: str = "") -> str:
    """Name shown for ``key`` when listed inside ``prefix``."""
    name = key[len(prefix):] if prefix and key.startswith(prefix) else key
    if name.endswith(DELIMITER):
        name = name[:-1]
    return name


def base_name(key: str) -> str:
    """Last path segment of a key, without the folder suffix."""
    return key.rstrip(DELIMITER).rsplit(DELIMITER, 1)[-1]


def parent_prefix(key: str) -> str:
    """Prefix of the folder that contains ``key`` ("" for top-level keys)."""
    stripped = key.rstrip(DELIMITER)
    if DELIMITER not in stripped:
        return ""
    return stripped.rsplit(DELIMITER, 1)[0] + DELIMITER


def join_key(prefix: str, name: str) -> str:
    return normalize_prefix(prefix) + name.lstrip(DELIMITER)


def validate_name(name: str) -> str:
    """Return the trimmed display name, rejecting empty names and nested paths."""
    trimmed = (name or "").strip()
    if not trimmed:
        raise InvalidKeyError("Name must not be empty")
    if DELIMITER in trimmed:
        raise InvalidKeyError(f"Name '{trimmed}' must not contain '{DELIMITER}'")
    if trimmed in (".", ".."):
        raise InvalidKeyError(f"'{trimmed}' is not a valid name")
    return trimmed


def renamed_key(key: str, new_name: str) -> str:
    """Replace the last segment of ``key`` with ``new_name``, keeping the folder suffix."""
    new_name = validate_name(new_name)
    suffix = DELIMITER if is_folder_key(key) else ""
    return f"{parent_prefix(key)}{new_name}{suffix}"


def split_filename(name: str) -> Tuple[str, str]:
    """Split ``name`` into ``(base, extension)``; the extension keeps its dot.

    Dot-files such as ``.env`` have no extension.
    """
    index = name.rfind(".")
    if index <= 0:
        return name, ""
    return name[:index], name[index:]


def breadcrumbs(bucket_name: str, prefix: str = "") -> List[Tuple[str, str]]:
    """Navigation trail from the bucket root down to ``prefix``.

    Each entry is ``(name, prefix)``; the first is the bucket itself with an
    empty prefix.
    """
    trail = [(bucket_name, "")]
    current = ""
    for segment in normalize_prefix(prefix).split(DELIMITER):
        if not segment:
            continue
        current = f"{current}{segment}{DELIMITER}"
        trail.append((segment, current))
    return trail
