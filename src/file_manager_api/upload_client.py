"""
Client-side upload orchestration.

Tracks a queue of uploads against the File Manager API and reports progress
per file, either through the API's streaming ``/v1/upload`` endpoint or
straight to the bucket with a presigned URL.
"""
import concurrent.futures
import json
import logging
import mimetypes
import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Callable, Iterable, List, Optional

import requests

from file_manager_api.keys import join_key
from file_manager_api.utils.decorators import retry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_WORKERS = 4
EVENT_PREFIX = "data: "


class UploadStatus(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class UploadItem:
    """One file in the upload queue."""
    id: str
    path: str
    key: str
    size: int = 0
    progress: int = 0
    status: UploadStatus = UploadStatus.PENDING
    error: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status in (UploadStatus.PENDING, UploadStatus.UPLOADING)

    @property
    def is_finished(self) -> bool:
        return self.status in (UploadStatus.SUCCESS, UploadStatus.ERROR)


class UploadError(Exception):
    """The API or the bucket rejected an upload."""


class _ProgressReader:
    """File wrapper that reports how many bytes requests has read so far."""

    def __init__(self, file_obj: BinaryIO, total: int, callback: Callable[[int], None]):
        self._file_obj = file_obj
        self._total = total
        self._callback = callback
        self._read = 0

    def __len__(self) -> int:
        return self._total

    def read(self, size: int = -1) -> bytes:
        chunk = self._file_obj.read(size)
        if chunk:
            self._read += len(chunk)
            self._callback(self._read)
        return chunk


def percent(loaded: int, total: int) -> int:
    if total <= 0:
        return 100
    return min(100, round(loaded / total * 100))


class UploadClient:
    """Upload local files into a bucket folder and keep per-file state.

    ``on_progress`` is called with the changed :class:`UploadItem` after every
    status or progress change.
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        session: Optional[requests.Session] = None,
        on_progress: Optional[Callable[[UploadItem], None]] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.on_progress = on_progress
        self.timeout = timeout
        self.max_workers = max_workers
        self.uploads: List[UploadItem] = []

    # --- queue state ---

    @property
    def has_uploads(self) -> bool:
        return bool(self.uploads)

    @property
    def has_active_uploads(self) -> bool:
        return any(item.is_active for item in self.uploads)

    @property
    def has_completed(self) -> bool:
        return any(item.is_finished for item in self.uploads)

    def clear_completed(self) -> None:
        """Forget finished uploads, successful or not."""
        self.uploads = [item for item in self.uploads if not item.is_finished]

    def clear_all(self) -> None:
        self.uploads = []

    # --- uploads ---

    def upload_files(
        self,
        bucket_name: str,
        current_path: str,
        paths: Iterable[str],
        presigned: bool = False,
    ) -> List[UploadItem]:
        """Queue every file as pending, then upload them concurrently.

        Items are returned in the order of ``paths``.
        """
        items = [self._register(current_path, path) for path in paths]
        if not items:
            return items
        send = self._send_presigned if presigned else self._send
        with concurrent.futures.ThreadPoolExecutor(max_workers=min(self.max_workers, len(items))) as executor:
            futures = [executor.submit(send, bucket_name, item) for item in items]
            for future in concurrent.futures.as_completed(futures):
                future.result()
        return items

    def upload_file(self, bucket_name: str, current_path: str, path: str) -> UploadItem:
        """Upload through ``POST /v1/upload`` and follow its progress events."""
        return self._send(bucket_name, self._register(current_path, path))

    def upload_via_presigned_url(self, bucket_name: str, current_path: str, path: str) -> UploadItem:
        """Ask the API for a presigned PUT URL and send the file straight to the bucket."""
        return self._send_presigned(bucket_name, self._register(current_path, path))

    def _send(self, bucket_name: str, item: UploadItem) -> UploadItem:
        path = item.path
        try:
            self._update(item, status=UploadStatus.UPLOADING)
            with open(path, "rb") as file_obj:
                response = self.session.post(
                    f"{self.base_url}/v1/upload",
                    headers=self._headers(),
                    data={"bucket": bucket_name, "key": item.key},
                    files={"file": (os.path.basename(path), file_obj, self._content_type(path))},
                    stream=True,
                    timeout=self.timeout,
                )
            with response:
                if not response.ok:
                    raise UploadError(f"Upload failed with status {response.status_code}")
                self._follow_events(item, response.iter_lines(decode_unicode=True))
        except (UploadError, requests.RequestException, OSError, ValueError) as e:
            logger.error(f"Upload of {path} to {bucket_name}/{item.key} failed: {e}")
            self._update(item, status=UploadStatus.ERROR, error=str(e) or "Upload failed")
        return item

    def _send_presigned(self, bucket_name: str, item: UploadItem) -> UploadItem:
        path = item.path
        content_type = self._content_type(path)
        try:
            self._update(item, status=UploadStatus.UPLOADING)
            url = self._request_upload_url(bucket_name, item.key, content_type)
            with open(path, "rb") as file_obj:
                reader = _ProgressReader(
                    file_obj,
                    item.size,
                    lambda loaded: self._update(item, progress=percent(loaded, item.size)),
                )
                response = self.session.put(
                    url,
                    data=reader,
                    headers={"Content-Type": content_type},
                    timeout=self.timeout,
                )
            if not response.ok:
                raise UploadError(f"Upload failed with status {response.status_code}")
            self._update(item, status=UploadStatus.SUCCESS, progress=100)
        except (UploadError, requests.RequestException, OSError) as e:
            logger.error(f"Presigned upload of {path} to {bucket_name}/{item.key} failed: {e}")
            self._update(item, status=UploadStatus.ERROR, error=str(e) or "Upload failed")
        return item

    # --- helpers ---

    def _headers(self) -> dict:
        return {"Authorization": f"Bearer {self.token}"}

    @staticmethod
    def _content_type(path: str) -> str:
        return mimetypes.guess_type(path)[0] or "application/octet-stream"

    def _register(self, current_path: str, path: str) -> UploadItem:
        # called from the caller's thread only, so the queue keeps the input order
        key = join_key(current_path, os.path.basename(path))
        size = os.path.getsize(path) if os.path.exists(path) else 0
        item = UploadItem(id=f"{key}-{time.time_ns()}-{len(self.uploads)}", path=path, key=key, size=size)
        self.uploads.append(item)
        self._notify(item)
        return item

    def _update(self, item: UploadItem, **changes) -> None:
        for name, value in changes.items():
            setattr(item, name, value)
        self._notify(item)

    def _notify(self, item: UploadItem) -> None:
        if self.on_progress:
            self.on_progress(item)

    def _follow_events(self, item: UploadItem, lines: Iterable[str]) -> None:
        for line in lines:
            if not line or not line.startswith(EVENT_PREFIX):
                continue
            event = json.loads(line[len(EVENT_PREFIX):])

            if event.get("error"):
                raise UploadError(event["error"])
            if event.get("done"):
                self._update(item, status=UploadStatus.SUCCESS, progress=100)
                return
            if "loaded" in event and "total" in event:
                self._update(item, progress=percent(event["loaded"], event["total"]))

        # the stream closed without an explicit "done"
        self._update(item, status=UploadStatus.SUCCESS, progress=100)

    @retry(max_attempts=3, delay=0.5, exceptions=(requests.ConnectionError, requests.Timeout))
    def _request_upload_url(self, bucket_name: str, key: str, content_type: str) -> str:
        response = self.session.post(
            f"{self.base_url}/v1/presigned",
            headers=self._headers(),
            json={"action": "upload", "bucket": bucket_name, "key": key, "content_type": content_type},
            timeout=self.timeout,
        )
        if not response.ok:
            raise UploadError(f"Could not get an upload URL (status {response.status_code})")
        return response.json()["url"]
