"""
Server-side upload with live progress.

The file is forwarded to S3 from a worker thread while the response streams
Server-Sent Events::

    data: {"loaded": 5242880, "total": 10485760}
    data: {"done": true}

or, on failure, a single ``data: {"error": "..."}`` event. The HTTP status is
200 once streaming has started, so failures are only reported in-band.
"""
import json
import logging
import queue
import shutil
import tempfile
import threading
from typing import BinaryIO, Iterator, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import StreamingResponse

from file_manager_api.auth import AuthenticatedUser, get_current_user
from file_manager_api.config.settings import Settings
from file_manager_api.dependencies import ensure_bucket_allowed, get_app_settings, get_s3_client
from file_manager_api.s3.write_objects import DEFAULT_CONTENT_TYPE, upload_s3_object

logger = logging.getLogger(__name__)

router = APIRouter()

# uploads larger than this are spooled to disk instead of memory
SPOOL_MAX_MEMORY = 8 * 1024 * 1024

_END_OF_STREAM = object()


def format_event(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def stream_upload_events(
    bucket_name: str,
    object_key: str,
    file_obj: BinaryIO,
    total: int,
    content_type: Optional[str],
    s3_client,
) -> Iterator[str]:
    """Upload `file_obj` in a thread and yield SSE lines as it progresses.

    `file_obj` is closed once the upload has finished.
    """
    events: "queue.Queue" = queue.Queue()

    def _progress(loaded: int) -> None:
        events.put({"loaded": loaded, "total": total})

    def _run() -> None:
        try:
            upload_s3_object(
                bucket_name=bucket_name,
                object_key=object_key,
                file_obj=file_obj,
                content_type=content_type,
                progress_callback=_progress,
                s3_client=s3_client,
            )
            events.put({"done": True})
        except Exception as e:
            logger.exception(f"Upload to s3://{bucket_name}/{object_key} failed")
            events.put({"error": str(e) or "Upload failed"})
        finally:
            events.put(_END_OF_STREAM)

    worker = threading.Thread(target=_run, name=f"upload:{object_key}", daemon=True)
    worker.start()
    try:
        while True:
            event = events.get()
            if event is _END_OF_STREAM:
                break
            yield format_event(event)
    finally:
        worker.join()
        file_obj.close()


@router.post(
    "/upload",
    response_class=StreamingResponse,
    responses={200: {"content": {"text/event-stream": {}}, "description": "Progress events."}},
)
def upload_object(
    file: UploadFile = File(..., description="The file to upload"),
    bucket: str = Form(..., min_length=1),
    key: str = Form(..., min_length=1),
    settings: Settings = Depends(get_app_settings),
    s3_client=Depends(get_s3_client),
    user: AuthenticatedUser = Depends(get_current_user),
) -> StreamingResponse:
    """Upload a file through the API, streaming progress as Server-Sent Events."""
    ensure_bucket_allowed(settings, bucket)

    # the request's own upload file is closed before the stream is consumed
    spool = tempfile.SpooledTemporaryFile(max_size=SPOOL_MAX_MEMORY)
    shutil.copyfileobj(file.file, spool)
    total = spool.tell()
    spool.seek(0)

    logger.info(f"User {user.user_id} uploading {total} bytes to s3://{bucket}/{key}")
    return StreamingResponse(
        stream_upload_events(
            bucket_name=bucket,
            object_key=key,
            file_obj=spool,
            total=total,
            content_type=file.content_type or DEFAULT_CONTENT_TYPE,
            s3_client=s3_client,
        ),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )
