"""AWS S3: assignment submission files."""
import asyncio
import re
import uuid

import boto3

from classroom.config import settings
from classroom.errors import remote_call

_s3 = None


def get_s3():
    global _s3
    if _s3 is None:
        _s3 = boto3.client(
            "s3",
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id or None,
            aws_secret_access_key=settings.aws_secret_access_key or None,
        )
    return _s3


def submission_file_key(assignment_id: str, student_id: str, filename: str | None) -> str:
    ext = (filename or "").rsplit(".", 1)[-1] if "." in (filename or "") else ""
    if not re.fullmatch(r"[A-Za-z0-9]{1,10}", ext):
        ext = "bin"
    return f"submissions/{assignment_id}/{student_id}/{uuid.uuid4().hex}.{ext}"


def _put_object_sync(key: str, body: bytes, content_type: str) -> None:
    get_s3().put_object(
        Bucket=settings.s3_bucket_submissions,
        Key=key,
        Body=body,
        ContentType=content_type,
    )


class S3Storage:
    """Upload-by-key and presigned download URLs."""

    async def upload(self, key: str, body: bytes, content_type: str | None = None) -> str:
        with remote_call("upload file"):
            await asyncio.to_thread(
                _put_object_sync, key, body, content_type or "application/octet-stream"
            )
        return key

    async def delete(self, key: str) -> None:
        with remote_call("delete file"):
            await asyncio.to_thread(
                get_s3().delete_object, Bucket=settings.s3_bucket_submissions, Key=key
            )

    async def download_url(self, key: str) -> str:
        with remote_call("sign download url"):
            return await asyncio.to_thread(
                get_s3().generate_presigned_url,
                "get_object",
                Params={"Bucket": settings.s3_bucket_submissions, "Key": key},
                ExpiresIn=settings.s3_presigned_url_expire_seconds,
            )
