"""
S3 filesystem client built on boto3.

Presents buckets as a hierarchical filesystem: keys sharing a "/"-delimited
prefix are treated as a directory. Accepts ``s3://``, ``s3a://`` and
``s3n://`` URIs; the scheme of the input is preserved when qualifying paths.
Every S3 request issued by the client is counted through the botocore event
system and exposed as a storage statistic.
"""

import re
from typing import Any, Iterator
from urllib.parse import urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from cloud_examples.constants import S3_SCHEMES
from cloud_examples.filesystem.base import FileStatus, FileSystem

# Statistic names follow the S3A connector where it has an equivalent
REQUEST_STATISTICS = {
    "HeadObject": "object_metadata_requests",
    "HeadBucket": "object_metadata_requests",
    "ListObjectsV2": "object_list_requests",
    "PutObject": "object_put_requests",
    "GetObject": "object_get_requests",
    "DeleteObject": "object_delete_requests",
    "DeleteObjects": "object_delete_requests",
    "CopyObject": "object_copy_requests",
}

NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound", "NoSuchBucket"}

DELETE_BATCH_SIZE = 1000


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _is_not_found(error: ClientError) -> bool:
    return str(error.response.get("Error", {}).get("Code")) in NOT_FOUND_CODES


def split_s3_uri(uri: str) -> tuple[str, str, str]:
    """Split an S3 URI into (scheme, bucket, key)."""
    parsed = urlparse(uri)
    if parsed.scheme not in S3_SCHEMES or not parsed.netloc:
        raise ValueError(f"Not an S3 URI: {uri}")
    return parsed.scheme, parsed.netloc, parsed.path.lstrip("/")


class S3FileSystem(FileSystem):
    """Filesystem client for S3 and S3-compatible stores."""

    scheme = "s3a"

    def __init__(
        self,
        client: Any = None,
        region: str = "us-east-1",
        endpoint_url: str | None = None,
        path_style_access: bool = False,
    ):
        super().__init__()
        if client is None:
            s3_config = {"addressing_style": "path"} if path_style_access else {}
            client = boto3.client(
                "s3",
                region_name=region,
                endpoint_url=endpoint_url,
                config=Config(s3=s3_config, retries={"max_attempts": 5, "mode": "standard"}),
            )
        self.client = client
        self.client.meta.events.register("before-call.s3", self._count_request)
        self.logger = self.logger.bind(endpoint=endpoint_url or "aws", region=region)

    def _count_request(self, model: Any = None, **kwargs: Any) -> None:
        if model is None:
            return
        self._increment(REQUEST_STATISTICS.get(model.name, _snake_case(model.name)))

    @staticmethod
    def _uri(scheme: str, bucket: str, key: str) -> str:
        return f"{scheme}://{bucket}/{key}"

    @staticmethod
    def _dir_prefix(key: str) -> str:
        return f"{key.rstrip('/')}/" if key else ""

    def _has_children(self, bucket: str, key: str) -> bool:
        response = self.client.list_objects_v2(
            Bucket=bucket, Prefix=self._dir_prefix(key), MaxKeys=1
        )
        return response.get("KeyCount", 0) > 0

    def get_file_status(self, path: str) -> FileStatus:
        self._increment("op_get_file_status")
        scheme, bucket, key = split_s3_uri(path)

        if not key:
            try:
                self.client.head_bucket(Bucket=bucket)
            except ClientError as e:
                if _is_not_found(e):
                    raise FileNotFoundError(f"No such bucket: {path}") from e
                raise
            return FileStatus(path=self._uri(scheme, bucket, ""), is_directory=True)

        if not key.endswith("/"):
            try:
                head = self.client.head_object(Bucket=bucket, Key=key)
                return FileStatus(
                    path=self._uri(scheme, bucket, key),
                    length=head.get("ContentLength", 0),
                    modification_time=int(head["LastModified"].timestamp() * 1000),
                )
            except ClientError as e:
                if not _is_not_found(e):
                    raise

        try:
            if self._has_children(bucket, key):
                return FileStatus(
                    path=self._uri(scheme, bucket, key.rstrip("/")), is_directory=True
                )
        except ClientError as e:
            if not _is_not_found(e):
                raise
        raise FileNotFoundError(f"No such file or directory: {path}")

    def _listing(self, scheme: str, bucket: str, prefix: str, recursive: bool) -> Iterator[FileStatus]:
        paginator = self.client.get_paginator("list_objects_v2")
        params: dict[str, Any] = {"Bucket": bucket, "Prefix": prefix}
        if not recursive:
            params["Delimiter"] = "/"
        for page in paginator.paginate(**params):
            for entry in page.get("Contents", []):
                # Directory markers are not files
                if entry["Key"].endswith("/"):
                    continue
                yield FileStatus(
                    path=self._uri(scheme, bucket, entry["Key"]),
                    length=entry.get("Size", 0),
                    modification_time=int(entry["LastModified"].timestamp() * 1000),
                )

    def list_files(self, path: str, recursive: bool = False) -> Iterator[FileStatus]:
        self._increment("op_list_files")
        status = self.get_file_status(path)
        if status.is_file:
            yield status
            return

        scheme, bucket, key = split_s3_uri(path)
        yield from self._listing(scheme, bucket, self._dir_prefix(key), recursive)

    def create(self, path: str, data: bytes, overwrite: bool = True) -> None:
        self._increment("op_create")
        _, bucket, key = split_s3_uri(path)
        if not key or key.endswith("/"):
            raise IsADirectoryError(f"Cannot create a file at a directory path: {path}")
        if not overwrite and self.exists(path):
            raise FileExistsError(f"File already exists: {path}")
        self.client.put_object(Bucket=bucket, Key=key, Body=data)
        self._increment("files_created")
        self._increment("bytes_written", len(data))

    def read_bytes(self, path: str) -> bytes:
        self._increment("op_open")
        _, bucket, key = split_s3_uri(path)
        try:
            response = self.client.get_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                raise FileNotFoundError(f"No such file: {path}") from e
            raise
        data = response["Body"].read()
        self._increment("bytes_read", len(data))
        return data

    def delete(self, path: str, recursive: bool = False) -> bool:
        self._increment("op_delete")
        try:
            status = self.get_file_status(path)
        except FileNotFoundError:
            return False

        _, bucket, key = split_s3_uri(path)
        if status.is_file:
            self.client.delete_object(Bucket=bucket, Key=key)
            return True

        prefix = self._dir_prefix(key)
        paginator = self.client.get_paginator("list_objects_v2")
        keys = [
            entry["Key"]
            for page in paginator.paginate(Bucket=bucket, Prefix=prefix)
            for entry in page.get("Contents", [])
        ]
        if any(k != prefix for k in keys) and not recursive:
            raise OSError(f"Directory is not empty: {path}")
        for start in range(0, len(keys), DELETE_BATCH_SIZE):
            batch = keys[start : start + DELETE_BATCH_SIZE]
            self.client.delete_objects(
                Bucket=bucket, Delete={"Objects": [{"Key": k} for k in batch], "Quiet": True}
            )
        return True

    def make_qualified(self, path: str) -> str:
        scheme, bucket, key = split_s3_uri(path)
        key = re.sub("/{2,}", "/", key)
        return self._uri(scheme, bucket, key)
