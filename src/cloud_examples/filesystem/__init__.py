"""
Filesystem clients for the committer checks and helper operations.
"""

from typing import Any

from cloud_examples.constants import S3_SCHEMES
from cloud_examples.exceptions import UnsupportedSchemeError
from cloud_examples.filesystem.base import (
    FileStatus,
    FileSystem,
    RemoteOutputIterator,
    StorageStatistic,
    get_scheme,
    join_path,
    sort_statistics,
)
from cloud_examples.filesystem.local import LocalFileSystem
from cloud_examples.filesystem.s3 import S3FileSystem


def get_filesystem(uri: str, spark: Any = None, **s3_options: Any) -> FileSystem:
    """
    Get a filesystem client for a URI.

    With a Spark session every path goes through the JVM Hadoop connectors;
    without one, local paths use the local client and S3 URIs use boto3.

    Args:
        uri: Path or URI to serve
        spark: Optional SparkSession whose Hadoop configuration is used
        **s3_options: Options passed to S3FileSystem (region, endpoint_url, ...)

    Returns:
        FileSystem client
    """
    scheme = get_scheme(uri)
    if scheme in ("", "file") and spark is None:
        return LocalFileSystem()
    if spark is not None:
        from cloud_examples.filesystem.hadoop import HadoopFileSystem

        return HadoopFileSystem.from_spark(spark, uri)
    if scheme in S3_SCHEMES:
        return S3FileSystem(**s3_options)
    raise UnsupportedSchemeError(f"No filesystem client for scheme '{scheme}': {uri}")


__all__ = [
    "FileStatus",
    "FileSystem",
    "LocalFileSystem",
    "RemoteOutputIterator",
    "S3FileSystem",
    "StorageStatistic",
    "get_filesystem",
    "get_scheme",
    "join_path",
    "sort_statistics",
]
