"""
Hadoop FileSystem client reached through the Spark py4j gateway.

This drives the JVM connectors themselves (S3A, S3N, ABFS, GCS, ...), so the
committer checks see exactly what a Spark job sees.
"""

from typing import Any, Iterator

from py4j.protocol import Py4JError, Py4JJavaError
from pyspark.sql import SparkSession

from cloud_examples.filesystem.base import (
    FileStatus,
    FileSystem,
    RemoteOutputIterator,
    StorageStatistic,
    get_scheme,
)

JAVA_NOT_FOUND = "java.io.FileNotFoundException"
JAVA_FILE_EXISTS = "org.apache.hadoop.fs.FileAlreadyExistsException"


def _java_exception_class(error: Py4JJavaError) -> str:
    try:
        return str(error.java_exception.getClass().getName())
    except (Py4JError, AttributeError):
        return ""


class HadoopFileSystem(FileSystem):
    """Filesystem client wrapping an ``org.apache.hadoop.fs.FileSystem`` instance."""

    def __init__(self, jvm: Any, java_fs: Any):
        super().__init__()
        self._jvm = jvm
        self._fs = java_fs
        self.uri = str(java_fs.getUri().toString())
        self.scheme = get_scheme(self.uri)
        self.logger = self.logger.bind(fs_uri=self.uri)

    @classmethod
    def from_spark(cls, spark: SparkSession, uri: str) -> "HadoopFileSystem":
        """Get the filesystem serving a URI, using the session's Hadoop configuration."""
        jvm = spark.sparkContext._jvm
        conf = spark.sparkContext._jsc.hadoopConfiguration()
        path = jvm.org.apache.hadoop.fs.Path(uri)
        return cls(jvm, path.getFileSystem(conf))

    def _path(self, path: str) -> Any:
        return self._jvm.org.apache.hadoop.fs.Path(path)

    def _call(self, path: str, operation: str, *args: Any) -> Any:
        try:
            return getattr(self._fs, operation)(*args)
        except Py4JJavaError as e:
            java_class = _java_exception_class(e)
            if java_class == JAVA_NOT_FOUND:
                raise FileNotFoundError(f"No such file or directory: {path}") from e
            if java_class == JAVA_FILE_EXISTS:
                raise FileExistsError(f"File already exists: {path}") from e
            raise

    @staticmethod
    def _to_status(java_status: Any) -> FileStatus:
        return FileStatus(
            path=str(java_status.getPath().toString()),
            length=java_status.getLen(),
            is_directory=java_status.isDirectory(),
            modification_time=java_status.getModificationTime(),
        )

    def get_file_status(self, path: str) -> FileStatus:
        self._increment("op_get_file_status")
        return self._to_status(self._call(path, "getFileStatus", self._path(path)))

    def list_files(self, path: str, recursive: bool = False) -> Iterator[FileStatus]:
        self._increment("op_list_files")
        remote = self._call(path, "listFiles", self._path(path), recursive)
        return RemoteOutputIterator(remote, self._to_status)

    def create(self, path: str, data: bytes, overwrite: bool = True) -> None:
        self._increment("op_create")
        out = self._call(path, "create", self._path(path), overwrite)
        try:
            out.write(bytearray(data))
        finally:
            out.close()

    def read_bytes(self, path: str) -> bytes:
        self._increment("op_open")
        stream = self._call(path, "open", self._path(path))
        try:
            return bytes(self._jvm.org.apache.commons.io.IOUtils.toByteArray(stream))
        finally:
            stream.close()

    def delete(self, path: str, recursive: bool = False) -> bool:
        self._increment("op_delete")
        return bool(self._call(path, "delete", self._path(path), recursive))

    def make_qualified(self, path: str) -> str:
        return str(self._fs.makeQualified(self._path(path)).toString())

    def _statistics_snapshot(self) -> list[StorageStatistic]:
        """Read the connector's own statistics; fall back to client counters."""
        try:
            java_stats = self._fs.getStorageStatistics()
        except Py4JJavaError:
            return super()._statistics_snapshot()
        return [
            StorageStatistic(name=str(s.getName()), value=int(s.getValue()))
            for s in RemoteOutputIterator(java_stats.getLongStatistics())
        ]
