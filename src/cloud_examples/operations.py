"""
Extra filesystem and DataFrame operations for object store integration tests.
"""

from typing import Any, Callable, Iterable

import structlog
from pyspark import RDD
from pyspark.sql import DataFrame, SparkSession

from cloud_examples.filesystem import FileStatus, FileSystem, RemoteOutputIterator

logger = structlog.get_logger(component="operations")


class PathFilter:
    """Filter built from a predicate on a path."""

    def __init__(self, predicate: Callable[[str], bool]):
        self._predicate = predicate

    def accept(self, path: str) -> bool:
        return bool(self._predicate(path))

    def __call__(self, status: FileStatus | str) -> bool:
        return self.accept(status.path if isinstance(status, FileStatus) else status)


def path_filter(predicate: Callable[[str], bool]) -> PathFilter:
    """
    Take a predicate, generate a path filter from it.

    Args:
        predicate: Function deciding whether to accept a path

    Returns:
        A filter usable with ``list_files`` and the builtin ``filter``
    """
    return PathFilter(predicate)


def hidden_file_filter() -> PathFilter:
    """Filter rejecting files whose name starts with "_" or "." (markers, checksums)."""
    return path_filter(lambda p: not p.rstrip("/").rsplit("/", 1)[-1].startswith(("_", ".")))


def remote_iterator_sequence(source: Any) -> list[Any]:
    """
    Take the output of a remote iterator and convert it to a list.

    Sources exposing ``hasNext()``/``next()`` are adapted first. Network IO may
    take place during the operation, and changes to a remote store may result
    in a list which is not consistent with any single state of the store.
    """
    if hasattr(source, "hasNext") and hasattr(source, "next"):
        source = RemoteOutputIterator(source)
    return list(source)


def list_files(
    fs: FileSystem, path: str, recursive: bool, filter_: PathFilter | None = None
) -> list[FileStatus]:
    """
    List files in a filesystem.

    Args:
        fs: Filesystem client
        path: Path to list
        recursive: Flag to request recursive listing
        filter_: Optional path filter

    Returns:
        All files (but not directories) underneath the path
    """
    files = remote_iterator_sequence(fs.list_files(path, recursive))
    if filter_ is not None:
        files = [f for f in files if filter_(f)]
    logger.debug("files_listed", path=path, recursive=recursive, count=len(files))
    return files


def put(fs: FileSystem, path: str, body: str) -> None:
    """Put a string to the destination, overwriting any existing file."""
    data = body.encode("utf-8")
    fs.create(path, data, overwrite=True)
    logger.debug("file_written", path=path, bytes=len(data))


def get(fs: FileSystem, path: str) -> str:
    """Read a file as a UTF-8 string."""
    return fs.read_bytes(path).decode("utf-8")


def save(df: DataFrame, dest: str, file_format: str, mode: str = "overwrite") -> str:
    """
    Save a DataFrame in a specific format.

    Returns:
        The path the DataFrame was saved to
    """
    logger.info("saving_dataframe", dest=dest, format=file_format, mode=mode)
    df.write.format(file_format).mode(mode).save(dest)
    return dest


def load(
    spark: SparkSession,
    source: str,
    file_format: str,
    opts: dict[str, str] | None = None,
) -> DataFrame:
    """Load a DataFrame from a path in a specific format."""
    logger.info("loading_dataframe", source=source, format=file_format)
    reader = spark.read.format(file_format)
    if opts:
        reader = reader.options(**opts)
    return reader.load(source)


def save_as_text_file(rdd: RDD, path: str) -> str:
    """
    Save an RDD as a text file, using string representations of elements.

    Returns:
        The destination path
    """
    logger.info("saving_text_file", dest=path)
    rdd.map(str).saveAsTextFile(path)
    return path


def apply_orc_speedup_options(spark: SparkSession) -> None:
    """Disable schema merging and enable filter pushdown for ORC and Parquet reads."""
    spark.conf.set("spark.sql.orc.mergeSchema", "false")
    spark.conf.set("spark.sql.orc.filterPushdown", "true")
    spark.conf.set("spark.sql.parquet.mergeSchema", "false")
    spark.conf.set("spark.sql.parquet.filterPushdown", "true")


def total_length(files: Iterable[FileStatus]) -> int:
    """Sum the lengths of a set of files."""
    return sum(f.length for f in files)
