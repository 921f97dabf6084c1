"""
Hierarchical filesystem abstraction shared by the local, S3 and Hadoop clients.

Every client offers the capability set the committer checks rely on:
create, open, list and get-status, plus path qualification and a snapshot
of the client's storage statistics.
"""

from abc import ABC, abstractmethod
from collections import Counter
from typing import Any, Callable, Generic, Iterator, TypeVar
from urllib.parse import urlparse

import structlog
from pydantic import BaseModel, Field

logger = structlog.get_logger()

T = TypeVar("T")


class FileStatus(BaseModel):
    """Status of a single file or directory."""

    path: str = Field(..., description="Qualified path URI")
    length: int = Field(default=0, ge=0, description="Length in bytes")
    is_directory: bool = Field(default=False, description="Directory flag")
    modification_time: int = Field(default=0, description="Modification time, epoch millis")

    @property
    def is_file(self) -> bool:
        return not self.is_directory

    @property
    def name(self) -> str:
        return self.path.rstrip("/").rsplit("/", 1)[-1]

    class Config:
        frozen = True


class StorageStatistic(BaseModel):
    """Name/value statistic exposed by a filesystem client."""

    name: str
    value: int

    class Config:
        frozen = True


def sort_statistics(statistics: Any) -> list[StorageStatistic]:
    """Sort statistics by name, descending."""
    return sorted(statistics, key=lambda s: s.name, reverse=True)


def join_path(base: str, child: str) -> str:
    """Join a child name onto a path or URI."""
    return f"{base.rstrip('/')}/{child.lstrip('/')}"


def get_scheme(path: str) -> str:
    """Return the lower-case URI scheme of a path, "" for plain paths."""
    scheme = urlparse(path).scheme.lower()
    # Windows drive letters parse as single-letter schemes
    return "" if len(scheme) == 1 else scheme


class RemoteOutputIterator(Generic[T]):
    """
    Iterator over remote output.

    Adapts any source exposing ``hasNext()``/``next()``, such as a Hadoop
    ``RemoteIterator`` or a Java iterator reached through py4j, to the Python
    iterator protocol. Network IO may take place on every step.
    """

    def __init__(self, source: Any, transform: Callable[[Any], T] | None = None):
        self._source = source
        self._transform = transform

    def __iter__(self) -> "RemoteOutputIterator[T]":
        return self

    def __next__(self) -> T:
        if not self._source.hasNext():
            raise StopIteration
        item = self._source.next()
        return self._transform(item) if self._transform else item


class FileSystem(ABC):
    """Base class for filesystem clients."""

    scheme: str = ""

    def __init__(self) -> None:
        self._statistics: Counter[str] = Counter()
        self.logger = logger.bind(component="filesystem", client=type(self).__name__)

    def _increment(self, name: str, count: int = 1) -> None:
        self._statistics[name] += count

    @abstractmethod
    def get_file_status(self, path: str) -> FileStatus:
        """Get the status of a path; raise FileNotFoundError if it does not exist."""

    @abstractmethod
    def list_files(self, path: str, recursive: bool = False) -> Iterator[FileStatus]:
        """Iterate over the files (not directories) under a path."""

    @abstractmethod
    def create(self, path: str, data: bytes, overwrite: bool = True) -> None:
        """Create a file holding the given bytes."""

    @abstractmethod
    def read_bytes(self, path: str) -> bytes:
        """Read the whole content of a file."""

    @abstractmethod
    def delete(self, path: str, recursive: bool = False) -> bool:
        """Delete a path; return False if there was nothing to delete."""

    @abstractmethod
    def make_qualified(self, path: str) -> str:
        """Qualify a path against this filesystem."""

    def exists(self, path: str) -> bool:
        self._increment("op_exists")
        try:
            self.get_file_status(path)
            return True
        except FileNotFoundError:
            return False

    def _statistics_snapshot(self) -> list[StorageStatistic]:
        return [StorageStatistic(name=k, value=v) for k, v in self._statistics.items()]

    def get_storage_statistics(self) -> list[StorageStatistic]:
        """Get a snapshot of the client statistics, sorted by name descending."""
        return sort_statistics(self._statistics_snapshot())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(scheme={self.scheme!r})"
