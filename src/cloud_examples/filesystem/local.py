"""
Local filesystem client, used against ``file://`` destinations and in tests.
"""

import os
import shutil
from pathlib import Path
from typing import Iterator
from urllib.parse import unquote, urlparse

from cloud_examples.filesystem.base import FileStatus, FileSystem


class LocalFileSystem(FileSystem):
    """Filesystem client backed by the local disk."""

    scheme = "file"

    @staticmethod
    def _to_local(path: str) -> Path:
        if path.startswith("file:"):
            return Path(unquote(urlparse(path).path))
        return Path(path)

    def _status(self, local: Path) -> FileStatus:
        st = local.stat()
        return FileStatus(
            path=local.absolute().as_uri(),
            length=0 if local.is_dir() else st.st_size,
            is_directory=local.is_dir(),
            modification_time=int(st.st_mtime * 1000),
        )

    def get_file_status(self, path: str) -> FileStatus:
        self._increment("op_get_file_status")
        local = self._to_local(path)
        if not local.exists():
            raise FileNotFoundError(f"No such file or directory: {path}")
        return self._status(local)

    def list_files(self, path: str, recursive: bool = False) -> Iterator[FileStatus]:
        self._increment("op_list_files")
        local = self._to_local(path)
        if not local.exists():
            raise FileNotFoundError(f"No such file or directory: {path}")
        if local.is_file():
            yield self._status(local)
            return

        if recursive:
            for root, dirs, files in os.walk(local):
                dirs.sort()
                for name in sorted(files):
                    yield self._status(Path(root) / name)
        else:
            for child in sorted(local.iterdir()):
                if child.is_file():
                    yield self._status(child)

    def create(self, path: str, data: bytes, overwrite: bool = True) -> None:
        self._increment("op_create")
        local = self._to_local(path)
        if local.exists() and not overwrite:
            raise FileExistsError(f"File already exists: {path}")
        local.parent.mkdir(parents=True, exist_ok=True)
        local.write_bytes(data)
        self._increment("files_created")
        self._increment("bytes_written", len(data))

    def read_bytes(self, path: str) -> bytes:
        self._increment("op_open")
        local = self._to_local(path)
        if not local.is_file():
            raise FileNotFoundError(f"No such file: {path}")
        data = local.read_bytes()
        self._increment("bytes_read", len(data))
        return data

    def delete(self, path: str, recursive: bool = False) -> bool:
        self._increment("op_delete")
        local = self._to_local(path)
        if not local.exists():
            return False
        if local.is_dir():
            if not recursive and any(local.iterdir()):
                raise OSError(f"Directory is not empty: {path}")
            shutil.rmtree(local)
        else:
            local.unlink()
        return True

    def make_qualified(self, path: str) -> str:
        return self._to_local(path).absolute().as_uri()
