"""
Committer verification against a filesystem.

Checks the ``_SUCCESS`` marker under a job's destination directory to confirm
which committer published the output and what it published. Object stores
may not show a freshly written marker immediately, so the lookup polls with
exponential backoff before declaring it missing.
"""

from typing import Any
from urllib.parse import urlparse

import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_delay,
    wait_exponential,
)

from cloud_examples.commit.success_data import SuccessData
from cloud_examples.constants import DEFAULT_RENAME, SUCCESS_FILE_NAME
from cloud_examples.exceptions import CommitterVerificationError, SuccessFileNotFoundError
from cloud_examples.filesystem import FileStatus, FileSystem, StorageStatistic, join_path

logger = structlog.get_logger()

DEFAULT_TIMEOUT = 30.0
DEFAULT_INTERVAL = 0.5
MAX_INTERVAL = 5.0


def eventually_get_file_status(
    fs: FileSystem,
    path: str,
    timeout: float = DEFAULT_TIMEOUT,
    interval: float = DEFAULT_INTERVAL,
) -> FileStatus:
    """
    Get the status of a path, retrying while it is not found.

    Args:
        fs: Filesystem client
        path: Path to look up
        timeout: Total seconds to keep retrying
        interval: Initial delay between attempts, doubled up to MAX_INTERVAL

    Raises:
        FileNotFoundError: path still missing once the timeout has passed
    """
    retryer = Retrying(
        stop=stop_after_delay(timeout),
        wait=wait_exponential(multiplier=interval, min=interval, max=max(interval, MAX_INTERVAL)),
        retry=retry_if_exception_type(FileNotFoundError),
        before_sleep=lambda state: logger.debug(
            "waiting_for_file", path=path, attempt=state.attempt_number
        ),
        reraise=True,
    )
    return retryer(fs.get_file_status, path)


class CommitterOperations:
    """
    Committer checks against a filesystem.

    Attributes:
        fs: Filesystem client holding the job output
        timeout: Seconds to wait for a success marker to become visible
        interval: Initial polling interval for the success marker
    """

    def __init__(
        self,
        fs: FileSystem,
        timeout: float = DEFAULT_TIMEOUT,
        interval: float = DEFAULT_INTERVAL,
    ) -> None:
        self.fs = fs
        self.timeout = timeout
        self.interval = interval
        self.logger = logger.bind(component="committer_operations")

    def get_storage_statistics(self) -> list[StorageStatistic]:
        """Get a sorted list of the filesystem statistics, by name descending."""
        return self.fs.get_storage_statistics()

    def verify_committer(
        self,
        dest_dir: str,
        committer: str | None = None,
        file_count: int | None = None,
        text: str = "",
        require_non_empty: bool = True,
    ) -> SuccessData | None:
        """
        Verify that an S3A committer was used to commit a job's output.

        Args:
            dest_dir: Destination directory of the work
            committer: Committer name, if known
            file_count: Expected number of files, if known
            text: Message to include in all assertions
            require_non_empty: Fail on a zero-byte marker instead of returning None

        Returns:
            The parsed success data, or None for an accepted zero-byte marker

        Raises:
            SuccessFileNotFoundError: no marker became visible
            CommitterVerificationError: the marker does not match expectations
        """
        success_file = join_path(dest_dir, SUCCESS_FILE_NAME)

        try:
            status = eventually_get_file_status(
                self.fs, success_file, self.timeout, self.interval
            )
        except FileNotFoundError as e:
            raise SuccessFileNotFoundError(f"No commit success file: {success_file}") from e

        if status.length == 0:
            if require_non_empty:
                raise CommitterVerificationError(
                    f"{text} 0-byte {success_file} implies that the S3A committer was not used"
                    f" to commit work to {dest_dir} with committer {committer}".strip()
                )
            self.logger.info("empty_success_file", path=success_file)
            return None

        success_data = SuccessData.load(self.fs, success_file)
        self.logger.info("success_data", path=success_file, success_data=str(success_data))
        self.logger.info("success_data_metrics", metrics=success_data.dump_metrics())
        self.logger.info("success_data_diagnostics", diagnostics=success_data.dump_diagnostics())

        if committer is not None and committer != success_data.committer:
            raise CommitterVerificationError(
                f"{text} Expected committer '{committer}' but was"
                f" '{success_data.committer}' in {success_data}".strip()
            )

        files = success_data.filenames
        if files is None:
            raise CommitterVerificationError(f"{text} No 'filenames' in {success_data}".strip())

        if file_count is not None and file_count != len(files):
            raise CommitterVerificationError(
                f"{text} Expected {file_count} files but found {len(files)}"
                f" in {success_data}".strip()
            )

        self.logger.info("committed_files", files=self._describe_files(dest_dir, files, text))
        return success_data

    def _describe_files(self, dest_dir: str, files: list[str], text: str) -> str:
        lines = []
        for name in files:
            path = self._qualify(dest_dir, name)
            try:
                status = self.fs.get_file_status(path)
            except FileNotFoundError as e:
                raise CommitterVerificationError(
                    f"{text} Committed file {path} does not exist".strip()
                ) from e
            lines.append(f"  {status.path} size={status.length}")
        return "\n".join(lines)

    def _qualify(self, dest_dir: str, name: str) -> str:
        # Markers list absolute paths without the scheme and bucket of the store
        if "://" not in name:
            parsed = urlparse(dest_dir)
            if parsed.scheme not in ("", "file") and parsed.netloc:
                name = f"{parsed.scheme}://{parsed.netloc}/{name.lstrip('/')}"
        return self.fs.make_qualified(name)

    def maybe_verify_committer(
        self,
        dest_dir: str,
        committer_name: str | None,
        committer_impl_name: str | None,
        file_count: int | None,
        text: str = "",
    ) -> SuccessData | None:
        """
        If a committer other than the classic one is enabled, verify that it
        was used; return any loaded success data.

        Args:
            dest_dir: Destination directory
            committer_name: Configured committer name, None if not configured
            committer_impl_name: Committer name to look for in the success data
            file_count: Expected number of files
            text: Message to include in all assertions
        """
        if committer_name is None or committer_name == DEFAULT_RENAME:
            return self.verify_committer(dest_dir, None, file_count, text, False)
        return self.verify_committer(dest_dir, committer_impl_name, file_count, text, True)


def verify_committer(fs: FileSystem, dest_dir: str, **kwargs: Any) -> SuccessData | None:
    """Verify the committer of ``dest_dir`` with default retry settings."""
    return CommitterOperations(fs).verify_committer(dest_dir, **kwargs)
