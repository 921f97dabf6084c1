"""
Success marker written by the S3A committers on job commit.

The ``_SUCCESS`` file of a committed job is a JSON document recording the
committer, the files it published, and the filesystem metrics and
diagnostics collected during the commit. The classic rename committer writes
a zero-byte file instead.
"""

from typing import Any

from pydantic import BaseModel, Field, ValidationError

from cloud_examples.constants import SUCCESS_DATA_NAME
from cloud_examples.exceptions import SuccessDataValidationError
from cloud_examples.filesystem import FileSystem


class SuccessData(BaseModel):
    """Parsed success marker."""

    name: str = Field(default=SUCCESS_DATA_NAME, description="Format identifier")
    timestamp: int = Field(default=0, description="Commit time, epoch millis")
    date: str = Field(default="", description="Commit time, human readable")
    hostname: str = Field(default="", description="Host which committed the job")
    committer: str = Field(default="", description="Committer name")
    description: str = Field(default="", description="Committer description")
    job_id: str | None = Field(default=None, alias="jobId", description="Job ID")
    job_id_source: str | None = Field(
        default=None, alias="jobIdSource", description="Origin of the job ID"
    )
    metrics: dict[str, int | float] = Field(default_factory=dict)
    diagnostics: dict[str, str] = Field(default_factory=dict)
    filenames: list[str] | None = Field(default_factory=list)

    class Config:
        populate_by_name = True
        extra = "ignore"
        frozen = True

    @classmethod
    def from_json(cls, data: bytes | str, source: str = "<bytes>") -> "SuccessData":
        """
        Parse and validate a success marker.

        Args:
            data: JSON content of the marker
            source: Where the data came from, for error messages

        Raises:
            SuccessDataValidationError: content is not a valid marker
        """
        try:
            success_data = cls.model_validate_json(data)
        except ValidationError as e:
            raise SuccessDataValidationError(f"Invalid success data in {source}: {e}") from e
        success_data.validate_name(source)
        return success_data

    @classmethod
    def load(cls, fs: FileSystem, path: str) -> "SuccessData":
        """Load a success marker from a filesystem."""
        return cls.from_json(fs.read_bytes(path), source=path)

    def validate_name(self, source: str = "<bytes>") -> None:
        if self.name != SUCCESS_DATA_NAME:
            raise SuccessDataValidationError(
                f"Incompatible success data in {source}: name '{self.name}'"
                f" is not '{SUCCESS_DATA_NAME}'"
            )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True, indent=2)

    @staticmethod
    def _dump(entries: dict[str, Any], prefix: str, middle: str, suffix: str) -> str:
        return "".join(f"{prefix}{k}{middle}{v}{suffix}" for k, v in sorted(entries.items()))

    def dump_metrics(self, prefix: str = "  ", middle: str = " = ", suffix: str = "\n") -> str:
        """Dump the metrics one per entry, sorted by name."""
        return self._dump(self.metrics, prefix, middle, suffix)

    def dump_diagnostics(self, prefix: str = "  ", middle: str = " = ", suffix: str = "\n") -> str:
        """Dump the diagnostics one per entry, sorted by name."""
        return self._dump(self.diagnostics, prefix, middle, suffix)

    def __str__(self) -> str:
        count = "null" if self.filenames is None else len(self.filenames)
        return (
            f"SuccessData{{committer='{self.committer}', hostname='{self.hostname}',"
            f" description='{self.description}', date='{self.date}', filenames=[{count}]}}"
        )
