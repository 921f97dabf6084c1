"""
Configuration for cloud storage example jobs and tests.

Provides Pydantic configuration models populated from environment variables.
"""

__version__ = "1.0.0"

import os
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

ENV_PREFIX = "CLOUD_TEST_"


class CloudConfig(BaseModel):
    """Configuration for object store example jobs."""

    job_name: str = Field(..., description="Job identifier")
    job_run_id: str = Field(
        default_factory=lambda: f"local-{datetime.now().isoformat()}",
        description="Unique run identifier",
    )
    env: Literal["local", "dev", "staging", "prod"] = Field(
        default="local", description="Environment"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )

    # Source and destination of the job
    source_uri: str | None = Field(default=None, description="Input data URI")
    dest_uri: str | None = Field(default=None, description="Output directory URI")

    # Output committer
    committer: str | None = Field(
        default=None, description="S3A committer name (file, directory, partitioned, magic)"
    )

    # Object store connection
    s3_endpoint: str | None = Field(default=None, description="S3 endpoint, e.g. a MinIO URL")
    region: str = Field(default="us-east-1", description="AWS region")
    path_style_access: bool = Field(default=False, description="Use path style S3 requests")

    # Eventual consistency tolerance
    success_file_timeout: float = Field(
        default=30.0, gt=0, description="Seconds to wait for the _SUCCESS marker"
    )
    success_file_interval: float = Field(
        default=0.5, gt=0, description="Initial polling interval for the _SUCCESS marker"
    )

    @property
    def committer_enabled(self) -> bool:
        """Check if a non-classic committer was requested."""
        return self.committer not in (None, "file")

    @property
    def is_object_store(self) -> bool:
        """Check if the destination is an object store URI."""
        return bool(self.dest_uri) and self.dest_uri.split(":", 1)[0] in ("s3", "s3a", "s3n")

    class Config:
        validate_assignment = True
        extra = "forbid"


def _env(name: str, default: str | None = None) -> str | None:
    return os.getenv(f"{ENV_PREFIX}{name}", default)


def create_config_from_env(job_name: str, **overrides: Any) -> CloudConfig:
    """
    Create configuration from CLOUD_TEST_* environment variables.

    Args:
        job_name: Name of the job
        **overrides: Configuration overrides applied after the environment

    Returns:
        CloudConfig instance
    """
    config_data: dict[str, Any] = {
        "job_name": job_name,
        "env": _env("ENV", "local"),
        "log_level": (_env("LOG_LEVEL") or os.getenv("LOG_LEVEL", "INFO")).upper(),
        "source_uri": _env("SOURCE"),
        "dest_uri": _env("DEST"),
        "committer": _env("COMMITTER"),
        "s3_endpoint": _env("S3_ENDPOINT"),
        "region": _env("REGION", "us-east-1"),
        "path_style_access": (_env("PATH_STYLE_ACCESS", "false") or "").lower() == "true",
        "success_file_timeout": float(_env("SUCCESS_FILE_TIMEOUT", "30") or 30),
        "success_file_interval": float(_env("SUCCESS_FILE_INTERVAL", "0.5") or 0.5),
    }
    run_id = _env("JOB_RUN_ID")
    if run_id:
        config_data["job_run_id"] = run_id

    config_data.update(overrides)
    return CloudConfig(**config_data)


def create_local_config(job_name: str, **overrides: Any) -> CloudConfig:
    """
    Create a local development configuration.

    Args:
        job_name: Name of the job
        **overrides: Configuration overrides

    Returns:
        Local development configuration
    """
    config_data = {"job_name": job_name, "env": "local", **overrides}

    return CloudConfig(**config_data)
