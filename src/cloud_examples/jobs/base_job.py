"""
Base class for object store example jobs.

Provides the extract → transform → validate → load pattern, ending with a
check of the committed output.
"""

from abc import ABC, abstractmethod

from pyspark.sql import DataFrame, SparkSession

from cloud_examples.commit import CommitterOperations, SuccessData
from cloud_examples.config import CloudConfig
from cloud_examples.filesystem import FileSystem, get_filesystem
from cloud_examples.operations import load, save
from cloud_examples.utils.logging import setup_logging
from cloud_examples.utils.spark import build_spark_session


class CloudJob(ABC):
    """
    Base class for jobs reading from and writing to object stores.

    Features:
    - Spark session bound to the configured S3A endpoint and committer
    - Structured logging
    - Committer verification of the job output
    """

    output_format: str = "parquet"

    def __init__(self, config: CloudConfig):
        """Initialize job with configuration."""
        self.config = config
        self.job_name = config.job_name
        self.job_run_id = config.job_run_id

        self.logger = setup_logging(self.job_name, config.env, config.log_level).bind(
            job_name=self.job_name, job_run_id=self.job_run_id
        )
        self.logger.info("job_starting", committer=config.committer, dest=config.dest_uri)

        self.spark: SparkSession | None = None
        self.success_data: SuccessData | None = None

    def run(self) -> bool:
        """Execute the complete pipeline."""
        try:
            self.logger.info("pipeline_started")

            self._initialize_spark()

            raw_data = self.extract()
            if raw_data is None or raw_data.rdd.isEmpty():
                self.logger.warning("no_data_extracted")
                return True

            transformed_data = self.transform(raw_data)

            if not self.validate(transformed_data):
                raise RuntimeError("Data validation failed")

            self.load(transformed_data)
            self.success_data = self.verify_commit()

            self.logger.info("pipeline_completed")
            return True

        except Exception as e:
            self.logger.error("job_failed", error=str(e))
            raise
        finally:
            if self.spark and self.config.env != "local":
                self.spark.stop()

    @abstractmethod
    def extract(self) -> DataFrame | None:
        """Extract data from source(s). Return None if no data to process."""
        pass

    @abstractmethod
    def transform(self, df: DataFrame) -> DataFrame:
        """Transform the data."""
        pass

    def validate(self, df: DataFrame) -> bool:
        """Validate the data. Override for custom validation."""
        if df is None:
            return False

        required_columns = self._get_required_columns()
        if required_columns:
            missing_columns = set(required_columns) - set(df.columns)
            if missing_columns:
                self.logger.error("missing_columns", columns=sorted(missing_columns))
                return False

        return True

    def load(self, df: DataFrame) -> None:
        """Write the data to the destination."""
        save(df, self.dest_uri, self.output_format)

    def verify_commit(self) -> SuccessData | None:
        """Check the success marker of the destination against the configured committer."""
        return self.verify_commit_at(self.dest_uri)

    def verify_commit_at(self, dest: str, file_count: int | None = None) -> SuccessData | None:
        """Check the success marker under a directory against the configured committer."""
        operations = CommitterOperations(
            self.get_filesystem(dest),
            timeout=self.config.success_file_timeout,
            interval=self.config.success_file_interval,
        )
        return operations.maybe_verify_committer(
            dest,
            self.config.committer,
            self.config.committer,
            file_count if file_count is not None else self._expected_file_count(),
            text=self.job_name,
        )

    def _expected_file_count(self) -> int | None:
        """Number of files the job is expected to commit, None if unknown."""
        return None

    def _get_required_columns(self) -> list[str]:
        """Get list of required columns for validation. Override in subclasses."""
        return []

    def _initialize_spark(self) -> None:
        """Initialize Spark session with object store settings."""
        if self.spark is None:
            self.spark = build_spark_session(self.config)
        self.logger.info("spark_session_initialized", version=self.spark.version)

    @property
    def source_uri(self) -> str:
        if not self.config.source_uri:
            raise ValueError(f"No source configured for job {self.job_name}")
        return self.config.source_uri

    @property
    def dest_uri(self) -> str:
        if not self.config.dest_uri:
            raise ValueError(f"No destination configured for job {self.job_name}")
        return self.config.dest_uri

    def get_filesystem(self, uri: str) -> FileSystem:
        """Get a filesystem client for a URI through this job's Spark session."""
        return get_filesystem(uri, spark=self.spark)

    def load_data(self, path: str, file_format: str = "csv") -> DataFrame:
        """Load data from a path in a given format."""
        self.logger.info("loading_data", path=path, format=file_format)

        if self.spark is None:
            raise RuntimeError("Spark session not initialized")

        if file_format.lower() == "csv":
            return load(self.spark, path, "csv", {"header": "true", "inferSchema": "true"})
        elif file_format.lower() in ["json", "parquet", "orc", "text"]:
            return load(self.spark, path, file_format.lower())
        else:
            raise ValueError(f"Unsupported file format: {file_format}")
