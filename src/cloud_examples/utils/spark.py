"""
Spark session construction for object store jobs and tests.
"""

from typing import Any

from pyspark.sql import SparkSession

from cloud_examples.config import CloudConfig
from cloud_examples.constants import (
    COMMIT_PROTOCOL_CLASS,
    COMMITTER_NAME_KEY,
    DEFAULT_RENAME,
    PARQUET_COMMITTER_CLASS,
    S3A_COMMITTER_FACTORY,
)


def s3a_options(config: CloudConfig) -> dict[str, str]:
    """Hadoop S3A connector options for a configuration, as Spark settings."""
    options = {
        "spark.hadoop.fs.s3a.impl": "org.apache.hadoop.fs.s3a.S3AFileSystem",
        "spark.hadoop.fs.s3a.endpoint.region": config.region,
    }
    if config.s3_endpoint:
        options["spark.hadoop.fs.s3a.endpoint"] = config.s3_endpoint
        options["spark.hadoop.fs.s3a.connection.ssl.enabled"] = str(
            config.s3_endpoint.startswith("https")
        ).lower()
    if config.path_style_access:
        options["spark.hadoop.fs.s3a.path.style.access"] = "true"
    return options


def committer_options(committer: str | None) -> dict[str, str]:
    """
    Spark settings binding output to an S3A committer.

    The classic rename committer needs no binding; any other committer is
    routed through the PathOutputCommitter factory.
    """
    if committer is None or committer == DEFAULT_RENAME:
        return {}
    return {
        f"spark.hadoop.{COMMITTER_NAME_KEY}": committer,
        "spark.hadoop.mapreduce.outputcommitter.factory.scheme.s3a": S3A_COMMITTER_FACTORY,
        "spark.sql.sources.commitProtocolClass": COMMIT_PROTOCOL_CLASS,
        "spark.sql.parquet.output.committer.class": PARQUET_COMMITTER_CLASS,
    }


def build_spark_session(
    config: CloudConfig,
    master: str | None = None,
    extra: dict[str, Any] | None = None,
) -> SparkSession:
    """Create or get a Spark session configured for the job's object store."""
    builder = (
        SparkSession.builder.appName(config.job_name)
        .config("spark.sql.adaptive.enabled", "true")
        .config("spark.sql.adaptive.coalescePartitions.enabled", "true")
        .config("spark.hadoop.mapreduce.fileoutputcommitter.cleanup-failures.ignored", "true")
    )
    if master:
        builder = builder.master(master)

    settings = {**s3a_options(config), **committer_options(config.committer)}
    settings.update({k: str(v) for k, v in (extra or {}).items()})
    for key, value in settings.items():
        builder = builder.config(key, value)

    return builder.getOrCreate()
