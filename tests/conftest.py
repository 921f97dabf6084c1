"""
Shared test configuration and fixtures.
"""

import os
import time

import boto3
import pytest
from moto import mock_aws

from cloud_examples.config import create_local_config
from cloud_examples.filesystem import LocalFileSystem, S3FileSystem

TEST_BUCKET = "cloud-examples-test"


@pytest.fixture(scope="session")
def spark():
    """Create one local Spark session for the test run.

    Imported lazily so unit tests run without a JVM.
    """
    from pyspark.sql import SparkSession

    app_name = f"cloud-examples-test-{int(time.time() * 1000)}"

    spark = (
        SparkSession.builder
        .appName(app_name)
        .master("local[2]")
        .config("spark.sql.shuffle.partitions", "2")
        .config("spark.sql.catalogImplementation", "in-memory")
        .config("spark.sql.execution.arrow.pyspark.enabled", "false")
        .config("spark.driver.host", "localhost")
        .config("spark.driver.bindAddress", "localhost")
        .config("spark.ui.enabled", "false")
        .getOrCreate()
    )

    yield spark

    try:
        spark.stop()
    except Exception:
        # Ignore shutdown errors
        pass


@pytest.fixture
def aws_credentials():
    """Mocked AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def s3_client(aws_credentials):
    """boto3 S3 client against a mocked S3 holding the test bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=TEST_BUCKET)
        yield client


@pytest.fixture
def s3_fs(s3_client):
    """S3 filesystem client bound to the mocked S3."""
    return S3FileSystem(client=s3_client)


@pytest.fixture
def local_fs():
    return LocalFileSystem()


@pytest.fixture
def sample_config(tmp_path):
    """Create sample job configuration for testing."""
    return create_local_config(
        "test_job",
        log_level="INFO",
        source_uri=str(tmp_path / "source"),
        dest_uri=str(tmp_path / "dest"),
        success_file_timeout=1.0,
        success_file_interval=0.05,
    )


@pytest.fixture
def sample_text():
    """Sample text for line and word counting."""
    return "\n".join(
        [
            "The quick brown fox",
            "jumps over the lazy dog",
            "the end",
        ]
    )
