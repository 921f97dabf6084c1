"""
Force load the object store client classes and some of their dependencies.

Missing or mismatched libraries usually only show up when a class is first
instantiated, so each probe creates an instance: JVM classes through the
Spark py4j gateway, Python clients directly. Mandatory probes that fail raise
DependencyProbeError; optional ones (libraries dropped by newer Hadoop
releases) are reported but do not fail the check.
"""

import sys
from typing import Any, Callable, Literal, NamedTuple

import structlog
from py4j.protocol import Py4JError
from pydantic import BaseModel

from cloud_examples.exceptions import DependencyProbeError

logger = structlog.get_logger(component="dependency_check")


class Probe(NamedTuple):
    name: str
    create: Callable[[Any], Any]
    optional: bool = False
    requires_jvm: bool = False


class ProbeResult(BaseModel):
    """Outcome of a single probe."""

    name: str
    status: Literal["passed", "failed", "skipped"]
    optional: bool = False
    detail: str = ""

    @property
    def failed(self) -> bool:
        return self.status == "failed"


def _boto3_s3_client(_: Any) -> Any:
    import boto3

    return boto3.session.Session().client("s3", region_name="us-east-1")


def _botocore_config(_: Any) -> Any:
    from botocore.config import Config

    return Config(s3={"addressing_style": "path"}, retries={"max_attempts": 3})


def _s3transfer_config(_: Any) -> Any:
    from boto3.s3.transfer import TransferConfig

    return TransferConfig(multipart_threshold=8 * 1024 * 1024)


JVM_PROBES = [
    Probe("Create S3A FS Instance", lambda jvm: jvm.org.apache.hadoop.fs.s3a.S3AFileSystem(), requires_jvm=True),
    Probe(
        "Create S3N FS Instance",
        lambda jvm: jvm.org.apache.hadoop.fs.s3native.NativeS3FileSystem(),
        optional=True,
        requires_jvm=True,
    ),
    Probe(
        "Create Jets3t class",
        lambda jvm: jvm.org.jets3t.service.S3ServiceException("jets3t"),
        optional=True,
        requires_jvm=True,
    ),
    Probe(
        "Create class in Amazon com.amazonaws.services.s3 JAR",
        lambda jvm: jvm.com.amazonaws.services.s3.S3ClientOptions(),
        optional=True,
        requires_jvm=True,
    ),
    Probe(
        "Create class in AWS SDK v2 S3 JAR",
        lambda jvm: jvm.software.amazon.awssdk.services.s3.S3Configuration.builder().build(),
        optional=True,
        requires_jvm=True,
    ),
    Probe(
        "Create Joda Time class",
        lambda jvm: jvm.org.joda.time.LocalTime(),
        optional=True,
        requires_jvm=True,
    ),
]

PYTHON_PROBES = [
    Probe("Create boto3 S3 client", _boto3_s3_client),
    Probe("Create botocore Config", _botocore_config),
    Probe("Create s3transfer TransferConfig", _s3transfer_config),
]

DEFAULT_PROBES = JVM_PROBES + PYTHON_PROBES


def run_probe(probe: Probe, jvm: Any = None) -> ProbeResult:
    """Run one probe and record its outcome."""
    if probe.requires_jvm and jvm is None:
        return ProbeResult(name=probe.name, status="skipped", optional=probe.optional, detail="no JVM")

    try:
        instance = probe.create(jvm)
    # An unknown JVM class resolves to a JavaPackage, which is not callable
    except (ImportError, TypeError, Py4JError) as e:
        logger.warning("probe_failed", probe=probe.name, optional=probe.optional, error=str(e))
        return ProbeResult(name=probe.name, status="failed", optional=probe.optional, detail=str(e))

    logger.debug("probe_passed", probe=probe.name, instance=str(instance))
    return ProbeResult(name=probe.name, status="passed", optional=probe.optional)


def check_dependencies(spark: Any = None, probes: list[Probe] | None = None) -> list[ProbeResult]:
    """
    Run dependency probes.

    Args:
        spark: SparkSession giving access to the JVM; JVM probes are skipped without one
        probes: Probes to run, defaults to DEFAULT_PROBES

    Returns:
        One result per probe

    Raises:
        DependencyProbeError: a mandatory probe failed
    """
    jvm = spark.sparkContext._jvm if spark is not None else None
    results = [run_probe(p, jvm) for p in (probes if probes is not None else DEFAULT_PROBES)]

    failures = [r for r in results if r.failed and not r.optional]
    if failures:
        summary = "; ".join(f"{r.name}: {r.detail}" for r in failures)
        raise DependencyProbeError(f"{len(failures)} dependency probe(s) failed: {summary}")

    logger.info(
        "dependency_check_completed",
        passed=sum(r.status == "passed" for r in results),
        failed=sum(r.failed for r in results),
        skipped=sum(r.status == "skipped" for r in results),
    )
    return results


def main() -> None:
    """Run the dependency check against a local Spark session."""
    from cloud_examples.config import create_config_from_env
    from cloud_examples.utils.logging import setup_logging
    from cloud_examples.utils.spark import build_spark_session

    config = create_config_from_env("dependency_check")
    setup_logging(config.job_name, config.env, config.log_level)
    spark = build_spark_session(config)
    try:
        for result in check_dependencies(spark):
            logger.info("probe_result", **result.model_dump())
    except DependencyProbeError as e:
        logger.error("dependency_check_failed", error=str(e))
        sys.exit(1)
    finally:
        spark.stop()


if __name__ == "__main__":
    main()
