import pytest

from cloud_examples.dependency_check import PYTHON_PROBES, Probe, check_dependencies
from cloud_examples.exceptions import DependencyProbeError

HADOOP_LOCAL_FS = Probe(
    "Create Hadoop local FS instance",
    lambda jvm: jvm.org.apache.hadoop.fs.LocalFileSystem(),
    requires_jvm=True,
)

# Removed from Hadoop 3
NATIVE_S3_FS = Probe(
    "Create S3N FS Instance",
    lambda jvm: jvm.org.apache.hadoop.fs.s3native.NativeS3FileSystem(),
    requires_jvm=True,
)


@pytest.mark.integration
class TestDependencyCheckWithSpark:
    def test_classes_on_classpath_load(self, spark, aws_credentials):
        results = check_dependencies(spark, [HADOOP_LOCAL_FS] + PYTHON_PROBES)

        assert all(r.status == "passed" for r in results)

    def test_optional_missing_class_reported(self, spark):
        results = check_dependencies(spark, [NATIVE_S3_FS._replace(optional=True)])

        assert results[0].failed

    def test_mandatory_missing_class_raises(self, spark):
        with pytest.raises(DependencyProbeError, match="S3N"):
            check_dependencies(spark, [NATIVE_S3_FS])
