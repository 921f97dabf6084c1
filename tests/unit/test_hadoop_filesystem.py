"""
Tests for the Hadoop filesystem client against mocked py4j objects.
"""

import pytest
from py4j.protocol import Py4JError, Py4JJavaError

from cloud_examples.filesystem.hadoop import JAVA_FILE_EXISTS, JAVA_NOT_FOUND, HadoopFileSystem
from tests.unit.test_filesystem import JavaStyleIterator


def java_error(mocker, class_name: str) -> Py4JJavaError:
    java_exception = mocker.MagicMock()
    java_exception.getClass.return_value.getName.return_value = class_name
    return Py4JJavaError("An error occurred", java_exception)


def java_status(mocker, path: str, length: int = 0, directory: bool = False):
    status = mocker.MagicMock()
    status.getPath.return_value.toString.return_value = path
    status.getLen.return_value = length
    status.isDirectory.return_value = directory
    status.getModificationTime.return_value = 1700000000000
    return status


def java_statistic(mocker, name: str, value: int):
    statistic = mocker.MagicMock()
    statistic.getName.return_value = name
    statistic.getValue.return_value = value
    return statistic


@pytest.fixture
def jvm(mocker):
    jvm = mocker.MagicMock()
    jvm.org.apache.hadoop.fs.Path.side_effect = lambda p: f"Path({p})"
    return jvm


@pytest.fixture
def java_fs(mocker):
    java_fs = mocker.MagicMock()
    java_fs.getUri.return_value.toString.return_value = "s3a://bucket"
    return java_fs


@pytest.fixture
def hadoop_fs(jvm, java_fs):
    return HadoopFileSystem(jvm, java_fs)


@pytest.mark.unit
class TestHadoopFileSystem:
    def test_scheme_from_uri(self, hadoop_fs):
        assert hadoop_fs.scheme == "s3a"
        assert hadoop_fs.uri == "s3a://bucket"

    def test_get_file_status(self, mocker, hadoop_fs, java_fs):
        java_fs.getFileStatus.return_value = java_status(mocker, "s3a://bucket/out/_SUCCESS", 42)

        status = hadoop_fs.get_file_status("s3a://bucket/out/_SUCCESS")

        java_fs.getFileStatus.assert_called_once_with("Path(s3a://bucket/out/_SUCCESS)")
        assert status.length == 42
        assert status.is_file
        assert status.modification_time == 1700000000000

    def test_java_not_found_translated(self, mocker, hadoop_fs, java_fs):
        java_fs.getFileStatus.side_effect = java_error(mocker, JAVA_NOT_FOUND)

        with pytest.raises(FileNotFoundError):
            hadoop_fs.get_file_status("s3a://bucket/missing")
        assert not hadoop_fs.exists("s3a://bucket/missing")

    def test_java_file_exists_translated(self, mocker, hadoop_fs, java_fs):
        java_fs.create.side_effect = java_error(mocker, JAVA_FILE_EXISTS)

        with pytest.raises(FileExistsError):
            hadoop_fs.create("s3a://bucket/file", b"x", overwrite=False)

    def test_other_java_errors_propagate(self, mocker, hadoop_fs, java_fs):
        java_fs.getFileStatus.side_effect = java_error(mocker, "java.nio.file.AccessDeniedException")

        with pytest.raises(Py4JJavaError):
            hadoop_fs.get_file_status("s3a://bucket/secret")

    def test_unreadable_java_exception_propagates(self, mocker, hadoop_fs, java_fs):
        error = java_error(mocker, JAVA_NOT_FOUND)
        error.java_exception.getClass.side_effect = Py4JError("gateway closed")
        java_fs.getFileStatus.side_effect = error

        with pytest.raises(Py4JJavaError):
            hadoop_fs.get_file_status("s3a://bucket/file")

    def test_list_files_adapts_remote_iterator(self, mocker, hadoop_fs, java_fs):
        java_fs.listFiles.return_value = JavaStyleIterator(
            [java_status(mocker, "s3a://bucket/out/a", 1), java_status(mocker, "s3a://bucket/out/b", 2)]
        )

        files = list(hadoop_fs.list_files("s3a://bucket/out", recursive=True))

        java_fs.listFiles.assert_called_once_with("Path(s3a://bucket/out)", True)
        assert [f.name for f in files] == ["a", "b"]

    def test_create_writes_and_closes(self, hadoop_fs, java_fs):
        stream = java_fs.create.return_value

        hadoop_fs.create("s3a://bucket/file", b"body")

        java_fs.create.assert_called_once_with("Path(s3a://bucket/file)", True)
        stream.write.assert_called_once_with(bytearray(b"body"))
        stream.close.assert_called_once()

    def test_create_closes_on_failure(self, hadoop_fs, java_fs):
        stream = java_fs.create.return_value
        stream.write.side_effect = RuntimeError("write failed")

        with pytest.raises(RuntimeError):
            hadoop_fs.create("s3a://bucket/file", b"body")
        stream.close.assert_called_once()

    def test_read_bytes(self, jvm, hadoop_fs, java_fs):
        jvm.org.apache.commons.io.IOUtils.toByteArray.return_value = b"content"

        assert hadoop_fs.read_bytes("s3a://bucket/file") == b"content"
        java_fs.open.return_value.close.assert_called_once()

    def test_make_qualified(self, hadoop_fs, java_fs):
        java_fs.makeQualified.return_value.toString.return_value = "s3a://bucket/out/part-0"

        assert hadoop_fs.make_qualified("/out/part-0") == "s3a://bucket/out/part-0"

    def test_storage_statistics_from_connector(self, mocker, hadoop_fs, java_fs):
        java_fs.getStorageStatistics.return_value.getLongStatistics.return_value = JavaStyleIterator(
            [
                java_statistic(mocker, "object_list_requests", 3),
                java_statistic(mocker, "files_created", 1),
                java_statistic(mocker, "op_get_file_status", 7),
            ]
        )

        statistics = hadoop_fs.get_storage_statistics()

        assert [s.name for s in statistics] == [
            "op_get_file_status",
            "object_list_requests",
            "files_created",
        ]
        assert statistics[0].value == 7

    def test_from_spark(self, mocker, jvm, java_fs):
        spark = mocker.MagicMock()
        spark.sparkContext._jvm = jvm
        path = mocker.MagicMock()
        path.getFileSystem.return_value = java_fs
        jvm.org.apache.hadoop.fs.Path.side_effect = None
        jvm.org.apache.hadoop.fs.Path.return_value = path

        fs = HadoopFileSystem.from_spark(spark, "s3a://bucket/out")

        path.getFileSystem.assert_called_once_with(spark.sparkContext._jsc.hadoopConfiguration())
        assert fs.uri == "s3a://bucket"
