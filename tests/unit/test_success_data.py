import json

import pytest

from cloud_examples.commit import SuccessData
from cloud_examples.constants import DIRECTORY, SUCCESS_DATA_NAME
from cloud_examples.exceptions import CommitterVerificationError, SuccessDataValidationError
from tests.factories import SuccessDataFactory, success_json


@pytest.mark.unit
class TestSuccessDataParsing:
    def test_parses_marker(self):
        """Should parse every field of a committer marker"""
        payload = SuccessDataFactory.for_files(["/out/part-0000", "/out/part-0001"])

        data = SuccessData.from_json(json.dumps(payload))

        assert data.name == SUCCESS_DATA_NAME
        assert data.committer == DIRECTORY
        assert data.filenames == ["/out/part-0000", "/out/part-0001"]
        assert data.metrics["object_put_requests"] == 3
        assert data.diagnostics["fs.s3a.committer.name"] == DIRECTORY
        assert data.hostname == payload["hostname"]
        assert data.timestamp == payload["timestamp"]

    def test_ignores_unknown_fields(self):
        """Newer Hadoop releases add fields such as iostatistics"""
        payload = SuccessDataFactory(iostatistics={"counters": {"op_create": 1}})

        data = SuccessData.from_json(json.dumps(payload))

        assert data.committer == DIRECTORY

    def test_reads_job_id_aliases(self):
        payload = SuccessDataFactory(jobId="job_20260101_0001", jobIdSource="spark.sql.sources.writeJobUUID")

        data = SuccessData.from_json(json.dumps(payload))

        assert data.job_id == "job_20260101_0001"
        assert data.job_id_source == "spark.sql.sources.writeJobUUID"

    def test_missing_filenames_defaults_to_empty(self):
        payload = SuccessDataFactory()
        del payload["filenames"]

        data = SuccessData.from_json(json.dumps(payload))

        assert data.filenames == []

    def test_null_filenames_preserved(self):
        data = SuccessData.from_json(json.dumps(SuccessDataFactory.without_filenames()))

        assert data.filenames is None

    def test_wrong_name_rejected(self):
        with pytest.raises(SuccessDataValidationError, match="Incompatible success data"):
            SuccessData.from_json(success_json(name="org.example.Other/2"))

    def test_invalid_json_rejected(self):
        with pytest.raises(SuccessDataValidationError, match="Invalid success data in s3a://b/_SUCCESS"):
            SuccessData.from_json(b"{ truncated", source="s3a://b/_SUCCESS")

    def test_wrong_types_rejected(self):
        with pytest.raises(SuccessDataValidationError):
            SuccessData.from_json(success_json(metrics={"files_created": "many"}))

    def test_validation_error_is_assertion(self):
        assert issubclass(SuccessDataValidationError, CommitterVerificationError)
        assert issubclass(SuccessDataValidationError, AssertionError)


@pytest.mark.unit
class TestSuccessDataDump:
    def test_dump_metrics_sorted(self):
        data = SuccessData(metrics={"b_metric": 2, "a_metric": 1})

        assert data.dump_metrics("  ", " = ", "\n") == "  a_metric = 1\n  b_metric = 2\n"

    def test_dump_diagnostics_custom_separators(self):
        data = SuccessData(diagnostics={"key": "value", "abc": "xyz"})

        assert data.dump_diagnostics("[", ":", "]") == "[abc:xyz][key:value]"

    def test_dump_empty(self):
        assert SuccessData().dump_metrics() == ""

    def test_str_summarises(self):
        data = SuccessData(committer="magic", hostname="worker-1", filenames=["/a", "/b"])

        text = str(data)

        assert "committer='magic'" in text
        assert "filenames=[2]" in text

    def test_json_uses_aliases(self):
        data = SuccessData(committer="magic", job_id="job-1")

        payload = json.loads(data.to_json())

        assert payload["jobId"] == "job-1"
        assert payload["name"] == SUCCESS_DATA_NAME
        assert SuccessData.from_json(data.to_json()) == data


@pytest.mark.unit
class TestSuccessDataLoad:
    def test_load_from_filesystem(self, tmp_path, local_fs):
        marker = tmp_path / "_SUCCESS"
        marker.write_bytes(success_json(filenames=["/x"]))

        data = SuccessData.load(local_fs, str(marker))

        assert data.filenames == ["/x"]

    def test_load_missing(self, tmp_path, local_fs):
        with pytest.raises(FileNotFoundError):
            SuccessData.load(local_fs, str(tmp_path / "_SUCCESS"))
