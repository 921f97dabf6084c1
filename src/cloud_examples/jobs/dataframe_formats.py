"""
DataFrame formats job: write generated rows in several formats and read them back.

Each format is written to its own directory under the destination, its
commit verified, then reloaded and its row count compared with the source.
"""

import sys

from pyspark.sql import DataFrame
from pyspark.sql.functions import col, concat, lit

from cloud_examples.commit import SuccessData
from cloud_examples.config import CloudConfig, create_config_from_env
from cloud_examples.filesystem import join_path
from cloud_examples.jobs.base_job import CloudJob
from cloud_examples.operations import apply_orc_speedup_options, load

DEFAULT_FORMATS = ("parquet", "orc", "json", "csv")


class DataFrameFormatsJob(CloudJob):
    """
    Round-trip a generated DataFrame through each output format.

    Pipeline:
    1. Extract: Generate ``row_count`` rows
    2. Transform: Derive name and value columns
    3. Validate: Check the id/name/value columns
    4. Load: Save in each format, verify the commit, reload and compare counts
    """

    def __init__(
        self,
        config: CloudConfig,
        row_count: int = 1000,
        formats: tuple[str, ...] = DEFAULT_FORMATS,
    ):
        super().__init__(config)
        self.row_count = row_count
        self.formats = formats
        self.results: dict[str, int] = {}
        self.commits: dict[str, SuccessData | None] = {}

    def extract(self) -> DataFrame | None:
        return self.spark.range(0, self.row_count)

    def transform(self, df: DataFrame) -> DataFrame:
        return df.withColumn("name", concat(lit("row-"), col("id"))).withColumn(
            "value", (col("id") * 2).cast("long")
        )

    def destination(self, file_format: str) -> str:
        return join_path(self.dest_uri, file_format)

    def load(self, df: DataFrame) -> None:
        apply_orc_speedup_options(self.spark)
        expected = df.count()

        for file_format in self.formats:
            dest = self.destination(file_format)
            writer = df.write
            if file_format == "csv":
                writer = writer.option("header", "true")
            writer.format(file_format).mode("overwrite").save(dest)

            self.commits[file_format] = self.verify_commit_at(dest)

            read_options = {"header": "true", "inferSchema": "true"} if file_format == "csv" else None
            actual = load(self.spark, dest, file_format, read_options).count()
            self.results[file_format] = actual
            self.logger.info("format_round_trip", format=file_format, expected=expected, actual=actual)

            if actual != expected:
                raise RuntimeError(
                    f"Row count mismatch for {file_format}: wrote {expected}, read {actual}"
                )

    def verify_commit(self) -> SuccessData | None:
        """Every format directory was verified as it was written."""
        return self.commits.get(self.formats[-1]) if self.formats else None

    def _get_required_columns(self) -> list[str]:
        return ["id", "name", "value"]


def main() -> None:
    """Main entry point for the DataFrame formats job."""
    config = create_config_from_env("dataframe_formats")
    job = DataFrameFormatsJob(config)
    success = job.run()

    if not success:
        sys.exit(1)


if __name__ == "__main__":
    main()
