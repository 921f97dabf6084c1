"""
Streaming job: process the text files landing in an object store directory.

Runs a structured streaming query over the source directory with an
``availableNow`` trigger, so every file present when the job starts is
processed and the query then stops. Word counts per batch are appended to
the destination as parquet.
"""

import sys

from pyspark.sql import DataFrame
from pyspark.sql.functions import col, explode, length, lower, split

from cloud_examples.commit import SuccessData
from cloud_examples.config import CloudConfig, create_config_from_env
from cloud_examples.filesystem import join_path
from cloud_examples.jobs.base_job import CloudJob

# The file sink records committed batches here instead of writing _SUCCESS
SPARK_METADATA_DIR = "_spark_metadata"


class StreamingJob(CloudJob):
    """
    Stream text files from a directory and write their words.

    Pipeline:
    1. Extract: Open a text stream over the source directory
    2. Transform: Split lines into lower-case words
    3. Load: Append each batch to the destination as parquet
    4. Verify: Check the sink's metadata log and reload the output
    """

    def __init__(
        self,
        config: CloudConfig,
        checkpoint_uri: str | None = None,
        timeout: float = 120.0,
    ):
        super().__init__(config)
        self.checkpoint_uri = checkpoint_uri
        self.timeout = timeout
        self.words_written = 0

    def run(self) -> bool:
        """Execute the streaming pipeline."""
        try:
            self.logger.info("pipeline_started", streaming=True)
            self._initialize_spark()

            words = self.transform(self.extract())
            if not self.validate(words):
                raise RuntimeError("Data validation failed")

            self.load(words)
            self.verify_commit()

            self.logger.info("pipeline_completed", words=self.words_written)
            return True

        except Exception as e:
            self.logger.error("job_failed", error=str(e))
            raise
        finally:
            if self.spark and self.config.env != "local":
                self.spark.stop()

    def extract(self) -> DataFrame:
        self.logger.info("opening_stream", source=self.source_uri)
        return self.spark.readStream.format("text").load(self.source_uri)

    def transform(self, df: DataFrame) -> DataFrame:
        return (
            df.select(explode(split(lower(col("value")), r"\W+")).alias("word"))
            .filter(length(col("word")) > 0)
        )

    def load(self, df: DataFrame) -> None:
        checkpoint = self.checkpoint_uri or f"{self.dest_uri.rstrip('/')}-checkpoint"
        query = (
            df.writeStream.format("parquet")
            .outputMode("append")
            .option("checkpointLocation", checkpoint)
            .option("path", self.dest_uri)
            .trigger(availableNow=True)
            .start()
        )
        finished = query.awaitTermination(self.timeout)
        if not finished:
            query.stop()
            raise TimeoutError(f"Streaming query did not finish within {self.timeout}s")
        if query.exception() is not None:
            raise RuntimeError(f"Streaming query failed: {query.exception()}")

        self.logger.info("stream_completed", batches=len(query.recentProgress))

    def verify_commit(self) -> SuccessData | None:
        """Check that the sink committed batches and count what it wrote."""
        fs = self.get_filesystem(self.dest_uri)
        metadata = join_path(self.dest_uri, SPARK_METADATA_DIR)
        if not fs.exists(metadata):
            raise FileNotFoundError(f"No streaming sink metadata: {metadata}")

        self.words_written = self.spark.read.parquet(self.dest_uri).count()
        self.logger.info("stream_output", dest=self.dest_uri, words=self.words_written)
        return None

    def _get_required_columns(self) -> list[str]:
        return ["word"]


def main() -> None:
    """Main entry point for the streaming job."""
    config = create_config_from_env("streaming")
    job = StreamingJob(config)
    success = job.run()

    if not success:
        sys.exit(1)


if __name__ == "__main__":
    main()
