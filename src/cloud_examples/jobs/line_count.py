"""
Line count job: read text from an object store, count words, write the counts back.
"""

import sys

from pyspark.sql import DataFrame
from pyspark.sql.functions import col, explode, length, lower, split

from cloud_examples.config import CloudConfig, create_config_from_env
from cloud_examples.jobs.base_job import CloudJob


class LineCountJob(CloudJob):
    """
    Count the lines and words of a text source.

    Pipeline:
    1. Extract: Load text lines from the source path
    2. Transform: Split lines into lower-case words and count each word
    3. Validate: Check the word/count columns
    4. Load: Write the counts as CSV and verify the commit
    """

    output_format = "csv"

    def __init__(self, config: CloudConfig, partitions: int | None = None):
        super().__init__(config)
        self.partitions = partitions
        self.line_count = 0

    def extract(self) -> DataFrame | None:
        """Extract the text lines of the source."""
        lines = self.load_data(self.source_uri, "text")
        self.line_count = lines.count()
        self.logger.info("lines_read", source=self.source_uri, lines=self.line_count)
        return lines

    def transform(self, df: DataFrame) -> DataFrame:
        """Count each word of the source."""
        words = (
            df.select(explode(split(lower(col("value")), r"\W+")).alias("word"))
            .filter(length(col("word")) > 0)
        )
        counts = words.groupBy("word").count().orderBy(col("count").desc(), col("word"))
        if self.partitions:
            counts = counts.coalesce(self.partitions)
        return counts

    def load(self, df: DataFrame) -> None:
        """Write the word counts as CSV with a header."""
        self.logger.info("writing_counts", dest=self.dest_uri)
        df.write.mode("overwrite").option("header", "true").csv(self.dest_uri)

    def _get_required_columns(self) -> list[str]:
        return ["word", "count"]


def main() -> None:
    """Main entry point for the line count job."""
    config = create_config_from_env("line_count")
    job = LineCountJob(config)
    success = job.run()

    if not success:
        sys.exit(1)


if __name__ == "__main__":
    main()
