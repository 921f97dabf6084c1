"""
Example jobs run against object stores.
"""

from cloud_examples.jobs.base_job import CloudJob
from cloud_examples.jobs.dataframe_formats import DataFrameFormatsJob
from cloud_examples.jobs.line_count import LineCountJob
from cloud_examples.jobs.streaming import StreamingJob

__all__ = ["CloudJob", "DataFrameFormatsJob", "LineCountJob", "StreamingJob"]
