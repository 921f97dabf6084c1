"""
Constants shared by the committer checks, filesystem clients and jobs.
"""

# Marker written by a successful job commit
SUCCESS_FILE_NAME = "_SUCCESS"

# Format identifier of the JSON success marker written by the S3A committers
SUCCESS_DATA_NAME = "org.apache.hadoop.fs.s3a.commit.files.SuccessData/1"

# Values of fs.s3a.committer.name
COMMITTER_NAME_KEY = "fs.s3a.committer.name"
DEFAULT_RENAME = "file"
DIRECTORY = "directory"
PARTITIONED = "partitioned"
MAGIC = "magic"

COMMITTERS = (DEFAULT_RENAME, DIRECTORY, PARTITIONED, MAGIC)

# Spark bindings that route commits through the Hadoop PathOutputCommitter factory
COMMIT_PROTOCOL_CLASS = "org.apache.spark.internal.io.cloud.PathOutputCommitProtocol"
PARQUET_COMMITTER_CLASS = "org.apache.spark.internal.io.cloud.BindingParquetOutputCommitter"
S3A_COMMITTER_FACTORY = "org.apache.hadoop.fs.s3a.commit.S3ACommitterFactory"

# Schemes served by the S3 clients
S3_SCHEMES = ("s3", "s3a", "s3n")
