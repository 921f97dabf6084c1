"""
Integration tests running jobs and operations on a local Spark session.

Object store runs are enabled by pointing CLOUD_TEST_DEST at a bucket.
"""
