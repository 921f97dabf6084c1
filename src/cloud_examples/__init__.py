"""
Cloud Examples - integration checks for Spark object store connectors.

This library provides the pieces used to test Spark jobs against object stores:
- CommitterOperations: success marker verification for the S3A committers
- Filesystem clients: local, S3 (boto3) and Hadoop (py4j) behind one interface
- Operations: listing, put/get, DataFrame save/load helpers
- Dependency check: probes for the storage client libraries
"""

from cloud_examples.commit import CommitterOperations, SuccessData, verify_committer
from cloud_examples.config import CloudConfig, create_config_from_env, create_local_config

# Import version from config
from cloud_examples.config import __version__

__all__ = [
    "__version__",
    "CloudConfig",
    "CommitterOperations",
    "SuccessData",
    "create_config_from_env",
    "create_local_config",
    "verify_committer",
]
