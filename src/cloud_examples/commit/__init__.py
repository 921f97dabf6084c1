"""
Output committer checks: success marker parsing and verification.
"""

from cloud_examples.commit.success_data import SuccessData
from cloud_examples.commit.verification import (
    CommitterOperations,
    eventually_get_file_status,
    verify_committer,
)

__all__ = [
    "CommitterOperations",
    "SuccessData",
    "eventually_get_file_status",
    "verify_committer",
]
