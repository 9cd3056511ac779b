#
# src/eztest/testing/__init__.py
#
"""
Test execution and output interpretation sub-package for eztest.
"""
from .protocols import UNKNOWN, FailureDetail, RunOutcome, RunRequest, RunStats, TestRunner
from .subprocess_runner import MixTestRunner, build_mix_test_args

__all__ = [
    "UNKNOWN",
    "FailureDetail",
    "MixTestRunner",
    "RunOutcome",
    "RunRequest",
    "RunStats",
    "TestRunner",
    "build_mix_test_args",
]

# 🧪⚙️
