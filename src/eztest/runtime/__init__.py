#
# src/eztest/runtime/__init__.py
#
"""
Run orchestration and result reporting for eztest.
"""
from .orchestrator import RunOrchestrator, RunPhase
from .reporter import RerunAction, ResultsReporter

__all__ = ["RerunAction", "ResultsReporter", "RunOrchestrator", "RunPhase"]

# 🧪⚙️
