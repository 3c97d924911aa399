"""Workflow orchestration package for romcleaner.

This package contains the components that drive a cleaning run:
- CleanLogger: Structured audit log of a run written to a timestamped file.
- CleanOrchestrator: Central coordinator for pre-flight, hashing and disposition.
"""

from romcleaner.orchestration.clean_logger import CleanLogger
from romcleaner.orchestration.clean_orchestrator import CleanOrchestrator

__all__ = ["CleanLogger", "CleanOrchestrator"]
