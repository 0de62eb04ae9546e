# src/engine/errors.py
"""
Error taxonomy for the scan scheduler.

Validation errors (InvalidURL, ConsentRequired) are raised before any
mutation. SynthesisFailure never leaves the scheduler: it is turned into a
failed job. PersistenceFailure is surfaced to whoever asked for the write.
"""

from typing import Any, Dict, Optional


class SchedulerError(Exception):
    code = "SCAN_000"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"code": self.code, "error": self.message, "details": self.details}


class InvalidURL(SchedulerError):
    code = "SCAN_001"


class ConsentRequired(SchedulerError):
    code = "SCAN_002"


class JobNotFound(SchedulerError):
    code = "SCAN_003"


class ResultNotFound(SchedulerError):
    code = "SCAN_004"


class SynthesisFailure(SchedulerError):
    code = "SCAN_005"


class PersistenceFailure(SchedulerError):
    code = "DB_001"
