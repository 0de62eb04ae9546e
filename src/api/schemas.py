# src/api/schemas.py
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class JobStatus(str, Enum):
    queued = "queued"
    running = "running"
    completed = "completed"
    failed = "failed"


TERMINAL_STATUSES = (JobStatus.completed, JobStatus.failed)


class ScanRequest(BaseModel):
    url: str = Field(..., description="Absolute http(s) URL of the target")
    consent: StrictBool = Field(False, description="Caller owns the target or holds written permission to scan it")
    terms_accepted: StrictBool = Field(False, description="Caller accepts the terms of use")
    simulation_ack: StrictBool = Field(False, description="Caller acknowledges scans are simulated, no live traffic")


class ScanJob(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    created_at: float
    status: JobStatus = JobStatus.queued
    result_id: Optional[str] = None


class Finding(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    owasp: str = Field(..., description="OWASP Top 10 category, e.g. 'A03:2021-Injection'")
    risk: int = Field(..., ge=0, le=4)
    fix: str


class ScanResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    url: str
    completed_at: float
    findings: List[Finding] = Field(..., min_length=1)


class ScanSubmitted(BaseModel):
    job_id: str
    status: JobStatus


class ScanReport(BaseModel):
    result_id: str
    url: str
    completed_at: float
    heatmap: List[Tuple[int, int]]
    findings: List[Finding]
    recommendations: List[str] = Field(default_factory=list)
