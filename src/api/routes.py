# src/api/routes.py
from typing import List, Optional

from fastapi import APIRouter, Query

from api.schemas import JobStatus, ScanJob, ScanReport, ScanRequest, ScanSubmitted
from engine.errors import ResultNotFound
from engine.job_manager import JobManager
from engine.scan_service import ReportService

router = APIRouter()

job_manager = JobManager()
report_service = ReportService(job_manager.results)


@router.post(
    "/scan",
    summary="Queue a simulated scan",
    response_description="Job ID and queue status",
    tags=["Scan Jobs"],
    response_model=ScanSubmitted,
    responses={
        200: {"description": "Job queued"},
        400: {"description": "Invalid URL or missing consent"},
        503: {"description": "Job queue could not be persisted"},
    },
)
def submit_scan(request: ScanRequest):
    """
    Queue a scan of the given URL. All three attestations must be true.
    Scans are simulated: no traffic is sent to the target.
    """
    job_id = job_manager.submit(
        request.url,
        consent=request.consent,
        terms_accepted=request.terms_accepted,
        simulation_ack=request.simulation_ack,
    )
    return {"job_id": job_id, "status": JobStatus.queued}


@router.get(
    "/scan/queue",
    summary="List queued, running and finished scan jobs",
    tags=["Scan Jobs"],
    response_model=List[ScanJob],
)
def list_queue(status: Optional[JobStatus] = None, limit: Optional[int] = Query(None, ge=1), offset: int = Query(0, ge=0)):
    """
    Jobs in submission order, optionally filtered by status.
    """
    return job_manager.list_jobs(status=status, limit=limit, offset=offset)


@router.get(
    "/scan/job/{job_id}",
    summary="Get scan job status",
    tags=["Scan Jobs"],
    response_model=ScanJob,
    responses={404: {"description": "Job not found"}},
)
def get_scan_job(job_id: str):
    return job_manager.get_job(job_id)


@router.get(
    "/scan/report/{result_id}",
    summary="Get the report of a completed scan",
    response_description="Risk heatmap, findings and recommendations",
    tags=["Reports"],
    response_model=ScanReport,
    responses={404: {"description": "Report not found"}},
)
def get_scan_report(result_id: str):
    return report_service.get_report(result_id)


@router.delete(
    "/scan/result/{result_id}",
    summary="Delete a stored scan result",
    tags=["Reports"],
    response_model=dict,
    responses={404: {"description": "Report not found"}},
)
def delete_scan_result(result_id: str):
    """
    Remove a stored result. Jobs that reference it keep their result_id,
    and their report lookups answer 404 from then on.
    """
    if not job_manager.results.delete(result_id):
        raise ResultNotFound(f"Report {result_id} not found", details={"result_id": result_id})
    return {"success": True, "message": f"Result {result_id} deleted."}


@router.get("/health")
def health_check():
    return {"status": "ok"}
