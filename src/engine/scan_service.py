# src/engine/scan_service.py
"""
ReportService: read-only projection of stored scan results into reports.
"""
from api.schemas import ScanReport
from engine.errors import ResultNotFound
from engine.result_store import ResultStore
from utils.scripts_utils import build_heatmap

RECOMMENDATIONS = (
    "Prioritize high-risk items first; verify fixes in a replayable simulation before production.",
    "Add unit tests for each remediation: header presence, encoder usage, and CORS policy checks.",
    "Enable Content Security Policy with nonce-based scripts and strict-dynamic for modern frameworks.",
)


class ReportService:
    def __init__(self, results: ResultStore):
        self.results = results

    def get_report(self, result_id: str) -> ScanReport:
        result = self.results.get(result_id)
        if result is None:
            raise ResultNotFound(f"Report {result_id} not found", details={"result_id": result_id})
        return ScanReport(
            result_id=result.id,
            url=result.url,
            completed_at=result.completed_at,
            heatmap=build_heatmap(result.findings),
            findings=list(result.findings),
            recommendations=list(RECOMMENDATIONS),
        )
