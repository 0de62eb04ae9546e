# src/engine/scan_engine.py
import time
import uuid
from typing import Callable, Optional

from pydantic import ValidationError

from api.schemas import Finding, ScanResult
from engine.errors import SynthesisFailure
from tools.base import SecurityToolAdapter
from tools.zap_simulator import ZapSimulatorAdapter


def new_id() -> str:
    return uuid.uuid4().hex


def synthesize_result(
    url: str,
    adapter: Optional[SecurityToolAdapter] = None,
    id_factory: Callable[[], str] = new_id,
    clock: Callable[[], float] = time.time,
) -> ScanResult:
    """
    Run the (simulated) tool against url and shape its alerts into a ScanResult.
    Raises SynthesisFailure if the tool fails or its output cannot be used.
    """
    adapter = adapter or ZapSimulatorAdapter()
    try:
        output = adapter.run_scan(url)
    except Exception as e:
        raise SynthesisFailure(f"Scan tool crashed: {e}", details={"url": url}) from e
    if not output.get("success"):
        raise SynthesisFailure(output.get("error", "Scan tool reported failure"), details={"url": url})
    alerts = output.get("result") or []
    if not alerts:
        raise SynthesisFailure("Scan tool returned no findings", details={"url": url})
    try:
        findings = [Finding(id=id_factory(), **alert) for alert in alerts]
        return ScanResult(id=id_factory(), url=url, completed_at=clock(), findings=findings)
    except (TypeError, ValidationError) as e:
        raise SynthesisFailure(f"Malformed finding from scan tool: {e}", details={"url": url}) from e
