# src/tools/base.py
from abc import ABC, abstractmethod

class SecurityToolAdapter(ABC):
    """Tool adapters return {"success": bool, "result": ...} or {"success": False, "error": str}."""

    @abstractmethod
    def run_scan(self, target: str) -> dict:
        pass
