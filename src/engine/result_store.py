# src/engine/result_store.py
"""
ResultStore: append-only collection of ScanResult records, looked up by id.
"""

import threading
from typing import List, Optional

from api.schemas import ScanResult
from engine.store import PersistentStore

RESULTS_KEY = "sensei.scans"


class ResultStore:
    def __init__(self, store: PersistentStore, key: str = RESULTS_KEY):
        self.store = store
        self.key = key
        self.lock = threading.Lock()
        self._results: List[ScanResult] = [ScanResult.model_validate(raw) for raw in store.get(key, [])]

    def add(self, result: ScanResult) -> None:
        with self.lock:
            if any(r.id == result.id for r in self._results):
                raise ValueError(f"Result {result.id} already stored")
            updated = self._results + [result]
            self._write(updated)

    def get(self, result_id: str) -> Optional[ScanResult]:
        for result in self._results:
            if result.id == result_id:
                return result
        return None

    def delete(self, result_id: str) -> bool:
        with self.lock:
            updated = [r for r in self._results if r.id != result_id]
            if len(updated) == len(self._results):
                return False
            self._write(updated)
            return True

    def all(self) -> List[ScanResult]:
        return list(self._results)

    def _write(self, results: List[ScanResult]) -> None:
        self.store.set(self.key, [r.model_dump(mode="json") for r in results])
        self._results = results
