# src/engine/job_queue.py
"""
JobQueue: ordered, append-only list of ScanJob records backed by the store.

The in-memory list is only replaced after the whole queue has been written,
so it never runs ahead of what is persisted. Callers serialize mutations.
"""

from typing import List, Optional

from api.schemas import ScanJob
from engine.store import PersistentStore

QUEUE_KEY = "sensei.scanQueue"


class JobQueue:
    def __init__(self, store: PersistentStore, key: str = QUEUE_KEY):
        self.store = store
        self.key = key
        self._jobs: List[ScanJob] = [ScanJob.model_validate(raw) for raw in store.get(key, [])]

    def snapshot(self) -> List[ScanJob]:
        return list(self._jobs)

    def find(self, job_id: str) -> Optional[ScanJob]:
        for job in self._jobs:
            if job.id == job_id:
                return job
        return None

    def commit(self, jobs: List[ScanJob]) -> None:
        self.store.set(self.key, [job.model_dump(mode="json") for job in jobs])
        self._jobs = list(jobs)

    def __len__(self):
        return len(self._jobs)
