# src/engine/job_manager.py
"""
JobManager: persistent FIFO scan queue with a single execution slot.

Every mutation (submit, admit, complete) goes through self.lock and is
written to the store before the lock is released. Completions are explicit
ScheduledCompletion entries fired by run_pending() once their time has
come, so tests can drive the whole lifecycle with a fake clock.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from api.schemas import JobStatus, ScanJob
from engine.config import get_config
from engine.errors import ConsentRequired, InvalidURL, JobNotFound, PersistenceFailure, SchedulerError, SynthesisFailure
from engine.job_queue import JobQueue
from engine.result_store import ResultStore
from engine.scan_engine import new_id, synthesize_result
from engine.store import PersistentStore
from tools.base import SecurityToolAdapter
from tools.zap_simulator import ZapSimulatorAdapter

ALLOWED_TRANSITIONS = {
    JobStatus.queued: (JobStatus.running,),
    JobStatus.running: (JobStatus.completed, JobStatus.failed),
    JobStatus.completed: (),
    JobStatus.failed: (),
}


@dataclass(order=True)
class ScheduledCompletion:
    fire_at: float
    job_id: str = field(compare=False)


_http_url = TypeAdapter(AnyHttpUrl)


def validate_url(url) -> str:
    if not isinstance(url, str) or not url.strip():
        raise InvalidURL("A target URL is required")
    try:
        parsed = _http_url.validate_python(url)
    except ValidationError as e:
        raise InvalidURL(f"Only absolute http(s) URLs can be scanned: {url}", details={"url": url}) from e
    if not parsed.host:
        raise InvalidURL(f"URL has no host: {url}", details={"url": url})
    return url


def _transition(job: ScanJob, status: JobStatus, result_id: Optional[str] = None) -> ScanJob:
    if status not in ALLOWED_TRANSITIONS[job.status]:
        raise RuntimeError(f"Illegal transition for job {job.id}: {job.status.value} -> {status.value}")
    return job.model_copy(update={"status": status, "result_id": result_id})


class JobManager:
    def __init__(
        self,
        store: Optional[PersistentStore] = None,
        results: Optional[ResultStore] = None,
        adapter: Optional[SecurityToolAdapter] = None,
        clock: Callable[[], float] = time.time,
        id_factory: Callable[[], str] = new_id,
        scan_duration: Optional[float] = None,
    ):
        self.store = store or PersistentStore()
        self.queue = JobQueue(self.store)
        self.results = results or ResultStore(self.store)
        self.adapter = adapter or ZapSimulatorAdapter()
        self.clock = clock
        self.id_factory = id_factory
        self.scan_duration = get_config().scan_duration if scan_duration is None else scan_duration
        self.lock = threading.Lock()
        self.pending: List[ScheduledCompletion] = []
        self._recover_running()

    def _recover_running(self):
        # A job left running by a previous process has no live completion.
        for job in self.queue.snapshot():
            if job.status == JobStatus.running:
                self._schedule(job.id)
                logging.warning(f"[job_id={job.id}] Found running job at startup; rescheduled completion.")

    def _schedule(self, job_id: str):
        self.pending.append(ScheduledCompletion(self.clock() + self.scan_duration, job_id))
        self.pending.sort()

    def submit(self, url, consent: bool, terms_accepted: bool, simulation_ack: bool) -> str:
        validate_url(url)
        if not (consent is True and terms_accepted is True and simulation_ack is True):
            raise ConsentRequired(
                "Legal consent, terms acceptance and simulation acknowledgement are all required.",
                details={"consent": consent, "terms_accepted": terms_accepted, "simulation_ack": simulation_ack},
            )
        job_id = self.id_factory()
        with self.lock:
            job = ScanJob(id=job_id, url=url, created_at=self.clock())
            self.queue.commit(self.queue.snapshot() + [job])
        logging.info(f"[job_id={job.id}] Queued scan job. url={url}")
        return job.id

    def tick(self) -> Optional[str]:
        """Admit the oldest queued job if the slot is free. Returns the admitted job id."""
        with self.lock:
            jobs = self.queue.snapshot()
            if any(job.status == JobStatus.running for job in jobs):
                return None
            candidates = [(job.created_at, idx) for idx, job in enumerate(jobs) if job.status == JobStatus.queued]
            if not candidates:
                return None
            _, idx = min(candidates)
            admitted = _transition(jobs[idx], JobStatus.running)
            jobs[idx] = admitted
            self.queue.commit(jobs)
            self._schedule(admitted.id)
        logging.info(f"[job_id={admitted.id}] Started scan job. url={admitted.url}")
        return admitted.id

    def run_pending(self) -> List[str]:
        """Fire every completion that is due. Returns the ids of jobs that reached a terminal state."""
        finished = []
        while True:
            with self.lock:
                if not self.pending or self.pending[0].fire_at > self.clock():
                    return finished
                completion = self.pending[0]
                job = self.queue.find(completion.job_id)
                if job is None or job.status != JobStatus.running:
                    self.pending.pop(0)
                    continue
                self._complete(job)
                self.pending.pop(0)
            finished.append(job.id)

    def _complete(self, job: ScanJob):
        try:
            result = synthesize_result(job.url, self.adapter, self.id_factory, self.clock)
        except SynthesisFailure as e:
            logging.error(f"[job_id={job.id}] Scan job failed: {e}")
            updated = _transition(job, JobStatus.failed)
        else:
            try:
                self.results.add(result)
            except PersistenceFailure:
                logging.error(f"[job_id={job.id}] Could not store result; will retry.")
                raise
            updated = _transition(job, JobStatus.completed, result.id)
        jobs = [updated if j.id == job.id else j for j in self.queue.snapshot()]
        try:
            self.queue.commit(jobs)
        except PersistenceFailure:
            logging.error(f"[job_id={job.id}] Could not record {updated.status.value} state; will retry.")
            raise
        if updated.status == JobStatus.completed:
            logging.info(f"[job_id={job.id}] Completed scan job. result_id={updated.result_id}")

    def advance(self):
        self.run_pending()
        return self.tick()

    def list_jobs(self, status: Optional[JobStatus] = None, limit: Optional[int] = None, offset: int = 0) -> List[ScanJob]:
        jobs = self.queue.snapshot()
        if status is not None:
            jobs = [job for job in jobs if job.status == status]
        jobs = jobs[offset:]
        return jobs if limit is None else jobs[:limit]

    def get_job(self, job_id: str) -> ScanJob:
        job = self.queue.find(job_id)
        if job is None:
            raise JobNotFound(f"Job {job_id} not found", details={"job_id": job_id})
        return job


class SchedulerLoop:
    """Background driver: fires due completions every poll and admits jobs every tick."""

    def __init__(self, manager: JobManager, tick_interval: float, poll_interval: float):
        self.manager = manager
        self.tick_interval = tick_interval
        self.poll_interval = poll_interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="scan-scheduler", daemon=True)
        self._thread.start()
        logging.info(f"Scheduler started. tick={self.tick_interval}s poll={self.poll_interval}s")

    def stop(self, timeout: float = 5.0):
        self._stop.set()
        if self._thread:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logging.warning(f"Scheduler thread did not stop within {timeout}s.")
                return
            self._thread = None
        logging.info("Scheduler stopped.")

    def is_running(self) -> bool:
        return bool(self._thread and self._thread.is_alive())

    def _run(self):
        next_tick = time.monotonic()
        while not self._stop.is_set():
            self._step(self.manager.run_pending)
            now = time.monotonic()
            if now >= next_tick:
                self._step(self.manager.tick)
                next_tick = now + self.tick_interval
            self._stop.wait(self.poll_interval)

    def _step(self, func):
        try:
            func()
        except SchedulerError as e:
            logging.error(f"Scheduler step {func.__name__} failed: [{e.code}] {e}")
        except Exception:
            logging.exception(f"Scheduler step {func.__name__} crashed")
