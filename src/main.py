# src/main.py

from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from api import routes
from engine.config import get_config
from engine.errors import (
    ConsentRequired, InvalidURL, JobNotFound, PersistenceFailure, ResultNotFound, SchedulerError,
)
from engine.job_manager import SchedulerLoop
import logging
import uuid

config = get_config()

# Configure structured logging
logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format='%(asctime)s %(levelname)s %(name)s %(message)s'
)

scheduler = SchedulerLoop(routes.job_manager, config.tick_interval, config.poll_interval)


@asynccontextmanager
async def lifespan(app: FastAPI):
    scheduler.start()
    logging.info("Scan scheduler API started.")
    yield
    scheduler.stop()


app = FastAPI(title="Sensei Scan Scheduler", lifespan=lifespan)

ERROR_STATUS = {
    InvalidURL: 400,
    ConsentRequired: 400,
    JobNotFound: 404,
    ResultNotFound: 404,
    PersistenceFailure: 503,
}

ATTESTATION_FIELDS = {"consent", "terms_accepted", "simulation_ack"}


@app.middleware("http")
async def add_trace_id_and_log(request: Request, call_next):
    trace_id = str(uuid.uuid4())
    request.state.trace_id = trace_id
    logging.info(f"[trace_id={trace_id}] Incoming request: {request.method} {request.url}")
    try:
        response = await call_next(request)
    except Exception as exc:
        logging.error(f"[trace_id={trace_id}] Unhandled error: {exc}")
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Internal server error", "trace_id": trace_id}
        )
    response.headers["X-Trace-Id"] = trace_id
    return response


@app.exception_handler(SchedulerError)
async def scheduler_exception_handler(request: Request, exc: SchedulerError):
    trace_id = getattr(request.state, "trace_id", str(uuid.uuid4()))
    status_code = ERROR_STATUS.get(type(exc), 500)
    logging.warning(f"[trace_id={trace_id}] {exc.code}: {exc}")
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": exc.message, "code": exc.code, "trace_id": trace_id}
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Anything but a JSON boolean on an attestation is a refusal, not a malformed request.
    fields = {err["loc"][-1] for err in exc.errors() if err.get("loc")}
    if fields & ATTESTATION_FIELDS:
        return await scheduler_exception_handler(request, ConsentRequired(
            "Legal consent, terms acceptance and simulation acknowledgement must be true booleans.",
            details={"fields": sorted(fields & ATTESTATION_FIELDS)},
        ))
    return await request_validation_exception_handler(request, exc)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    trace_id = getattr(request.state, "trace_id", str(uuid.uuid4()))
    logging.error(f"[trace_id={trace_id}] Exception: {exc}")
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": str(exc), "trace_id": trace_id}
    )

app.include_router(routes.router)

