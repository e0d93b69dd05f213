import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from estimation_rpa.automation.selectors import apply_overrides, load_selector_overrides
from estimation_rpa.config import settings
from estimation_rpa.job_store import job_store
from estimation_rpa.message_queue import InMemoryMessageQueue
from estimation_rpa.models.job import JobStatus
from estimation_rpa.models.messages import JobMessage, QueueNames
from estimation_rpa.schemas import JobSubmission
from estimation_rpa.workflow.runner import PAYLOAD_METADATA_KEY
from estimation_rpa.worker import JobWorker

logger = logging.getLogger(__name__)

message_queue = InMemoryMessageQueue()
worker = JobWorker(message_queue)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.SELECTOR_OVERRIDES_FILE:
        apply_overrides(load_selector_overrides(settings.SELECTOR_OVERRIDES_FILE))
    worker.start()
    yield
    await worker.stop(timeout=30)


app = FastAPI(title="ERP Estimation RPA", lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # For development, restrict this in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Add exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Global exception handler caught: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "detail": str(exc),
            "traceback": str(traceback.format_exc())
        }
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "worker_running": worker.running,
        "queued_jobs": message_queue.pending(QueueNames.JOB_PROCESSING),
    }


@app.post("/api/jobs", status_code=202)
async def submit_job(request: JobSubmission):
    """Create a pending estimation job and queue it for the worker."""
    payload = request.payload.model_dump(by_alias=True, mode="json")
    job = job_store.create_job(
        metadata={PAYLOAD_METADATA_KEY: payload},
        sender_email=request.sender_email or "",
        subject=request.subject,
        job_type=request.job_type,
    )
    job_store.add_log(job.job_id, "Job submitted")
    await message_queue.publish(
        JobMessage(job_id=job.job_id, job_type=request.job_type, payload=payload),
        QueueNames.JOB_PROCESSING,
    )
    return {"job_id": job.job_id, "status": job.status.value}


@app.get("/api/status/{job_id}")
async def get_job_status(job_id: str):
    try:
        job = job_store.get_job(job_id)
        if not job:
            raise HTTPException(status_code=404, detail=f"Job {job_id} not found")

        result = job.result()
        return {
            "job_id": job_id,
            "status": job.status.value,
            "retry_count": job.retry_count,
            "logs": job.logs,
            "message": result.message if result else "Job in progress." if not job.status.is_terminal else None,
            "result": result.model_dump(mode="json") if result and job.status == JobStatus.COMPLETED else None,
            "failed_step": result.failed_step.model_dump(mode="json") if result and result.failed_step else None,
            "error": job.error_message,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error getting job status: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail={"error": str(e), "traceback": traceback.format_exc()}
        )
