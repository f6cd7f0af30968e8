import logging
from datetime import datetime
from fastapi import APIRouter, HTTPException
from bizbank.worker.scheduler_instance import scheduler

router = APIRouter(prefix="/scheduler", tags=["scheduler"])
logger = logging.getLogger(__name__)

@router.get("/status")
async def get_scheduler_status():
    """Get the status of the scheduler and its jobs."""
    if not scheduler.running:
        return {"is_running": False, "jobs": []}

    jobs = []
    for job in scheduler.get_jobs():
        logger.debug(f"Job: {job.id}, Name: {job.name}")
        jobs.append({
            "id": job.id,
            "name": job.name,
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
            "trigger": str(job.trigger),
            "kwargs": dict(job.kwargs),
        })
    return {"is_running": scheduler.running, "jobs": jobs}

@router.post("/trigger/{job_id}")
async def trigger_scheduler_job(job_id: str):
    """Trigger a specific scheduler job to run immediately."""
    job = scheduler.get_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail=f"Job '{job_id}' not found.")

    try:
        tz = job.next_run_time.tzinfo if job.next_run_time else None
        now = datetime.now(tz)
        job.modify(next_run_time=now)
        logger.info(f"Job '{job.id}' triggered to run now.")
        return {"job_id": job.id, "message": f"Job '{job.id}' triggered to run now.", "triggered_at": now.isoformat()}
    except Exception as e:
        logger.error(f"Failed to trigger job '{job_id}': {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to trigger job '{job_id}': {str(e)}")
