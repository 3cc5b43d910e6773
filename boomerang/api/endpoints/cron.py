"""
Cron trigger endpoints for manual runs and external schedulers.
"""
from fastapi import APIRouter, HTTPException, Query

from boomerang.services.errors import BoomerangError
from boomerang.utils.messages import MSG

router = APIRouter()


@router.post("/trigger")
async def trigger_job(
    type: str = Query(..., description="Job type: 'expire'")
):
    """
    Manually trigger housekeeping jobs.

    - `expire`: archive pending tasks past their expiry
    """
    from boomerang.services.scheduler_service import run_expiry_sweep

    if type != "expire":
        return {"status": "error", "message": MSG.UNKNOWN_CRON_TYPE.format(type=type)}

    try:
        archived = run_expiry_sweep()
    except BoomerangError as e:
        raise HTTPException(status_code=500, detail=e.to_dict())
    return {"status": "ok", "type": "expire", "archived": archived, "message": MSG.EXPIRED_ARCHIVED.format(count=archived)}


@router.get("/status")
async def scheduler_status():
    """Get scheduler status and next run times."""
    from boomerang.services.scheduler_service import scheduler

    jobs = []
    for job in scheduler.get_jobs():
        jobs.append({
            "id": job.id,
            "next_run": str(job.next_run_time) if job.next_run_time else None
        })

    return {
        "running": scheduler.running,
        "jobs": jobs
    }
