from __future__ import annotations
from fastapi import APIRouter, Depends, HTTPException, Query
from core.scheduler import JobScheduler
from schemas.jobs import CooldownResponse, ExecuteNextResponse, RegisterJobRequest, TopKResponse
from .common import get_scheduler

router = APIRouter(prefix="/v1/jobs")

@router.put("/{job_id}")
async def register_job(job_id: str, body: RegisterJobRequest, jobs: JobScheduler = Depends(get_scheduler)):
    """Cria ou sobrescreve a configuração do job."""
    jobs.register_job(job_id, body.priority, body.cooldown_ms)
    return {"job_id": job_id, "registered": True}

@router.post("/execute-next", response_model=ExecuteNextResponse)
async def execute_next(jobs: JobScheduler = Depends(get_scheduler)):
    """Executa o job elegível de maior prioridade, se houver."""
    job_id = jobs.execute_next()
    return ExecuteNextResponse(job_id=job_id, executed=job_id is not None)

@router.post("/{job_id}/fail")
async def mark_failed(job_id: str, jobs: JobScheduler = Depends(get_scheduler)):
    if not jobs.mark_failed(job_id):
        raise HTTPException(status_code=404, detail="Job não encontrado.")
    return {"job_id": job_id, "failed": True}

@router.get("/top", response_model=TopKResponse)
async def top_k(k: int = Query(5, ge=0, le=1000), jobs: JobScheduler = Depends(get_scheduler)):
    return TopKResponse(k=k, jobs=jobs.top_k(k))

@router.get("/{job_id}/cooldown", response_model=CooldownResponse)
async def remaining_cooldown(job_id: str, jobs: JobScheduler = Depends(get_scheduler)):
    return CooldownResponse(job_id=job_id, remaining_cooldown_ms=jobs.get_remaining_cooldown(job_id))

@router.delete("/{job_id}")
async def remove_job(job_id: str, jobs: JobScheduler = Depends(get_scheduler)):
    return {"job_id": job_id, "removed": jobs.remove_job(job_id)}
