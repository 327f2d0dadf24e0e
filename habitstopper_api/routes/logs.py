from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from habitstopper_api.auth import require_user
from habitstopper_api.schemas import LogPayload, LogResponse

router = APIRouter(prefix="/api")


@router.get("/logs", response_model=list[LogResponse])
async def list_logs(request: Request, user: dict = Depends(require_user)):
    logs = await request.app.state.log_service.list_logs(user["id"])
    return [LogResponse(date=log.date, status=log.status) for log in logs]


@router.post("/log", response_model=LogResponse)
async def set_log(payload: LogPayload, request: Request, user: dict = Depends(require_user)):
    log = await request.app.state.log_service.set_status(user["id"], payload.date, payload.status)
    return LogResponse(date=log.date, status=log.status)
