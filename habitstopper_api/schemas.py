from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


LOG_STATUSES = ("success", "failed")


class DailyLog(BaseModel):
    user_id: str
    date: str
    status: str
    updated_at: Optional[str] = None


class LogPayload(BaseModel):
    # Checked by LogService so bad values surface as InvalidArgument.
    date: str
    status: str


class LogResponse(BaseModel):
    date: str
    status: str


class UserResponse(BaseModel):
    id: str
    name: Optional[str]
    email: Optional[str]
    joined: str
