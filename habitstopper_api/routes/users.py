from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from habitstopper_api.auth import optional_user
from habitstopper_api.schemas import UserResponse

router = APIRouter(prefix="/api")


@router.get("/current_user", response_model=Optional[UserResponse])
async def current_user(user: dict | None = Depends(optional_user)):
    if not user:
        return None
    return UserResponse(id=user["id"], name=user.get("name"), email=user.get("email"), joined=user["joined"])
