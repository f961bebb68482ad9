from functools import lru_cache

from fastapi import Header, HTTPException, Security, status
from fastapi.security import APIKeyHeader

from app.base.config import settings
from app.base.database import get_db  # noqa: F401  re-exported for routers
from app.base.models import Actor, UserRole
from app.services.interview_scheduler_service import InterviewSchedulerService

# --- API key header config ---
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def verify_api_key(key: str = Security(api_key_header)):
    if settings.ENABLE_API_KEY_SECURITY and key != settings.API_KEY:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or missing API key")


def get_actor(
    x_user_id: str = Header(..., min_length=1),
    x_user_role: UserRole = Header(...),
) -> Actor:
    """Acting identity, asserted by the upstream auth gateway."""
    return Actor(user_id=x_user_id, role=x_user_role)


@lru_cache()
def get_scheduler() -> InterviewSchedulerService:
    return InterviewSchedulerService()
