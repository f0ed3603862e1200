from fastapi import APIRouter, Depends
from fastapi.responses import Response

from leadhub.business.admin.api import router as admin_router
from leadhub.business.submissions.api import router as submissions_router, user_router as user_submissions_router
from leadhub.core.auth import AuthUser, get_current_user
from leadhub.core.config import get_settings
from leadhub.core.errors import ForbiddenError, NotFoundError
from leadhub.metrics import generate_metrics_payload, metrics_content_type
from leadhub.platform.security.context import ROLE_ADMIN

router = APIRouter()
router.include_router(submissions_router)
router.include_router(user_submissions_router)
router.include_router(admin_router)


@router.get("/health", tags=["system"])
def health() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "environment": settings.app_env,
    }


@router.get("/me", tags=["auth"])
async def me(user: AuthUser = Depends(get_current_user)) -> dict[str, str]:
    return {
        "sub": user.sub,
        "role": user.role,
    }


@router.get("/metrics", tags=["system"])
def metrics(user: AuthUser = Depends(get_current_user)) -> Response:
    settings = get_settings()
    if not settings.metrics_enabled:
        raise NotFoundError("Not found")
    if user.role != ROLE_ADMIN:
        raise ForbiddenError("Admin access required")
    return Response(content=generate_metrics_payload(), media_type=metrics_content_type())
