from fastapi import APIRouter
from ..core.schemas import ViewStatus
from ..core.view_manager import manager

router = APIRouter(prefix="", tags=["health"])

@router.get("/health")
async def health():
    return {"status": "ok"}

@router.get("/ready")
async def ready():
    ready_any = any(v.status == ViewStatus.ready for v in manager.views.values())
    return {"ready": ready_any}
