from fastapi import APIRouter

from .command_handler import handle_command
from .config import settings
from .models import ActionResponse, ChatRequest

router = APIRouter()


@router.get("/health")
def health():
    return {"ok": True, "service": "heaven-deploy-bot"}


@router.post("/command", response_model=ActionResponse)
async def command(req: ChatRequest):
    return await handle_command(req.text, user=req.user, room=req.room)


@router.get("/apps")
def apps():
    items = [{"app": slug, "repo": cfg.repo} for slug, cfg in sorted(settings.apps.items())]
    return {"ok": True, "count": len(items), "items": items}
