import re

from fastapi import APIRouter, Request

from .command_handler import handle_command
from .config import settings
from .models import ChatRoom, ChatUser

router = APIRouter()

MENTION_RE = re.compile(r"<at>[^<]*</at>")


def _strip_mentions(text: str) -> str:
    return MENTION_RE.sub("", text).strip()


def _from_user(body: dict) -> ChatUser | None:
    sender = body.get("from") or {}
    handle = sender.get("name") or sender.get("id")
    if not handle:
        return None
    return ChatUser(id=sender.get("id") or sender.get("aadObjectId"), name=sender.get("name"), mention_name=handle)


def _from_room(body: dict) -> ChatRoom | None:
    conversation = body.get("conversation") or {}
    if not conversation.get("name"):
        return None
    return ChatRoom(id=conversation.get("id"), name=conversation["name"])


@router.post("/messages")
async def teams_messages(req: Request):
    if not settings.ms_teams_bot_enabled:
        return {"type": "message", "text": "Teams bot is disabled"}

    body = await req.json()
    text = _strip_mentions(body.get("text") or "")

    res = await handle_command(text, user=_from_user(body), room=_from_room(body))
    return {"type": "message", "text": res.message}
