from typing import Any

from pydantic import BaseModel, computed_field


class AppConfig(BaseModel):
    repo: str | None = None
    default_ref: str | None = None
    default_env: str | None = None
    auto_merge_on_standard_deploys: bool = True
    payload: dict[str, Any] = {}


class ChatUser(BaseModel):
    id: str | None = None
    name: str | None = None
    mention_name: str


class ChatRoom(BaseModel):
    id: str | None = None
    name: str


class ChatRequest(BaseModel):
    text: str
    user: ChatUser | None = None
    room: ChatRoom | None = None


class ActionResponse(BaseModel):
    ok: bool
    replies: list[str] = []

    @computed_field
    @property
    def message(self) -> str:
        return "\n".join(self.replies)
