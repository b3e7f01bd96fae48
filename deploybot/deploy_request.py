import copy
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .models import AppConfig, ChatRoom, ChatUser

logger = logging.getLogger(__name__)

DEFAULT_REF = "master"
DEFAULT_ENV = "production"
UNKNOWN_USER = "unknown"

VALID_SLUG = r"([-_.0-9a-z]+)"

PATTERN_PARTS = [
    r"(deploy|lock|unlock)",           # command
    r"(!)?\s+",                        # forced deploy
    VALID_SLUG,                        # application name
    r"(?:/(\S+))?",                    # ref, may contain slashes
    r"(?:\s+(?:to|in|on)\s+",          # to | in | on
    VALID_SLUG,                        # environment
    r")?",
]

DEPLOY_PATTERN = re.compile("".join(PATTERN_PARTS))

ENV_ALIASES = {
    "stg": "staging",
    "prod": "production",
    "prd": "production",
}


class Command(str, Enum):
    DEPLOY = "deploy"
    LOCK = "lock"
    UNLOCK = "unlock"
    UNRECOGNIZED = "unrecognized"


class AppConfigError(Exception):
    """Raised when an app's configuration lacks a required key."""


class UnknownReplyError(Exception):
    """Raised when a reply is requested for a command the parser never emits."""


@dataclass(frozen=True)
class DeployIntent:
    command: Command
    forced: bool = False
    app: str | None = None
    ref: str | None = None
    environment: str | None = None

    @property
    def recognized(self) -> bool:
        return self.command is not Command.UNRECOGNIZED


def parse_command(text: str) -> DeployIntent:
    m = DEPLOY_PATTERN.search(text)
    if not m:
        return DeployIntent(command=Command.UNRECOGNIZED)

    command = Command(m.group(1))
    return DeployIntent(
        command=command,
        forced=command is Command.DEPLOY and m.group(2) == "!",
        app=m.group(3),
        ref=m.group(4),
        environment=m.group(5),
    )


def alias_env(env: str | None) -> str | None:
    return ENV_ALIASES.get(env, env)


class DeployRequest:
    def __init__(
        self,
        message: str,
        config: AppConfig | Mapping[str, Any],
        user: ChatUser | None = None,
        room: ChatRoom | None = None,
    ):
        self.message = message
        self.config = config if isinstance(config, AppConfig) else AppConfig.model_validate(config)
        self.user = user
        self.room = room
        self.intent = parse_command(message)

        self._ref = self.intent.ref or self.config.default_ref or DEFAULT_REF
        self._env = self.intent.environment or self.config.default_env or DEFAULT_ENV
        self._auto_merge_on_standard_deploys = self.config.auto_merge_on_standard_deploys

    @property
    def command(self) -> Command:
        return self.intent.command

    @property
    def app(self) -> str | None:
        return self.intent.app

    @property
    def forced(self) -> bool:
        return self.intent.forced

    @property
    def ref(self) -> str:
        return self._ref

    @property
    def environment(self) -> str:
        """Environment before aliasing."""
        return self._env

    @property
    def env(self) -> str:
        return alias_env(self._env)

    @property
    def task(self) -> str | None:
        if self.command in (Command.LOCK, Command.UNLOCK):
            return f"deploy:{self.command.value}"
        if self.command is Command.DEPLOY:
            return Command.DEPLOY.value
        return None

    @property
    def auto_merge(self) -> bool:
        if self.forced:
            return False
        return self._auto_merge_on_standard_deploys

    @property
    def repo(self) -> str:
        if not self.config.repo:
            raise AppConfigError(f"repo is not configured for app '{self.app}'")
        return self.config.repo

    @property
    def handle(self) -> str:
        if self.user is None:
            return UNKNOWN_USER
        return self.user.mention_name

    @property
    def reply(self) -> str:
        if self.command in (Command.LOCK, Command.UNLOCK):
            return f"{self.handle} is {self.command.value}ing {self.repo} in {self.env}"
        if self.command is Command.DEPLOY and self.forced:
            return f"{self.handle} is force deploying {self.repo}/{self.ref} to {self.env}"
        if self.command is Command.DEPLOY:
            return f"{self.handle} is deploying {self.repo}/{self.ref} to {self.env}"

        logger.error("event=unknown_reply message=%s", self.message)
        raise UnknownReplyError(f"no reply for unrecognized command: {self.message!r}")

    @property
    def payload(self) -> dict[str, Any]:
        payload = copy.deepcopy(self.config.payload)
        payload["actor"] = self.handle

        # Heaven uses notify to tell the right user and room about the deploy.
        notify = {}
        if self.user is not None:
            notify["user"] = self.user.mention_name
        if self.room is not None:
            notify["room"] = self.room.name
        payload["notify"] = notify
        return payload

    def deployment_options(self) -> dict[str, Any]:
        options = {
            "environment": self.env,
            "payload": self.payload,
            "task": self.task,
            "auto_merge": self.auto_merge,
        }
        if self.forced:
            options["required_contexts"] = []
        return options
