import logging
import re

from .config import settings
from .deploy_request import AppConfigError, Command, DeployRequest, parse_command
from .models import ActionResponse, ChatRoom, ChatUser
from .tools.github_tool import GitHubApiError, GitHubClient, get_github_client

logger = logging.getLogger(__name__)

DEPLOY_ROUTE = re.compile(r"^deploy!?\s+")
LOCK_ROUTE = re.compile(r"^(un)?lock\s+")
WCID_ROUTES = [
    re.compile(r"^where can i deploy\s+", re.IGNORECASE),
    re.compile(r"^wcid\s+"),
]

WCID_ENVS = ["staging", "qa", "production"]


def help_text() -> str:
    return (
        "Commands:\n"
        "- deploy app: Deploy app.\n"
        "- deploy app/ref: Deploy app at specific ref (branch / sha / etc)\n"
        "- deploy app to env: Deploy app to environment\n"
        "- deploy app/ref to env: Deploy app at ref to environment\n"
        "- deploy! app to env: Force deploy app, ignoring CI and any locks\n"
        "- lock app in env: Lock app in environment.\n"
        "- unlock app in env: Unlock app in environment.\n"
        "- where can i deploy <app>: display latest deployment status for <app>\n"
        "- wcid <app>: same as where can i deploy"
    )


def _first_arg(text: str) -> str:
    parts = text.split()
    if len(parts) < 2:
        return ""
    return parts[1].split("/")[0]


async def handle_command(
    text: str,
    user: ChatUser | None = None,
    room: ChatRoom | None = None,
    client: GitHubClient | None = None,
) -> ActionResponse:
    text = text.strip()

    if DEPLOY_ROUTE.match(text):
        return await handle_deploy(text, user, room, client)

    if LOCK_ROUTE.match(text):
        return await handle_lock_or_unlock(text, user, room, client)

    for route in WCID_ROUTES:
        m = route.match(text)
        if m:
            args = text[m.end():].split()
            return await handle_where_can_i_deploy(args[0], client)

    if text.lower() in {"help", "/help", ""}:
        return ActionResponse(ok=True, replies=[help_text()])

    return ActionResponse(ok=False, replies=["Unknown command. Type `help` to see available commands."])


async def handle_deploy(
    text: str,
    user: ChatUser | None = None,
    room: ChatRoom | None = None,
    client: GitHubClient | None = None,
) -> ActionResponse:
    return await _request_deployment(text, {Command.DEPLOY}, user, room, client)


async def handle_lock_or_unlock(
    text: str,
    user: ChatUser | None = None,
    room: ChatRoom | None = None,
    client: GitHubClient | None = None,
) -> ActionResponse:
    command = Command.UNLOCK if text.startswith("un") else Command.LOCK
    return await _request_deployment(text, {command}, user, room, client)


async def _request_deployment(
    text: str,
    commands: set[Command],
    user: ChatUser | None,
    room: ChatRoom | None,
    client: GitHubClient | None,
) -> ActionResponse:
    intent = parse_command(text)
    app = _first_arg(text)
    app_config = settings.apps.get(app)
    if intent.command not in commands or intent.app != app or app_config is None:
        return ActionResponse(ok=False, replies=[f"{app} not found"])

    request = DeployRequest(message=text, config=app_config, user=user, room=room)
    replies = []
    try:
        await create_deployment(request, client or get_github_client())
    except GitHubApiError as e:
        logger.error("event=create_deployment_failed repo=%s status=%s error=%s", request.repo, e.status_code, e.message)
        replies.append(f"{e.status_code or 'GitHub'} error creating deployment")
        replies.append(e.message)
        return ActionResponse(ok=False, replies=replies)

    replies.append(request.reply)
    return ActionResponse(ok=True, replies=replies)


async def create_deployment(request: DeployRequest, client: GitHubClient) -> dict:
    logger.info(
        "event=create_deployment repo=%s ref=%s env=%s task=%s payload=%s",
        request.repo,
        request.ref,
        request.env,
        request.task,
        request.payload,
    )
    return await client.create_deployment(request.repo, request.ref, request.deployment_options())


async def handle_where_can_i_deploy(app: str, client: GitHubClient | None = None) -> ActionResponse:
    app_config = settings.apps.get(app)
    if app_config is None:
        return ActionResponse(ok=False, replies=[f"{app} not found"])
    if not app_config.repo:
        raise AppConfigError(f"repo is not configured for app '{app}'")

    client = client or get_github_client()
    repo = app_config.repo
    lines = []
    try:
        for env in WCID_ENVS:
            deployments = await client.list_deployments(repo, env, per_page=1)
            for deployment in deployments:
                statuses = await client.list_deployment_statuses(repo, deployment["id"])
                logger.info("event=wcid repo=%s env=%s deployment=%s statuses=%d", repo, env, deployment["id"], len(statuses))
                lines.append(_deployment_line(env, deployment, statuses))
    except GitHubApiError as e:
        logger.error("event=find_deployments_failed repo=%s status=%s error=%s", repo, e.status_code, e.message)
        return ActionResponse(ok=False, replies=[f"{e.status_code or 'GitHub'} error finding deployments", e.message])

    if not lines:
        return ActionResponse(ok=True, replies=[f"No deployments found for {app}"])
    return ActionResponse(ok=True, replies=["\n".join(lines)])


def _deployment_line(env: str, deployment: dict, statuses: list[dict]) -> str:
    payload = deployment.get("payload")
    actor = payload.get("actor", "unknown") if isinstance(payload, dict) else "unknown"
    state = statuses[0].get("state", "unknown") if statuses else "unknown"
    return f"*{env}*: {actor} deployed {deployment.get('ref')} at {deployment.get('created_at')}; state {state}"
