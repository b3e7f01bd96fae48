import logging

import uvicorn
from fastapi import FastAPI

from .api import router
from .config import settings
from .teams import router as teams_router

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Heaven Deploy Bot", version="0.1.0")


@app.on_event("startup")
def _startup() -> None:
    logger.info("event=startup env=%s apps=%s", settings.app_env, ",".join(sorted(settings.apps)))


app.include_router(router, prefix="/api")
app.include_router(teams_router, prefix="/teams")


if __name__ == "__main__":
    uvicorn.run(app, host=settings.app_host, port=settings.app_port)
