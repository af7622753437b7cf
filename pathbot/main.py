from fastapi import FastAPI
import asyncio
import logging

from pathbot.api.routes import router
from pathbot.config import SESSION_SWEEP_INTERVAL_S, log_level_from_env, session_idle_ttl_from_env
from pathbot.sessions import registry

app = FastAPI(title="pathbot", version="0.1.0")
app.include_router(router)
# Configure logging
logging.basicConfig(level=log_level_from_env())
logger = logging.getLogger(__name__)

_reaper: asyncio.Task[None] | None = None


@app.on_event("startup")
async def _startup() -> None:
    global _reaper
    ttl = session_idle_ttl_from_env()
    if ttl > 0:
        _reaper = asyncio.create_task(
            registry.reap_forever(max_idle_s=ttl, interval_s=min(SESSION_SWEEP_INTERVAL_S, ttl))
        )


@app.on_event("shutdown")
async def _shutdown() -> None:
    global _reaper
    if _reaper is not None:
        _reaper.cancel()
        _reaper = None
    # Cancel every live run timer before the loop goes away.
    await registry.close_all()
    logger.info("All puzzle sessions closed")


@app.get("/info")
async def info() -> dict[str, str]:
    return {"name": "pathbot", "version": "0.1.0"}
