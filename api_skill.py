"""HTTP endpoint for the voice platform.

Provides a FastAPI app that accepts skill request envelopes, routes them
through the skill handlers, and returns the response envelope. The same
path is exposed as ``lambda_handler`` for function hosts.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from catalog import build_catalog
from config import SkillConfig, load_config
from events import EventParseError, describe_event, parse_event
from handlers import build_router
from responses import render_envelope
from router import SkillRouter

log = logging.getLogger(__name__)

# Global router instance, built on first use
skill_router: Optional[SkillRouter] = None


def _init_router(config: Optional[SkillConfig] = None) -> SkillRouter:
    global skill_router
    if skill_router is None:
        config = config or load_config()
        logging.basicConfig(
            level=config.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        skill_router = build_router(build_catalog(config))
    return skill_router


def handle_envelope(envelope: Any, router: Optional[SkillRouter] = None) -> Dict[str, Any]:
    """Route one decoded request envelope; raises EventParseError if unreadable."""
    router = router or _init_router()
    event = parse_event(envelope)
    log.info("Request: %s", describe_event(event))
    return render_envelope(router.dispatch(event))


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.router = _init_router()
    yield


app = FastAPI(title="Home Stream Skill API", lifespan=lifespan)


@app.post("/skill")
async def receive_request(request: Request) -> Any:
    """Receive a skill request envelope and return the response envelope."""
    try:
        envelope = await request.json()
    except ValueError:
        # Invalid JSON or a body that is not UTF-8
        raise HTTPException(status_code=400, detail="Request body must be JSON")
    router = getattr(request.app.state, "router", None) or _init_router()
    try:
        # A cold store-backed catalog blocks on its first fetch
        body = await run_in_threadpool(handle_envelope, envelope, router)
    except EventParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return JSONResponse(content=body)


@app.get("/health")
async def health(request: Request):
    router = getattr(request.app.state, "router", None) or _init_router()
    keys = await run_in_threadpool(router.catalog.list)
    return JSONResponse(content={"status": "ok", "content_keys": keys})


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """Function-host entry point; unreadable envelopes get the apology response."""
    router = _init_router()
    try:
        return handle_envelope(event, router)
    except EventParseError as exc:
        log.error("Unreadable request envelope: %s", exc)
        return render_envelope(router.error_handler(None, exc))


# If running directly, start the server (use uvicorn)
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
