# summary_poller/adapters/web/fastapi.py
from contextlib import asynccontextmanager
from typing import Callable, Optional

import uuid

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from summary_poller.adapters.status_board_inmemory import InMemoryStatusBoard
from summary_poller.core.config import PollerConfig
from summary_poller.core.exceptions import InvalidKeyError, validate_key
from summary_poller.core.interfaces.http_client import HttpClientPort
from summary_poller.core.interfaces.status_board import StatusBoardPort
from summary_poller.core.interfaces.status_fetcher import StatusFetcherPort
from summary_poller.core.logging_config import correlation_id_var
from summary_poller.core.managers.poll_registry import PollRegistry
from summary_poller.core.models.problem import ProblemResponse
from summary_poller.core.settings import logger


class StartPollRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    key: str
    job_id: str = Field(alias="jobId")


# Note: this is a driver adapter. It holds the PollRegistry on app.state and
# only ever calls start/stop/dispose on it; the registry knows nothing of HTTP.
def create_app(
    http_client: HttpClientPort,
    fetcher_factory: Callable[[HttpClientPort], StatusFetcherPort],
    config: Optional[PollerConfig] = None,
    board: Optional[StatusBoardPort] = None,
):
    """Create the FastAPI app.

    The HTTP client and fetcher are assembled outside (composition root) and
    passed in; the lifespan opens the client, builds the registry and disposes
    it on shutdown so no poll task outlives the app.
    """
    status_board = board or InMemoryStatusBoard()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        async with http_client as client:
            registry = PollRegistry(
                fetcher_factory(client),
                config=config,
                observers=[status_board],
            )
            app.state.registry = registry
            app.state.status_board = status_board
            try:
                yield
            finally:
                await registry.dispose()

    app = FastAPI(title="Summary Poller", lifespan=lifespan)

    def render_problem(problem: ProblemResponse) -> JSONResponse:
        payload = jsonable_encoder(problem.model_dump(exclude_none=True))
        return JSONResponse(status_code=problem.status, content=payload)

    # Correlation ID middleware: assigns per-request id (header override) and exposes it to logging
    @app.middleware("http")
    async def correlation_id_middleware(request: Request, call_next):
        incoming = request.headers.get("x-request-id")
        cid = incoming or uuid.uuid4().hex[:12]
        correlation_id_var.set(cid)
        try:
            response = await call_next(request)
        finally:
            correlation_id_var.set("-")
        response.headers["X-Request-ID"] = cid
        return response

    @app.exception_handler(InvalidKeyError)
    async def invalid_key_handler(request: Request, exc: InvalidKeyError):
        problem = ProblemResponse.invalid_key(str(exc), instance=str(request.url))
        return render_problem(problem.model_copy(update={"requestId": correlation_id_var.get()}))

    @app.get("/health")
    async def health():
        return {"status": "ok", "activePolls": len(app.state.registry)}

    @app.post("/polls", status_code=202)
    async def start_poll(body: StartPollRequest):
        validate_key(body.key)
        registry: PollRegistry = app.state.registry
        registry.start(body.key, body.job_id, status_board.sink_for(body.key))
        return {"key": body.key, "jobId": body.job_id, "active": registry.has(body.key)}

    @app.get("/polls")
    async def list_polls():
        handles = app.state.registry.handles()
        return {
            "polls": [
                {"key": h.key, "jobId": h.job_id, "tickCount": h.tick_count}
                for h in handles
            ]
        }

    @app.get("/polls/{key}")
    async def get_poll(key: str, request: Request):
        if not status_board.knows(key):
            return render_problem(ProblemResponse.unknown_key(key, instance=str(request.url)))
        latest = status_board.latest(key)
        return {
            "key": key,
            "active": app.state.registry.has(key),
            "retireReason": status_board.retire_reason(key),
            "latest": latest.model_dump(mode="json") if latest else None,
            "history": [r.model_dump(mode="json") for r in status_board.history(key)],
        }

    @app.delete("/polls/{key}", status_code=204)
    async def stop_poll(key: str):
        logger.debug(f"[http] stop requested key={key}")
        app.state.registry.stop(key)
        return Response(status_code=204)

    return app
