# pyright: reportMissingImports=false
"""HTTP adapter for maids (requires the ``http`` extra).

Usage::

    from maids import Maids
    from maids.ext.http.app import create_app

    maids = Maids.from_config(load_config().to_dict())
    app = create_app(maids, api_token="secret")
    uvicorn.run(app)

Routes (``{version}`` is accepted but not interpreted)::

    POST /maids/{version}/appids/register   {"ids": ["a", "b"]}
    POST /maids/{version}/appids            {"numOfIds": 3}
    GET  /maids/{version}/health/status
    GET  /maids/{version}/health/version

``ids`` and ``numOfIds`` may also be sent in the query string
(``?ids=a&ids=b``, ``?numOfIds=3``); the body wins when both are given.

Every response body is a serialised :class:`~maids.facade.types.Reply`
and the HTTP status mirrors ``Reply.status``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

from maids.errors import MaidsError, UnauthorizedError
from maids.facade.core import Maids
from maids.facade.types import Reply

try:
    from fastapi import Depends, FastAPI, Header, Query, Request
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel, ConfigDict, Field
except ImportError:
    raise ImportError(
        "fastapi is required for the HTTP adapter. "
        "Install it with: pip install maids[http]"
    ) from None

logger = logging.getLogger(__name__)

Authenticator = Callable[[str], str | None]
"""Maps an access token to the caller's owner identity, or ``None``."""


class RegisterBody(BaseModel):
    ids: Any = None


class CreateBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    num_of_ids: Any = Field(default=None, alias="numOfIds")
    ids: Any = None
    retries: Any = None


def token_authenticator(tokens: dict[str, str]) -> Authenticator:
    """Accept exactly the tokens in *tokens*, mapping each to an owner."""

    def _authenticate(token: str) -> str | None:
        return tokens.get(token)

    return _authenticate


def _query_number(value: str | None) -> Any:
    """Parse a numeric query value; anything unparseable is passed on as-is."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except ValueError:
        return value


def _reply_response(reply: Reply) -> JSONResponse:
    return JSONResponse(reply.to_dict(), status_code=reply.status)


def create_app(
    maids: Maids,
    *,
    api_token: str | None = None,
    api_owner: str = "maids",
    authenticate: Authenticator | None = None,
    manage_lifecycle: bool = True,
) -> FastAPI:
    """Build a FastAPI app serving *maids*.

    Args:
        maids: The facade to serve.
        api_token: Token accepted by the default authenticator.
        api_owner: Owner identity the default token maps to.
        authenticate: Custom token → owner mapping; overrides
            ``api_token``.
        manage_lifecycle: When true, ``maids.init()`` runs on startup
            and ``maids.close()`` on shutdown.
    """
    if authenticate is None:
        if not api_token:
            raise ValueError("Either api_token or authenticate is required")
        authenticate = token_authenticator({api_token: api_owner})

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        if manage_lifecycle:
            await maids.init()
        try:
            yield
        finally:
            if manage_lifecycle:
                await maids.close()

    app = FastAPI(title="maids", lifespan=lifespan)

    @app.exception_handler(MaidsError)
    async def _maids_error(request: Request, exc: MaidsError) -> JSONResponse:
        reply = Reply(id=request.headers.get("x-request-id") or Reply().id)
        reply.add_errors(exc)
        return _reply_response(reply)

    async def caller(
        authorization: str | None = Header(default=None),
        access_token: str | None = Query(default=None),
    ) -> str:
        token = authorization or access_token
        if token and token.lower().startswith("bearer "):
            token = token[len("bearer ") :]
        owner = authenticate(token) if token else None
        if owner is None:
            logger.info("Rejected request with missing or unknown access token")
            raise UnauthorizedError()
        return owner

    def request_id(x_request_id: str | None = Header(default=None)) -> str | None:
        return x_request_id

    @app.post("/maids/{version}/appids/register")
    async def register(
        version: str,
        body: RegisterBody | None = None,
        query_ids: list[str] | None = Query(default=None, alias="ids"),
        owner: str = Depends(caller),
        rid: str | None = Depends(request_id),
    ) -> JSONResponse:
        ids = body.ids if body is not None else None
        if ids is None:
            ids = query_ids
        return _reply_response(await maids.register(owner, ids, request_id=rid))

    @app.post("/maids/{version}/appids")
    async def create(
        version: str,
        body: CreateBody | None = None,
        query_num_of_ids: str | None = Query(default=None, alias="numOfIds"),
        owner: str = Depends(caller),
        rid: str | None = Depends(request_id),
    ) -> JSONResponse:
        body = body or CreateBody()
        num_of_ids = body.num_of_ids
        if num_of_ids is None:
            num_of_ids = _query_number(query_num_of_ids)
        reply = await maids.create(
            owner,
            num_of_ids,
            ids=body.ids,
            retries=body.retries,
            request_id=rid,
        )
        return _reply_response(reply)

    @app.get("/maids/{version}/health/status")
    async def status(
        version: str,
        _: str = Depends(caller),
        rid: str | None = Depends(request_id),
    ) -> JSONResponse:
        return _reply_response(await maids.status(request_id=rid))

    @app.get("/maids/{version}/health/version")
    async def version_info(
        version: str,
        _: str = Depends(caller),
        rid: str | None = Depends(request_id),
    ) -> JSONResponse:
        return _reply_response(await maids.version(request_id=rid))

    return app
