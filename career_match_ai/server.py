"""FastAPI surface: one endpoint accepting POSTed WorkerRequests, with CORS preflight."""

from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from career_match_ai.config import CORS_HEADERS, Settings
from career_match_ai.dispatcher import Dispatcher
from career_match_ai.errors import ConfigurationError
from career_match_ai.utils.logger import get_logger

app = FastAPI(title="Career Match AI")
logger = get_logger(__name__)

ENDPOINT_PATHS = ("/", "/api/analyze")
ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"]

_dispatcher: Optional[Dispatcher] = None


def _get_dispatcher() -> Dispatcher:
    """Build the Dispatcher on first use so importing the app never requires API keys."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = Dispatcher(Settings.from_env())
    return _dispatcher


def _json(payload: Dict[str, Any], status_code: int = 200) -> JSONResponse:
    return JSONResponse(payload, status_code=status_code, headers=dict(CORS_HEADERS))


async def endpoint(request: Request) -> Response:
    """POST runs the pipeline; OPTIONS answers preflight; anything else is 405."""
    if request.method == "OPTIONS":
        return Response(status_code=204, headers=dict(CORS_HEADERS), media_type="application/json")
    if request.method != "POST":
        return _json({"error": "Method not allowed"}, status_code=405)

    try:
        dispatcher = _get_dispatcher()
    except ConfigurationError as e:
        logger.error("Service misconfigured: %s", e.message)
        return _json({"error": e.message}, status_code=e.status_code)

    body = await request.body()
    status_code, payload = await dispatcher.dispatch(body)
    return _json(payload, status_code=status_code)


for _path in ENDPOINT_PATHS:
    app.add_api_route(_path, endpoint, methods=ALL_METHODS, include_in_schema=_path == "/")
