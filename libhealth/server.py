"""FastAPI server for Library Health.

Exposes (under /LibraryHealth):
- GET    /Libraries
- GET    /Results
- GET    /Results/{library_id}
- DELETE /Results/{library_id}
- POST   /Scan/{library_id}
- POST   /Scan/Cancel
- GET    /Status
- POST   /Subtitles/{item_id}
"""

from __future__ import annotations

import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .config import HealthConfig
from .logging_config import get_logger

from healthapi import router as health_router

logger = get_logger(__name__)

API_PREFIX = "/LibraryHealth"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request's method, path and response status."""

    async def dispatch(self, request, call_next):
        response = await call_next(request)
        client_ip = request.client.host if request.client else "unknown"
        logging.getLogger("libhealth.request").debug(
            'ip="%s" url="%s %s" status=%s',
            client_ip,
            request.method,
            request.url.path,
            response.status_code,
        )
        return response


@asynccontextmanager
async def _lifespan(app: FastAPI):
    async def _print_startup_messages():
        await asyncio.sleep(0.1)
        logger.info("Started server process [" + str(os.getpid()) + "]")
        api_url = getattr(app.state, "api_url", None)
        if api_url:
            logger.info("Library Health API available at: " + api_url)

    asyncio.create_task(_print_startup_messages())
    yield


app = FastAPI(title="Library Health", lifespan=_lifespan)
app.add_middleware(RequestLoggingMiddleware)
app.include_router(health_router, prefix=API_PREFIX)


@app.get("/favicon.ico", include_in_schema=False)
def favicon() -> Response:
    return Response(status_code=204)


def run_server(
    config: HealthConfig,
    host: Optional[str] = None,
    port: Optional[int] = None,
) -> None:
    """Run the FastAPI app with Uvicorn."""
    import uvicorn

    effective_host = host or config.server_host
    effective_port = port or config.server_port

    display_host = "localhost" if effective_host == "0.0.0.0" else effective_host
    app.state.api_url = f"http://{display_host}:{effective_port}{API_PREFIX}/"

    uvicorn.run(
        app,
        host=effective_host,
        port=effective_port,
        log_level="info",
        log_config=None,
    )
