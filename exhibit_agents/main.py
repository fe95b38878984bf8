"""Exhibit Agents: voice agent configuration and vendor sync API."""

import logging

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .errors import ExhibitAgentError, VendorSyncError
from .routes import agents, chat, visitor

logger = logging.getLogger(__name__)

app = FastAPI(title="Exhibit Agents", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(agents.router)
app.include_router(visitor.router)
app.include_router(chat.router)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

@app.exception_handler(ExhibitAgentError)
async def agent_error_handler(request: Request, exc: ExhibitAgentError):
    body = {"success": False, "error": exc.message}
    if isinstance(exc, VendorSyncError):
        body["details"] = exc.details
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=body)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get("/health")
async def health():
    return {"status": "ok", "service": "exhibit-agents"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8100)
