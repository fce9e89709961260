import asyncio
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from uvicorn import Config, Server

from .routers import runbook
from .dependencies import session_registered
from ..config import settings
from ..errors import ExportError, InvalidMetadataError, UnknownStepError

logger = logging.getLogger("n7-runbook.api-gateway")


app = FastAPI(title="Naga-7 Incident Runbook API", version="1.0.0")

# The desktop shell serves its UI from a different origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(runbook.router, prefix="/api/v1/runbook")


@app.exception_handler(UnknownStepError)
async def unknown_step_handler(request: Request, exc: UnknownStepError):
    logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidMetadataError)
async def invalid_metadata_handler(request: Request, exc: InvalidMetadataError):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(ExportError)
async def export_error_handler(request: Request, exc: ExportError):
    logger.error(f"Audit export failed: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Failed to export audit report"})


@app.get("/health")
async def health():
    return {"status": "ok" if session_registered() else "starting"}


class APIGatewayService:
    """
    API Gateway Service.
    Responsibility: Serve the runbook API to the local presentation layer.
    """

    def __init__(self, host: Optional[str] = None, port: Optional[int] = None):
        self.name = "APIGatewayService"
        self.host = host or settings.API_HOST
        self.port = port or settings.API_PORT
        self._server: Optional[Server] = None
        self._task: Optional[asyncio.Task] = None

    async def start(self):
        logger.info(f"APIGatewayService starting on {self.host}:{self.port}")
        config = Config(app=app, host=self.host, port=self.port, log_level="info")
        self._server = Server(config)
        self._task = asyncio.create_task(self._server.serve())

    async def stop(self):
        if self._server:
            self._server.should_exit = True
        if self._task:
            await self._task
        logger.info("APIGatewayService stopped.")
