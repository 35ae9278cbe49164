"""FastAPI application entrypoint for secpolicy service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Literal, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..clients.base import HEAD_REVISION
from ..config import SecPolicyConfig, load_config
from ..errors import RepoUnreachableError, SecPolicyError
from ..models import AnalysisResult
from ..orchestrator import Orchestrator


class AnalyzeRequest(BaseModel):
    target: str
    provider: Optional[Literal["local", "github"]] = None
    revision: str = HEAD_REVISION


class PolicyFileModel(BaseModel):
    path: str
    source_kind: str
    offset: int
    content_length: int


class PolicyHitModel(BaseModel):
    category: str
    matched_text: str
    line_number: int
    column_offset: int


class AnalyzeResponse(BaseModel):
    file: PolicyFileModel
    content_length: int
    hits: List[PolicyHitModel]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
    config: SecPolicyConfig | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing policy analysis."""

    app = FastAPI(title="secpolicy", version="1.0.0")
    app_config = config or load_config(Path.cwd())

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze", response_model=AnalyzeResponse)
    async def analyze(
        payload: AnalyzeRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> AnalyzeResponse:
        def _run() -> AnalysisResult:
            return orchestrator.run(
                payload.target,
                provider=payload.provider,
                revision=payload.revision,
                config=app_config,
            )

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)
        return AnalyzeResponse.model_validate(result.to_dict())

    @app.exception_handler(RepoUnreachableError)
    async def unreachable_handler(_: Any, exc: RepoUnreachableError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(SecPolicyError)
    async def secpolicy_error_handler(_: Any, exc: SecPolicyError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)
