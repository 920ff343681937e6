"""FastAPI application entrypoint for action-allowlist service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import AllowlistConfig, load_config
from ..errors import ConfigError, DiscoveryError
from ..extractor import extract_references
from ..orchestrator import Orchestrator, RunOutcome, format_summary


class GenerateRequest(BaseModel):
    config_path: Optional[str] = None
    dry_run: bool = True


class FailureItem(BaseModel):
    repository: str
    message: str


class GenerateResponse(BaseModel):
    strict: List[str]
    simple: List[str]
    attempted: int
    succeeded: int
    failures: List[FailureItem]
    unique_references: int
    dry_run: bool
    summary: str


class ExtractRequest(BaseModel):
    text: str


class ReferenceItem(BaseModel):
    full: str
    owner: str
    repo: str
    path: str
    ref: str


class ExtractResponse(BaseModel):
    references: List[ReferenceItem]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def _default_config_loader(path: Optional[str]) -> AllowlistConfig:
    return load_config(Path(path) if path else None)


def _to_response(outcome: RunOutcome) -> GenerateResponse:
    report = outcome.report
    return GenerateResponse(
        strict=outcome.allowlists.strict,
        simple=outcome.allowlists.simple,
        attempted=report.attempted,
        succeeded=report.succeeded,
        failures=[
            FailureItem(repository=str(failure.repository), message=failure.message)
            for failure in report.failures
        ],
        unique_references=len(report.references),
        dry_run=outcome.dry_run,
        summary=format_summary(report),
    )


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
    config_loader: Callable[[Optional[str]], AllowlistConfig] = _default_config_loader,
) -> FastAPI:
    """Create the FastAPI application exposing allowlist operations."""
    app = FastAPI(title="Action Allowlist Service", version="0.1.0")

    async def get_orchestrator() -> Orchestrator:
        # Fresh instance per request; runs share no state.
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerateResponse:
        def _run() -> RunOutcome:
            config = config_loader(payload.config_path)
            return orchestrator.run(config, dry_run=payload.dry_run)

        loop = asyncio.get_running_loop()
        outcome = await loop.run_in_executor(None, _run)
        return _to_response(outcome)

    @app.post("/extract", response_model=ExtractResponse)
    async def extract(payload: ExtractRequest) -> ExtractResponse:
        references = extract_references(payload.text)
        return ExtractResponse(
            references=[
                ReferenceItem(
                    full=reference.full,
                    owner=reference.owner,
                    repo=reference.repo,
                    path=reference.path,
                    ref=reference.ref,
                )
                for reference in references
            ]
        )

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(DiscoveryError)
    async def discovery_error_handler(_: Any, exc: DiscoveryError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
