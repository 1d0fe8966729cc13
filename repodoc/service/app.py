"""FastAPI application entrypoint for repodoc service mode."""

from __future__ import annotations

from typing import Callable, Dict, Optional

import uvicorn
from fastapi import Depends, FastAPI
from pydantic import BaseModel

from ..config import Settings
from ..orchestrator import Orchestrator
from ..tool import DEFAULT_TARGET_LANGUAGE, generate_documentation


class GenerateRequest(BaseModel):
    path: str
    include_tests: bool = False
    target_language: Optional[str] = DEFAULT_TARGET_LANGUAGE
    output_dir: Optional[str] = None


class GenerateResponse(BaseModel):
    is_error: bool
    text: str
    documents: Dict[str, str] = {}
    output_path: Optional[str] = None


class HealthResponse(BaseModel):
    status: str


def create_app(orchestrator_factory: Callable[[], Orchestrator]) -> FastAPI:
    """Create the FastAPI application exposing documentation generation."""

    app = FastAPI(title="repodoc service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(
        payload: GenerateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerateResponse:
        # Failures come back in the body with is_error set, never as HTTP errors.
        result = await generate_documentation(
            orchestrator,
            payload.path,
            include_tests=payload.include_tests,
            target_language=payload.target_language,
            output_dir=payload.output_dir,
        )
        return GenerateResponse(
            is_error=result.is_error,
            text=result.text,
            documents=result.documents,
            output_path=str(result.output_path) if result.output_path else None,
        )

    return app


def run_service(
    settings: Settings, host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    app = create_app(lambda: Orchestrator.from_settings(settings))
    uvicorn.run(app, host=host, port=port)


__all__ = ["GenerateRequest", "GenerateResponse", "create_app", "run_service"]
