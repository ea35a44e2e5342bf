# web_app/api.py
"""
FastAPI endpoints for prompt improvement and media generation.

- POST   /api/improve:  rewrite an idea into a richer prompt
- POST   /api/image:    generate an image (placeholder PNG when no key is set)
- POST   /api/video:    ask the video provider; {"url": null} means "use the fallback"
- POST   /api/generate: improve (optional) + generate, with the fallback clip built in
- GET    /media/{id}:   fetch a generated clip
- DELETE /media/{id}:   release it
"""
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from agentic_media import __version__
from agentic_media.config import Settings, configure_logging
from agentic_media.errors import AgenticMediaError
from agentic_media.orchestrator import MediaOrchestrator

logger = logging.getLogger(__name__)


class PromptRequest(BaseModel):
    prompt: Optional[Any] = None


class GenerateRequest(BaseModel):
    prompt: Optional[Any] = None
    type: str = "image"
    improve: bool = False


def _require_prompt(req: PromptRequest) -> str:
    if not req.prompt or not isinstance(req.prompt, str):
        raise HTTPException(status_code=400, detail="Missing prompt")
    return req.prompt


def get_orchestrator(request: Request) -> MediaOrchestrator:
    return request.app.state.orchestrator


router = APIRouter()


@router.post("/api/improve")
def improve(req: PromptRequest, orchestrator: MediaOrchestrator = Depends(get_orchestrator)):
    prompt = _require_prompt(req)
    return {"improved": orchestrator.improve(prompt)}


@router.post("/api/image")
def image(req: PromptRequest, orchestrator: MediaOrchestrator = Depends(get_orchestrator)):
    prompt = _require_prompt(req)
    return {"url": orchestrator.generate_image(prompt).url}


@router.post("/api/video")
def video(req: PromptRequest, orchestrator: MediaOrchestrator = Depends(get_orchestrator)):
    prompt = _require_prompt(req)
    return {"url": orchestrator.video_provider.generate(prompt)}


@router.post("/api/generate", response_model=Dict[str, Any])
def generate(req: GenerateRequest, orchestrator: MediaOrchestrator = Depends(get_orchestrator)):
    result = orchestrator.generate(req.prompt, kind=req.type, improve=req.improve)
    return result.to_dict()


@router.get("/media/{media_id}")
def get_media(media_id: str, orchestrator: MediaOrchestrator = Depends(get_orchestrator)):
    blob = orchestrator.media_store.get(media_id)
    headers = {"Content-Disposition": f'inline; filename="{media_id}.{blob.extension}"'}
    return Response(content=blob.data, media_type=blob.media_type, headers=headers)


@router.delete("/media/{media_id}")
def release_media(media_id: str, orchestrator: MediaOrchestrator = Depends(get_orchestrator)):
    orchestrator.media_store.release(media_id)
    return {"released": True}


@router.get("/")
def root():
    return {
        "status": "ok",
        "version": __version__,
        "endpoints": [
            "/api/improve (POST)",
            "/api/image (POST)",
            "/api/video (POST)",
            "/api/generate (POST)",
            "/media/{id} (GET, DELETE)",
        ],
    }


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(orchestrator: Optional[MediaOrchestrator] = None) -> FastAPI:
    if orchestrator is None:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        orchestrator = MediaOrchestrator(settings)

    app = FastAPI(title="Agentic Media API", version=__version__)
    app.state.orchestrator = orchestrator
    app.include_router(router)

    @app.exception_handler(AgenticMediaError)
    async def media_error_handler(request: Request, exc: AgenticMediaError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error_response(exc.status_code, str(exc) or "Generation failed")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return _error_response(400, "Invalid request body")

    return app


app = create_app()
