"""Entry point for the FastAPI-powered identification service."""

from __future__ import annotations

import logging
from contextlib import AsyncExitStack, asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from .config import settings
from .models import Artifact, ResolutionResult
from .services.openrouter import OpenRouterClient
from .services.resolver import ResolutionController
from .services.tmdb import TMDBClient

logging.basicConfig(level=getattr(logging, settings.log_level, logging.INFO))
logger = logging.getLogger(__name__)

UPLOAD_CHUNK_BYTES = 64 * 1024

app: FastAPI


class TextResolveRequest(BaseModel):
    """Body of a mood or theme resolution request."""

    text: str = Field(min_length=1, max_length=5_000)
    label: str | None = Field(default=None, max_length=200)


@asynccontextmanager
async def lifespan(fastapi_app: FastAPI):
    exit_stack = AsyncExitStack()
    tmdb_http = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.tmdb_api_url).rstrip("/"),
            timeout=httpx.Timeout(settings.catalog_timeout_seconds, connect=5.0),
        )
    )
    openrouter_http = await exit_stack.enter_async_context(
        httpx.AsyncClient(
            base_url=str(settings.openrouter_api_url).rstrip("/"),
            timeout=httpx.Timeout(settings.inference_timeout_seconds, connect=10.0),
        )
    )

    catalog = TMDBClient(settings, tmdb_http)
    inference = OpenRouterClient(settings, openrouter_http)
    if not catalog.configured:
        logger.warning("TMDB_API_KEY is not set; every catalog query will fail")
    if not inference.configured:
        logger.info("OPENROUTER_API_KEY is not set; running heuristic-only resolution")

    fastapi_app.state.resolver = ResolutionController(settings, catalog, inference)

    try:
        yield
    finally:  # pragma: no cover - teardown path exercised at runtime
        await exit_stack.aclose()


def create_app() -> FastAPI:
    fastapi_app = FastAPI(
        title=settings.app_name,
        description="Identify movies, series and anime from screenshots or moods",
        version="1.0.0",
        lifespan=lifespan,
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    register_routes(fastapi_app)
    return fastapi_app


def get_resolver(app: FastAPI) -> ResolutionController:
    resolver = getattr(app.state, "resolver", None)
    if not isinstance(resolver, ResolutionController):
        raise RuntimeError("Resolution controller not initialised")
    return resolver


def serialise_result(result: ResolutionResult) -> dict[str, Any]:
    """Return the JSON payload sent to UI callers."""

    payload = result.model_dump(mode="json")
    for candidate, rendered in zip(result.candidates, payload["candidates"]):
        rendered["entry"]["poster_url"] = TMDBClient.build_poster_url(
            candidate.entry.poster_path
        )
    return payload


async def read_upload_limited(upload: UploadFile, *, max_bytes: int) -> bytes:
    """Read an upload into memory, refusing anything over ``max_bytes``."""

    buffer = bytearray()
    while True:
        chunk = await upload.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise HTTPException(status_code=413, detail="Image exceeds the upload limit")
    return bytes(buffer)


def register_routes(fastapi_app: FastAPI) -> None:
    @fastapi_app.get("/healthz")
    async def healthcheck() -> dict[str, str]:
        return {"status": "ok"}

    @fastapi_app.post("/api/resolve/image")
    async def resolve_image(file: UploadFile = File(...)) -> dict[str, Any]:
        resolver = get_resolver(fastapi_app)
        media_type = (file.content_type or "").lower()
        if not media_type.startswith("image/"):
            raise HTTPException(status_code=415, detail="Please upload an image file")
        try:
            content = await read_upload_limited(
                file, max_bytes=settings.max_upload_bytes
            )
        finally:
            await file.close()
        if not content:
            raise HTTPException(status_code=400, detail="Uploaded image is empty")

        artifact = Artifact.from_upload(
            content, filename=file.filename, media_type=media_type
        )
        result = await resolver.resolve(artifact)
        return serialise_result(result)

    @fastapi_app.post("/api/resolve/text")
    async def resolve_text(body: TextResolveRequest) -> dict[str, Any]:
        resolver = get_resolver(fastapi_app)
        text = body.text.strip()
        if not text:
            raise HTTPException(status_code=400, detail="Describe what you want to watch")
        result = await resolver.resolve(Artifact.from_text(text, filename=body.label))
        return serialise_result(result)


app = create_app()
