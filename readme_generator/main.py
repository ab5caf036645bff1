"""
FastAPI application — GitHub README Generator.

Endpoints:
    GET  /                     → single-page form (frontend/index.html)
    GET  /health               → {"status": "ok"}
    POST /api/generate-readme  → {"readme": "..."} | {"error": "..."}
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from openai import APIStatusError

from readme_generator.context import build_context, build_prompt
from readme_generator.github_client import GitHubClient
from readme_generator.llm_client import GenerationError, LLMClient, describe_api_error
from readme_generator.logging_config import (
    new_request_id,
    repository_ctx,
    request_id_ctx,
    setup_logging,
)
from readme_generator.models import (
    ErrorResponse,
    GenerateReadmeRequest,
    GenerateReadmeResponse,
)
from readme_generator.settings import settings
from readme_generator.url_parser import parse_github_url

logger = logging.getLogger("readme_generator.main")

UI_PATH = Path(__file__).resolve().parent.parent / "frontend" / "index.html"


# ── Shared state ───────────────────────────────────────────────
class _State:
    """Mutable container so lifespan and endpoints share instances."""
    github_client: GitHubClient | None = None
    llm_client: LLMClient | None = None


state = _State()


def _ensure_state() -> tuple[GitHubClient, LLMClient]:
    """Create the clients on first use (credentials are checked before)."""
    if state.github_client is None:
        state.github_client = GitHubClient()
    if state.llm_client is None:
        state.llm_client = LLMClient()
    return state.github_client, state.llm_client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and close clients on shutdown."""
    setup_logging(settings.log_level)

    missing = settings.missing_credentials()
    logger.info("Application started (llm_model=%s)", settings.llm_model)
    if missing:
        logger.warning(
            "Missing %s — README generation requests will fail "
            "until it is set in the environment or .env.",
            ", ".join(missing),
        )
    yield

    if state.github_client:
        await state.github_client.aclose()
        state.github_client = None
    if state.llm_client:
        await state.llm_client.aclose()
        state.llm_client = None
    logger.info("Application shutdown")


app = FastAPI(
    title="GitHub README Generator",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Middleware: request_id + timing ────────────────────────────
@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    rid = new_request_id()
    request_id_ctx.set(rid)
    t0 = time.perf_counter()
    response = await call_next(request)
    elapsed = round((time.perf_counter() - t0) * 1000, 1)
    response.headers["X-Request-Id"] = rid
    logger.info(
        "%s %s → %s (%.1f ms)",
        request.method, request.url.path, response.status_code, elapsed,
    )
    return response


# ── Error helpers ──────────────────────────────────────────────
def _error_response(status: int, message: str) -> JSONResponse:
    body = ErrorResponse(error=message)
    return JSONResponse(status_code=status, content=body.model_dump())


def _configuration_error() -> JSONResponse | None:
    missing = settings.missing_credentials()
    if not missing:
        return None
    logger.error("Missing required configuration: %s", ", ".join(missing))
    return _error_response(500, "Server configuration error.")


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Configuration problems outrank a bad body
    config_error = _configuration_error()
    if config_error is not None:
        return config_error
    logger.warning("Rejected malformed request body: %s", exc.errors())
    return _error_response(400, "Invalid request format or URL.")


# ── Endpoints ──────────────────────────────────────────────────
@app.get("/", response_class=HTMLResponse)
async def home():
    """Serve the form at the root path."""
    try:
        return UI_PATH.read_text(encoding="utf-8")
    except FileNotFoundError:
        return (
            "<h1>GitHub README Generator</h1>"
            "<p>UI file not found at /frontend/index.html. "
            "Use POST /api/generate-readme to get started.</p>"
        )


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/generate-readme", response_model=GenerateReadmeResponse)
async def generate_readme(body: GenerateReadmeRequest):
    logger.info("Received generate-readme request")

    # 1. Credentials
    config_error = _configuration_error()
    if config_error is not None:
        return config_error

    # 2. Parse URL
    try:
        owner, repo = parse_github_url(body.repo_url)
    except ValueError as exc:
        logger.warning("Failed parsing repository URL %r", body.repo_url)
        return _error_response(400, str(exc))
    repository_ctx.set(f"{owner}/{repo}")
    logger.info("Parsed GitHub repo: %s/%s", owner, repo)

    gh_client, llm_client = _ensure_state()

    # 3. Fetch from GitHub (partial results on failure)
    snapshot = await gh_client.fetch_snapshot(owner, repo)
    fetch_error = snapshot.fetch_error

    # 4. Build prompt
    context = build_context(body.repo_url, snapshot)
    prompt = build_prompt(context)

    # 5. Generate
    logger.info("Sending prompt to the LLM for %s/%s", owner, repo)
    try:
        readme = await llm_client.generate_readme(prompt)
    except GenerationError as exc:
        message = f"{exc} {fetch_error}" if fetch_error else str(exc)
        return _error_response(500, message)
    except APIStatusError as exc:
        logger.error(
            "Inference API returned %s for %s/%s", exc.status_code, owner, repo
        )
        detail = describe_api_error(exc)
        if fetch_error:
            detail = f"{fetch_error}. {detail}"
        return _error_response(500, f"Failed to process request: {detail}")
    except Exception as exc:
        logger.exception("AI processing failed for %s/%s", owner, repo)
        detail = str(exc) or "Unknown AI processing error."
        if fetch_error:
            detail = f"{fetch_error}. {detail}"
        return _error_response(500, f"Failed to process request: {detail}")

    logger.info("Successfully generated README for %s/%s", owner, repo)
    return GenerateReadmeResponse(readme=readme)
