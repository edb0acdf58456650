"""
server.py — HTTP API for the analysis pipeline (aiohttp).

Endpoints:
  POST /analyze-comprehensive   {"imageUrl": "..."} → full report JSON
  GET  /health                  → JSON status + which services are configured

Status codes for /analyze-comprehensive:
  200  report (includes a "debug" block)
  400  missing/invalid imageUrl, or the URL is not an image (when pre-check enabled)
  500  partial-failure envelope (synthesis reply unusable) or unexpected error
  502  the vision call failed
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from aiohttp import web

import config
from analysis import AnalysisPipeline
from errors import ExternalCallFailed
from image_analyzer import InvalidImageUrl

logger = logging.getLogger(__name__)

PIPELINE_KEY = web.AppKey("pipeline", AnalysisPipeline)


# ── Middleware ────────────────────────────────────────────────────────────────

@web.middleware
async def log_requests(request: web.Request, handler):
    logger.info("%s %s", request.method, request.path)
    return await handler(request)


@web.middleware
async def json_errors(request: web.Request, handler):
    """Turn 404s and unhandled exceptions into JSON bodies."""
    try:
        return await handler(request)
    except web.HTTPNotFound:
        return web.json_response(
            {"error": "not_found", "message": "Endpoint not found"}, status=404,
        )
    except web.HTTPException:
        raise
    except Exception:
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return web.json_response(
            {"error": "internal_server_error", "message": "An unexpected error occurred"},
            status=500,
        )


# ── Request handlers ───────────────────────────────────────────────────────────

async def handle_analyze(request: web.Request) -> web.Response:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    image_url = body.get("imageUrl") if isinstance(body, dict) else None
    if not isinstance(image_url, str) or not image_url.strip():
        return web.json_response({"error": "imageUrl is required"}, status=400)

    pipeline = request.app[PIPELINE_KEY]
    try:
        outcome = await pipeline.analyze_comprehensive(image_url.strip())
    except InvalidImageUrl as exc:
        return web.json_response({"error": str(exc)}, status=400)
    except ExternalCallFailed as exc:
        logger.error("Comprehensive analysis failed upstream: %s", exc)
        return web.json_response(
            {"error": "upstream_error", "service": exc.service, "details": str(exc)},
            status=502,
        )
    except Exception as exc:
        logger.exception("Comprehensive analysis error")
        return web.json_response({"error": "internal_error", "details": str(exc)}, status=500)

    status = 500 if outcome.synthesis_failed else 200
    return web.json_response(outcome.to_dict(), status=status)


async def handle_health(request: web.Request) -> web.Response:
    """Health check — always 200; reports which external services are configured."""
    return web.json_response({
        "status":    "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "services": {
            "openai":       bool(config.OPENAI_API_KEY),
            "azure_openai": config.azure_configured(),
            "brave":        bool(config.BRAVE_API_KEY),
            "google":       bool(config.GOOGLE_SEARCH_API_KEY and config.GOOGLE_SEARCH_ENGINE_ID),
        },
    })


# ── App factory ────────────────────────────────────────────────────────────────

def build_web_app(pipeline: AnalysisPipeline) -> web.Application:
    app = web.Application(middlewares=[log_requests, json_errors], client_max_size=1024 ** 2)
    app[PIPELINE_KEY] = pipeline
    app.router.add_post("/analyze-comprehensive", handle_analyze)
    app.router.add_get("/health",                 handle_health)
    return app


async def start_server(pipeline: AnalysisPipeline) -> web.AppRunner:
    """Start the web server. Returns runner so caller can shut it down cleanly."""
    app    = build_web_app(pipeline)
    runner = web.AppRunner(app, access_log=None)
    await runner.setup()
    site = web.TCPSite(runner, config.HOST, config.PORT)
    await site.start()
    logger.info("Server running on port %d", config.PORT)
    logger.info("Health check available at: http://localhost:%d/health", config.PORT)
    logger.info(
        "Comprehensive analysis endpoint: POST http://localhost:%d/analyze-comprehensive",
        config.PORT,
    )
    return runner
