"""
Responsive Tester Service - Main Application

A FastAPI backend that renders pages at device viewports with Playwright,
runs heuristic responsive-design checks, and asks Claude (Anthropic) for
human-readable analysis and CSS fixes.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from dotenv import load_dotenv

from analyzer.pipeline import AnalysisService, CompletionLimits, ResponsiveTester
from analyzer.scanner import ResponsiveScanner
from browser_pool import BrowserPool
from config import Settings, get_settings
from device_catalog import DeviceCatalog
from errors import AnalyzerError, ErrorKind
from progress import ProgressStore
from routes import router
from utils.anthropic_client import CompletionClient
from utils.wordpress_client import WordPressClient

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_state(app: FastAPI, settings: Settings):
    """Construct every shared component and attach it to app.state."""
    app.state.settings = settings
    app.state.device_catalog = DeviceCatalog()
    app.state.progress_store = ProgressStore()
    app.state.browser_pool = BrowserPool(
        pool_size=settings.BROWSER_POOL_SIZE,
        max_pages_per_browser=settings.BROWSER_MAX_PAGES,
        browser_timeout=settings.BROWSER_TIMEOUT,
    )
    app.state.completion_client = CompletionClient(
        api_key=settings.ANTHROPIC_API_KEY,
        model=settings.ANTHROPIC_MODEL,
        temperature=settings.COMPLETION_TEMPERATURE,
    )
    app.state.wordpress_client = WordPressClient(timeout=settings.WORDPRESS_TIMEOUT)
    app.state.scanner = ResponsiveScanner(app.state.browser_pool, settings.SCAN_LOAD_TIMEOUT)
    app.state.analysis_service = AnalysisService(
        app.state.completion_client,
        CompletionLimits(
            analysis_max_tokens=settings.ANALYSIS_MAX_TOKENS,
            css_fix_max_tokens=settings.CSS_FIX_MAX_TOKENS,
            design_max_tokens=settings.DESIGN_MAX_TOKENS,
            design_html_limit=settings.DESIGN_HTML_LIMIT,
        ),
    )
    app.state.tester = ResponsiveTester(app.state.scanner, app.state.analysis_service)


async def teardown_state(app: FastAPI):
    await app.state.browser_pool.cleanup()
    await app.state.completion_client.close()
    app.state.wordpress_client.close()
    app.state.device_catalog.close()
    app.state.progress_store.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        build_state(app, settings)
        if not settings.ANTHROPIC_API_KEY:
            logger.warning("⚠️  ANTHROPIC_API_KEY not set. AI analysis features will be disabled.")
        logger.info("🚀 Responsive Tester started")
        try:
            yield
        finally:
            await teardown_state(app)
            logger.info("👋 Responsive Tester stopped")

    app = FastAPI(title="Responsive Tester Service", lifespan=lifespan)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AnalyzerError)
    async def analyzer_error_handler(request: Request, exc: AnalyzerError):
        logger.error(f"ERROR: {request.url.path} failed ({exc.kind.value}): {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=jsonable_encoder({
                "success": False,
                "kind": ErrorKind.VALIDATION.value,
                "message": "Invalid request format",
                "errors": exc.errors(),
            }),
        )

    # Include all routes from routes.py
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000, timeout_keep_alive=60)
