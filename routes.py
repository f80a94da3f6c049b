from typing import List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse

from analyzer.colors import analyze_colors
from analyzer.performance import analyze_performance
from analyzer.pipeline import AnalysisService, ResponsiveTester
from analyzer.scanner import ResponsiveScanner
from browser_pool import BrowserPool
from config import Settings
from device_catalog import DeviceCatalog, DeviceExistsError
from errors import ValidationFailure
from models import (
    AnalysisRequest,
    AnalysisResponse,
    ColorAnalysis,
    CSSFixResponse,
    DesignAnalysisRequest,
    DesignIssue,
    Device,
    MetricRecord,
    PageRequest,
    PerformanceAnalysis,
    ProgressUpdate,
    ResponsiveTestResponse,
    ScanRequest,
    ScanResponse,
    ScreenSize,
    UrlValidationRequest,
    UserProgress,
    WordPressApplyRequest,
    WordPressCredentials,
    WordPressTestRecord,
    validate_absolute_url,
)
from progress import ProgressStore
from utils.anthropic_client import CompletionClient
from utils.page_fetcher import fetch_page
from utils.wordpress_client import WordPressClient

# Create router
router = APIRouter()

DEFAULT_VIEWPORT = ScreenSize(width=1920, height=1080)


# Dependencies: every shared component lives on app.state, built by the lifespan
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_catalog(request: Request) -> DeviceCatalog:
    return request.app.state.device_catalog


def get_progress_store(request: Request) -> ProgressStore:
    return request.app.state.progress_store


def get_browser_pool(request: Request) -> BrowserPool:
    return request.app.state.browser_pool


def get_completion_client(request: Request) -> CompletionClient:
    return request.app.state.completion_client


def get_scanner(request: Request) -> ResponsiveScanner:
    return request.app.state.scanner


def get_analysis_service(request: Request) -> AnalysisService:
    return request.app.state.analysis_service


def get_tester(request: Request) -> ResponsiveTester:
    return request.app.state.tester


def get_wordpress_client(request: Request) -> WordPressClient:
    return request.app.state.wordpress_client


@router.get("/")
async def root():
    return {
        "service": "Responsive Tester",
        "status": "running",
        "endpoints": {
            "scan": "/api/scan (POST)",
            "test": "/api/test (POST)",
            "analyze": "/api/analyze (POST)",
            "css_fixes": "/api/generate-css-fixes (POST)",
        },
    }


@router.get("/health")
async def health_check():
    return {"status": "healthy"}


@router.get("/status/detailed")
async def detailed_status_check(
    pool: BrowserPool = Depends(get_browser_pool),
    client: CompletionClient = Depends(get_completion_client),
    catalog: DeviceCatalog = Depends(get_catalog),
):
    """
    Component health: browser pool, completion service configuration, device catalog.
    """
    status_info = {
        "api": "healthy",
        "browser_pool": "not_initialized",
        "anthropic_api": "configured" if client.configured else "missing",
        "devices": len(catalog),
    }

    if pool.initialized:
        status_info["browser_pool"] = await pool.health_check()

    status_info["overall_status"] = "healthy" if client.configured else "degraded"
    return status_info


# ======================
# Device catalog
# ======================

@router.get("/api/devices", response_model=List[Device])
async def list_devices(catalog: DeviceCatalog = Depends(get_catalog)):
    return catalog.list_devices()


@router.get("/api/devices/{device_id}", response_model=Device)
async def get_device(device_id: str, catalog: DeviceCatalog = Depends(get_catalog)):
    device = catalog.get_device(device_id)
    if device is None:
        return JSONResponse(status_code=404, content={"success": False, "message": "Device not found"})
    return device


@router.post("/api/devices", response_model=Device, status_code=201)
async def create_device(device: Device, catalog: DeviceCatalog = Depends(get_catalog)):
    try:
        return catalog.add_device(device)
    except DeviceExistsError as e:
        return JSONResponse(status_code=409, content={"success": False, "message": str(e)})


@router.post("/api/validate-url")
async def validate_url(payload: UrlValidationRequest):
    if not payload.url:
        return JSONResponse(status_code=400, content={"valid": False, "message": "URL is required"})
    try:
        validate_absolute_url(payload.url)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"valid": False, "message": str(e)})
    return {"valid": True}


@router.post("/wp/record-test")
async def record_wordpress_test(
    record: WordPressTestRecord,
    progress: ProgressStore = Depends(get_progress_store),
):
    # The test itself is stored by the plugin; only usage is counted here
    progress.record("tests_run")
    return {"success": True}


# ======================
# Page proxy and scanning
# ======================

@router.get("/api/fetch-page", response_class=HTMLResponse)
def fetch_page_content(url: str = "", settings: Settings = Depends(get_settings)):
    """Return the raw HTML of ``url``, fetched server-side."""
    if not url:
        raise ValidationFailure("URL is required")
    try:
        validate_absolute_url(url)
    except ValueError as e:
        raise ValidationFailure("Invalid URL", details=str(e))

    html = fetch_page(url, timeout=settings.FETCH_TIMEOUT, user_agent=settings.FETCH_USER_AGENT)
    return HTMLResponse(content=html)


@router.post("/api/scan", response_model=ScanResponse)
async def scan_page(
    request: ScanRequest,
    scanner: ResponsiveScanner = Depends(get_scanner),
    progress: ProgressStore = Depends(get_progress_store),
):
    """Run the heuristic checklist only; no completion service call."""
    results = await scanner.scan(
        request.url,
        request.width,
        request.height,
        stylesheet=request.stylesheet,
        html=request.html,
    )
    progress.record("tests_run")
    return ScanResponse(
        url=request.url,
        viewport=ScreenSize(width=request.width, height=request.height),
        results=results,
    )


@router.post("/api/test", response_model=ResponsiveTestResponse, response_model_exclude_none=True)
async def run_responsive_test(
    request: ScanRequest,
    tester: ResponsiveTester = Depends(get_tester),
    progress: ProgressStore = Depends(get_progress_store),
):
    """
    Scan the page, then ask for an AI analysis if the scan found issues.

    An unavailable or failing completion service is reported in
    ``analysisError``; the scan results are returned either way.
    """
    result = await tester.run(request.url, request.width, request.height, html=request.html)
    progress.record("tests_run")
    return result


# ======================
# Completion-backed analysis
# ======================

@router.post("/api/analyze", response_model=AnalysisResponse)
async def analyze_issues(
    request: AnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    analysis = await service.analyze(request)
    return AnalysisResponse(analysis=analysis, rawIssues=request.issues)


@router.post("/api/analyze-design", response_model=List[DesignIssue], response_model_exclude_none=True)
async def analyze_design(
    request: DesignAnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    return await service.analyze_design(request)


@router.post("/api/generate-css-fixes", response_model=CSSFixResponse)
async def generate_css_fixes(
    request: AnalysisRequest,
    service: AnalysisService = Depends(get_analysis_service),
):
    fix_set, stylesheet = await service.generate_css_fixes(request)
    return CSSFixResponse(fixes=fix_set, stylesheet=stylesheet)


# ======================
# Rendered-page analysis
# ======================

@router.post("/api/analyze-colors", response_model=ColorAnalysis)
async def analyze_page_colors(
    request: PageRequest,
    pool: BrowserPool = Depends(get_browser_pool),
    settings: Settings = Depends(get_settings),
):
    viewport = request.viewport or DEFAULT_VIEWPORT
    return await analyze_colors(
        pool, request.url, viewport.width, viewport.height, settings.SCAN_LOAD_TIMEOUT
    )


@router.post("/api/analyze-performance", response_model=PerformanceAnalysis)
async def analyze_page_performance(
    request: PageRequest,
    pool: BrowserPool = Depends(get_browser_pool),
    settings: Settings = Depends(get_settings),
):
    viewport = request.viewport or DEFAULT_VIEWPORT
    return await analyze_performance(
        pool, request.url, viewport.width, viewport.height, settings.SCAN_LOAD_TIMEOUT
    )


# ======================
# WordPress forwarding
# ======================

@router.post("/api/wordpress/apply-css")
def apply_wordpress_css(
    request: WordPressApplyRequest,
    wordpress: WordPressClient = Depends(get_wordpress_client),
):
    change_id = wordpress.apply_css(
        request.site_url,
        request.api_key,
        request.page_id,
        request.css_content,
        request.device_type,
    )
    return {"success": True, "change_id": change_id}


@router.post("/api/wordpress/revert-css/{change_id}")
def revert_wordpress_css(
    change_id: str,
    credentials: WordPressCredentials,
    wordpress: WordPressClient = Depends(get_wordpress_client),
):
    wordpress.revert_css(credentials.site_url, credentials.api_key, change_id)
    return {"success": True, "change_id": change_id}


# ======================
# Usage progress
# ======================

@router.get("/api/user/progress", response_model=UserProgress)
async def get_user_progress(progress: ProgressStore = Depends(get_progress_store)):
    return progress.get()


@router.patch("/api/user/progress", response_model=UserProgress)
async def update_user_progress(
    update: ProgressUpdate,
    progress: ProgressStore = Depends(get_progress_store),
):
    return progress.update(update.stats)


@router.post("/api/user/progress/record", response_model=UserProgress)
async def record_user_metric(
    record: MetricRecord,
    progress: ProgressStore = Depends(get_progress_store),
):
    return progress.record(record.metric, record.value)
