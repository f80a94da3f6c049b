"""
Page performance analysis from the browser's Navigation and Resource Timing entries.
"""

import logging
from typing import List, Optional
from urllib.parse import urlparse

from playwright.async_api import Error as PlaywrightError

from analyzer.scanner import load_page
from browser_pool import BrowserPool
from errors import UpstreamFailure
from models import PerformanceAnalysis, PerformanceMetric, ResourceMetric

logger = logging.getLogger(__name__)

COLLECT_TIMINGS_SCRIPT = """
() => {
    const nav = performance.getEntriesByType('navigation')[0];
    const paint = performance.getEntriesByType('paint')
        .find((entry) => entry.name === 'first-contentful-paint');
    const resources = performance.getEntriesByType('resource').map((entry) => ({
        url: entry.name,
        initiatorType: entry.initiatorType,
        transferSize: entry.transferSize || 0,
        decodedBodySize: entry.decodedBodySize || 0,
        duration: entry.duration,
    }));
    return {
        ttfb: nav ? nav.responseStart - nav.requestStart : 0,
        domContentLoaded: nav ? nav.domContentLoadedEventEnd - nav.startTime : 0,
        load: nav ? Math.max(nav.loadEventEnd, nav.loadEventStart) - nav.startTime : 0,
        firstContentfulPaint: paint ? paint.startTime : null,
        documentTransferSize: nav ? nav.transferSize || 0 : 0,
        resources,
    };
}
"""

FONT_EXTENSIONS = (".woff", ".woff2", ".ttf", ".otf", ".eot")
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".avif", ".svg", ".ico")

# name: (good below, poor above, unit, recommendation)
THRESHOLDS = {
    "Time to First Byte": (800, 1800, "ms", "Reduce server response time or add caching in front of the origin."),
    "First Contentful Paint": (1800, 3000, "ms", "Inline critical CSS and defer render-blocking scripts."),
    "DOM Content Loaded": (2000, 4000, "ms", "Defer non-critical JavaScript and reduce DOM size."),
    "Page Load Time": (3000, 6000, "ms", "Lazy-load below-the-fold images and trim third-party scripts."),
    "Total Transfer Size": (1024 * 1024, 3 * 1024 * 1024, "bytes", "Compress images and minify scripts and stylesheets."),
    "Request Count": (50, 100, "requests", "Bundle assets and remove unused third-party requests."),
}


def classify_resource(url: str, initiator_type: str) -> str:
    path = urlparse(url).path.lower()
    if path.endswith(FONT_EXTENSIONS):
        return "font"
    if initiator_type == "script" or path.endswith(".js"):
        return "script"
    if initiator_type == "css" or path.endswith(".css") or (initiator_type == "link" and ".css" in path):
        return "stylesheet"
    if initiator_type == "img" or path.endswith(IMAGE_EXTENSIONS):
        return "image"
    return "other"


def grade(name: str, value: float) -> PerformanceMetric:
    good, poor, unit, recommendation = THRESHOLDS[name]
    if value < good:
        status = "good"
    elif value > poor:
        status = "poor"
    else:
        status = "warning"
    return PerformanceMetric(
        name=name,
        value=round(value, 2),
        unit=unit,
        status=status,
        recommendation=None if status == "good" else recommendation,
    )


def build_performance_analysis(timings: dict) -> PerformanceAnalysis:
    resources: List[ResourceMetric] = []
    for entry in timings.get("resources") or []:
        resources.append(ResourceMetric(
            type=classify_resource(entry.get("url", ""), entry.get("initiatorType", "")),
            size=int(entry.get("decodedBodySize") or 0),
            transferSize=int(entry.get("transferSize") or 0),
            loadTime=round(float(entry.get("duration") or 0), 2),
            url=entry.get("url", ""),
        ))
    resources.sort(key=lambda r: r.transfer_size, reverse=True)

    total_transfer = int(timings.get("documentTransferSize") or 0) + sum(r.transfer_size for r in resources)

    metrics = [grade("Time to First Byte", float(timings.get("ttfb") or 0))]
    fcp: Optional[float] = timings.get("firstContentfulPaint")
    if fcp is not None:
        metrics.append(grade("First Contentful Paint", float(fcp)))
    metrics.extend([
        grade("DOM Content Loaded", float(timings.get("domContentLoaded") or 0)),
        grade("Page Load Time", float(timings.get("load") or 0)),
        grade("Total Transfer Size", total_transfer),
        grade("Request Count", len(resources) + 1),
    ])

    return PerformanceAnalysis(metrics=metrics, resources=resources)


async def analyze_performance(
    pool: BrowserPool,
    url: str,
    width: int,
    height: int,
    load_timeout: float = 10,
) -> PerformanceAnalysis:
    async with pool.page(width, height) as page:
        await load_page(page, url, load_timeout)
        try:
            timings = await page.evaluate(COLLECT_TIMINGS_SCRIPT)
        except PlaywrightError as e:
            raise UpstreamFailure("Page content is not accessible for analysis", details=str(e))

    logger.info(f"⚡ Collected {len(timings.get('resources') or [])} resource timings from {url}")
    return build_performance_analysis(timings)
