"""
Heuristic responsive-design scanner.

Loads a page in an isolated browser context sized to the target device and
checks five fixed rules:

1. Missing <meta name="viewport">                          -> error
2. Elements with computed font size below 12px              -> warning
3. Clickable elements (button, a, [role=button]) under 44px  -> warning
4. Document scroll width wider than the viewport             -> error
5. Images without a max-width constraint                     -> warning

Measurements are gathered in one page.evaluate call; turning them into
findings is a pure function so the rules can be checked without a browser.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from playwright.async_api import Page
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from analyzer.stylesheet import set_stylesheet
from browser_pool import BrowserPool
from errors import ScanTimeout, UpstreamFailure
from models import TestResult

logger = logging.getLogger(__name__)

MIN_FONT_SIZE_PX = 12
MIN_TOUCH_TARGET_PX = 44

COLLECT_METRICS_SCRIPT = """
({minFontSize, minTouchTarget}) => {
    const tag = (el) => el.tagName.toLowerCase();

    const smallText = Array.from(document.querySelectorAll('*')).filter((el) => {
        return parseFloat(window.getComputedStyle(el).fontSize) < minFontSize;
    });

    const smallTargets = Array.from(
        document.querySelectorAll('button, a, [role="button"]')
    ).filter((el) => {
        const rect = el.getBoundingClientRect();
        return rect.width < minTouchTarget || rect.height < minTouchTarget;
    });

    const fixedImages = Array.from(document.querySelectorAll('img')).filter((img) => {
        const maxWidth = window.getComputedStyle(img).maxWidth;
        return !maxWidth || maxWidth === 'none';
    });

    return {
        hasViewportMeta: document.querySelector('meta[name="viewport"]') !== null,
        smallTextCount: smallText.length,
        smallTextElement: smallText.length ? tag(smallText[0]) : null,
        smallTargetCount: smallTargets.length,
        smallTargetElement: smallTargets.length ? tag(smallTargets[0]) : null,
        scrollWidth: document.documentElement.scrollWidth,
        nonResponsiveImageCount: fixedImages.length,
    };
}
"""


@dataclass
class PageMetrics:
    """Raw measurements taken from a rendered document."""

    has_viewport_meta: bool
    small_text_count: int = 0
    small_text_element: Optional[str] = None
    small_target_count: int = 0
    small_target_element: Optional[str] = None
    scroll_width: int = 0
    non_responsive_image_count: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "PageMetrics":
        return cls(
            has_viewport_meta=bool(data.get("hasViewportMeta")),
            small_text_count=int(data.get("smallTextCount") or 0),
            small_text_element=data.get("smallTextElement"),
            small_target_count=int(data.get("smallTargetCount") or 0),
            small_target_element=data.get("smallTargetElement"),
            scroll_width=int(data.get("scrollWidth") or 0),
            non_responsive_image_count=int(data.get("nonResponsiveImageCount") or 0),
        )


NO_ISSUES_RESULT = TestResult(
    type="success",
    title="No Issues Found",
    description="The page appears to be well-optimized for this device size.",
)


def evaluate_metrics(metrics: PageMetrics, viewport_width: int) -> List[TestResult]:
    """Apply the five rules; a clean page yields exactly one success finding."""
    results: List[TestResult] = []

    if not metrics.has_viewport_meta:
        results.append(TestResult(
            type="error",
            title="Missing Viewport Meta Tag",
            description=(
                'Add <meta name="viewport" content="width=device-width, initial-scale=1"> '
                "to ensure proper scaling on mobile devices."
            ),
        ))

    if metrics.small_text_count > 0:
        results.append(TestResult(
            type="warning",
            title="Small Text Detected",
            description=(
                f"Found {metrics.small_text_count} elements with font size smaller than "
                f"{MIN_FONT_SIZE_PX}px. Consider increasing for better readability."
            ),
            element=metrics.small_text_element,
        ))

    if metrics.small_target_count > 0:
        results.append(TestResult(
            type="warning",
            title="Small Touch Targets",
            description=(
                f"Found {metrics.small_target_count} clickable elements smaller than "
                f"{MIN_TOUCH_TARGET_PX}x{MIN_TOUCH_TARGET_PX}px. "
                "This may be difficult for users to tap."
            ),
            element=metrics.small_target_element,
        ))

    if metrics.scroll_width > viewport_width:
        results.append(TestResult(
            type="error",
            title="Horizontal Scrolling Detected",
            description=(
                f"Content width ({metrics.scroll_width}px) exceeds device width "
                f"({viewport_width}px). This causes poor user experience on mobile."
            ),
        ))

    if metrics.non_responsive_image_count > 0:
        results.append(TestResult(
            type="warning",
            title="Non-Responsive Images",
            description=(
                f"Found {metrics.non_responsive_image_count} images without max-width property. "
                "Add 'max-width: 100%' to ensure images scale properly."
            ),
            element="img",
        ))

    return results or [NO_ISSUES_RESULT.model_copy()]


def has_issues(results: List[TestResult]) -> bool:
    return any(result.type != "success" for result in results)


async def load_page(page: Page, url: str, timeout_seconds: float, html: Optional[str] = None):
    """
    Navigate (or write proxied HTML) and wait for the load event.

    Raises ScanTimeout when load never fires and UpstreamFailure for any
    other navigation problem, including a non-2xx main response.
    """
    timeout_ms = timeout_seconds * 1000
    try:
        if html is not None:
            await page.set_content(html, wait_until="load", timeout=timeout_ms)
            return
        response = await page.goto(url, wait_until="load", timeout=timeout_ms)
    except PlaywrightTimeout as e:
        logger.error(f"❌ Page load timeout for {url}: {str(e)}")
        raise ScanTimeout(
            f"Page did not finish loading within {timeout_seconds} seconds",
            details=str(e),
        )
    except PlaywrightError as e:
        logger.error(f"❌ Page load failed for {url}: {str(e)}")
        raise UpstreamFailure("Failed to load page for analysis", details=str(e))

    if response is not None and not response.ok:
        raise UpstreamFailure(
            "Failed to load page for analysis",
            details=f"{url} responded with HTTP {response.status}",
        )


class ResponsiveScanner:
    """Runs the heuristic checklist against a page rendered at a device viewport."""

    def __init__(self, pool: BrowserPool, load_timeout: float = 10):
        self.pool = pool
        self.load_timeout = load_timeout

    async def scan(
        self,
        url: str,
        width: int,
        height: int,
        stylesheet: Optional[str] = None,
        html: Optional[str] = None,
    ) -> List[TestResult]:
        async with self.pool.page(width, height) as page:
            await load_page(page, url, self.load_timeout, html=html)
            metrics = await self.collect_metrics(page, stylesheet)

        results = evaluate_metrics(metrics, width)
        logger.info(f"🔍 Scanned {url} at {width}x{height}: {len(results)} finding(s)")
        return results

    async def collect_metrics(self, page: Page, stylesheet: Optional[str] = None) -> PageMetrics:
        try:
            if stylesheet:
                await set_stylesheet(page, stylesheet)
            raw = await page.evaluate(
                COLLECT_METRICS_SCRIPT,
                {"minFontSize": MIN_FONT_SIZE_PX, "minTouchTarget": MIN_TOUCH_TARGET_PX},
            )
        except PlaywrightError as e:
            # A document that refuses script access is a failed scan, not a clean one
            raise UpstreamFailure("Page content is not accessible for analysis", details=str(e))

        if not isinstance(raw, dict):
            raise UpstreamFailure("Page content is not accessible for analysis", details="No document")
        return PageMetrics.from_dict(raw)
