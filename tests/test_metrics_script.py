"""Runs the metrics script in a real Chromium page; skipped when no browser is installed."""

import pytest

from analyzer.scanner import NO_ISSUES_RESULT, ResponsiveScanner
from browser_pool import BrowserPool

CLEAN_PAGE = """<!DOCTYPE html>
<html>
<head><meta name="viewport" content="width=device-width, initial-scale=1"></head>
<body style="font-size: 16px">
  <button style="width: 48px; height: 48px">Go</button>
  <img alt="" style="max-width: 100%; width: 40px; height: 40px">
</body>
</html>"""

BROKEN_PAGE = """<!DOCTYPE html>
<html>
<head></head>
<body>
  <p style="font-size: 10px">Fine print</p>
  <a href="#" style="display: inline-block; width: 20px; height: 20px"></a>
  <img alt="" style="width: 10px; height: 10px">
  <div style="width: 1200px; height: 10px"></div>
</body>
</html>"""


@pytest.fixture
async def chromium_pool():
    pool = BrowserPool(pool_size=1)
    try:
        await pool.initialize()
    except Exception as e:
        pytest.skip(f"Chromium is not available: {e}")
    yield pool
    await pool.cleanup()


async def test_clean_page_has_no_findings(chromium_pool):
    scanner = ResponsiveScanner(chromium_pool)
    results = await scanner.scan("https://example.com", 390, 844, html=CLEAN_PAGE)
    assert results == [NO_ISSUES_RESULT]


async def test_broken_page_trips_every_rule(chromium_pool):
    async with chromium_pool.page(390, 844) as page:
        await page.set_content(BROKEN_PAGE)
        metrics = await ResponsiveScanner(chromium_pool).collect_metrics(page)

    assert not metrics.has_viewport_meta
    assert metrics.small_text_count >= 1
    assert metrics.small_text_element == "p"
    assert metrics.small_target_count == 1
    assert metrics.small_target_element == "a"
    assert metrics.scroll_width >= 1200
    assert metrics.non_responsive_image_count == 1


async def test_injected_stylesheet_is_measured(chromium_pool):
    async with chromium_pool.page(390, 844) as page:
        await page.set_content(BROKEN_PAGE)
        metrics = await ResponsiveScanner(chromium_pool).collect_metrics(
            page, stylesheet="img { max-width: 100%; } p { font-size: 16px !important; }"
        )

    assert metrics.non_responsive_image_count == 0
    assert metrics.small_text_count == 0
