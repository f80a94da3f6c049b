"""
Browser pool for Responsive Tester
Keeps a few headless Chromium instances warm; each scan borrows one and
opens a throwaway context emulating the requested device viewport
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import AsyncIterator, List

from playwright.async_api import async_playwright, Browser, BrowserContext, Page

logger = logging.getLogger(__name__)

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
MOBILE_USER_AGENT = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)
MOBILE_MAX_WIDTH = 480

CHROMIUM_ARGS = [
    "--disable-dev-shm-usage",  # /dev/shm is tiny in containers
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-gpu",
]


def context_options(width: int, height: int) -> dict:
    """Playwright context options emulating a device of the given viewport."""
    is_mobile = width <= MOBILE_MAX_WIDTH
    return {
        "viewport": {"width": width, "height": height},
        "user_agent": MOBILE_USER_AGENT if is_mobile else DESKTOP_USER_AGENT,
        "is_mobile": is_mobile,
        "has_touch": is_mobile,
    }


@dataclass
class BrowserSlot:
    browser: Browser
    launched_at: datetime = field(default_factory=datetime.now)
    pages_served: int = 0
    busy: bool = False
    temporary: bool = False

    @property
    def age_seconds(self) -> float:
        return (datetime.now() - self.launched_at).total_seconds()

    def worn_out(self, max_pages: int, max_age: int) -> bool:
        return self.pages_served >= max_pages or self.age_seconds > max_age


@dataclass
class Lease:
    slot: BrowserSlot
    context: BrowserContext
    page: Page


class BrowserPool:
    """
    Fixed-size pool of Chromium browsers, launched on first use.

    Concurrency is capped by a semaphore sized to the pool; a browser is
    relaunched once it has served too many pages or lived too long.
    """

    def __init__(
        self,
        pool_size: int = 3,
        max_pages_per_browser: int = 10,
        browser_timeout: int = 300,
    ):
        """
        Args:
            pool_size: Number of browsers kept warm (and max concurrent scans)
            max_pages_per_browser: Pages served before a browser is relaunched
            browser_timeout: Seconds a browser may live before it is relaunched
        """
        self.pool_size = pool_size
        self.max_pages_per_browser = max_pages_per_browser
        self.browser_timeout = browser_timeout

        self.playwright = None
        self.slots: List[BrowserSlot] = []
        self._capacity = asyncio.Semaphore(pool_size)
        self._lock = asyncio.Lock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self):
        """Start Playwright and launch the pool's browsers (idempotent)."""
        if self._initialized:
            return

        async with self._lock:
            if self._initialized:
                return

            logger.info(f"🚀 Launching {self.pool_size} browsers...")
            try:
                self.playwright = await async_playwright().start()
                for _ in range(self.pool_size):
                    self.slots.append(BrowserSlot(browser=await self._launch()))
            except Exception as e:
                logger.error(f"❌ Failed to initialize browser pool: {str(e)}")
                await self._shutdown()
                raise

            self._initialized = True
            logger.info(f"✅ Browser pool ready with {len(self.slots)} browsers")

    async def _launch(self) -> Browser:
        return await self.playwright.chromium.launch(headless=True, args=CHROMIUM_ARGS)

    async def _relaunch(self, slot: BrowserSlot):
        logger.info(
            f"♻️  Relaunching browser (age: {slot.age_seconds:.0f}s, pages: {slot.pages_served})"
        )
        try:
            await slot.browser.close()
        except Exception as e:
            logger.warning(f"⚠️  Error closing worn-out browser: {str(e)}")
        slot.browser = await self._launch()
        slot.launched_at = datetime.now()
        slot.pages_served = 0

    async def _claim_slot(self) -> BrowserSlot:
        async with self._lock:
            slot = next((s for s in self.slots if not s.busy), None)
            if slot is None:
                # Only reachable if slots were lost; serve from a one-off browser
                logger.warning("⚠️  No idle browser, launching a temporary one")
                slot = BrowserSlot(browser=await self._launch(), temporary=True)
            elif slot.worn_out(self.max_pages_per_browser, self.browser_timeout):
                await self._relaunch(slot)

            slot.busy = True
            slot.pages_served += 1
            return slot

    async def acquire(self, width: int, height: int) -> Lease:
        """Borrow a browser and open a page emulating a width x height device."""
        await self.initialize()
        await self._capacity.acquire()

        try:
            slot = await self._claim_slot()
        except Exception:
            self._capacity.release()
            raise

        try:
            context = await slot.browser.new_context(**context_options(width, height))
            page = await context.new_page()
        except Exception as e:
            logger.error(f"❌ Failed to open {width}x{height} page: {str(e)}")
            await self._return_slot(slot)
            raise

        logger.info(f"✅ Page opened at {width}x{height} (browser pages: {slot.pages_served})")
        return Lease(slot=slot, context=context, page=page)

    async def release(self, lease: Lease):
        """Close the lease's page and context; the browser goes back to the pool."""
        try:
            try:
                await lease.page.close()
            except Exception as e:
                logger.error(f"⚠️  Error closing page: {str(e)}")
            try:
                await lease.context.close()
            except Exception as e:
                logger.error(f"⚠️  Error closing context: {str(e)}")
        finally:
            await self._return_slot(lease.slot)

    async def _return_slot(self, slot: BrowserSlot):
        try:
            async with self._lock:
                slot.busy = False
                if slot.temporary:
                    await slot.browser.close()
        finally:
            self._capacity.release()

    @asynccontextmanager
    async def page(self, width: int, height: int) -> AsyncIterator[Page]:
        """Borrow a page sized to the viewport for the duration of the block."""
        lease = await self.acquire(width, height)
        try:
            yield lease.page
        finally:
            await self.release(lease)

    async def health_check(self) -> dict:
        """Occupancy and wear of the pool's browsers."""
        async with self._lock:
            total = len(self.slots)
            busy = sum(1 for s in self.slots if s.busy)
            ages = [s.age_seconds for s in self.slots]
            pages = [s.pages_served for s in self.slots]

            return {
                "total_browsers": total,
                "in_use": busy,
                "available": total - busy,
                "average_age_seconds": round(sum(ages) / total, 2) if total else 0,
                "average_page_count": round(sum(pages) / total, 2) if total else 0,
                "status": "healthy" if total - busy > 0 else "saturated",
            }

    async def _shutdown(self):
        for slot in self.slots:
            try:
                await slot.browser.close()
            except Exception as e:
                logger.warning(f"⚠️  Error closing browser: {str(e)}")
        self.slots.clear()

        if self.playwright:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.warning(f"⚠️  Error stopping Playwright: {str(e)}")
            self.playwright = None

        self._initialized = False

    async def cleanup(self):
        """Close every browser and stop Playwright."""
        logger.info("🧹 Cleaning up browser pool...")
        async with self._lock:
            await self._shutdown()
        logger.info("✅ Browser pool cleaned up")
