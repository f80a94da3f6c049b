"""Shared fixtures: fake browser pages, a scripted completion client and a wired test app."""

from contextlib import asynccontextmanager
from typing import List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from analyzer.pipeline import AnalysisService, ResponsiveTester
from analyzer.scanner import NO_ISSUES_RESULT
from config import Settings
from main import build_state, create_app
from models import TestResult


class FakePool:
    """Stands in for BrowserPool; hands out one prepared page."""

    def __init__(self, page):
        self.page_obj = page
        self.viewports = []
        self.initialized = False

    @asynccontextmanager
    async def page(self, width, height):
        self.viewports.append((width, height))
        yield self.page_obj


class FakeCompletionClient:
    """Returns queued responses in order and records every prompt."""

    def __init__(self, responses: Optional[List[str]] = None, error: Optional[Exception] = None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []
        self.configured = True

    async def complete(self, system: str, prompt: str, max_tokens: int) -> str:
        self.calls.append({"system": system, "prompt": prompt, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.responses.pop(0)

    async def close(self):
        pass


class FakeScanner:
    def __init__(self, results: Optional[List[TestResult]] = None, error: Optional[Exception] = None):
        self.results = results if results is not None else [NO_ISSUES_RESULT.model_copy()]
        self.error = error
        self.calls = []

    async def scan(self, url, width, height, stylesheet=None, html=None):
        self.calls.append({
            "url": url,
            "width": width,
            "height": height,
            "stylesheet": stylesheet,
            "html": html,
        })
        if self.error is not None:
            raise self.error
        return list(self.results)


def loaded_page(evaluate_result=None, status: int = 200) -> AsyncMock:
    """An async page mock whose navigation succeeds with the given HTTP status."""
    page = AsyncMock()
    page.goto.return_value = MagicMock(ok=200 <= status < 300, status=status)
    page.evaluate.return_value = evaluate_result
    return page


CLEAN_METRICS = {
    "hasViewportMeta": True,
    "smallTextCount": 0,
    "smallTextElement": None,
    "smallTargetCount": 0,
    "smallTargetElement": None,
    "scrollWidth": 390,
    "nonResponsiveImageCount": 0,
}

CSS_FIX_RESPONSE = """```json
{
  "fixes": [
    {
      "selector": ".hero img",
      "css": "max-width: 100%; height: auto;",
      "description": "Scale hero images to the viewport",
      "impact": "high"
    }
  ],
  "mediaQueries": [
    {
      "query": "(max-width: 480px)",
      "rules": [{"selector": "nav a", "css": "min-height: 44px;"}]
    }
  ]
}
```"""


@pytest.fixture
def settings():
    return Settings(ANTHROPIC_API_KEY="test-key", LOG_LEVEL="WARNING")


@pytest.fixture
def fake_scanner():
    return FakeScanner()


@pytest.fixture
def fake_completion():
    return FakeCompletionClient()


@pytest.fixture
def app(settings, fake_scanner, fake_completion):
    """Application with real stores and fake browser and completion backends."""
    application = create_app(settings)
    build_state(application, settings)
    application.state.completion_client = fake_completion
    application.state.scanner = fake_scanner
    application.state.analysis_service = AnalysisService(fake_completion)
    application.state.tester = ResponsiveTester(fake_scanner, application.state.analysis_service)
    return application


@pytest.fixture
def client(app):
    # No context manager: the lifespan would replace the fakes with real components
    return TestClient(app)
