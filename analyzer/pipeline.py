"""
Analysis pipeline for Responsive Tester.

Glues the heuristic scanner, the prompt builders, the completion client and
the stylesheet synthesizer together. The quick scan always runs and reports
first; the completion service is only consulted when the scan found
something, and its failure never discards the scan results.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from analyzer.prompts import build_analysis_prompt, build_css_fix_prompt, build_design_prompt
from analyzer.scanner import ResponsiveScanner, has_issues
from analyzer.stylesheet import render_stylesheet
from errors import AnalyzerError
from models import (
    AnalysisErrorInfo,
    AnalysisIssue,
    AnalysisRequest,
    CSSFixSet,
    DesignAnalysisRequest,
    DesignIssue,
    DeviceInfo,
    ResponsiveTestResponse,
    ScreenSize,
    TestResult,
)
from utils.anthropic_client import CompletionClient
from utils.json_parser import parse_css_fix_set, parse_design_issues

logger = logging.getLogger(__name__)


def classify_device(width: int) -> str:
    if width <= 480:
        return "mobile"
    if width <= 1024:
        return "tablet"
    return "desktop"


def issues_from_results(results: List[TestResult]) -> List[AnalysisIssue]:
    return [
        AnalysisIssue(type=result.type, description=result.description, element=result.element)
        for result in results
        if result.type != "success"
    ]


@dataclass
class CompletionLimits:
    analysis_max_tokens: int = 500
    css_fix_max_tokens: int = 1000
    design_max_tokens: int = 1000
    design_html_limit: int = 8000


class AnalysisService:
    """Completion-backed analyses: free-text analysis, CSS fixes, design issues."""

    def __init__(self, client: CompletionClient, limits: Optional[CompletionLimits] = None):
        self.client = client
        self.limits = limits or CompletionLimits()

    async def analyze(self, request: AnalysisRequest) -> str:
        system, prompt = build_analysis_prompt(request)
        return await self.client.complete(system, prompt, self.limits.analysis_max_tokens)

    async def generate_css_fixes(self, request: AnalysisRequest) -> Tuple[CSSFixSet, str]:
        system, prompt = build_css_fix_prompt(request)
        response_text = await self.client.complete(system, prompt, self.limits.css_fix_max_tokens)
        fix_set = parse_css_fix_set(response_text)

        device = request.device_info
        stylesheet = render_stylesheet(request.url, device.width, device.height, fix_set)
        logger.info(
            f"🎨 Generated {len(fix_set.fixes)} fixes and "
            f"{len(fix_set.media_queries)} media queries for {request.url}"
        )
        return fix_set, stylesheet

    async def analyze_design(self, request: DesignAnalysisRequest) -> List[DesignIssue]:
        system, prompt = build_design_prompt(request, self.limits.design_html_limit)
        response_text = await self.client.complete(system, prompt, self.limits.design_max_tokens)
        return parse_design_issues(response_text)


class ResponsiveTester:
    """Quick heuristic scan followed, when warranted, by an AI analysis."""

    def __init__(self, scanner: ResponsiveScanner, analysis: AnalysisService):
        self.scanner = scanner
        self.analysis = analysis

    async def run(
        self,
        url: str,
        width: int,
        height: int,
        html: Optional[str] = None,
    ) -> ResponsiveTestResponse:
        results = await self.scanner.scan(url, width, height, html=html)
        response = ResponsiveTestResponse(
            url=url,
            viewport=ScreenSize(width=width, height=height),
            results=results,
        )

        if not has_issues(results):
            return response

        request = AnalysisRequest(
            url=url,
            deviceInfo=DeviceInfo(width=width, height=height, type=classify_device(width)),
            issues=issues_from_results(results),
        )
        try:
            response.analysis = await self.analysis.analyze(request)
        except AnalyzerError as e:
            logger.warning(f"⚠️  AI analysis skipped for {url}: {e.message}")
            response.analysis_error = AnalysisErrorInfo(kind=e.kind.value, message=e.message)

        return response
