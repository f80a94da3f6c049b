"""
Prompts for the completion service

Each builder returns a (system, user) pair. Issues are listed one per line
as "- <type>: <description>".
"""

from typing import List, Tuple

from bs4 import BeautifulSoup, Comment, NavigableString

from models import AnalysisIssue, AnalysisRequest, DesignAnalysisRequest

ANALYSIS_SYSTEM_PROMPT = """Analyze responsive design issues and provide concise solutions. Focus on:
1. Critical fixes (layout breaks, content overflow)
2. Key accessibility problems
3. Most impactful responsive design improvements
Keep suggestions practical and focused."""

CSS_FIX_SYSTEM_PROMPT = """You are a CSS expert generating fixes for responsive design issues.
Generate CSS fixes that will be applied through a separate stylesheet to avoid modifying the original site.
Focus on non-destructive, reversible changes.

Your response should be in this format:
{
  "fixes": [
    {
      "selector": "specific CSS selector",
      "css": "CSS rules",
      "description": "What this fix addresses",
      "impact": "high/medium/low"
    }
  ],
  "mediaQueries": [
    {
      "query": "media query condition",
      "rules": [
        {
          "selector": "specific CSS selector",
          "css": "CSS rules"
        }
      ]
    }
  ]
}"""

DESIGN_SYSTEM_PROMPT = """Analyze HTML for key design issues:
1. Overlapping elements
2. Viewport overflow
3. Spacing problems
4. Contrast issues

Return JSON array of issues:
{
  "issues": [
    {
      "type": "overlap|overflow|spacing|contrast",
      "title": "brief title",
      "description": "short description",
      "element": "affected element",
      "bounds": {"x": number, "y": number, "width": number, "height": number}
    }
  ]
}"""


def format_issues(issues: List[AnalysisIssue]) -> str:
    return "\n".join(f"- {issue.type}: {issue.description}" for issue in issues)


def _device_header(request: AnalysisRequest) -> str:
    device = request.device_info
    return (
        f"URL: {request.url}\n"
        f"Device: {device.width}x{device.height}\n"
        f"Type: {device.type}"
    )


def build_analysis_prompt(request: AnalysisRequest) -> Tuple[str, str]:
    user = f"""{_device_header(request)}

Issues found:
{format_issues(request.issues)}

Provide a brief, actionable analysis focusing on critical issues first."""
    return ANALYSIS_SYSTEM_PROMPT, user


def build_css_fix_prompt(request: AnalysisRequest) -> Tuple[str, str]:
    user = f"""{_device_header(request)}

Issues to fix:
{format_issues(request.issues)}

Generate CSS fixes that will resolve these issues while ensuring the changes are:
1. Non-destructive to the original layout
2. Specific to the problem areas
3. Easily reversible
4. Include appropriate media queries when needed

Respond with a valid JSON object matching the format specified above. Return JSON only."""
    return CSS_FIX_SYSTEM_PROMPT, user


# Elements that carry no layout of their own
NON_LAYOUT_TAGS = ["script", "style", "link", "meta", "svg", "img", "video", "audio", "iframe", "noscript"]


def simplify_html(html: str) -> str:
    """
    Reduce a page body to its layout skeleton. Non-layout elements are
    removed and text-only elements keep just the placeholder ``text``.
    """
    soup = BeautifulSoup(html, "html.parser")
    root = soup.body or soup

    for tag in root.find_all(NON_LAYOUT_TAGS):
        if not tag.decomposed:
            tag.decompose()

    for tag in root.find_all(True):
        if len(tag.contents) == 1:
            child = tag.contents[0]
            if isinstance(child, NavigableString) and not isinstance(child, Comment):
                tag.string = "text"

    return str(root)


def build_design_prompt(request: DesignAnalysisRequest, html_limit: int = 8000) -> Tuple[str, str]:
    user = f"""URL: {request.url}
Viewport: {request.viewport_width}x{request.viewport_height}

{simplify_html(request.html)[:html_limit]}

Analyze for design issues. Return JSON only."""
    return DESIGN_SYSTEM_PROMPT, user
