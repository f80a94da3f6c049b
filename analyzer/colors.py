"""
Colour contrast analysis.

WCAG 2.x relative luminance and contrast ratio, plus a page-level report of
text/background pairs taken from the rendered document.
"""

import logging
import re
from collections import Counter
from typing import Dict, List, Optional, Tuple

from analyzer.scanner import load_page
from browser_pool import BrowserPool
from errors import UpstreamFailure
from models import ColorAnalysis, ColorPair, SuggestedAlternatives
from playwright.async_api import Error as PlaywrightError

logger = logging.getLogger(__name__)

RGB = Tuple[int, int, int]

WCAG_AA_RATIO = 4.5
WCAG_AAA_RATIO = 7.0
MAX_DOMINANT_COLORS = 5
MAX_COLOR_PAIRS = 20

WHITE: RGB = (255, 255, 255)
BLACK: RGB = (0, 0, 0)

_HEX_RE = re.compile(r"^#([0-9a-f]{3}|[0-9a-f]{6}|[0-9a-f]{8})$", re.IGNORECASE)
_FUNC_RE = re.compile(r"^rgba?\(\s*([^)]*)\)$", re.IGNORECASE)

# Text colour and effective background of every element holding visible text.
COLLECT_COLORS_SCRIPT = """
(limit) => {
    const transparent = (c) => !c || c === 'transparent' || /rgba\\(.*,\\s*0\\)$/.test(c);
    const backgroundOf = (el) => {
        for (let node = el; node && node.nodeType === 1; node = node.parentElement) {
            const bg = window.getComputedStyle(node).backgroundColor;
            if (!transparent(bg)) return bg;
        }
        return 'rgb(255, 255, 255)';
    };
    const samples = [];
    for (const el of document.querySelectorAll('body *')) {
        const hasText = Array.from(el.childNodes).some(
            (n) => n.nodeType === 3 && n.textContent.trim().length > 0
        );
        if (!hasText) continue;
        samples.push({
            color: window.getComputedStyle(el).color,
            background: backgroundOf(el),
        });
        if (samples.length >= limit) break;
    }
    return samples;
}
"""


def parse_color(value: str) -> Optional[RGB]:
    """Parse #rgb, #rrggbb, #rrggbbaa, rgb() and rgba() into an RGB triple."""
    value = (value or "").strip()

    match = _HEX_RE.match(value)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = "".join(c * 2 for c in digits)
        return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)

    match = _FUNC_RE.match(value)
    if match:
        parts = [p for p in re.split(r"[\s,/]+", match.group(1).strip()) if p]
        if len(parts) < 3:
            return None
        try:
            channels = []
            for part in parts[:3]:
                if part.endswith("%"):
                    channels.append(round(float(part[:-1]) * 2.55))
                else:
                    channels.append(round(float(part)))
        except ValueError:
            return None
        return tuple(max(0, min(255, c)) for c in channels)

    return None


def to_hex(rgb: RGB) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb)


def relative_luminance(rgb: RGB) -> float:
    def channel(value: int) -> float:
        c = value / 255
        return c / 12.92 if c <= 0.03928 else ((c + 0.055) / 1.055) ** 2.4

    r, g, b = (channel(v) for v in rgb)
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def _raw_contrast(first: RGB, second: RGB) -> float:
    lighter, darker = sorted((relative_luminance(first), relative_luminance(second)), reverse=True)
    return (lighter + 0.05) / (darker + 0.05)


def contrast_ratio(first: RGB, second: RGB) -> float:
    """WCAG contrast ratio, rounded to two decimals. Order of arguments does not matter."""
    return round(_raw_contrast(first, second), 2)


def evaluate_pair(foreground: RGB, background: RGB) -> ColorPair:
    raw = _raw_contrast(foreground, background)
    alternatives = None
    if raw < WCAG_AA_RATIO:
        better = BLACK if _raw_contrast(BLACK, background) >= _raw_contrast(WHITE, background) else WHITE
        alternatives = SuggestedAlternatives(foreground=to_hex(better))

    return ColorPair(
        foreground=to_hex(foreground),
        background=to_hex(background),
        contrastRatio=round(raw, 2),
        wcagAACompliant=raw >= WCAG_AA_RATIO,
        wcagAAACompliant=raw >= WCAG_AAA_RATIO,
        suggestedAlternatives=alternatives,
    )


def build_color_analysis(samples: List[Dict[str, str]]) -> ColorAnalysis:
    """Turn raw {color, background} samples into a colour report."""
    usage: Counter = Counter()
    pair_counts: Counter = Counter()

    for sample in samples:
        foreground = parse_color(sample.get("color", ""))
        background = parse_color(sample.get("background", ""))
        if foreground is None or background is None:
            continue
        usage[foreground] += 1
        usage[background] += 1
        pair_counts[(foreground, background)] += 1

    pairs = [
        evaluate_pair(foreground, background)
        for (foreground, background), _ in pair_counts.most_common(MAX_COLOR_PAIRS)
    ]
    pairs.sort(key=lambda pair: pair.contrast_ratio)

    suggestions = []
    failing = [pair for pair in pairs if not pair.wcag_aa_compliant]
    for pair in failing:
        suggestions.append(
            f"Text {pair.foreground} on {pair.background} has a contrast ratio of "
            f"{pair.contrast_ratio:.2f}:1, below the WCAG AA minimum of {WCAG_AA_RATIO}:1. "
            f"Consider {pair.suggested_alternatives.foreground} for the text."
        )
    if pairs and not failing:
        suggestions.append("All sampled text colours meet WCAG AA contrast requirements.")

    return ColorAnalysis(
        dominantColors=[to_hex(rgb) for rgb, _ in usage.most_common(MAX_DOMINANT_COLORS)],
        colorPairs=pairs,
        suggestions=suggestions,
    )


async def analyze_colors(
    pool: BrowserPool,
    url: str,
    width: int,
    height: int,
    load_timeout: float = 10,
    sample_limit: int = 500,
) -> ColorAnalysis:
    async with pool.page(width, height) as page:
        await load_page(page, url, load_timeout)
        try:
            samples = await page.evaluate(COLLECT_COLORS_SCRIPT, sample_limit)
        except PlaywrightError as e:
            raise UpstreamFailure("Page content is not accessible for analysis", details=str(e))

    logger.info(f"🎨 Collected {len(samples)} colour samples from {url}")
    return build_color_analysis(samples)
