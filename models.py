from typing import Dict, List, Literal, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


def validate_absolute_url(value: str) -> str:
    """Accept absolute http(s) URLs, keeping the caller's spelling."""
    value = value.strip()
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("Invalid url")
    return value


class CamelModel(BaseModel):
    """Models whose wire format uses camelCase keys."""

    model_config = ConfigDict(populate_by_name=True)


# Device catalog
class ScreenSize(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class Device(CamelModel):
    id: str = Field(min_length=1)
    name: str
    type: Literal["phone", "tablet", "laptop"]
    manufacturer: str
    screen_sizes: List[ScreenSize] = Field(alias="screenSizes", min_length=1)
    os_versions: List[str] = Field(default_factory=list, alias="osVersions")


# Heuristic scan
class TestResult(BaseModel):
    __test__ = False  # not a pytest test class

    type: Literal["error", "warning", "success"]
    title: str
    description: str
    element: Optional[str] = None


class ScanRequest(BaseModel):
    url: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    stylesheet: Optional[str] = None  # injected before measuring when set
    html: Optional[str] = None  # proxied markup to render instead of navigating

    check_url = field_validator("url")(validate_absolute_url)


class ScanResponse(BaseModel):
    success: bool = True
    url: str
    viewport: ScreenSize
    results: List[TestResult]


class AnalysisErrorInfo(BaseModel):
    kind: str
    message: str


class ResponsiveTestResponse(ScanResponse):
    analysis: Optional[str] = None
    analysis_error: Optional[AnalysisErrorInfo] = Field(default=None, alias="analysisError")

    model_config = ConfigDict(populate_by_name=True)


# Completion requests
class DeviceInfo(BaseModel):
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    type: str


class AnalysisIssue(BaseModel):
    type: str
    description: str
    element: Optional[str] = None


class AnalysisRequest(CamelModel):
    url: str
    device_info: DeviceInfo = Field(alias="deviceInfo")
    issues: List[AnalysisIssue]

    check_url = field_validator("url")(validate_absolute_url)


class AnalysisResponse(CamelModel):
    success: bool = True
    analysis: str
    raw_issues: List[AnalysisIssue] = Field(alias="rawIssues")


# CSS fixes
class CSSFix(BaseModel):
    selector: str = Field(min_length=1)
    css: str
    description: str
    impact: str


class MediaQueryRule(BaseModel):
    selector: str = Field(min_length=1)
    css: str


class MediaQuery(BaseModel):
    query: str = Field(min_length=1)
    rules: List[MediaQueryRule] = Field(default_factory=list)


class CSSFixSet(CamelModel):
    fixes: List[CSSFix]
    media_queries: List[MediaQuery] = Field(default_factory=list, alias="mediaQueries")


class CSSFixResponse(BaseModel):
    success: bool = True
    fixes: CSSFixSet
    stylesheet: str


# Design scan
class DesignAnalysisRequest(CamelModel):
    url: str
    html: str
    viewport_width: int = Field(alias="viewportWidth", gt=0)
    viewport_height: int = Field(alias="viewportHeight", gt=0)

    check_url = field_validator("url")(validate_absolute_url)


class Bounds(BaseModel):
    x: float
    y: float
    width: float
    height: float


class DesignIssue(BaseModel):
    type: str
    title: str
    description: str
    element: str = ""
    bounds: Optional[Bounds] = None


# Colour and performance analysis
class PageRequest(BaseModel):
    url: str
    viewport: Optional[ScreenSize] = None

    check_url = field_validator("url")(validate_absolute_url)


class SuggestedAlternatives(BaseModel):
    foreground: Optional[str] = None
    background: Optional[str] = None


class ColorPair(CamelModel):
    foreground: str
    background: str
    contrast_ratio: float = Field(alias="contrastRatio")
    wcag_aa_compliant: bool = Field(alias="wcagAACompliant")
    wcag_aaa_compliant: bool = Field(alias="wcagAAACompliant")
    suggested_alternatives: Optional[SuggestedAlternatives] = Field(
        default=None, alias="suggestedAlternatives"
    )


class ColorAnalysis(CamelModel):
    dominant_colors: List[str] = Field(alias="dominantColors")
    color_pairs: List[ColorPair] = Field(alias="colorPairs")
    suggestions: List[str]


class PerformanceMetric(BaseModel):
    name: str
    value: float
    unit: str
    status: Literal["good", "warning", "poor"]
    recommendation: Optional[str] = None


class ResourceMetric(CamelModel):
    type: Literal["script", "stylesheet", "image", "font", "other"]
    size: int
    transfer_size: int = Field(alias="transferSize")
    load_time: float = Field(alias="loadTime")
    url: str


class PerformanceAnalysis(BaseModel):
    metrics: List[PerformanceMetric]
    resources: List[ResourceMetric]


# WordPress forwarding
class WordPressCredentials(BaseModel):
    site_url: str
    api_key: str = Field(min_length=1)

    check_url = field_validator("site_url")(validate_absolute_url)


class WordPressApplyRequest(WordPressCredentials):
    page_id: int
    css_content: str = Field(min_length=1)
    device_type: str


class WordPressTestRecord(CamelModel):
    page_id: int = Field(alias="pageId")
    device_type: str = Field(alias="deviceType")


class UrlValidationRequest(BaseModel):
    url: Optional[str] = None


# Progress
class UserProgress(CamelModel):
    stats: Dict[str, int] = Field(default_factory=dict)
    achievements: List[str] = Field(default_factory=list)
    total_points: int = Field(default=0, alias="totalPoints")
    level: int = 1
    level_progress: float = Field(default=0.0, alias="levelProgress")
    last_active: str = Field(alias="lastActive")


class ProgressUpdate(CamelModel):
    stats: Dict[str, int]


class MetricRecord(BaseModel):
    metric: str = Field(min_length=1)
    value: int = 1
