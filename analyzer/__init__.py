# Analyzer package - responsive design analysis engine
from .scanner import ResponsiveScanner, evaluate_metrics, load_page
from .stylesheet import STYLESHEET_ELEMENT_ID, injection_script, render_stylesheet, set_stylesheet
from .pipeline import AnalysisService, CompletionLimits, ResponsiveTester

__all__ = [
    "ResponsiveScanner",
    "evaluate_metrics",
    "load_page",
    "STYLESHEET_ELEMENT_ID",
    "injection_script",
    "render_stylesheet",
    "set_stylesheet",
    "AnalysisService",
    "CompletionLimits",
    "ResponsiveTester",
]
