# Utils package - outbound clients and response parsing

from .anthropic_client import CompletionClient
from .json_parser import repair_and_parse_json, parse_css_fix_set, parse_design_issues
from .page_fetcher import fetch_page
from .wordpress_client import WordPressClient

__all__ = [
    "CompletionClient",
    "repair_and_parse_json",
    "parse_css_fix_set",
    "parse_design_issues",
    "fetch_page",
    "WordPressClient",
]
