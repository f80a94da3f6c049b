"""
Server-side page proxy.

Fetches the raw HTML of an arbitrary URL so the preview and the scanner can
work with it without browser cross-origin restrictions.
"""

import logging
from typing import Optional

import requests

from errors import UpstreamFailure

logger = logging.getLogger(__name__)


def fetch_page(
    url: str,
    timeout: float = 30,
    user_agent: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> str:
    """
    Return the response body of ``url`` as text.

    Raises:
        UpstreamFailure: network error or non-2xx status, with the
        underlying message attached as details
    """
    http = session or requests
    headers = {"User-Agent": user_agent} if user_agent else None

    try:
        response = http.get(url, headers=headers, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"❌ Error fetching page {url}: {str(e)}")
        raise UpstreamFailure("Failed to fetch page content", details=str(e))

    logger.info(f"🌐 Fetched {url} ({len(response.content)} bytes)")
    return _decode_body(response)


def _decode_body(response: requests.Response) -> str:
    """
    Decode with the declared charset; without one, requests assumes
    ISO-8859-1 for text/* so try UTF-8 first, then a detected encoding.
    """
    content_type = response.headers.get("Content-Type", "")
    if "charset=" in content_type.lower():
        return response.text

    try:
        return response.content.decode("utf-8")
    except UnicodeDecodeError:
        response.encoding = response.apparent_encoding
        return response.text
